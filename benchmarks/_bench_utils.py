"""Shared benchmark runtime helpers."""

from __future__ import annotations

import math
import os
import platform
import time
from typing import Any, Callable

import jax


def host_metadata() -> dict[str, Any]:
    return {
        "platform": platform.platform(),
        "python": platform.python_version(),
        "jax": getattr(jax, "__version__", "unknown"),
        "backend": jax.default_backend(),
        "x64": bool(jax.config.jax_enable_x64),
        "cpu_count": os.cpu_count(),
    }


def block_until_ready(value: object) -> None:
    if hasattr(value, "block_until_ready"):
        value.block_until_ready()


def percentile(values: list[float], q: float) -> float:
    ordered = sorted(values)
    if len(ordered) == 1:
        return ordered[0]
    pos = (len(ordered) - 1) * q
    lo = int(math.floor(pos))
    hi = int(math.ceil(pos))
    if lo == hi:
        return ordered[lo]
    alpha = pos - lo
    return ordered[lo] * (1.0 - alpha) + ordered[hi] * alpha


def mean(values: list[float]) -> float:
    return sum(values) / len(values)


def sample_ms(fn: Callable[[], object], *, repeats: int, samples: int) -> list[float]:
    """Mean milliseconds per call, one entry per sample."""
    rows: list[float] = []
    for _ in range(samples):
        start_ns = time.perf_counter_ns()
        for _ in range(repeats):
            block_until_ready(fn())
        elapsed_ns = time.perf_counter_ns() - start_ns
        rows.append((elapsed_ns / repeats) / 1e6)
    return rows
