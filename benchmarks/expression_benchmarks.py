"""Profile parse and evaluate on deep and wide call expressions."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable

from lisp_jax import evaluate, parse, tokenize
from _bench_utils import host_metadata, mean as _mean, percentile as _percentile, sample_ms


@dataclass(frozen=True)
class Case:
    name: str
    build: Callable[[int], str]
    repeats: int


@dataclass(frozen=True)
class Row:
    name: str
    stage: str
    n: int
    mean_ms: float
    p50_ms: float
    p95_ms: float
    min_ms: float
    max_ms: float
    repeats: int
    samples: int


def _wide_sum(n: int) -> str:
    return "(+ " + " ".join(str(i) for i in range(n)) + ")"


def _deep_sum(n: int) -> str:
    return "(+ 1 " * n + "0" + ")" * n


def _nested_conditionals(n: int) -> str:
    return "(if (< 1 2) " * n + "1" + " 0)" * n


def _row(case: Case, stage: str, n: int, rows: list[float], samples: int) -> Row:
    return Row(
        name=case.name,
        stage=stage,
        n=n,
        mean_ms=_mean(rows),
        p50_ms=_percentile(rows, 0.50),
        p95_ms=_percentile(rows, 0.95),
        min_ms=min(rows),
        max_ms=max(rows),
        repeats=case.repeats,
        samples=samples,
    )


def _run_case(case: Case, n: int, *, samples: int) -> list[Row]:
    tokens = tokenize(case.build(n))
    expr = parse(tokens)
    # First call pays for jit compilation of the kernels.
    evaluate(expr)
    parse_rows = sample_ms(lambda: parse(tokens), repeats=case.repeats, samples=samples)
    eval_rows = sample_ms(lambda: evaluate(expr), repeats=case.repeats, samples=samples)
    return [_row(case, "parse", n, parse_rows, samples), _row(case, "evaluate", n, eval_rows, samples)]


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--ns", default="8,64,128", help="comma-separated sizes")
    parser.add_argument("--samples", type=int, default=3, help="timing samples")
    parser.add_argument("--json-out", default="", help="optional output JSON")
    args = parser.parse_args()

    ns = [int(x.strip()) for x in args.ns.split(",") if x.strip()]
    cases = [
        Case("wide_sum", _wide_sum, repeats=50),
        Case("deep_sum", _deep_sum, repeats=50),
        Case("nested_if", _nested_conditionals, repeats=50),
    ]

    rows: list[Row] = []
    print("Call-expression benchmark")
    for n in ns:
        for case in cases:
            for row in _run_case(case, n, samples=args.samples):
                rows.append(row)
                print(f"{case.name:10} {row.stage:8} n={n:4d} mean={row.mean_ms:8.3f}ms p95={row.p95_ms:8.3f}ms")

    if args.json_out:
        outpath = Path(args.json_out)
        outpath.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "timestamp_utc": datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ"),
            "host": host_metadata(),
            "sizes": ns,
            "samples": args.samples,
            "rows": [asdict(row) for row in rows],
        }
        outpath.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote JSON: {outpath}")


if __name__ == "__main__":
    main()
