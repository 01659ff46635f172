"""Runtime value model and validators for the evaluator."""

from __future__ import annotations

import math
import numbers
from enum import Enum

import jax
import jax.numpy as jnp

from .errors import LispTypeError
from .lexer import is_number_text

# 64-bit dtypes must be on before any array is created.
jax.config.update("jax_enable_x64", True)


class ValueKind(str, Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"


def kind_of(value: object) -> ValueKind:
    # bool before number: bool is an Integral.
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, jnp.ndarray):
        if value.ndim != 0:
            raise LispTypeError(f"Expected a scalar value, got shape {tuple(value.shape)}")
        if value.dtype == jnp.bool_:
            return ValueKind.BOOLEAN
        return ValueKind.NUMBER
    if isinstance(value, numbers.Number):
        return ValueKind.NUMBER
    raise LispTypeError(f"Unsupported runtime type {type(value).__name__}")


def validate_value(value: object, *, where: str = "value") -> None:
    try:
        kind_of(value)
    except LispTypeError as exc:
        raise LispTypeError(f"{where}: {exc.message}") from exc


def parse_number_text(text: str) -> jnp.ndarray:
    if not is_number_text(text):
        raise LispTypeError(f"Invalid numeric literal: {text}.")
    is_integer = not any(ch in text for ch in ".eE")
    number = int(text) if is_integer else float(text)
    try:
        arr = jnp.asarray(number, dtype=jnp.int64 if is_integer else jnp.float64)
    except (OverflowError, ValueError) as exc:
        raise LispTypeError(f"Numeric literal out of range: {text}.") from exc
    if not bool(jnp.isfinite(arr)) or arr.item() != number:
        raise LispTypeError(f"Numeric literal out of range: {text}.")
    return arr


def as_number_array(value: object, *, where: str) -> jnp.ndarray:
    if kind_of(value) != ValueKind.NUMBER:
        raise LispTypeError(f"{where} expects numbers, got {kind_of(value).value}")
    return jnp.asarray(value)


def to_python(value: object) -> int | float | str | bool:
    kind = kind_of(value)
    if kind == ValueKind.STRING:
        return value
    if kind == ValueKind.BOOLEAN:
        return bool(value)
    if isinstance(value, jnp.ndarray):
        return value.item()
    return value


def format_value(value: object) -> str:
    scalar = to_python(value)
    if isinstance(scalar, bool):
        return "true" if scalar else "false"
    if isinstance(scalar, str):
        return scalar
    if isinstance(scalar, numbers.Integral):
        return str(int(scalar))
    real = float(scalar)
    if math.isnan(real):
        return "NaN"
    if math.isinf(real):
        return "Infinity" if real > 0 else "-Infinity"
    if real.is_integer():
        return str(int(real))
    if isinstance(value, jnp.ndarray) and value.dtype == jnp.float32:
        # float32 carries about seven significant digits.
        return format(real, ".7g")
    return repr(real)
