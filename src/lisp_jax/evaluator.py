"""Tree-walking evaluator for call-expression ASTs on top of JAX."""

from __future__ import annotations

import operator
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Final

import jax
from jax import lax
import jax.numpy as jnp

from .ast import BinaryOperation, BinaryOperationName, Conditional, Expr, NumberLiteral, Predicate, PredicateName, StringLiteral, UnaryOperation, UnaryOperationName
from .errors import LispArityError, LispOverflowError, LispRuntimeError, LispTypeError, LispZeroDivisionError
from .parser import OPERATOR_SPECS_BY_NAME, OperatorKind, parse_source
from .values import ValueKind, as_number_array, format_value, kind_of, parse_number_text, validate_value

_USE_JITTED_BASE_OPS: Final[bool] = os.environ.get("LISP_JAX_DISABLE_JITTED_BASE_OPS", "0") != "1"
_PARSE_CACHE_MAX: Final[int] = max(1, int(os.environ.get("LISP_JAX_PARSE_CACHE_MAX", "256")))

OutputFn = Callable[[object], None]


def _promote_binary_pair(w: jnp.ndarray, x: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    if w.dtype == x.dtype:
        return w, x
    dtype = jnp.result_type(w, x)
    if w.dtype == dtype:
        return w, lax.convert_element_type(x, dtype)
    if x.dtype == dtype:
        return lax.convert_element_type(w, dtype), x
    return lax.convert_element_type(w, dtype), lax.convert_element_type(x, dtype)


def _lax_add_promoted(w: jnp.ndarray, x: jnp.ndarray) -> jnp.ndarray:
    ww, xx = _promote_binary_pair(w, x)
    return lax.add(ww, xx)


def _lax_sub_promoted(w: jnp.ndarray, x: jnp.ndarray) -> jnp.ndarray:
    ww, xx = _promote_binary_pair(w, x)
    return lax.sub(ww, xx)


def _lax_mul_promoted(w: jnp.ndarray, x: jnp.ndarray) -> jnp.ndarray:
    ww, xx = _promote_binary_pair(w, x)
    return lax.mul(ww, xx)


def _true_divide(w: jnp.ndarray, x: jnp.ndarray) -> jnp.ndarray:
    return jnp.true_divide(w, x)


def _lax_cmp_promoted(cmp_op: Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray], w: jnp.ndarray, x: jnp.ndarray) -> jnp.ndarray:
    if w.dtype == x.dtype:
        return cmp_op(w, x)
    ww, xx = _promote_binary_pair(w, x)
    return cmp_op(ww, xx)


_BASE_BINARY_OPS: Final[dict[BinaryOperationName, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    BinaryOperationName.ADD: _lax_add_promoted,
    BinaryOperationName.SUBTRACT: _lax_sub_promoted,
    BinaryOperationName.MULTIPLY: _lax_mul_promoted,
    BinaryOperationName.DIVIDE: _true_divide,
}

_BASE_NUMERIC_COMPARISONS: Final[dict[PredicateName, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    PredicateName.EQUAL: lambda w, x: _lax_cmp_promoted(lax.eq, w, x),
    PredicateName.NOT_EQUAL: lambda w, x: _lax_cmp_promoted(lax.ne, w, x),
    PredicateName.LESS_THAN: lambda w, x: _lax_cmp_promoted(lax.lt, w, x),
    PredicateName.LESS_THAN_OR_EQUAL: lambda w, x: _lax_cmp_promoted(lax.le, w, x),
    PredicateName.GREATER_THAN: lambda w, x: _lax_cmp_promoted(lax.gt, w, x),
    PredicateName.GREATER_THAN_OR_EQUAL: lambda w, x: _lax_cmp_promoted(lax.ge, w, x),
}

_PY_COMPARISONS: Final[dict[PredicateName, Callable[[object, object], bool]]] = {
    PredicateName.EQUAL: operator.eq,
    PredicateName.NOT_EQUAL: operator.ne,
    PredicateName.LESS_THAN: operator.lt,
    PredicateName.LESS_THAN_OR_EQUAL: operator.le,
    PredicateName.GREATER_THAN: operator.gt,
    PredicateName.GREATER_THAN_OR_EQUAL: operator.ge,
}

_EQUALITY_PREDICATES: Final[frozenset[PredicateName]] = frozenset({PredicateName.EQUAL, PredicateName.NOT_EQUAL})

_PY_INTEGER_OPS: Final[dict[BinaryOperationName, Callable[[int, int], int]]] = {
    BinaryOperationName.ADD: operator.add,
    BinaryOperationName.SUBTRACT: operator.sub,
    BinaryOperationName.MULTIPLY: operator.mul,
}

_JITTED_BINARY_OPS: dict[BinaryOperationName, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]] = {}
_JITTED_COMPARISONS: dict[PredicateName, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]] = {}


def _binary_kernel(name: BinaryOperationName) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    if not _USE_JITTED_BASE_OPS:
        return _BASE_BINARY_OPS[name]
    fn = _JITTED_BINARY_OPS.get(name)
    if fn is None:
        fn = jax.jit(_BASE_BINARY_OPS[name])
        _JITTED_BINARY_OPS[name] = fn
    return fn


def _comparison_kernel(name: PredicateName) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    if not _USE_JITTED_BASE_OPS:
        return _BASE_NUMERIC_COMPARISONS[name]
    fn = _JITTED_COMPARISONS.get(name)
    if fn is None:
        fn = jax.jit(_BASE_NUMERIC_COMPARISONS[name])
        _JITTED_COMPARISONS[name] = fn
    return fn


def _default_output(value: object) -> None:
    print(format_value(value))


def _params_text(count: int) -> str:
    return f"{count} param" if count == 1 else f"{count} params"


def _check_arity(key: object, count: int, label: str) -> None:
    spec = OPERATOR_SPECS_BY_NAME[key]
    if spec.max_params == spec.min_params:
        if count != spec.min_params:
            raise LispArityError(f"{label} expects exactly {_params_text(spec.min_params)}, got {count}.")
        return
    if count < spec.min_params:
        raise LispArityError(f"{label} expects at least {_params_text(spec.min_params)}, got {count}.")
    if spec.max_params is not None and count > spec.max_params:
        raise LispArityError(f"{label} expects at most {_params_text(spec.max_params)}, got {count}.")


@dataclass
class _Evaluator:
    output: OutputFn = field(default=_default_output)

    def eval(self, expr: Expr) -> object:
        if isinstance(expr, NumberLiteral):
            return parse_number_text(expr.value)
        if isinstance(expr, StringLiteral):
            return expr.value
        if isinstance(expr, BinaryOperation):
            return self._eval_binary_operation(expr)
        if isinstance(expr, Predicate):
            return self._eval_predicate(expr)
        if isinstance(expr, Conditional):
            return self._eval_conditional(expr)
        if isinstance(expr, UnaryOperation):
            return self._eval_unary_operation(expr)
        raise LispRuntimeError(f"Unsupported expression node: {type(expr).__name__}.")

    def _eval_binary_operation(self, expr: BinaryOperation) -> jnp.ndarray:
        _check_arity(expr.name, len(expr.params), expr.name.value)
        operands = [as_number_array(self.eval(param), where=expr.name.value) for param in expr.params]
        kernel = _binary_kernel(expr.name)
        result = operands[0]
        for operand in operands[1:]:
            if expr.name == BinaryOperationName.DIVIDE and bool(operand == 0):
                raise LispZeroDivisionError("Division by zero.")
            result = self._checked_step(expr.name, kernel, result, operand)
        return result

    def _checked_step(self, name: BinaryOperationName, kernel, left: jnp.ndarray, right: jnp.ndarray) -> jnp.ndarray:
        out = kernel(left, right)
        exact_op = _PY_INTEGER_OPS.get(name)
        if exact_op is None or not jnp.issubdtype(out.dtype, jnp.integer):
            return out
        # Integer kernels wrap silently; compare against exact Python ints.
        if int(out) != exact_op(int(left), int(right)):
            raise LispOverflowError(f"Integer overflow in {name.value}.")
        return out

    def _eval_predicate(self, expr: Predicate) -> bool:
        _check_arity(expr.name, len(expr.params), expr.name.value)
        values = [self.eval(param) for param in expr.params]
        outcomes = [self._compare(expr.name, left, right) for left, right in zip(values, values[1:])]
        return all(outcomes)

    def _compare(self, name: PredicateName, left: object, right: object) -> bool:
        left_kind = kind_of(left)
        right_kind = kind_of(right)
        if left_kind != right_kind:
            raise LispTypeError(f"{name.value} cannot compare {left_kind.value} with {right_kind.value}.")
        if left_kind == ValueKind.NUMBER:
            return bool(_comparison_kernel(name)(jnp.asarray(left), jnp.asarray(right)))
        if left_kind == ValueKind.BOOLEAN and name not in _EQUALITY_PREDICATES:
            raise LispTypeError(f"{name.value} is not defined for booleans.")
        return bool(_PY_COMPARISONS[name](left, right))

    def _eval_conditional(self, expr: Conditional) -> object:
        _check_arity(OperatorKind.CONDITIONAL, len(expr.params), "if")
        predicate, then_branch, else_branch = expr.params
        test = self.eval(predicate)
        if kind_of(test) != ValueKind.BOOLEAN:
            raise LispTypeError(f"if expects a boolean predicate, got {kind_of(test).value}.")
        # Only the taken branch is evaluated.
        if bool(test):
            return self.eval(then_branch)
        return self.eval(else_branch)

    def _eval_unary_operation(self, expr: UnaryOperation) -> object:
        _check_arity(expr.name, 0 if expr.param is None else 1, expr.name.value)
        value = self.eval(expr.param)
        if expr.name == UnaryOperationName.PRINT:
            self.output(value)
            return value
        raise LispRuntimeError(f"Unsupported unary operation: {expr.name.value}.")


@lru_cache(maxsize=_PARSE_CACHE_MAX)
def _parse_source_cached(source: str) -> Expr:
    return parse_source(source)


def evaluate(expr: Expr, *, output: OutputFn | None = None) -> object:
    """Reduce an AST to a number, string or boolean.

    ``print`` nodes hand their value to ``output`` (default: write it to stdout)
    in left-to-right, depth-first order.
    """
    evaluator = _Evaluator() if output is None else _Evaluator(output=output)
    result = evaluator.eval(expr)
    validate_value(result, where="result")
    return result


def run(source: str, *, output: OutputFn | None = None) -> object:
    """Tokenize, parse and evaluate source text."""
    return evaluate(_parse_source_cached(source), output=output)
