"""lisp-jax public API."""

from .lexer import Token, TokenKind, tokenize
from .parser import OPERATORS, OperatorKind, OperatorSpec, parse, parse_source, parse_with_rest, resolve_operator
from .errors import (
    LispArityError,
    LispError,
    LispRuntimeError,
    LispSyntaxError,
    LispOverflowError,
    LispTypeError,
    LispZeroDivisionError,
    UnexpectedEOFError,
    UnhandledTokenError,
)

try:
    from .evaluator import evaluate, run
except ModuleNotFoundError as exc:
    if exc.name and exc.name.startswith("jax"):
        _jax_import_error = exc

        def evaluate(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for evaluate(). Install runtime deps first."
            ) from _jax_import_error

        def run(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for run(). Install runtime deps first."
            ) from _jax_import_error

    else:
        raise

__all__ = [
    "tokenize",
    "Token",
    "TokenKind",
    "parse",
    "parse_source",
    "parse_with_rest",
    "resolve_operator",
    "OPERATORS",
    "OperatorKind",
    "OperatorSpec",
    "evaluate",
    "run",
    "LispError",
    "LispSyntaxError",
    "UnexpectedEOFError",
    "UnhandledTokenError",
    "LispRuntimeError",
    "LispArityError",
    "LispTypeError",
    "LispOverflowError",
    "LispZeroDivisionError",
]
