"""Structured error types for parser/runtime separation."""

from __future__ import annotations

from .lexer import Token


class LispError(Exception):
    """Base class for structured lisp-jax errors."""

    def __init__(self, message: str, token: Token | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.token = token

    @property
    def start(self) -> int | None:
        return None if self.token is None else self.token.pos

    @property
    def end(self) -> int | None:
        return None if self.token is None else self.token.end

    def __str__(self) -> str:
        return self.message


class LispSyntaxError(LispError, SyntaxError):
    """Malformed call-expression grammar."""

    def __init__(self, message: str, token: Token | None = None) -> None:
        LispError.__init__(self, message, token)
        self.msg = message


class UnexpectedEOFError(LispError):
    """Token stream ended before a call expression or string was closed."""

    def __init__(self) -> None:
        super().__init__("Unexpected eof.")


class UnhandledTokenError(LispError):
    """A token of an unexpected kind appeared where a parameter belongs."""

    def __init__(self, token: Token) -> None:
        super().__init__(f"Unhandled token: {token.text}.", token)


class LispRuntimeError(LispError):
    """Generic evaluation failure after successful parse."""


class LispArityError(LispRuntimeError):
    """Call expression has the wrong number of params for its operator."""


class LispTypeError(LispRuntimeError):
    """Runtime type/value-kind compatibility failure."""


class LispZeroDivisionError(LispRuntimeError, ZeroDivisionError):
    """Division with a zero divisor."""


class LispOverflowError(LispRuntimeError, OverflowError):
    """Integer arithmetic result does not fit the integer dtype."""
