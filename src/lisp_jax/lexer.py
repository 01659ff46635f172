"""Tokenization for the parenthesized call-expression language."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    OPEN_PAREN = "OPEN_PAREN"
    CLOSE_PAREN = "CLOSE_PAREN"
    QUOTE = "QUOTE"
    SYMBOL = "SYMBOL"
    NUMBER = "NUMBER"
    UNHANDLED = "UNHANDLED"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    pos: int = 0
    end: int = 0


_SINGLE_TOKENS = {
    "(": TokenKind.OPEN_PAREN,
    ")": TokenKind.CLOSE_PAREN,
    "'": TokenKind.QUOTE,
    '"': TokenKind.QUOTE,
}

_OPERATOR_TEXTS = {"=", "/=", "<", "<=", ">", ">=", "+", "-", "*", "/"}
_WHITESPACE = {" ", "\t", "\n", "\r", "\f", "\v"}

_NUMBER_RE = re.compile(
    r"""
    ^
    -?                              # optional sign
    (?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)
    (?:[eE][+\-]?[0-9]+)?           # optional exponent
    $
    """,
    re.VERBOSE,
)
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_?!\-]*$")


def is_number_text(text: str) -> bool:
    return _NUMBER_RE.match(text) is not None


def _scan_word(source: str, start: int) -> int:
    i = start
    while i < len(source) and source[i] not in _WHITESPACE and source[i] not in _SINGLE_TOKENS and source[i] != ";":
        i += 1
    return i


def _classify_word(text: str) -> TokenKind:
    if is_number_text(text):
        return TokenKind.NUMBER
    if text in _OPERATOR_TEXTS or _IDENT_RE.match(text):
        return TokenKind.SYMBOL
    return TokenKind.UNHANDLED


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    i = 0

    while i < len(source):
        ch = source[i]

        if ch in _WHITESPACE:
            i += 1
            continue

        if ch == ";":
            while i < len(source) and source[i] not in {"\n", "\r"}:
                i += 1
            continue

        if ch in _SINGLE_TOKENS:
            tokens.append(Token(_SINGLE_TOKENS[ch], ch, i, i + 1))
            i += 1
            continue

        end = _scan_word(source, i)
        text = source[i:end]
        tokens.append(Token(_classify_word(text), text, i, end))
        i = end

    return tokens
