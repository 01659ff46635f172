"""Recursive-descent parser for parenthesized call expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Sequence

from .ast import BinaryOperation, BinaryOperationName, Conditional, Expr, NumberLiteral, Predicate, PredicateName, StringLiteral, UnaryOperation, UnaryOperationName
from .errors import LispSyntaxError, UnexpectedEOFError, UnhandledTokenError
from .lexer import Token, TokenKind, tokenize


class OperatorKind(str, Enum):
    CONDITIONAL = "conditional"
    PREDICATE = "predicate"
    BINARY_OPERATION = "binary_operation"
    UNARY_OPERATION = "unary_operation"


@dataclass(frozen=True)
class OperatorSpec:
    kind: OperatorKind
    name: PredicateName | BinaryOperationName | UnaryOperationName | None
    min_params: int
    max_params: int | None = None


def _build_operator_table() -> dict[str, OperatorSpec]:
    # Insertion order is resolution priority; earlier entries win on duplicate text.
    groups: tuple[tuple[OperatorKind, dict[str, object], int, int | None], ...] = (
        (OperatorKind.CONDITIONAL, {"if": None}, 3, 3),
        (
            OperatorKind.PREDICATE,
            {
                "=": PredicateName.EQUAL,
                "/=": PredicateName.NOT_EQUAL,
                "<=": PredicateName.LESS_THAN_OR_EQUAL,
                "<": PredicateName.LESS_THAN,
                ">=": PredicateName.GREATER_THAN_OR_EQUAL,
                ">": PredicateName.GREATER_THAN,
            },
            2,
            None,
        ),
        (
            OperatorKind.BINARY_OPERATION,
            {
                "+": BinaryOperationName.ADD,
                "-": BinaryOperationName.SUBTRACT,
                "*": BinaryOperationName.MULTIPLY,
                "/": BinaryOperationName.DIVIDE,
            },
            1,
            None,
        ),
        (OperatorKind.UNARY_OPERATION, {"print": UnaryOperationName.PRINT}, 1, 1),
    )
    table: dict[str, OperatorSpec] = {}
    for kind, names, min_params, max_params in groups:
        for text, name in names.items():
            table.setdefault(text, OperatorSpec(kind=kind, name=name, min_params=min_params, max_params=max_params))
    return table


OPERATORS: Final[dict[str, OperatorSpec]] = _build_operator_table()
OPERATOR_SPECS_BY_NAME: Final[dict[object, OperatorSpec]] = {
    spec.name if spec.name is not None else spec.kind: spec for spec in OPERATORS.values()
}


def resolve_operator(text: str) -> OperatorSpec | None:
    return OPERATORS.get(text)


@dataclass
class _Parser:
    tokens: Sequence[Token]
    index: int = 0

    def parse_top_level(self) -> Expr:
        if self._at_end() or self._peek().kind != TokenKind.OPEN_PAREN:
            raise LispSyntaxError("No initial call expression found.", None if self._at_end() else self._peek())
        self._advance()
        return self._parse_call_expression()

    def _at_end(self) -> bool:
        return self.index >= len(self.tokens)

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        if self._at_end():
            raise UnexpectedEOFError()
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _parse_call_expression(self) -> Expr:
        operator_tok = self._advance()
        if operator_tok.kind != TokenKind.SYMBOL:
            raise LispSyntaxError("Missing operator in call expression.", operator_tok)

        spec = resolve_operator(operator_tok.text)
        if spec is None:
            raise LispSyntaxError(f"Unknown operator: {operator_tok.text}.", operator_tok)

        params = self._parse_params()

        if spec.kind == OperatorKind.CONDITIONAL:
            return Conditional(params=params)
        if spec.kind == OperatorKind.PREDICATE:
            return Predicate(name=spec.name, params=params)
        if spec.kind == OperatorKind.BINARY_OPERATION:
            return BinaryOperation(name=spec.name, params=params)
        # Extra params of a unary call are dropped without error.
        return UnaryOperation(name=spec.name, param=params[0] if params else None)

    def _parse_params(self) -> tuple[Expr, ...]:
        params: list[Expr] = []
        while True:
            tok = self._advance()
            if tok.kind == TokenKind.NUMBER:
                params.append(NumberLiteral(value=tok.text))
            elif tok.kind == TokenKind.QUOTE:
                params.append(self._parse_string())
            elif tok.kind == TokenKind.OPEN_PAREN:
                params.append(self._parse_call_expression())
            elif tok.kind == TokenKind.CLOSE_PAREN:
                return tuple(params)
            else:
                raise UnhandledTokenError(tok)

    def _parse_string(self) -> StringLiteral:
        words: list[str] = []
        while True:
            tok = self._advance()
            if tok.kind == TokenKind.QUOTE:
                return StringLiteral(value=" ".join(words))
            words.append(tok.text)


def parse_with_rest(tokens: Sequence[Token]) -> tuple[Expr, int]:
    """Parse the leading call expression; also return the index of the first unconsumed token."""
    parser = _Parser(tokens=tokens)
    expr = parser.parse_top_level()
    return expr, parser.index


def parse(tokens: Sequence[Token]) -> Expr:
    """Parse a token sequence into an AST.

    Tokens after the outermost closing paren are ignored.
    """
    expr, _ = parse_with_rest(tokens)
    return expr


def parse_source(source: str) -> Expr:
    return parse(tokenize(source))
