"""AST nodes for parenthesized call expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class PredicateName(str, Enum):
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    LESS_THAN = "LESS_THAN"
    LESS_THAN_OR_EQUAL = "LESS_THAN_OR_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    GREATER_THAN_OR_EQUAL = "GREATER_THAN_OR_EQUAL"


class BinaryOperationName(str, Enum):
    ADD = "ADD"
    SUBTRACT = "SUBTRACT"
    MULTIPLY = "MULTIPLY"
    DIVIDE = "DIVIDE"


class UnaryOperationName(str, Enum):
    PRINT = "PRINT"


@dataclass(frozen=True)
class NumberLiteral:
    value: str


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class Conditional:
    params: tuple["Expr", ...]


@dataclass(frozen=True)
class Predicate:
    name: PredicateName
    params: tuple["Expr", ...]


@dataclass(frozen=True)
class BinaryOperation:
    name: BinaryOperationName
    params: tuple["Expr", ...]


@dataclass(frozen=True)
class UnaryOperation:
    name: UnaryOperationName
    # None when the call had no params at all; rejected at evaluation time.
    param: "Expr | None"


Literal = Union[NumberLiteral, StringLiteral]
CallExpression = Union[Conditional, Predicate, BinaryOperation, UnaryOperation]
Expr = Union[NumberLiteral, StringLiteral, Conditional, Predicate, BinaryOperation, UnaryOperation]
