#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Optional, List


# ==========================
# AST definitions
# ==========================

MISSING = "<missing>"


def _text(node: Optional["Node"]) -> str:
    return MISSING if node is None else str(node)


@dataclass
class Span:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class Node:
    span: Optional[Span] = field(default=None, repr=False, compare=False, kw_only=True)


# --- expressions ---

@dataclass
class Expression(Node):
    pass


@dataclass
class Identifier(Expression):
    name: str  # attribute name, placeholder or literal text as written

    def __str__(self) -> str:
        return self.name


@dataclass
class PrefixExpression(Expression):
    operator: str  # only "NOT" today
    operand: Optional[Expression]

    def __str__(self) -> str:
        return f"({self.operator} {_text(self.operand)})"


@dataclass
class InfixExpression(Expression):
    operator: str
    left: Optional[Expression]
    right: Optional[Expression]

    def __str__(self) -> str:
        return f"({_text(self.left)} {self.operator} {_text(self.right)})"


@dataclass
class BetweenExpression(Expression):
    subject: Optional[Expression]
    low: Identifier
    high: Identifier

    def __str__(self) -> str:
        return f"({_text(self.subject)} BETWEEN {_text(self.low)} AND {_text(self.high)})"


@dataclass
class CallExpression(Expression):
    callee: Optional[Expression]
    arguments: Optional[List[Optional[Expression]]]  # None when the argument list failed to parse

    def __str__(self) -> str:
        if self.arguments is None:
            return f"{_text(self.callee)}({MISSING})"
        args = ", ".join(_text(arg) for arg in self.arguments)
        return f"{_text(self.callee)}({args})"


# --- statements ---

@dataclass
class ExpressionStatement(Node):
    expression: Optional[Expression]

    def __str__(self) -> str:
        return _text(self.expression)


@dataclass
class DynamoExpression(Node):
    statement: Optional[ExpressionStatement] = None

    def __str__(self) -> str:
        return "" if self.statement is None else str(self.statement)
