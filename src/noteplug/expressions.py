"""Arithmetic evaluation for variable assignment commands.

Expressions are parsed with :mod:`ast` and only numeric literals, the
arithmetic operators and ``$v(n)`` variable reads are accepted.
"""

from __future__ import annotations

import ast
import operator
import re
from typing import Any, Callable, Dict

from .exceptions import CommandError

__all__ = ["Assignment", "ExpressionError", "evaluate", "parse_assignment"]

_ASSIGNMENT = re.compile(r"^\s*\$v\(\s*(\d+)\s*\)\s*=(.+)$", re.DOTALL)
_VARIABLE_REFERENCE = re.compile(r"\$v\s*\(")
_READER_NAME = "_read_variable"
_MAX_EXPONENT = 1024

_BINARY_OPERATORS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class ExpressionError(CommandError):
    """Raised for malformed or unsupported expressions."""


class Assignment:
    """A parsed ``$v(index) = expression`` statement."""

    __slots__ = ("index", "expression")

    def __init__(self, index: int, expression: str) -> None:
        self.index = index
        self.expression = expression

    def __repr__(self) -> str:
        return f"Assignment(index={self.index!r}, expression={self.expression!r})"


def parse_assignment(text: str) -> Assignment:
    match = _ASSIGNMENT.match(text)
    if match is None:
        raise ExpressionError(f"Bad or useless expression: {text}")
    return Assignment(int(match.group(1)), match.group(2).strip())


def evaluate(expression: str, read_variable: Callable[[int], Any]) -> Any:
    """Evaluate ``expression`` reading ``$v(n)`` through ``read_variable``."""

    source = _VARIABLE_REFERENCE.sub(f"{_READER_NAME}(", expression)
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        raise ExpressionError(f"Invalid expression: {expression}") from exc

    def visit(node: ast.AST) -> Any:
        if isinstance(node, ast.Expression):
            return visit(node.body)
        if isinstance(node, ast.Constant) and type(node.value) in (int, float):
            return node.value
        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
            left, right = visit(node.left), visit(node.right)
            if (
                isinstance(node.op, ast.Pow)
                and isinstance(right, (int, float))
                and abs(right) > _MAX_EXPONENT
            ):
                raise ExpressionError(f"Exponent too large in {expression}")
            try:
                return _BINARY_OPERATORS[type(node.op)](left, right)
            except (ArithmeticError, TypeError) as exc:
                raise ExpressionError(f"Cannot evaluate {expression}: {exc}") from exc
        if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
            return _UNARY_OPERATORS[type(node.op)](visit(node.operand))
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id == _READER_NAME
            and len(node.args) == 1
            and not node.keywords
        ):
            index = visit(node.args[0])
            if not isinstance(index, int):
                raise ExpressionError(f"Variable index must be an integer in {expression}")
            return read_variable(index)
        raise ExpressionError(
            f"Unsupported syntax '{type(node).__name__}' in expression: {expression}"
        )

    return visit(tree)
