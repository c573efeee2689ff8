"""Tests for the arithmetic evaluator behind ``Calc``."""

from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from noteplug.exceptions import CommandError
from noteplug.expressions import ExpressionError, evaluate, parse_assignment


def _no_variables(index: int) -> int:
    raise AssertionError(f"unexpected read of variable {index}")


def test_parse_assignment_splits_target_and_expression() -> None:
    assignment = parse_assignment(" $v( 12 ) = 2 + $v(3)")

    assert assignment.index == 12
    assert assignment.expression == "2 + $v(3)"


@pytest.mark.parametrize("text", ["2+2", "$v(x)=3", "$v(1)=", "v(1)=2"])
def test_parse_assignment_rejects_malformed_text(text: str) -> None:
    with pytest.raises(ExpressionError, match="Bad or useless expression"):
        parse_assignment(text)


@pytest.mark.parametrize(
    ("expression", "expected"),
    [
        ("2+2", 4),
        ("7 // 2", 3),
        ("7 / 2", 3.5),
        ("-(3 - 5) * 2", 4),
        ("2 ** 10", 1024),
        ("10 % 4", 2),
        ("+1.5", 1.5),
    ],
)
def test_evaluate_arithmetic(expression: str, expected: float) -> None:
    assert evaluate(expression, _no_variables) == expected


def test_evaluate_reads_variables() -> None:
    values = {4: 10, 2: 3}

    assert evaluate("2+2+$v(4)", values.__getitem__) == 14
    assert evaluate("$v( 2 ) * $v(4)", values.__getitem__) == 30


@pytest.mark.parametrize(
    "expression",
    [
        "__import__('os')",
        "open('x')",
        "'text'",
        "[1, 2]",
        "$v(1.5)",
        "2 if 1 else 3",
        "1 < 2",
        "2 ** 100000",
        "1 / 0",
        "2 +",
    ],
)
def test_evaluate_rejects_unsupported_or_failing_expressions(expression: str) -> None:
    with pytest.raises(ExpressionError):
        evaluate(expression, lambda index: 1)


def test_expression_errors_are_command_errors() -> None:
    assert issubclass(ExpressionError, CommandError)


@given(st.integers(min_value=-1000, max_value=1000), st.integers(min_value=-1000, max_value=1000))
def test_evaluate_matches_python_arithmetic(left: int, right: int) -> None:
    assert evaluate(f"{left} + {right} * 3", _no_variables) == left + right * 3
