"""Cell values — the two shapes a grid number can take.

A cell either shows a plain integer or a two-operand arithmetic
expression.  Modelling them as separate frozen types means rule checks
never have to parse ``"a+b"`` strings at evaluation time; text only
appears at the edges (level files, rendering).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class Operator(Enum):
    """Binary operator of an expression value."""

    PLUS = "+"
    MINUS = "-"


@dataclass(frozen=True)
class Numeric:
    """A plain integer cell value."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Expression:
    """A two-operand expression such as ``7+3`` or ``12-4``.

    Attributes:
        op: The operator joining the operands.
        left: Left operand.
        right: Right operand.
    """

    op: Operator
    left: int
    right: int

    def evaluate(self) -> int:
        """Return the arithmetic result of the expression."""
        if self.op is Operator.PLUS:
            return self.left + self.right
        return self.left - self.right

    def __str__(self) -> str:
        return f"{self.left}{self.op.value}{self.right}"


CellValue = Numeric | Expression

_EXPRESSION_RE = re.compile(r"^\s*(\d+)\s*([+-])\s*(\d+)\s*$")


def parse_value(raw: int | str) -> CellValue:
    """Convert an int or its textual form into a CellValue.

    Args:
        raw: An integer, a decimal string, or an ``"a+b"``/``"a-b"`` string.

    Returns:
        The matching Numeric or Expression.

    Raises:
        ValueError: If the text is neither an integer nor a two-operand
            expression.
    """
    if isinstance(raw, int):
        return Numeric(raw)
    match = _EXPRESSION_RE.match(raw)
    if match:
        left, op, right = match.groups()
        return Expression(Operator(op), int(left), int(right))
    try:
        return Numeric(int(raw.strip()))
    except ValueError:
        msg = f"unrecognised cell value {raw!r}"
        raise ValueError(msg) from None
