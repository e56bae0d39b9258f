"""Cell and Position — the building blocks of the puzzle grid.

A Cell holds its displayed value plus occupancy and presentation flags.
``is_target`` is only a cache of the rule evaluation; gameplay decisions
always re-derive correctness through the RuleEngine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from munchers.enemies.profiles import EnemyKind
    from munchers.rules.values import CellValue


@dataclass(frozen=True)
class Position:
    """A grid coordinate.

    Attributes:
        row: Row index, 0 at the top.
        col: Column index, 0 at the left.
    """

    row: int
    col: int

    def manhattan(self, other: Position) -> int:
        """Return the 4-connected step distance to ``other``."""
        return abs(self.row - other.row) + abs(self.col - other.col)

    def offset(self, d_row: int, d_col: int) -> Position:
        """Return the position shifted by the given deltas (unclamped)."""
        return Position(self.row + d_row, self.col + d_col)


@dataclass
class Cell:
    """A single tile in the puzzle grid.

    Attributes:
        value: Number or expression displayed on the tile.
        is_target: Cached result of the rule check for ``value``.
        has_muncher: Whether the Muncher stands here.
        has_troggle: Whether at least one Troggle stands here.
        troggle_kind: Behaviour kind of the Troggle standing here, if any.
        revealed: Whether the hint timer has revealed this tile.
        consumed_correctly: Whether this tile was eaten as a correct answer.
    """

    value: CellValue
    is_target: bool = False
    has_muncher: bool = False
    has_troggle: bool = False
    troggle_kind: EnemyKind | None = None
    revealed: bool = False
    consumed_correctly: bool = False
