"""Grid — the rows x cols board of numeric cells.

The Grid owns cells arranged in a 2D list and provides the spatial
queries (bounds, clamping, 4-connected neighbours) and the live target
queries used by movement, the Troggle AI and objective evaluation.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from munchers.rules.rule_engine import is_correct
from munchers.world.cell import Cell, Position

if TYPE_CHECKING:
    from collections.abc import Iterator

    from munchers.rules.rule_engine import Rule

_CARDINAL = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass
class Grid:
    """A 2D board of cells indexed as ``cells[row][col]``.

    Attributes:
        cells: Row-major list of rows.
    """

    cells: list[list[Cell]]

    @property
    def rows(self) -> int:
        """Number of rows."""
        return len(self.cells)

    @property
    def cols(self) -> int:
        """Number of columns."""
        return len(self.cells[0]) if self.cells else 0

    def cell_at(self, pos: Position) -> Cell:
        """Return the cell at ``pos``.

        Raises:
            IndexError: If ``pos`` is outside the grid.
        """
        if not self.in_bounds(pos):
            msg = f"({pos.row}, {pos.col}) out of bounds for {self.rows}x{self.cols}"
            raise IndexError(msg)
        return self.cells[pos.row][pos.col]

    def in_bounds(self, pos: Position) -> bool:
        """Return True if ``pos`` lies on the grid."""
        return 0 <= pos.row < self.rows and 0 <= pos.col < self.cols

    def clamp(self, pos: Position) -> Position:
        """Pull ``pos`` back onto the grid along each axis independently."""
        return Position(
            max(0, min(self.rows - 1, pos.row)),
            max(0, min(self.cols - 1, pos.col)),
        )

    def neighbours(self, pos: Position) -> list[Position]:
        """Return the in-bounds orthogonal neighbours of ``pos``."""
        result: list[Position] = []
        for d_row, d_col in _CARDINAL:
            nxt = pos.offset(d_row, d_col)
            if self.in_bounds(nxt):
                result.append(nxt)
        return result

    def positions(self) -> Iterator[Position]:
        """Yield every position in row-major order."""
        for r in range(self.rows):
            for c in range(self.cols):
                yield Position(r, c)

    def copy(self) -> Grid:
        """Return a deep copy so transitions never touch a prior state."""
        return Grid(cells=copy.deepcopy(self.cells))

    # -- Target queries --

    def is_live_target(self, pos: Position, rule: Rule, target_number: int) -> bool:
        """Return True if the cell is an uneaten value satisfying the rule."""
        cell = self.cell_at(pos)
        return not cell.consumed_correctly and is_correct(
            cell.value,
            rule,
            target_number,
        )

    def target_mask(self, rule: Rule, target_number: int) -> NDArray[np.bool_]:
        """Return a boolean array marking every live target cell."""
        mask = np.zeros((self.rows, self.cols), dtype=np.bool_)
        for pos in self.positions():
            mask[pos.row, pos.col] = self.is_live_target(pos, rule, target_number)
        return mask

    def live_targets(self, rule: Rule, target_number: int) -> list[Position]:
        """Return positions of all live target cells in row-major order."""
        mask = self.target_mask(rule, target_number)
        return [Position(int(r), int(c)) for r, c in np.argwhere(mask)]

    def refresh_targets(self, rule: Rule, target_number: int) -> int:
        """Re-derive every cached ``is_target`` flag from the rule.

        Args:
            rule: Active rule.
            target_number: Rule parameter.

        Returns:
            Number of flags that were stale and got corrected.
        """
        fixed = 0
        for pos in self.positions():
            cell = self.cell_at(pos)
            live = self.is_live_target(pos, rule, target_number)
            if cell.is_target != live:
                cell.is_target = live
                fixed += 1
        return fixed
