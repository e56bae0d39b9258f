"""GridGenerator — builds a puzzle grid for a rule and target number.

Generation picks a target-cell count, scatters that many correct values
over random cells and fills the rest with incorrect ones.  Degenerate
input (a rule/target pair with fewer than three correct values, or no
incorrect values) is recovered locally:

1. retry with an alternative target for the same rule (10 retries),
2. switch to the primes rule,
3. build a small hand-rolled prime grid.

None of these steps raise; they log a warning so the fallback is
diagnosable.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from munchers.rules.rule_engine import (
    Rule,
    alternative_target,
    generate_correct_pool,
    generate_incorrect_pool,
    is_correct,
)
from munchers.rules.values import Numeric
from munchers.world.cell import Cell, Position
from munchers.world.grid import Grid

if TYPE_CHECKING:
    from numpy.random import Generator

logger = logging.getLogger(__name__)

# -- Constants ---------------------------------------------------------------

MIN_TARGETS = 3
MAX_TARGETS = 8
_MAX_RETRIES = 10
_FALLBACK_PRIMES = (2, 3, 5)
_FALLBACK_COMPOSITES = (4, 6, 8, 9, 10, 12, 14, 15, 16, 18)


@dataclass
class Puzzle:
    """A generated grid together with the rule it was built for.

    The rule and target may differ from the ones requested when the
    degenerate-input fallback kicked in.

    Attributes:
        grid: The populated grid (no occupants placed yet).
        rule: Rule every ``is_target`` flag was derived from.
        target_number: Rule parameter used.
    """

    grid: Grid
    rule: Rule
    target_number: int


def generate(
    rows: int,
    cols: int,
    rule: Rule,
    target_number: int,
    rng: Generator,
) -> Puzzle:
    """Build a consistent puzzle grid.

    Args:
        rows: Number of grid rows.
        cols: Number of grid columns.
        rule: Requested rule.
        target_number: Requested rule parameter.
        rng: Seeded random generator.

    Returns:
        A Puzzle whose every cell satisfies
        ``cell.is_target == is_correct(cell.value, rule, target_number)``.
    """
    attempts = [(rule, target_number)]
    if rule is not Rule.PRIMES:
        attempts.append((Rule.PRIMES, 0))

    for attempt_rule, start_target in attempts:
        current = start_target
        for retry in range(_MAX_RETRIES + 1):
            grid = _build(rows, cols, attempt_rule, current, rng)
            if grid is not None:
                return Puzzle(grid=grid, rule=attempt_rule, target_number=current)
            logger.warning(
                "Too few values for %s/%d (attempt %d), retrying",
                attempt_rule.value,
                current,
                retry + 1,
            )
            current = alternative_target(attempt_rule, rng)
        logger.warning("Giving up on rule %s", attempt_rule.value)

    logger.warning("Grid generation failed, using hand-built prime grid")
    return Puzzle(grid=fallback_prime_grid(rows, cols), rule=Rule.PRIMES, target_number=0)


def target_count(correct_pool_size: int, total_cells: int, rng: Generator) -> int:
    """Choose how many target cells to place.

    Uniform in ``[3, upper]`` where ``upper = min(8, pool, cells - 2)``,
    leaving room for the Muncher and a Troggle.
    """
    upper = min(MAX_TARGETS, correct_pool_size, total_cells - 2)
    lower = min(MIN_TARGETS, upper)
    return int(rng.integers(lower, upper + 1))


def fallback_prime_grid(rows: int, cols: int) -> Grid:
    """Deterministic grid with three primes and composite filler."""
    values = itertools.chain(_FALLBACK_PRIMES, itertools.cycle(_FALLBACK_COMPOSITES))
    cells = []
    for _ in range(rows):
        row = []
        for _ in range(cols):
            value = Numeric(next(values))
            row.append(Cell(value=value, is_target=is_correct(value, Rule.PRIMES, 0)))
        cells.append(row)
    return Grid(cells=cells)


# -- Placement ---------------------------------------------------------------


def place_classic(grid: Grid, rng: Generator) -> tuple[Position, Position]:
    """Put the Muncher in a random corner and a Troggle diagonally opposite.

    Returns:
        ``(muncher, troggle)`` positions, already flagged on the grid.
    """
    last_row, last_col = grid.rows - 1, grid.cols - 1
    corners = [
        Position(0, 0),
        Position(0, last_col),
        Position(last_row, 0),
        Position(last_row, last_col),
    ]
    index = int(rng.integers(0, 4))
    muncher = corners[index]
    troggle = corners[3 - index]
    grid.cell_at(muncher).has_muncher = True
    grid.cell_at(troggle).has_troggle = True
    return muncher, troggle


def random_empty_position(grid: Grid, rng: Generator) -> Position:
    """Pick a cell holding neither the Muncher nor a Troggle.

    Falls back to ``(0, 0)`` with a warning when the grid is full.
    """
    empty = [
        pos
        for pos in grid.positions()
        if not grid.cell_at(pos).has_muncher and not grid.cell_at(pos).has_troggle
    ]
    if not empty:
        logger.warning("No empty positions found, returning default position")
        return Position(0, 0)
    return empty[int(rng.integers(0, len(empty)))]


# -- Helpers -----------------------------------------------------------------


def _build(
    rows: int,
    cols: int,
    rule: Rule,
    target_number: int,
    rng: Generator,
) -> Grid | None:
    """Single generation attempt; None when the input is degenerate."""
    correct = generate_correct_pool(rule, target_number)
    if len(correct) < MIN_TARGETS:
        return None
    incorrect = generate_incorrect_pool(rule, target_number, rng)
    if not incorrect:
        return None

    total = rows * cols
    k = target_count(len(correct), total, rng)
    target_indices = {int(i) for i in rng.choice(total, size=k, replace=False)}

    cells: list[list[Cell]] = []
    for r in range(rows):
        row: list[Cell] = []
        for c in range(cols):
            if r * cols + c in target_indices:
                value = correct[int(rng.integers(0, len(correct)))]
                row.append(Cell(value=value, is_target=True))
            else:
                value = incorrect[int(rng.integers(0, len(incorrect)))]
                row.append(Cell(value=value, is_target=False))
        cells.append(row)

    grid = Grid(cells=cells)
    fixed = grid.refresh_targets(rule, target_number)
    if fixed:
        logger.debug("Corrected %d target flags after generation", fixed)
    return grid
