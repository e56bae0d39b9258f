"""Troggle AI — one decision policy per behaviour kind.

Every policy answers the same question: where does this Troggle stand
after the current tick?  All policies step along a single axis per tick
and never leave the grid.  Classic mode uses the random-walk policy for
every Troggle; level mode picks the policy registered for the Troggle's
kind.

Policies:

- **random walk** (classic): random axis, random delta in {-1, 0, 1}.
- **standard**: track the Muncher with probability ``intelligence``,
  otherwise step to a random neighbour.
- **speed**: as standard, gated on ``aggressiveness``; its profile has no
  cooldown so it steps every tick.
- **smart**: follows a cached BFS path to the Muncher, recomputed when
  exhausted or when its next step is no longer adjacent.
- **blocker**: heads for the midpoint between the Muncher and the target
  cell nearest to the Muncher.
- **hunter**: with other hunters present, claims the nearest free
  orthogonal neighbour of the Muncher to box it in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from munchers.enemies.pathfinding import find_path
from munchers.enemies.profiles import EnemyKind
from munchers.world.cell import Position

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.random import Generator

    from munchers.enemies.troggle import TroggleRuntime
    from munchers.rules.rule_engine import Rule
    from munchers.world.grid import Grid

# -- Constants ---------------------------------------------------------------

_BLOCKER_CANDIDATES = 3
_SURROUND_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))  # N, S, W, E


@dataclass(frozen=True)
class BoardView:
    """What a Troggle can see when deciding its move.

    Attributes:
        grid: Current grid.
        muncher: Muncher position.
        rule: Active rule (for live target lookups).
        target_number: Rule parameter.
    """

    grid: Grid
    muncher: Position
    rule: Rule
    target_number: int


class EnemyBehavior(Protocol):
    """Decision policy for a Troggle."""

    def next_position(
        self,
        troggle: TroggleRuntime,
        board: BoardView,
        siblings: Sequence[TroggleRuntime],
        rng: Generator,
    ) -> Position:
        """Return the Troggle's position after this tick."""
        ...


# -- Shared steps ------------------------------------------------------------


def step_toward(
    current: Position,
    goal: Position,
    grid: Grid,
    rng: Generator,
) -> Position:
    """Take one single-axis step that reduces the distance to ``goal``.

    When both axes differ the axis is chosen at random.  Staying put is
    the result when ``current == goal``.
    """
    d_row = (goal.row > current.row) - (goal.row < current.row)
    d_col = (goal.col > current.col) - (goal.col < current.col)
    if d_row and d_col:
        if rng.random() < 0.5:
            d_col = 0
        else:
            d_row = 0
    return grid.clamp(current.offset(d_row, d_col))


def random_adjacent(current: Position, grid: Grid, rng: Generator) -> Position:
    """Step to a uniformly chosen in-bounds orthogonal neighbour."""
    options = grid.neighbours(current)
    if not options:
        return current
    return options[int(rng.integers(0, len(options)))]


def nearest_targets(board: BoardView, count: int) -> list[Position]:
    """Return up to ``count`` live targets closest to the Muncher."""
    targets = board.grid.live_targets(board.rule, board.target_number)
    targets.sort(key=board.muncher.manhattan)
    return targets[:count]


# -- Policies ----------------------------------------------------------------


class RandomWalkBehavior:
    """Classic-mode Troggle: random axis, random delta, clamped."""

    def next_position(
        self,
        troggle: TroggleRuntime,
        board: BoardView,
        siblings: Sequence[TroggleRuntime],
        rng: Generator,
    ) -> Position:
        delta = int(rng.integers(-1, 2))
        if rng.random() < 0.5:
            nxt = troggle.position.offset(delta, 0)
        else:
            nxt = troggle.position.offset(0, delta)
        return board.grid.clamp(nxt)


class StandardBehavior:
    """Mostly wanders; tracks the Muncher with probability ``intelligence``."""

    def tracking_chance(self, troggle: TroggleRuntime) -> float:
        return troggle.profile.intelligence

    def next_position(
        self,
        troggle: TroggleRuntime,
        board: BoardView,
        siblings: Sequence[TroggleRuntime],
        rng: Generator,
    ) -> Position:
        if rng.random() < self.tracking_chance(troggle):
            return step_toward(troggle.position, board.muncher, board.grid, rng)
        return random_adjacent(troggle.position, board.grid, rng)


class SpeedBehavior(StandardBehavior):
    """Standard policy gated on aggressiveness instead of intelligence."""

    def tracking_chance(self, troggle: TroggleRuntime) -> float:
        return troggle.profile.aggressiveness


class SmartBehavior:
    """Consumes a cached shortest path to the Muncher one step per tick."""

    def next_position(
        self,
        troggle: TroggleRuntime,
        board: BoardView,
        siblings: Sequence[TroggleRuntime],
        rng: Generator,
    ) -> Position:
        path = troggle.planned_path
        if path and not _is_valid_step(troggle.position, path[0], board.grid):
            path.clear()
        if not path:
            path.extend(find_path(board.grid, troggle.position, board.muncher))
        if path:
            return path.pop(0)
        return step_toward(troggle.position, board.muncher, board.grid, rng)


class BlockerBehavior:
    """Cuts the Muncher off from its nearest remaining target."""

    def next_position(
        self,
        troggle: TroggleRuntime,
        board: BoardView,
        siblings: Sequence[TroggleRuntime],
        rng: Generator,
    ) -> Position:
        targets = nearest_targets(board, _BLOCKER_CANDIDATES)
        if targets:
            nearest = targets[0]
            midpoint = Position(
                (board.muncher.row + nearest.row) // 2,
                (board.muncher.col + nearest.col) // 2,
            )
            return step_toward(troggle.position, midpoint, board.grid, rng)
        return step_toward(troggle.position, board.muncher, board.grid, rng)


class HunterBehavior:
    """Coordinates with other hunters to surround the Muncher."""

    def next_position(
        self,
        troggle: TroggleRuntime,
        board: BoardView,
        siblings: Sequence[TroggleRuntime],
        rng: Generator,
    ) -> Position:
        others = [
            s for s in siblings if s is not troggle and s.kind is EnemyKind.HUNTER
        ]
        if others:
            spot = _surround_spot(troggle.position, board, others)
            if spot is not None:
                return step_toward(troggle.position, spot, board.grid, rng)
        return step_toward(troggle.position, board.muncher, board.grid, rng)


BEHAVIORS: dict[EnemyKind, EnemyBehavior] = {
    EnemyKind.STANDARD: StandardBehavior(),
    EnemyKind.SPEED: SpeedBehavior(),
    EnemyKind.SMART: SmartBehavior(),
    EnemyKind.BLOCKER: BlockerBehavior(),
    EnemyKind.HUNTER: HunterBehavior(),
}
CLASSIC_BEHAVIOR: EnemyBehavior = RandomWalkBehavior()


def next_position(
    troggle: TroggleRuntime,
    board: BoardView,
    siblings: Sequence[TroggleRuntime],
    rng: Generator,
    *,
    classic: bool = False,
) -> Position:
    """Decide a Troggle's position for this tick, honouring its cooldown.

    A Troggle with a positive cooldown stays put and the cooldown ticks
    down.  Otherwise the kind's policy (or the random walk in classic
    mode) picks the step and the cooldown is reloaded from the profile.
    ``troggle`` is updated in place, so callers pass a copy.

    Args:
        troggle: The deciding Troggle.
        board: Grid, Muncher position and active rule.
        siblings: Every Troggle on the board, including ``troggle``.
        rng: Seeded random generator.
        classic: Use the classic random walk regardless of kind.

    Returns:
        In-bounds position at most one orthogonal step away.
    """
    if troggle.move_cooldown > 0:
        troggle.move_cooldown -= 1
        return troggle.position

    behavior = CLASSIC_BEHAVIOR if classic else BEHAVIORS[troggle.kind]
    nxt = board.grid.clamp(behavior.next_position(troggle, board, siblings, rng))
    troggle.move_cooldown = 0 if classic else troggle.profile.cooldown_ticks
    return nxt


# -- Helpers -----------------------------------------------------------------


def _is_valid_step(current: Position, step: Position, grid: Grid) -> bool:
    return grid.in_bounds(step) and current.manhattan(step) == 1


def _surround_spot(
    current: Position,
    board: BoardView,
    others: list[TroggleRuntime],
) -> Position | None:
    """Nearest orthogonal neighbour of the Muncher not held by another hunter."""
    taken = {h.position for h in others}
    spots = [
        spot
        for spot in (board.muncher.offset(dr, dc) for dr, dc in _SURROUND_OFFSETS)
        if board.grid.in_bounds(spot) and spot not in taken
    ]
    if not spots:
        return None
    return min(spots, key=current.manhattan)
