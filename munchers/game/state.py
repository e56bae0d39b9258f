"""GameState — the single value describing a live puzzle session.

GameState is frozen: every transition builds a new one with
``dataclasses.replace`` after copying the grid, so a state handed to the
presentation layer never changes underneath it.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from munchers.enemies.troggle import TroggleRuntime
    from munchers.levels.catalog import Level, Objective
    from munchers.rules.rule_engine import Rule
    from munchers.world.cell import Position
    from munchers.world.grid import Grid


class GameMode(Enum):
    """Classic endless puzzles or catalog-driven levels."""

    CLASSIC = "classic"
    LEVEL = "level"


@dataclass(frozen=True)
class GameState:
    """Complete state of one puzzle.

    Attributes:
        grid: The board (owned exclusively by this state).
        muncher: Muncher position.
        troggles: Troggles in spawn order.
        rule: Active rule.
        target_number: Rule parameter.
        mode: Classic or level play.
        time_limit: Countdown length in ticks.
        time_left: Ticks remaining.
        score: Running score (eat points plus objective credits).
        mistakes: Incorrect eats so far.
        max_mistakes: Mistakes that end the game.
        streak: Consecutive correct eats since the last mistake.
        best_streak: Longest streak reached this session.
        correct_eats: Correct eats so far.
        puzzles_cleared: Classic puzzles won before this one.
        points_per_target: Base points for a correct eat.
        level: Level definition in level mode.
        objectives: Objectives tracked this session.
        completed_objectives: Ids of completed objectives, in order.
        ticks_elapsed: Ticks since the puzzle started.
        ticks_since_correct: Ticks since the last correct eat or hint.
        game_over: Terminal loss flag.
        game_won: Terminal win flag.
    """

    grid: Grid
    muncher: Position
    troggles: tuple[TroggleRuntime, ...]
    rule: Rule
    target_number: int
    mode: GameMode = GameMode.CLASSIC
    time_limit: int = 60
    time_left: int = 60
    score: int = 0
    mistakes: int = 0
    max_mistakes: int = 3
    streak: int = 0
    best_streak: int = 0
    correct_eats: int = 0
    puzzles_cleared: int = 0
    points_per_target: int = 10
    level: Level | None = None
    objectives: tuple[Objective, ...] = ()
    completed_objectives: tuple[str, ...] = ()
    ticks_elapsed: int = 0
    ticks_since_correct: int = 0
    game_over: bool = False
    game_won: bool = False

    @property
    def is_terminal(self) -> bool:
        """Return True once the puzzle is won or lost."""
        return self.game_over or self.game_won

    @property
    def accuracy(self) -> int:
        """Percentage of eats that were correct, 100 before any eat."""
        total = self.correct_eats + self.mistakes
        if total == 0:
            return 100
        return int(self.correct_eats * 100 / total + 0.5)

    @property
    def difficulty_tier(self) -> int:
        """Tier of the current level; classic play is tier 1."""
        return self.level.tier if self.level is not None else 1

    @property
    def troggle_positions(self) -> list[Position]:
        return [t.position for t in self.troggles]

    def remaining_targets(self) -> int:
        """Count uneaten cells that satisfy the rule."""
        return len(self.grid.live_targets(self.rule, self.target_number))

    def snapshot(self) -> GameState:
        """Return a deep copy safe to hand to rendering or storage code."""
        return copy.deepcopy(self)
