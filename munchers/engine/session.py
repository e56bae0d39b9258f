"""GameEngine — owns the live session and serialises every transition.

The engine holds the current GameState, the seeded RNG and a generation
counter.  Input events and clock ticks are applied one at a time, each
producing a new state that is published to listeners.  Every new game
(start, retry, return to menu, next classic puzzle) bumps the generation;
ticks scheduled for an older generation are ignored, so a stale timer
can never touch a newer session.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.random import Generator

from munchers.game import movement
from munchers.game.achievements import Achievement, check_achievements
from munchers.game.setup import new_classic_state, new_level_state
from munchers.game.state import GameMode, GameState
from munchers.game.summary import SessionSummary, summarize

if TYPE_CHECKING:
    from collections.abc import Callable, Collection

    from munchers.engine.config import GameConfig
    from munchers.levels.catalog import LevelCatalog
    from munchers.levels.progression import ProgressionManager

logger = logging.getLogger(__name__)


@dataclass
class GameEngine:
    """Drives one player's sessions.

    Attributes:
        config: Loaded engine configuration.
        catalog: Level definitions (required for level play).
        progression: Save-data collaborator; sessions are not persisted
            when absent.
        clock: Monotonic seconds source used for session durations.
        state: Current game state, None at the menu.
        rng: Master seeded random generator.
        generation: Id of the current session.
        last_summary: Summary of the most recently finished level.
        new_achievements: Achievements earned by the last finished session.
        pending_high_score: The last classic run qualifies for the table.
    """

    config: GameConfig
    catalog: LevelCatalog | None = None
    progression: ProgressionManager | None = None
    clock: Callable[[], float] = time.monotonic
    state: GameState | None = field(init=False, default=None)
    rng: Generator = field(init=False)
    generation: int = field(init=False, default=0)
    last_summary: SessionSummary | None = field(init=False, default=None)
    new_achievements: list[Achievement] = field(init=False, default_factory=list)
    pending_high_score: bool = field(init=False, default=False)
    _listeners: list[Callable[[GameState | None], None]] = field(
        init=False,
        default_factory=list,
    )
    _started_at: float = field(init=False, default=0.0)
    _level_id: int | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        """Seed the RNG from config."""
        self.rng = np.random.default_rng(self.config.seed)

    # -- Subscriptions --

    def subscribe(self, listener: Callable[[GameState | None], None]) -> Callable[[], None]:
        """Register a listener called with a snapshot of every new state.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> GameState | None:
        """Return a deep copy of the current state, or None at the menu."""
        return self.state.snapshot() if self.state is not None else None

    # -- Session lifecycle --

    def start_classic(self) -> GameState:
        """Begin a new classic run from zero."""
        self._level_id = None
        return self._begin(new_classic_state(self.config, self.rng))

    def next_puzzle(self) -> GameState | None:
        """Continue a won classic run with a fresh puzzle, carrying the score."""
        prev = self.state
        if prev is None or prev.mode is not GameMode.CLASSIC or not prev.game_won:
            return None
        return self._begin(
            new_classic_state(
                self.config,
                self.rng,
                score=prev.score,
                puzzles_cleared=prev.puzzles_cleared + 1,
            ),
        )

    def start_level(self, level_id: int) -> GameState:
        """Begin a catalog level.

        Raises:
            LevelNotFoundError: If the id is unknown.
            LevelLockedError: If the level is not unlocked.
            ValueError: If the engine has no catalog.
        """
        if self.catalog is None:
            msg = "Level play needs a level catalog"
            raise ValueError(msg)
        completed: Collection[int] = ()
        total_score = None
        if self.progression is not None:
            completed = self.progression.completed_levels()
            total_score = self.progression.data.player_stats.total_score
        state = new_level_state(
            self.catalog, level_id, self.config, self.rng, completed, total_score
        )
        self._level_id = level_id
        return self._begin(state)

    def retry(self) -> GameState:
        """Restart the current level, or a fresh classic run."""
        if self._level_id is not None:
            return self.start_level(self._level_id)
        return self.start_classic()

    def return_to_menu(self) -> None:
        """Drop the current session; pending ticks become stale."""
        self.generation += 1
        self.state = None
        self._level_id = None
        self._publish()

    # -- Transitions --

    def move(self, d_row: int, d_col: int) -> movement.MoveResult | None:
        """Apply a Muncher move to the current state."""
        if self.state is None:
            return None
        result = movement.move_muncher(self.state, d_row, d_col)
        self._commit(result.state)
        return result

    def eat(self) -> movement.EatResult | None:
        """Apply an eat to the current state."""
        if self.state is None:
            return None
        result = movement.eat(self.state)
        self._commit(result.state)
        return result

    def tick(self, generation: int | None = None) -> bool:
        """Advance the clock by one tick.

        Args:
            generation: Session id the tick was scheduled for; defaults
                to the current one.

        Returns:
            True if a tick was applied.
        """
        if generation is not None and generation != self.generation:
            logger.debug("Ignoring stale tick for generation %d", generation)
            return False
        if self.state is None or self.state.is_terminal:
            return False
        self._commit(
            movement.advance_tick(self.state, self.rng, self.config.reveal_delay_ticks),
        )
        return True

    def submit_high_score(self, player_name: str) -> int:
        """Enter the finished classic run into the high-score table.

        Returns:
            Zero-based rank, or -1 when nothing was recorded.
        """
        if not self.pending_high_score or self.progression is None or self.state is None:
            return -1
        self.pending_high_score = False
        return self.progression.add_high_score(
            self.state.score,
            player_name,
            self.state.puzzles_cleared,
        )

    # -- Internals --

    def _begin(self, state: GameState) -> GameState:
        self.generation += 1
        self.state = state
        self.last_summary = None
        self.new_achievements = []
        self.pending_high_score = False
        self._started_at = self.clock()
        logger.debug("Session generation %d started", self.generation)
        self._publish()
        return state

    def _commit(self, state: GameState) -> None:
        finished = state.is_terminal and not (self.state and self.state.is_terminal)
        self.state = state
        if finished:
            self._finish(state)
        self._publish()

    def _finish(self, state: GameState) -> None:
        duration_ms = int((self.clock() - self._started_at) * 1000)
        if state.mode is GameMode.CLASSIC:
            if state.game_over and self.progression is not None:
                self.pending_high_score = self.progression.qualifies_for_high_score(
                    state.score,
                )
            logger.info("Classic puzzle ended: won=%s score=%d", state.game_won, state.score)
            return

        summary = summarize(state, duration_ms)
        self.last_summary = summary
        logger.info(
            "Level %d ended: completed=%s final=%d stars=%d",
            summary.level_id,
            summary.completed,
            summary.final_score,
            summary.stars_earned,
        )
        if self.progression is None:
            return
        self.progression.record_session(summary)
        earned = check_achievements(
            state,
            self.progression.data.player_stats.total_score,
            self.progression.data.achievements,
        )
        self.progression.record_achievements(a.id for a in earned)
        self.new_achievements = earned

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
