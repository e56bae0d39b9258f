"""Movement system — Muncher moves, eats, Troggle moves and clock ticks.

Every function takes a GameState and returns a new one; the input state
and its grid are never modified.  Once a state is terminal (won or lost)
all transitions return it unchanged.

Collision rule: the Muncher and any Troggle on the same cell ends the
game.  Troggle collisions are judged only after every Troggle has moved
in a tick, so a Muncher swapped past by a Troggle survives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from munchers.enemies.behaviors import BoardView, next_position
from munchers.game.scoring import update_objectives
from munchers.game.state import GameMode
from munchers.rules.rule_engine import is_correct

if TYPE_CHECKING:
    from numpy.random import Generator

    from munchers.game.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a Muncher step.

    Attributes:
        collided: The Muncher walked onto a Troggle.
        state: Resulting state.
    """

    collided: bool
    state: GameState


@dataclass(frozen=True)
class EatResult:
    """Outcome of an eat action.

    Attributes:
        consumed: An eat was actually processed.
        correct: The eaten value satisfied the rule.
        collided: A Troggle was sharing the cell.
        state: Resulting state.
    """

    consumed: bool
    correct: bool
    collided: bool
    state: GameState


def move_muncher(state: GameState, d_row: int, d_col: int) -> MoveResult:
    """Step the Muncher by a delta, clamped to the grid.

    A move that would leave the grid (and so lands on the same cell) is
    a no-op.  Landing on a Troggle ends the game.
    """
    if state.is_terminal:
        return MoveResult(collided=False, state=state)

    target = state.grid.clamp(state.muncher.offset(d_row, d_col))
    if target == state.muncher:
        return MoveResult(collided=False, state=state)

    grid = state.grid.copy()
    grid.cell_at(state.muncher).has_muncher = False
    grid.cell_at(target).has_muncher = True

    collided = grid.cell_at(target).has_troggle
    if collided:
        logger.info("Muncher ran into a Troggle at (%d, %d)", target.row, target.col)
    return MoveResult(
        collided=collided,
        state=replace(state, grid=grid, muncher=target, game_over=collided),
    )


def eat(state: GameState) -> EatResult:
    """Eat the value under the Muncher.

    Correct eats score ``points_per_target``, mark the cell consumed and
    may win the puzzle; objectives are then re-evaluated.  Incorrect eats
    (including re-eating a consumed cell) cost a mistake and reset the
    streak.  A Troggle on the cell is an immediate loss.
    """
    if state.is_terminal:
        return EatResult(consumed=False, correct=False, collided=False, state=state)

    pos = state.muncher
    cell = state.grid.cell_at(pos)
    if cell.has_troggle:
        logger.info("Eat blocked by a Troggle at (%d, %d)", pos.row, pos.col)
        return EatResult(
            consumed=False,
            correct=False,
            collided=True,
            state=replace(state, game_over=True),
        )

    correct = not cell.consumed_correctly and is_correct(
        cell.value,
        state.rule,
        state.target_number,
    )
    grid = state.grid.copy()
    eaten = grid.cell_at(pos)

    if correct:
        eaten.is_target = False
        eaten.consumed_correctly = True
        eaten.revealed = True
        streak = state.streak + 1
        nxt = replace(
            state,
            grid=grid,
            score=state.score + state.points_per_target,
            streak=streak,
            best_streak=max(state.best_streak, streak),
            correct_eats=state.correct_eats + 1,
            ticks_since_correct=0,
        )
        remaining = [
            p for p in grid.live_targets(state.rule, state.target_number) if p != pos
        ]
        if not remaining:
            logger.info("Puzzle cleared after %d correct eats", nxt.correct_eats)
            nxt = replace(nxt, game_won=True)
        return EatResult(
            consumed=True,
            correct=True,
            collided=False,
            state=update_objectives(nxt),
        )

    if eaten.is_target:
        logger.warning("Stale target flag at (%d, %d), clearing", pos.row, pos.col)
        eaten.is_target = False
    mistakes = state.mistakes + 1
    lost = mistakes >= state.max_mistakes
    if lost:
        logger.info("Out of chances after %d mistakes", mistakes)
    return EatResult(
        consumed=True,
        correct=False,
        collided=False,
        state=replace(state, grid=grid, mistakes=mistakes, streak=0, game_over=lost),
    )


def move_troggles(state: GameState, rng: Generator) -> GameState:
    """Advance every Troggle one decision and resolve collisions.

    All Troggles decide against the same pre-move board; the grid flags
    are then rewritten and the Muncher is checked against every new
    position.
    """
    if state.is_terminal or not state.troggles:
        return state

    board = BoardView(
        grid=state.grid,
        muncher=state.muncher,
        rule=state.rule,
        target_number=state.target_number,
    )
    classic = state.mode is GameMode.CLASSIC
    troggles = [t.copy() for t in state.troggles]
    moves = [next_position(t, board, troggles, rng, classic=classic) for t in troggles]

    grid = state.grid.copy()
    for troggle in state.troggles:
        old = grid.cell_at(troggle.position)
        old.has_troggle = False
        old.troggle_kind = None
    for troggle, pos in zip(troggles, moves):
        troggle.position = pos
        cell = grid.cell_at(pos)
        cell.has_troggle = True
        cell.troggle_kind = troggle.kind

    collided = state.muncher in moves
    if collided:
        logger.info("A Troggle caught the Muncher")
    return replace(
        state,
        grid=grid,
        troggles=tuple(troggles),
        game_over=state.game_over or collided,
    )


def reveal_hint(state: GameState, rng: Generator) -> GameState:
    """Reveal one random unrevealed live target and restart the hint timer."""
    candidates = [
        pos
        for pos in state.grid.live_targets(state.rule, state.target_number)
        if not state.grid.cell_at(pos).revealed
        and not state.grid.cell_at(pos).has_muncher
        and not state.grid.cell_at(pos).has_troggle
    ]
    if not candidates:
        return replace(state, ticks_since_correct=0)

    pos = candidates[int(rng.integers(0, len(candidates)))]
    grid = state.grid.copy()
    grid.cell_at(pos).revealed = True
    logger.debug("Revealed hint at (%d, %d)", pos.row, pos.col)
    return replace(state, grid=grid, ticks_since_correct=0)


def advance_tick(state: GameState, rng: Generator, reveal_delay: int = 0) -> GameState:
    """Run one clock tick: countdown, hint timer, then Troggle moves.

    Args:
        state: Current state.
        rng: Seeded random generator.
        reveal_delay: Ticks without a correct eat before a hint is
            revealed (0 disables hints).

    Returns:
        The next state; running out of time is a loss.
    """
    if state.is_terminal:
        return state

    state = replace(
        state,
        time_left=max(0, state.time_left - 1),
        ticks_elapsed=state.ticks_elapsed + 1,
        ticks_since_correct=state.ticks_since_correct + 1,
    )
    if reveal_delay > 0 and state.ticks_since_correct >= reveal_delay:
        state = reveal_hint(state, rng)

    state = move_troggles(state, rng)
    if state.time_left == 0 and not state.is_terminal:
        logger.info("Time is up")
        state = replace(state, game_over=True)
    return state
