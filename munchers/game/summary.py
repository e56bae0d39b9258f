"""SessionSummary — what a finished level hands to progression."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from munchers.game import scoring

if TYPE_CHECKING:
    from munchers.game.state import GameState


@dataclass(frozen=True)
class SessionSummary:
    """Outcome of one level attempt.

    Attributes:
        level_id: Level played.
        completed: Whether the level was won.
        final_score: Total from the scoring breakdown (0 when lost).
        stars_earned: 1-3 on completion, 0 otherwise.
        objectives_completed: Objective ids completed during play.
        duration_ms: Wall-clock time spent.
        mistakes: Incorrect eats.
        correct_answers: Correct eats.
        accuracy: Accuracy percentage at the end of play.
        time_remaining: Seconds left on the clock.
        breakdown: Scoring breakdown, present on completion.
    """

    level_id: int
    completed: bool
    final_score: int
    stars_earned: int
    objectives_completed: tuple[str, ...]
    duration_ms: int
    mistakes: int
    correct_answers: int
    accuracy: int
    time_remaining: int
    breakdown: scoring.ScoringBreakdown | None = None


def summarize(state: GameState, duration_ms: int) -> SessionSummary:
    """Build the summary of a terminal level-mode state.

    Raises:
        ValueError: If ``state`` has no level attached.
    """
    if state.level is None:
        msg = "Only level sessions can be summarised"
        raise ValueError(msg)

    breakdown = None
    final_score = 0
    stars = 0
    if state.game_won:
        breakdown = scoring.score(
            base=state.correct_eats * state.points_per_target,
            objectives=state.objectives,
            completed_ids=state.completed_objectives,
            time_left=state.time_left,
            time_limit=state.time_limit,
            accuracy=state.accuracy,
            streak=state.streak,
            difficulty_tier=state.difficulty_tier,
        )
        final_score = scoring.total(breakdown)
        stars = scoring.calculate_stars(final_score, state.completed_objectives, state.level)

    return SessionSummary(
        level_id=state.level.id,
        completed=state.game_won,
        final_score=final_score,
        stars_earned=stars,
        objectives_completed=state.completed_objectives,
        duration_ms=duration_ms,
        mistakes=state.mistakes,
        correct_answers=state.correct_eats,
        accuracy=state.accuracy,
        time_remaining=state.time_left,
        breakdown=breakdown,
    )
