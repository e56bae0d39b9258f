"""ScoringEngine — point formulas, objectives and star ratings.

Final level score::

    total = floor((base + time + difficulty + streak + objective)
                  * accuracy_multiplier)

with

- ``difficulty = floor(base * (tier_multiplier - 1))``
- ``time = floor(time_left / time_limit * base * 0.5)``
- ``streak = streak * 10``
- ``objective = sum of points of completed objectives``
- ``accuracy_multiplier = clamp(accuracy / 50, 0.5, 2.0)``

Objectives are evaluated against live state; each completes at most once
and credits its points to the running score immediately.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from munchers.levels.catalog import ObjectiveCondition

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from munchers.game.state import GameState
    from munchers.levels.catalog import Level, Objective

# -- Constants ---------------------------------------------------------------

DIFFICULTY_MULTIPLIERS: dict[int, float] = {
    1: 1.0,
    2: 1.2,
    3: 1.5,
    4: 2.0,
    5: 3.0,
}
_TIME_BONUS_SHARE = 0.5
_STREAK_POINTS = 10
_ACCURACY_DIVISOR = 50
_MIN_ACCURACY_MULTIPLIER = 0.5
_MAX_ACCURACY_MULTIPLIER = 2.0
_THREE_STAR_FACTOR = 1.5


@dataclass(frozen=True)
class ScoringBreakdown:
    """Components of a level's final score.

    Attributes:
        base_points: Points from correct eats.
        time_bonus: Reward for time remaining (at most half of base).
        difficulty_bonus: Tier-scaled share of base.
        streak_bonus: Ten points per streak step.
        objective_bonus: Sum of completed objective points.
        accuracy_multiplier: Factor in [0.5, 2.0] applied to the sum.
    """

    base_points: int
    time_bonus: int
    difficulty_bonus: int
    streak_bonus: int
    objective_bonus: int
    accuracy_multiplier: float

    @property
    def total(self) -> int:
        return total(self)


def _floor(value: float) -> int:
    # Round off binary noise first so 10 * 0.2 floors to 2, not 1.
    return math.floor(round(value, 9))


def accuracy_multiplier(accuracy: float) -> float:
    """Map accuracy percent onto the clamped score multiplier."""
    return max(
        _MIN_ACCURACY_MULTIPLIER,
        min(_MAX_ACCURACY_MULTIPLIER, accuracy / _ACCURACY_DIVISOR),
    )


def score(
    base: int,
    objectives: Sequence[Objective],
    completed_ids: Iterable[str],
    time_left: int,
    time_limit: int,
    accuracy: float,
    streak: int,
    difficulty_tier: int,
) -> ScoringBreakdown:
    """Compute the scoring breakdown for a finished level.

    Args:
        base: Raw points earned from correct eats.
        objectives: The level's objectives.
        completed_ids: Ids of objectives completed this session.
        time_left: Ticks remaining on the clock.
        time_limit: Full countdown length.
        accuracy: Accuracy percentage (0-100).
        streak: Current correct-eat streak.
        difficulty_tier: Tier 1-5 of the level.

    Returns:
        The breakdown; use ``total`` for the final figure.
    """
    multiplier = DIFFICULTY_MULTIPLIERS.get(difficulty_tier, 1.0)
    fraction = min(1.0, max(0.0, time_left / time_limit)) if time_limit > 0 else 0.0
    points = {o.id: o.points for o in objectives}
    return ScoringBreakdown(
        base_points=base,
        time_bonus=_floor(fraction * base * _TIME_BONUS_SHARE),
        difficulty_bonus=_floor(base * (multiplier - 1)),
        streak_bonus=streak * _STREAK_POINTS,
        objective_bonus=sum(points.get(obj_id, 0) for obj_id in completed_ids),
        accuracy_multiplier=accuracy_multiplier(accuracy),
    )


def total(breakdown: ScoringBreakdown) -> int:
    """Collapse a breakdown into the final integer score."""
    subtotal = (
        breakdown.base_points
        + breakdown.time_bonus
        + breakdown.difficulty_bonus
        + breakdown.streak_bonus
        + breakdown.objective_bonus
    )
    return _floor(subtotal * breakdown.accuracy_multiplier)


# -- Objectives --------------------------------------------------------------


def evaluate(objective: Objective, state: GameState) -> bool:
    """Return True if ``objective``'s predicate holds for ``state``."""
    target = objective.target
    match objective.condition:
        case ObjectiveCondition.COMPLETE:
            return state.remaining_targets() == 0
        case ObjectiveCondition.SCORE:
            return target is not None and state.score >= target
        case ObjectiveCondition.TIME:
            return target is not None and state.time_left >= target
        case ObjectiveCondition.ACCURACY:
            return target is not None and state.accuracy >= target
        case ObjectiveCondition.NO_MISTAKES:
            return state.mistakes == 0
    return False


def update_objectives(state: GameState) -> GameState:
    """Complete every newly satisfied objective and credit its points.

    Objectives are checked in order against the running state, so points
    credited by one can satisfy a later score objective in the same pass.
    Already completed ids are never revisited.
    """
    for objective in state.objectives:
        if objective.id in state.completed_objectives:
            continue
        if evaluate(objective, state):
            state = replace(
                state,
                completed_objectives=(*state.completed_objectives, objective.id),
                score=state.score + objective.points,
            )
    return state


# -- Stars -------------------------------------------------------------------


def three_star_minimum(level: Level) -> int:
    """Score needed for a third star: 150% of the primary objective points."""
    primary = sum(o.points for o in level.primary_objectives)
    return _floor(primary * _THREE_STAR_FACTOR)


def calculate_stars(final_score: int, completed_ids: Iterable[str], level: Level) -> int:
    """Rate a completed level with 1-3 stars.

    1 star for completing; 2 with at least one bonus objective; 3 when
    every bonus objective is done and the score reaches
    ``three_star_minimum``.
    """
    completed = set(completed_ids)
    bonus_ids = {o.id for o in level.bonus_objectives}
    done_bonus = len(bonus_ids & completed)

    stars = 1
    if done_bonus >= 1:
        stars = 2
    if done_bonus == len(bonus_ids) and final_score >= three_star_minimum(level):
        stars = 3
    return stars
