"""Achievements — one-off awards checked when a session ends."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from munchers.game.state import GameState


class Requirement(Enum):
    """What an achievement measures."""

    TOTAL_SCORE = "totalScore"
    LEVEL_COMPLETION = "levelCompletion"
    PERFECT_ACCURACY = "perfectAccuracy"
    SPEED_COMPLETION = "speedCompletion"
    STREAK = "streak"
    NO_MISTAKES = "noMistakes"


@dataclass(frozen=True)
class Achievement:
    """An award the player earns once.

    Attributes:
        id: Stable identifier stored in save data.
        name: Display name.
        description: Display text.
        requirement: Measured quantity.
        points: Nominal value shown to the player.
        target: Threshold for score, streak and time requirements.
        level_id: Level that must be completed, for level completion.
    """

    id: str
    name: str
    description: str
    requirement: Requirement
    points: int
    target: int | None = None
    level_id: int | None = None


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement(
        "first_steps", "First Steps", "Complete your first level",
        Requirement.LEVEL_COMPLETION, 10, level_id=1,
    ),
    Achievement(
        "speed_demon", "Speed Demon", "Complete a level in under 30 seconds",
        Requirement.SPEED_COMPLETION, 50, target=30,
    ),
    Achievement(
        "perfectionist", "Perfectionist", "Complete a level with 100% accuracy",
        Requirement.PERFECT_ACCURACY, 30,
    ),
    Achievement(
        "streak_master", "Streak Master", "Get 10 correct answers in a row",
        Requirement.STREAK, 40, target=10,
    ),
    Achievement(
        "no_mistakes", "Flawless Victory", "Complete a level without any mistakes",
        Requirement.NO_MISTAKES, 25,
    ),
    Achievement(
        "high_scorer", "High Scorer", "Reach a total score of 1000 points",
        Requirement.TOTAL_SCORE, 100, target=1000,
    ),
    Achievement(
        "tutorial_master", "Tutorial Master", "Complete all tutorial levels with 3 stars",
        Requirement.LEVEL_COMPLETION, 75, level_id=3,
    ),
    Achievement(
        "lightning_fast", "Lightning Fast", "Complete a level in under 15 seconds",
        Requirement.SPEED_COMPLETION, 100, target=15,
    ),
)


def _earned(achievement: Achievement, state: GameState, total_score: int) -> bool:
    won = state.game_won
    match achievement.requirement:
        case Requirement.TOTAL_SCORE:
            return total_score >= (achievement.target or 0)
        case Requirement.LEVEL_COMPLETION:
            return won and state.level is not None and state.level.id == achievement.level_id
        case Requirement.PERFECT_ACCURACY:
            return won and state.accuracy == 100
        case Requirement.SPEED_COMPLETION:
            used = state.time_limit - state.time_left
            return won and used <= (achievement.target or 0)
        case Requirement.STREAK:
            return state.best_streak >= (achievement.target or 0)
        case Requirement.NO_MISTAKES:
            return won and state.mistakes == 0
    return False


def check_achievements(
    state: GameState,
    total_score: int,
    already_earned: Iterable[str] = (),
) -> list[Achievement]:
    """Return achievements newly earned by the session ending in ``state``.

    Args:
        state: Terminal game state.
        total_score: Player's cumulative score including this session.
        already_earned: Ids to skip.

    Returns:
        Newly earned achievements in catalog order.
    """
    skip = set(already_earned)
    return [
        a for a in ACHIEVEMENTS if a.id not in skip and _earned(a, state, total_score)
    ]
