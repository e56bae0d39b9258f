"""Enemy behaviour profiles — per-kind constants scaled by difficulty tier.

A profile is immutable and derived purely from ``(kind, tier)`` plus any
level speed modifier.  The AI reads ``intelligence`` and
``aggressiveness`` as probabilities and turns ``speed`` into a move
cooldown.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum

# -- Constants ---------------------------------------------------------------

# Upper level id of tiers 1-4; anything above is tier 5.
_TIER_BREAKPOINTS = (3, 8, 15, 25)
MAX_TIER = 5

_SPEED_MODIFIERS: dict[str, float] = {
    "slowerEnemies": 0.7,
    "fasterEnemies": 1.3,
}


class EnemyKind(Enum):
    """Troggle behaviour variants."""

    STANDARD = "standard"
    SPEED = "speed"
    SMART = "smart"
    BLOCKER = "blocker"
    HUNTER = "hunter"


@dataclass(frozen=True)
class EnemyBehaviorProfile:
    """Tuning constants for one Troggle.

    Attributes:
        kind: Behaviour variant this profile belongs to.
        speed: Relative step rate; 1.0 moves every tick.
        intelligence: Probability of tracking the Muncher (0.0-1.0).
        aggressiveness: Pursuit drive (0.0-1.0); gates speed-kind tracking.
        coordination: Whether the kind cooperates with siblings.
    """

    kind: EnemyKind
    speed: float
    intelligence: float
    aggressiveness: float
    coordination: bool

    @property
    def cooldown_ticks(self) -> int:
        """Ticks to wait after each step; 0 for speed >= 1."""
        return max(0, math.ceil(1.0 / self.speed) - 1)


def difficulty_tier(level_id: int) -> int:
    """Map a level id onto tier 1-5 (breakpoints 3/8/15/25)."""
    for tier, upper in enumerate(_TIER_BREAKPOINTS, start=1):
        if level_id <= upper:
            return tier
    return MAX_TIER


def create_profile(kind: EnemyKind, tier: int = 1) -> EnemyBehaviorProfile:
    """Build the profile for ``kind`` at difficulty ``tier``.

    Every stat is non-decreasing in ``tier``; probabilities cap at 1.0.

    Args:
        kind: Troggle behaviour variant.
        tier: Difficulty tier 1-5.

    Returns:
        The matching immutable profile.
    """
    match kind:
        case EnemyKind.SPEED:
            speed, intelligence, aggressiveness = (
                1.5 + tier * 0.2,
                0.3,
                0.4 + (tier - 1) * 0.05,
            )
        case EnemyKind.SMART:
            speed, intelligence, aggressiveness = 0.8, 0.7 + tier * 0.1, 0.6
        case EnemyKind.BLOCKER:
            speed, intelligence, aggressiveness = 0.5, 0.4, 0.8
        case EnemyKind.HUNTER:
            speed, intelligence, aggressiveness = 1.2, 0.8, 0.9
        case _:
            speed, intelligence, aggressiveness = (
                1.0,
                0.1 + tier * 0.1,
                0.2 + tier * 0.05,
            )
    return EnemyBehaviorProfile(
        kind=kind,
        speed=speed,
        intelligence=min(1.0, intelligence),
        aggressiveness=min(1.0, aggressiveness),
        coordination=kind in (EnemyKind.BLOCKER, EnemyKind.HUNTER),
    )


def apply_speed_modifiers(
    profile: EnemyBehaviorProfile,
    modifiers: list[str] | tuple[str, ...],
) -> EnemyBehaviorProfile:
    """Scale ``speed`` by every recognised level modifier."""
    speed = profile.speed
    for modifier in modifiers:
        speed *= _SPEED_MODIFIERS.get(modifier, 1.0)
    return replace(profile, speed=speed)
