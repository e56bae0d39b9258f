"""Troggle — runtime state of one adversary on the grid."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from munchers.enemies.profiles import EnemyKind, create_profile

if TYPE_CHECKING:
    from munchers.enemies.profiles import EnemyBehaviorProfile
    from munchers.world.cell import Position


@dataclass
class TroggleRuntime:
    """A Troggle's position and AI bookkeeping.

    Attributes:
        position: Current grid position.
        profile: Immutable behaviour constants.
        planned_path: Queue of upcoming steps (smart kind only).
        move_cooldown: Ticks left before the Troggle may move again.
    """

    position: Position
    profile: EnemyBehaviorProfile = field(
        default_factory=lambda: create_profile(EnemyKind.STANDARD),
    )
    planned_path: list[Position] = field(default_factory=list)
    move_cooldown: int = 0

    @property
    def kind(self) -> EnemyKind:
        """Behaviour variant of this Troggle."""
        return self.profile.kind

    def copy(self) -> TroggleRuntime:
        """Return an independent copy (the path queue is not shared)."""
        return replace(self, planned_path=list(self.planned_path))
