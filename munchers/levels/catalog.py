"""Level catalog — load level definitions from YAML.

Levels are static configuration: grid size, time limit, rule, enemy
line-up and objectives.  They are parsed into typed dataclasses here and
validated on load so the game core can trust them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from munchers.enemies.profiles import EnemyKind, difficulty_tier
from munchers.levels.errors import LevelValidationError
from munchers.rules.rule_engine import Rule

# -- Constants ---------------------------------------------------------------

_CATEGORIES = ("tutorial", "basic", "intermediate", "advanced", "master")
_MIN_GRID_SIDE = 3
_EXTRA_TIME = 15
_LESS_TIME = 10


class ObjectiveType(Enum):
    """Whether an objective is needed to clear the level or is a bonus."""

    PRIMARY = "primary"
    BONUS = "bonus"


class ObjectiveCondition(Enum):
    """Predicate an objective checks against the live game state."""

    COMPLETE = "complete"
    SCORE = "score"
    TIME = "time"
    ACCURACY = "accuracy"
    NO_MISTAKES = "noMistakes"


@dataclass(frozen=True)
class Objective:
    """A points-bearing completion predicate.

    Attributes:
        id: Identifier, unique within its level.
        kind: Primary or bonus.
        condition: Which predicate to evaluate.
        points: Score credited once when the objective completes.
        target: Threshold for score/time/accuracy conditions.
        description: Player-facing text.
        required: Whether the level requires this objective.
    """

    id: str
    kind: ObjectiveType
    condition: ObjectiveCondition
    points: int
    target: int | None = None
    description: str = ""
    required: bool = False


@dataclass(frozen=True)
class LevelRequirements:
    """Unlock requirements.

    Attributes:
        previous_level: Level id that must be completed first (0 = none).
        min_score: Minimum cumulative player score.
    """

    previous_level: int = 0
    min_score: int = 0


@dataclass(frozen=True)
class LevelParameters:
    """Gameplay parameters for a level.

    Attributes:
        rows: Grid rows.
        cols: Grid columns.
        time_limit: Countdown length in ticks (seconds).
        rule: Target rule.
        target_number: Rule parameter (0 for primes).
        enemy_count: Number of Troggles.
        enemy_kinds: Behaviour kinds, cycled by Troggle index.
        difficulty_modifiers: Named tweaks such as ``lessTime``.
    """

    rows: int
    cols: int
    time_limit: int
    rule: Rule
    target_number: int = 0
    enemy_count: int = 1
    enemy_kinds: tuple[EnemyKind, ...] = (EnemyKind.STANDARD,)
    difficulty_modifiers: tuple[str, ...] = ()

    def kind_for(self, index: int) -> EnemyKind:
        """Return the behaviour kind of the ``index``-th Troggle."""
        if not self.enemy_kinds:
            return EnemyKind.STANDARD
        return self.enemy_kinds[index % len(self.enemy_kinds)]


@dataclass(frozen=True)
class Level:
    """One playable level."""

    id: int
    name: str
    parameters: LevelParameters
    objectives: tuple[Objective, ...]
    description: str = ""
    requirements: LevelRequirements = field(default_factory=LevelRequirements)

    @property
    def tier(self) -> int:
        """Difficulty tier derived from the level id."""
        return difficulty_tier(self.id)

    @property
    def category(self) -> str:
        """Category name of the level's tier."""
        return _CATEGORIES[self.tier - 1]

    @property
    def primary_objectives(self) -> tuple[Objective, ...]:
        return tuple(o for o in self.objectives if o.kind is ObjectiveType.PRIMARY)

    @property
    def bonus_objectives(self) -> tuple[Objective, ...]:
        return tuple(o for o in self.objectives if o.kind is ObjectiveType.BONUS)


def effective_parameters(level: Level) -> LevelParameters:
    """Apply the level's time and enemy-count modifiers to its parameters.

    Speed modifiers are applied to enemy profiles instead.
    """
    params = level.parameters
    time_limit = params.time_limit
    enemy_count = params.enemy_count
    for modifier in params.difficulty_modifiers:
        match modifier:
            case "extraTime":
                time_limit += _EXTRA_TIME
            case "lessTime":
                time_limit -= _LESS_TIME
            case "moreEnemies":
                enemy_count += 1
    return replace(params, time_limit=time_limit, enemy_count=enemy_count)


def validate_level(level: Level) -> list[str]:
    """Return a list of problems with ``level`` (empty when valid)."""
    errors: list[str] = []
    params = level.parameters
    if level.id <= 0:
        errors.append("Level ID must be positive")
    if not level.name.strip():
        errors.append("Level name is required")
    if params.time_limit <= 0:
        errors.append("Time limit must be positive")
    if params.enemy_count < 0:
        errors.append("Enemy count cannot be negative")
    if params.rows < _MIN_GRID_SIDE or params.cols < _MIN_GRID_SIDE:
        errors.append("Grid must be at least 3x3")
    if not any(o.required for o in level.objectives):
        errors.append("At least one required objective must be defined")
    return errors


def is_unlocked(
    level: Level,
    completed_levels: set[int] | frozenset[int],
    total_score: int | None = None,
) -> bool:
    """Decide whether ``level`` may be started.

    Args:
        level: The level to check.
        completed_levels: Ids of levels the player has completed.
        total_score: Cumulative player score, if known.

    Returns:
        True when the previous level is completed (or there is none) and
        the score requirement, if a score is known, is met.
    """
    reqs = level.requirements
    if reqs.previous_level and reqs.previous_level not in completed_levels:
        return False
    return total_score is None or total_score >= reqs.min_score


@dataclass
class LevelCatalog:
    """All levels keyed by id.

    Attributes:
        levels: Mapping from level id to Level.
    """

    levels: dict[int, Level] = field(default_factory=dict)

    def get(self, level_id: int) -> Level | None:
        """Return the level with ``level_id`` or None."""
        return self.levels.get(level_id)

    def next_level(self, level_id: int) -> Level | None:
        """Return the level following ``level_id``, if any."""
        return self.levels.get(level_id + 1)

    def by_category(self, category: str) -> list[Level]:
        """Return every level in ``category`` ordered by id."""
        return [lvl for _, lvl in sorted(self.levels.items()) if lvl.category == category]

    def __len__(self) -> int:
        return len(self.levels)

    @classmethod
    def from_yaml(cls, path: str | Path) -> LevelCatalog:
        """Load and validate a catalog from a YAML file.

        Args:
            path: Path to the YAML level file.

        Returns:
            A populated LevelCatalog.

        Raises:
            FileNotFoundError: If the file does not exist.
            LevelValidationError: If any level fails validation.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dicts(data.get("levels", []))

    @classmethod
    def from_dicts(cls, entries: list[dict[str, Any]]) -> LevelCatalog:
        """Build a catalog from already-parsed level mappings."""
        levels: dict[int, Level] = {}
        for entry in entries:
            level = _parse_level(entry)
            errors = validate_level(level)
            if errors:
                raise LevelValidationError(level.id, errors)
            levels[level.id] = level
        return cls(levels=levels)


# -- Parsing -----------------------------------------------------------------


def _parse_level(entry: dict[str, Any]) -> Level:
    params = entry.get("parameters", {})
    grid_size = params.get("grid_size", {})
    reqs = entry.get("requirements", {})
    return Level(
        id=int(entry["id"]),
        name=entry.get("name", ""),
        description=entry.get("description", ""),
        requirements=LevelRequirements(
            previous_level=reqs.get("previous_level", 0),
            min_score=reqs.get("min_score", 0),
        ),
        parameters=LevelParameters(
            rows=grid_size.get("rows", 0),
            cols=grid_size.get("cols", 0),
            time_limit=params.get("time_limit", 0),
            rule=Rule(params["rule"]),
            target_number=params.get("target_number", 0),
            enemy_count=params.get("enemy_count", 1),
            enemy_kinds=tuple(
                EnemyKind(k) for k in params.get("enemy_kinds", ["standard"])
            ),
            difficulty_modifiers=tuple(params.get("difficulty_modifiers", [])),
        ),
        objectives=tuple(_parse_objective(o) for o in entry.get("objectives", [])),
    )


def _parse_objective(entry: dict[str, Any]) -> Objective:
    return Objective(
        id=entry["id"],
        kind=ObjectiveType(entry.get("type", "primary")),
        condition=ObjectiveCondition(entry["condition"]),
        points=entry.get("points", 0),
        target=entry.get("target"),
        description=entry.get("description", ""),
        required=entry.get("required", False),
    )
