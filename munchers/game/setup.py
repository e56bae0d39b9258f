"""Game setup — build the initial GameState for classic or level play."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from munchers.enemies.profiles import EnemyKind, apply_speed_modifiers, create_profile
from munchers.enemies.troggle import TroggleRuntime
from munchers.game.state import GameMode, GameState
from munchers.levels.catalog import effective_parameters, is_unlocked
from munchers.levels.errors import LevelLockedError, LevelNotFoundError
from munchers.rules.rule_engine import Rule
from munchers.world.generator import generate, place_classic, random_empty_position

if TYPE_CHECKING:
    from collections.abc import Collection

    from numpy.random import Generator

    from munchers.engine.config import GameConfig
    from munchers.levels.catalog import LevelCatalog

logger = logging.getLogger(__name__)

# -- Constants ---------------------------------------------------------------

CLASSIC_RULES = (
    Rule.MULTIPLES,
    Rule.FACTORS,
    Rule.PRIMES,
    Rule.ADDITION,
    Rule.SUBTRACTION,
)
_FACTOR_TARGETS = (12, 18, 20, 24, 30, 36)


def classic_target(rule: Rule, rng: Generator) -> int:
    """Pick a target number suited to ``rule`` for a classic puzzle."""
    match rule:
        case Rule.PRIMES:
            return 0
        case Rule.ADDITION:
            return int(rng.integers(5, 21))
        case Rule.SUBTRACTION:
            return int(rng.integers(0, 16))
        case Rule.FACTORS:
            return _FACTOR_TARGETS[int(rng.integers(0, len(_FACTOR_TARGETS)))]
    return int(rng.integers(2, 13))


def new_classic_state(
    config: GameConfig,
    rng: Generator,
    *,
    score: int = 0,
    puzzles_cleared: int = 0,
) -> GameState:
    """Start a classic puzzle with a random rule and one corner Troggle.

    Args:
        config: Engine configuration (board size, time, scoring).
        rng: Seeded random generator.
        score: Score carried over from earlier puzzles.
        puzzles_cleared: Puzzles already won in this run.

    Returns:
        A fresh, non-terminal classic GameState.
    """
    rule = CLASSIC_RULES[int(rng.integers(0, len(CLASSIC_RULES)))]
    puzzle = generate(
        config.classic_rows,
        config.classic_cols,
        rule,
        classic_target(rule, rng),
        rng,
    )
    muncher, troggle_pos = place_classic(puzzle.grid, rng)
    troggle = TroggleRuntime(position=troggle_pos)
    puzzle.grid.cell_at(troggle_pos).troggle_kind = troggle.kind

    logger.info(
        "Classic puzzle: %s %d on %dx%d",
        puzzle.rule.value,
        puzzle.target_number,
        config.classic_rows,
        config.classic_cols,
    )
    return GameState(
        grid=puzzle.grid,
        muncher=muncher,
        troggles=(troggle,),
        rule=puzzle.rule,
        target_number=puzzle.target_number,
        mode=GameMode.CLASSIC,
        time_limit=config.classic_time_limit,
        time_left=config.classic_time_limit,
        score=score,
        max_mistakes=config.max_mistakes,
        puzzles_cleared=puzzles_cleared,
        points_per_target=config.points_per_target,
    )


def new_level_state(
    catalog: LevelCatalog,
    level_id: int,
    config: GameConfig,
    rng: Generator,
    completed_levels: Collection[int] = (),
    total_score: int | None = None,
) -> GameState:
    """Start a catalog level.

    Args:
        catalog: Level definitions.
        level_id: Level to start.
        config: Engine configuration (mistakes, scoring).
        rng: Seeded random generator.
        completed_levels: Ids the player has completed, for unlocking.
        total_score: Player's cumulative score, checked against the
            level's minimum when given.

    Returns:
        A fresh, non-terminal level GameState.

    Raises:
        LevelNotFoundError: If ``level_id`` is not in the catalog.
        LevelLockedError: If the prerequisite is not completed or the
            minimum score is not met.
    """
    level = catalog.get(level_id)
    if level is None:
        logger.error("Level %d not found", level_id)
        raise LevelNotFoundError(level_id)
    if not is_unlocked(level, frozenset(completed_levels), total_score):
        logger.error("Level %d is locked", level_id)
        raise LevelLockedError(level_id)

    params = effective_parameters(level)
    puzzle = generate(params.rows, params.cols, params.rule, params.target_number, rng)
    grid = puzzle.grid

    muncher = random_empty_position(grid, rng)
    grid.cell_at(muncher).has_muncher = True

    troggles: list[TroggleRuntime] = []
    for index in range(params.enemy_count):
        kind: EnemyKind = params.kind_for(index)
        profile = apply_speed_modifiers(
            create_profile(kind, level.tier),
            params.difficulty_modifiers,
        )
        pos = random_empty_position(grid, rng)
        cell = grid.cell_at(pos)
        cell.has_troggle = True
        cell.troggle_kind = kind
        troggles.append(TroggleRuntime(position=pos, profile=profile))

    logger.info(
        "Level %d '%s': %s %d, %d troggles",
        level.id,
        level.name,
        puzzle.rule.value,
        puzzle.target_number,
        len(troggles),
    )
    return GameState(
        grid=grid,
        muncher=muncher,
        troggles=tuple(troggles),
        rule=puzzle.rule,
        target_number=puzzle.target_number,
        mode=GameMode.LEVEL,
        time_limit=params.time_limit,
        time_left=params.time_limit,
        max_mistakes=config.max_mistakes,
        points_per_target=config.points_per_target,
        level=level,
        objectives=level.objectives,
    )
