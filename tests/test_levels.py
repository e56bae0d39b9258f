"""Tests for munchers.levels — catalog loading, unlocking and level setup."""

from pathlib import Path

import pytest
from numpy.random import Generator

from munchers.engine.config import GameConfig
from munchers.enemies.profiles import EnemyKind
from munchers.game.setup import CLASSIC_RULES, classic_target, new_classic_state, new_level_state
from munchers.game.state import GameMode
from munchers.levels.catalog import (
    LevelCatalog,
    ObjectiveCondition,
    ObjectiveType,
    effective_parameters,
    is_unlocked,
    validate_level,
)
from munchers.levels.errors import LevelInitError, LevelLockedError, LevelNotFoundError, LevelValidationError
from munchers.rules.rule_engine import Rule


def _entry(**overrides: object) -> dict:
    entry = {
        "id": 1,
        "name": "Tiny",
        "parameters": {
            "grid_size": {"rows": 3, "cols": 3},
            "time_limit": 30,
            "rule": "primes",
        },
        "objectives": [
            {"id": "complete", "type": "primary", "condition": "complete", "points": 10, "required": True},
        ],
    }
    entry.update(overrides)
    return entry


class TestCatalog:
    """Tests for loading and validating levels."""

    def test_shipped_catalog_loads(self, catalog: LevelCatalog) -> None:
        assert len(catalog) == 12
        first = catalog.get(1)
        assert first is not None
        assert first.name == "First Steps"
        assert first.parameters.rows == 4
        assert first.parameters.cols == 5
        assert first.parameters.rule is Rule.MULTIPLES
        assert first.parameters.target_number == 2
        assert first.category == "tutorial"
        assert [o.kind for o in first.objectives] == [ObjectiveType.PRIMARY, ObjectiveType.BONUS]
        assert first.objectives[1].condition is ObjectiveCondition.NO_MISTAKES

    def test_categories_follow_tiers(self, catalog: LevelCatalog) -> None:
        assert [lvl.id for lvl in catalog.by_category("tutorial")] == [1, 2, 3]
        assert [lvl.id for lvl in catalog.by_category("basic")] == [4, 5, 6, 7, 8]
        assert [lvl.id for lvl in catalog.by_category("intermediate")] == [9, 10, 11, 12]

    def test_next_level(self, catalog: LevelCatalog) -> None:
        assert catalog.next_level(1).id == 2
        assert catalog.next_level(12) is None

    def test_kinds_cycle(self, catalog: LevelCatalog) -> None:
        params = catalog.get(5).parameters
        assert params.kind_for(0) is EnemyKind.STANDARD
        assert params.kind_for(1) is EnemyKind.SPEED
        assert params.kind_for(2) is EnemyKind.STANDARD

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "levels.yaml"
        path.write_text(
            "levels:\n"
            "  - id: 3\n"
            "    name: Custom\n"
            "    parameters:\n"
            "      grid_size: {rows: 3, cols: 4}\n"
            "      time_limit: 20\n"
            "      rule: addition\n"
            "      target_number: 9\n"
            "    objectives:\n"
            "      - {id: complete, condition: complete, points: 5, required: true}\n",
        )
        catalog = LevelCatalog.from_yaml(path)
        level = catalog.get(3)
        assert level is not None
        assert level.parameters.rule is Rule.ADDITION
        assert level.parameters.enemy_kinds == (EnemyKind.STANDARD,)

    def test_invalid_level_rejected(self) -> None:
        with pytest.raises(LevelValidationError) as excinfo:
            LevelCatalog.from_dicts([_entry(objectives=[])])
        assert excinfo.value.level_id == 1

    def test_validation_messages(self) -> None:
        level = LevelCatalog.from_dicts([_entry()]).get(1)
        assert validate_level(level) == []

    def test_small_grid_rejected(self) -> None:
        entry = _entry()
        entry["parameters"] = {**entry["parameters"], "grid_size": {"rows": 2, "cols": 5}}
        with pytest.raises(LevelValidationError):
            LevelCatalog.from_dicts([entry])


class TestModifiers:
    """Tests for difficulty modifiers on parameters."""

    def test_less_time(self, catalog: LevelCatalog) -> None:
        assert effective_parameters(catalog.get(7)).time_limit == 45

    def test_extra_time(self, catalog: LevelCatalog) -> None:
        assert effective_parameters(catalog.get(12)).time_limit == 75

    def test_more_enemies(self, catalog: LevelCatalog) -> None:
        assert effective_parameters(catalog.get(10)).enemy_count == 4


class TestUnlocking:
    """Tests for unlock rules."""

    def test_first_level_always_open(self, catalog: LevelCatalog) -> None:
        assert is_unlocked(catalog.get(1), set())

    def test_needs_previous_level(self, catalog: LevelCatalog) -> None:
        assert not is_unlocked(catalog.get(2), set())
        assert is_unlocked(catalog.get(2), {1})

    def test_min_score_when_known(self, catalog: LevelCatalog) -> None:
        assert not is_unlocked(catalog.get(2), {1}, total_score=10)
        assert is_unlocked(catalog.get(2), {1}, total_score=30)


class TestLevelSetup:
    """Tests for building initial level and classic states."""

    def test_level_one_state(
        self,
        catalog: LevelCatalog,
        default_config: GameConfig,
        rng: Generator,
    ) -> None:
        state = new_level_state(catalog, 1, default_config, rng)
        assert state.mode is GameMode.LEVEL
        assert state.time_left == state.time_limit == 90
        assert state.grid.rows == 4
        assert state.grid.cols == 5
        assert len(state.troggles) == 1
        troggle = state.troggles[0]
        assert troggle.kind is EnemyKind.STANDARD
        assert troggle.profile.speed == pytest.approx(0.7)
        assert troggle.position != state.muncher
        assert state.grid.cell_at(state.muncher).has_muncher
        assert state.grid.cell_at(troggle.position).troggle_kind is EnemyKind.STANDARD
        assert state.objectives == catalog.get(1).objectives
        assert not state.is_terminal

    def test_enemy_line_up(
        self,
        catalog: LevelCatalog,
        default_config: GameConfig,
        rng: Generator,
    ) -> None:
        state = new_level_state(catalog, 10, default_config, rng, completed_levels=range(1, 10))
        kinds = [t.kind for t in state.troggles]
        assert kinds == [EnemyKind.STANDARD, EnemyKind.SMART, EnemyKind.SPEED, EnemyKind.STANDARD]
        assert len({t.position for t in state.troggles}) == 4
        assert state.difficulty_tier == 3

    def test_unknown_level(self, catalog: LevelCatalog, default_config: GameConfig, rng: Generator) -> None:
        with pytest.raises(LevelNotFoundError):
            new_level_state(catalog, 99, default_config, rng)

    def test_locked_level(self, catalog: LevelCatalog, default_config: GameConfig, rng: Generator) -> None:
        with pytest.raises(LevelLockedError) as excinfo:
            new_level_state(catalog, 3, default_config, rng, completed_levels={1})
        assert isinstance(excinfo.value, LevelInitError)
        assert excinfo.value.level_id == 3

    def test_score_below_minimum(
        self,
        catalog: LevelCatalog,
        default_config: GameConfig,
        rng: Generator,
    ) -> None:
        with pytest.raises(LevelLockedError):
            new_level_state(catalog, 2, default_config, rng, completed_levels={1}, total_score=0)
        state = new_level_state(catalog, 2, default_config, rng, completed_levels={1}, total_score=30)
        assert state.level.id == 2

    def test_classic_state(self, default_config: GameConfig, rng: Generator) -> None:
        state = new_classic_state(default_config, rng, score=120, puzzles_cleared=2)
        assert state.mode is GameMode.CLASSIC
        assert state.score == 120
        assert state.puzzles_cleared == 2
        assert state.time_left == 60
        corners = {(0, 0), (0, 5), (4, 0), (4, 5)}
        assert (state.muncher.row, state.muncher.col) in corners
        troggle = state.troggles[0].position
        assert (troggle.row, troggle.col) in corners
        assert state.muncher.manhattan(troggle) == 9

    def test_classic_targets(self, rng: Generator) -> None:
        assert Rule.MIXED not in CLASSIC_RULES
        for _ in range(50):
            assert classic_target(Rule.PRIMES, rng) == 0
            assert 5 <= classic_target(Rule.ADDITION, rng) <= 20
            assert 0 <= classic_target(Rule.SUBTRACTION, rng) <= 15
            assert classic_target(Rule.FACTORS, rng) in (12, 18, 20, 24, 30, 36)
            assert 2 <= classic_target(Rule.MULTIPLES, rng) <= 12
