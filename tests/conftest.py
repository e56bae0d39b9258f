"""Shared fixtures for the Munchers test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
from numpy.random import Generator

from munchers.engine.config import GameConfig
from munchers.enemies.troggle import TroggleRuntime
from munchers.game.state import GameMode, GameState
from munchers.levels.catalog import LevelCatalog
from munchers.rules.rule_engine import Rule, is_correct
from munchers.rules.values import parse_value
from munchers.world.cell import Cell, Position
from munchers.world.grid import Grid

_LEVELS_YAML = Path(__file__).resolve().parent.parent / "config" / "levels.yaml"

GridFactory = Callable[..., Grid]
StateFactory = Callable[..., GameState]


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def default_config(tmp_path: Path) -> GameConfig:
    """Default engine config with the save file inside ``tmp_path``."""
    return GameConfig(save_path=tmp_path / "save.yaml")


@pytest.fixture
def catalog() -> LevelCatalog:
    """The shipped level catalog."""
    return LevelCatalog.from_yaml(_LEVELS_YAML)


@pytest.fixture
def make_grid() -> GridFactory:
    """Build a grid from rows of ints or expression strings.

    Target flags are derived from ``rule``/``target_number``.
    """

    def build(
        rows: list[list[int | str]],
        rule: Rule = Rule.MULTIPLES,
        target_number: int = 2,
    ) -> Grid:
        cells = []
        for row in rows:
            built = []
            for raw in row:
                value = parse_value(raw)
                built.append(Cell(value=value, is_target=is_correct(value, rule, target_number)))
            cells.append(built)
        return Grid(cells=cells)

    return build


@pytest.fixture
def make_state(make_grid: GridFactory) -> StateFactory:
    """Build a GameState with occupants flagged on a hand-made grid."""

    def build(
        rows: list[list[int | str]],
        muncher: Position = Position(0, 0),
        troggles: tuple[TroggleRuntime, ...] = (),
        rule: Rule = Rule.MULTIPLES,
        target_number: int = 2,
        **overrides: object,
    ) -> GameState:
        grid = make_grid(rows, rule, target_number)
        grid.cell_at(muncher).has_muncher = True
        for troggle in troggles:
            cell = grid.cell_at(troggle.position)
            cell.has_troggle = True
            cell.troggle_kind = troggle.kind
        fields: dict[str, object] = {"mode": GameMode.LEVEL}
        fields.update(overrides)
        return GameState(
            grid=grid,
            muncher=muncher,
            troggles=troggles,
            rule=rule,
            target_number=target_number,
            **fields,
        )

    return build
