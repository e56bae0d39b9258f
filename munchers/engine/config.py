"""Config — load engine parameters from YAML files.

Board size, tick cadence, rules of play and file locations live in YAML
and are parsed into a typed dataclass here.  Relative paths in the file
resolve against the file's own directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


@dataclass
class GameConfig:
    """Top-level engine configuration.

    Attributes:
        seed: RNG seed for deterministic replay.
        classic_rows: Classic-mode grid rows.
        classic_cols: Classic-mode grid columns.
        classic_time_limit: Classic-mode countdown in ticks.
        tick_seconds: Wall-clock length of one tick.
        reveal_delay_ticks: Ticks without a correct eat before a hint
            (0 disables hints).
        max_mistakes: Incorrect eats that end a game.
        points_per_target: Base points for a correct eat.
        levels_path: Level catalog YAML file.
        save_path: Progression save file.
    """

    seed: int = 42

    # Classic mode
    classic_rows: int = 5
    classic_cols: int = 6
    classic_time_limit: int = 60

    # Clock
    tick_seconds: float = 1.0
    reveal_delay_ticks: int = 10

    # Rules of play
    max_mistakes: int = 3
    points_per_target: int = 10

    levels_path: Path = field(default_factory=lambda: _CONFIG_DIR / "levels.yaml")
    save_path: Path = field(
        default_factory=lambda: Path.home() / ".munchers" / "save.yaml",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> GameConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated GameConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        defaults = cls()
        base = path.resolve().parent
        return cls(
            seed=data.get("seed", cls.seed),
            classic_rows=data.get("classic_rows", cls.classic_rows),
            classic_cols=data.get("classic_cols", cls.classic_cols),
            classic_time_limit=data.get(
                "classic_time_limit",
                cls.classic_time_limit,
            ),
            tick_seconds=data.get("tick_seconds", cls.tick_seconds),
            reveal_delay_ticks=data.get(
                "reveal_delay_ticks",
                cls.reveal_delay_ticks,
            ),
            max_mistakes=data.get("max_mistakes", cls.max_mistakes),
            points_per_target=data.get("points_per_target", cls.points_per_target),
            levels_path=_resolve(base, data.get("levels_path"), defaults.levels_path),
            save_path=_resolve(base, data.get("save_path"), defaults.save_path),
        )


def _resolve(base: Path, value: str | None, default: Path) -> Path:
    if value is None:
        return default
    candidate = Path(value).expanduser()
    return candidate if candidate.is_absolute() else (base / candidate).resolve()
