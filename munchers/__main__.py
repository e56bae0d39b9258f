"""Entry point for ``python -m munchers``.

Loads the YAML config and level catalog, restores the player's save and
opens a Pygame window on either a classic game or the requested level.
"""

from __future__ import annotations

import argparse
import pathlib

from munchers.engine.config import GameConfig
from munchers.engine.session import GameEngine
from munchers.levels.catalog import LevelCatalog
from munchers.levels.errors import LevelInitError
from munchers.levels.progression import ProgressionManager, YamlSaveStorage
from munchers.logging_config import configure_logging
from munchers.ui.pygame_client import PygameClient

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def main() -> None:
    """Parse CLI args, create engine, launch the client."""
    parser = argparse.ArgumentParser(
        prog="munchers",
        description="Munchers - grid arcade math puzzles",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--level",
        type=int,
        default=None,
        help="Start this level instead of a classic game",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=80,
        help="Pixel size per grid cell (default: 80)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)
    config = GameConfig.from_yaml(args.config)
    catalog = LevelCatalog.from_yaml(config.levels_path)
    progression = ProgressionManager(YamlSaveStorage(config.save_path), catalog)
    engine = GameEngine(config=config, catalog=catalog, progression=progression)

    if args.level is None:
        engine.start_classic()
    else:
        try:
            engine.start_level(args.level)
        except LevelInitError as exc:
            parser.exit(1, f"munchers: {exc}\n")

    client = PygameClient(engine=engine, cell_size=args.cell_size)
    client.run(fps=args.fps)


if __name__ == "__main__":
    main()
