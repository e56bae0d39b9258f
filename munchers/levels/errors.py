"""Exceptions raised when a level cannot be loaded or started."""

from __future__ import annotations


class LevelInitError(Exception):
    """A level could not be initialised; no game state was produced."""


class LevelNotFoundError(LevelInitError):
    """The requested level id is not in the catalog."""

    def __init__(self, level_id: int) -> None:
        super().__init__(f"Level {level_id} not found")
        self.level_id = level_id


class LevelLockedError(LevelInitError):
    """The requested level exists but its unlock requirements are unmet."""

    def __init__(self, level_id: int) -> None:
        super().__init__(f"Level {level_id} is not unlocked")
        self.level_id = level_id


class LevelValidationError(ValueError):
    """A level definition in the catalog is malformed."""

    def __init__(self, level_id: int, errors: list[str]) -> None:
        super().__init__(f"Level {level_id} is invalid: {'; '.join(errors)}")
        self.level_id = level_id
        self.errors = errors
