"""Progression — persistent player stats, level progress and high scores.

SaveData is a plain dataclass tree serialised to YAML.  Loading tolerates
missing keys (older saves) by falling back to defaults field by field.
ProgressionManager applies session summaries and high scores to the save
and writes it back through a SaveStorage.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import yaml

if TYPE_CHECKING:
    from collections.abc import Iterable

    from munchers.game.summary import SessionSummary
    from munchers.levels.catalog import LevelCatalog

logger = logging.getLogger(__name__)

# -- Constants ---------------------------------------------------------------

SAVE_VERSION = "1.0.0"
MAX_HIGH_SCORES = 5


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class PlayerStats:
    """Cumulative player statistics."""

    total_score: int = 0
    total_stars: int = 0
    levels_completed: int = 0
    total_play_time_ms: int = 0


@dataclass
class LevelProgress:
    """Per-level record.

    Attributes:
        level_id: Level the record belongs to.
        completed: Whether the level was ever won.
        best_score: Best final score.
        stars_earned: Best star rating.
        attempts: Sessions recorded.
        total_time_ms: Wall-clock time across attempts.
        objectives_completed: Union of objective ids ever completed.
        first_completed_at: ISO timestamp of the first win.
        last_played_at: ISO timestamp of the latest attempt.
    """

    level_id: int
    completed: bool = False
    best_score: int = 0
    stars_earned: int = 0
    attempts: int = 0
    total_time_ms: int = 0
    objectives_completed: list[str] = field(default_factory=list)
    first_completed_at: str | None = None
    last_played_at: str | None = None


@dataclass
class HighScore:
    """One entry in the classic-mode high-score table."""

    score: int
    player_name: str
    date: str
    puzzles_solved: int = 0


@dataclass
class SaveData:
    """Everything persisted between runs."""

    player_stats: PlayerStats = field(default_factory=PlayerStats)
    level_progress: dict[int, LevelProgress] = field(default_factory=dict)
    unlocked_levels: list[int] = field(default_factory=lambda: [1])
    achievements: list[str] = field(default_factory=list)
    high_scores: list[HighScore] = field(default_factory=list)
    last_played: str | None = None
    version: str = SAVE_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Return a YAML-safe mapping."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SaveData:
        """Rebuild save data, filling anything missing with defaults."""
        stats = data.get("player_stats") or {}
        progress = data.get("level_progress") or {}
        return cls(
            player_stats=PlayerStats(
                total_score=stats.get("total_score", 0),
                total_stars=stats.get("total_stars", 0),
                levels_completed=stats.get("levels_completed", 0),
                total_play_time_ms=stats.get("total_play_time_ms", 0),
            ),
            level_progress={
                int(key): LevelProgress(
                    level_id=int(entry.get("level_id", key)),
                    completed=entry.get("completed", False),
                    best_score=entry.get("best_score", 0),
                    stars_earned=entry.get("stars_earned", 0),
                    attempts=entry.get("attempts", 0),
                    total_time_ms=entry.get("total_time_ms", 0),
                    objectives_completed=list(entry.get("objectives_completed", [])),
                    first_completed_at=entry.get("first_completed_at"),
                    last_played_at=entry.get("last_played_at"),
                )
                for key, entry in progress.items()
            },
            unlocked_levels=list(data.get("unlocked_levels", [1])),
            achievements=list(data.get("achievements", [])),
            high_scores=[
                HighScore(
                    score=h.get("score", 0),
                    player_name=h.get("player_name", "Anonymous"),
                    date=h.get("date", ""),
                    puzzles_solved=h.get("puzzles_solved", 0),
                )
                for h in data.get("high_scores", [])
            ],
            last_played=data.get("last_played"),
            version=data.get("version", SAVE_VERSION),
        )


# -- Storage -----------------------------------------------------------------


class SaveStorage(Protocol):
    """Where save data lives."""

    def load(self) -> SaveData: ...

    def save(self, data: SaveData) -> None: ...


class InMemorySaveStorage:
    """Keeps save data in memory (tests, throwaway sessions)."""

    def __init__(self, data: SaveData | None = None) -> None:
        self.data = data if data is not None else SaveData()

    def load(self) -> SaveData:
        return self.data

    def save(self, data: SaveData) -> None:
        self.data = data


class YamlSaveStorage:
    """Persists save data to a YAML file.

    Read or write failures are logged and never interrupt play: an
    unreadable save loads as fresh defaults.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> SaveData:
        if not self.path.exists():
            return SaveData()
        try:
            with self.path.open("r") as f:
                raw = yaml.safe_load(f) or {}
            return SaveData.from_dict(raw)
        except (OSError, yaml.YAMLError, AttributeError, TypeError, ValueError):
            logger.exception("Failed to load save data from %s", self.path)
            return SaveData()

    def save(self, data: SaveData) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w") as f:
                yaml.safe_dump(data.to_dict(), f, sort_keys=False)
        except OSError:
            logger.exception("Failed to write save data to %s", self.path)


# -- Manager -----------------------------------------------------------------


class ProgressionManager:
    """Applies finished sessions to the player's save.

    Args:
        storage: Backing store, loaded immediately.
        catalog: Level catalog used to unlock follow-up levels.
    """

    def __init__(self, storage: SaveStorage, catalog: LevelCatalog | None = None) -> None:
        self.storage = storage
        self.catalog = catalog
        self.data = storage.load()

    def completed_levels(self) -> set[int]:
        return {lid for lid, p in self.data.level_progress.items() if p.completed}

    def is_unlocked(self, level_id: int) -> bool:
        return level_id in self.data.unlocked_levels

    def total_stars(self) -> int:
        return sum(p.stars_earned for p in self.data.level_progress.values())

    def recommended_level(self) -> int:
        """Lowest unlocked level not yet completed, else the highest unlocked."""
        completed = self.completed_levels()
        pending = sorted(lid for lid in self.data.unlocked_levels if lid not in completed)
        if pending:
            return pending[0]
        return max(self.data.unlocked_levels, default=1)

    def record_session(self, summary: SessionSummary) -> LevelProgress:
        """Fold a level session into the save and persist it.

        Args:
            summary: Outcome of the finished level.

        Returns:
            The updated progress record of the level.
        """
        now = _now()
        progress = self.data.level_progress.setdefault(
            summary.level_id,
            LevelProgress(level_id=summary.level_id),
        )
        progress.attempts += 1
        progress.total_time_ms += summary.duration_ms
        progress.last_played_at = now
        progress.best_score = max(progress.best_score, summary.final_score)
        progress.stars_earned = max(progress.stars_earned, summary.stars_earned)
        for obj_id in summary.objectives_completed:
            if obj_id not in progress.objectives_completed:
                progress.objectives_completed.append(obj_id)
        if summary.completed:
            progress.completed = True
            if progress.first_completed_at is None:
                progress.first_completed_at = now

        stats = self.data.player_stats
        stats.total_play_time_ms += summary.duration_ms
        stats.total_score += summary.final_score
        stats.total_stars = self.total_stars()
        stats.levels_completed = len(self.completed_levels())

        if summary.stars_earned > 0:
            self._unlock_after(summary.level_id)
        self.data.last_played = now
        self.storage.save(self.data)
        logger.info(
            "Recorded level %d: completed=%s score=%d stars=%d",
            summary.level_id,
            summary.completed,
            summary.final_score,
            summary.stars_earned,
        )
        return progress

    def record_achievements(self, achievement_ids: Iterable[str]) -> list[str]:
        """Store newly earned achievement ids; return the ones actually new."""
        new = [a for a in achievement_ids if a not in self.data.achievements]
        if new:
            self.data.achievements.extend(new)
            self.storage.save(self.data)
            logger.info("Achievements earned: %s", ", ".join(new))
        return new

    def qualifies_for_high_score(self, score: int) -> bool:
        """Return True if ``score`` would enter the high-score table."""
        if score <= 0:
            return False
        table = self.data.high_scores
        return len(table) < MAX_HIGH_SCORES or score > table[-1].score

    def add_high_score(self, score: int, player_name: str, puzzles_solved: int = 0) -> int:
        """Insert a score into the table, keeping the top entries.

        Returns:
            Zero-based rank of the new entry, or -1 if it did not place.
        """
        if not self.qualifies_for_high_score(score):
            return -1
        entry = HighScore(
            score=score,
            player_name=player_name or "Anonymous",
            date=_now(),
            puzzles_solved=puzzles_solved,
        )
        table = sorted(
            [*self.data.high_scores, entry],
            key=lambda h: h.score,
            reverse=True,
        )[:MAX_HIGH_SCORES]
        self.data.high_scores = table
        self.storage.save(self.data)
        return next(i for i, h in enumerate(table) if h is entry)

    def _unlock_after(self, level_id: int) -> None:
        if self.catalog is not None:
            nxt = self.catalog.next_level(level_id)
            candidate = nxt.id if nxt is not None else None
        else:
            candidate = level_id + 1
        if candidate is not None and candidate not in self.data.unlocked_levels:
            self.data.unlocked_levels.append(candidate)
            logger.info("Unlocked level %d", candidate)
