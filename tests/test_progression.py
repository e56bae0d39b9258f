"""Tests for munchers.levels.progression — save data, storage and manager."""

from pathlib import Path

from munchers.game.summary import SessionSummary
from munchers.levels.catalog import LevelCatalog
from munchers.levels.progression import (
    InMemorySaveStorage,
    ProgressionManager,
    SaveData,
    YamlSaveStorage,
)


def _summary(level_id: int = 1, **overrides: object) -> SessionSummary:
    fields: dict[str, object] = {
        "level_id": level_id,
        "completed": True,
        "final_score": 120,
        "stars_earned": 2,
        "objectives_completed": ("complete",),
        "duration_ms": 40_000,
        "mistakes": 0,
        "correct_answers": 5,
        "accuracy": 100,
        "time_remaining": 20,
    }
    fields.update(overrides)
    return SessionSummary(**fields)


class TestSaveData:
    """Tests for save data defaults and migration."""

    def test_defaults(self) -> None:
        data = SaveData()
        assert data.unlocked_levels == [1]
        assert data.player_stats.total_score == 0
        assert data.high_scores == []

    def test_partial_dict_fills_defaults(self) -> None:
        data = SaveData.from_dict({"player_stats": {"total_score": 300}})
        assert data.player_stats.total_score == 300
        assert data.player_stats.total_stars == 0
        assert data.unlocked_levels == [1]


class TestStorage:
    """Tests for storage implementations."""

    def test_yaml_round_trip(self, tmp_path: Path) -> None:
        storage = YamlSaveStorage(tmp_path / "nested" / "save.yaml")
        manager = ProgressionManager(storage)
        manager.record_session(_summary())
        manager.add_high_score(500, "Ada", 3)

        reloaded = YamlSaveStorage(tmp_path / "nested" / "save.yaml").load()
        assert reloaded.level_progress[1].best_score == 120
        assert reloaded.level_progress[1].objectives_completed == ["complete"]
        assert reloaded.high_scores[0].player_name == "Ada"
        assert 2 in reloaded.unlocked_levels

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert YamlSaveStorage(tmp_path / "none.yaml").load() == SaveData()

    def test_corrupt_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "save.yaml"
        path.write_text("player_stats: [unclosed\n")
        assert YamlSaveStorage(path).load() == SaveData()


class TestProgressionManager:
    """Tests for applying sessions."""

    def test_record_first_completion(self, catalog: LevelCatalog) -> None:
        storage = InMemorySaveStorage()
        manager = ProgressionManager(storage, catalog)
        progress = manager.record_session(_summary())
        assert progress.completed
        assert progress.attempts == 1
        assert progress.first_completed_at is not None
        assert manager.completed_levels() == {1}
        assert manager.is_unlocked(2)
        assert manager.total_stars() == 2
        assert storage.data.player_stats.levels_completed == 1
        assert storage.data.player_stats.total_score == 120

    def test_best_values_kept(self) -> None:
        manager = ProgressionManager(InMemorySaveStorage())
        manager.record_session(_summary(final_score=200, stars_earned=3))
        progress = manager.record_session(
            _summary(final_score=80, stars_earned=1, objectives_completed=("complete", "no_mistakes")),
        )
        assert progress.best_score == 200
        assert progress.stars_earned == 3
        assert progress.attempts == 2
        assert progress.total_time_ms == 80_000
        assert progress.objectives_completed == ["complete", "no_mistakes"]

    def test_failed_attempt_does_not_unlock(self) -> None:
        manager = ProgressionManager(InMemorySaveStorage())
        manager.record_session(_summary(completed=False, final_score=0, stars_earned=0))
        assert manager.completed_levels() == set()
        assert not manager.is_unlocked(2)
        assert manager.data.level_progress[1].attempts == 1

    def test_recommended_level(self) -> None:
        manager = ProgressionManager(InMemorySaveStorage())
        assert manager.recommended_level() == 1
        manager.record_session(_summary())
        assert manager.recommended_level() == 2

    def test_last_level_unlocks_nothing(self, catalog: LevelCatalog) -> None:
        manager = ProgressionManager(InMemorySaveStorage(), catalog)
        manager.record_session(_summary(level_id=12))
        assert 13 not in manager.data.unlocked_levels

    def test_achievements_recorded_once(self) -> None:
        manager = ProgressionManager(InMemorySaveStorage())
        assert manager.record_achievements(["first_steps"]) == ["first_steps"]
        assert manager.record_achievements(["first_steps", "perfectionist"]) == ["perfectionist"]
        assert manager.data.achievements == ["first_steps", "perfectionist"]


class TestHighScores:
    """Tests for the classic high-score table."""

    def test_keeps_top_five(self) -> None:
        manager = ProgressionManager(InMemorySaveStorage())
        for score in (50, 10, 40, 30, 20):
            manager.add_high_score(score, "P")
        assert not manager.qualifies_for_high_score(10)
        assert manager.qualifies_for_high_score(11)
        assert manager.add_high_score(45, "Q") == 1
        assert [h.score for h in manager.data.high_scores] == [50, 45, 40, 30, 20]

    def test_zero_never_qualifies(self) -> None:
        manager = ProgressionManager(InMemorySaveStorage())
        assert not manager.qualifies_for_high_score(0)
        assert manager.add_high_score(0, "P") == -1

    def test_blank_name_becomes_anonymous(self) -> None:
        manager = ProgressionManager(InMemorySaveStorage())
        manager.add_high_score(10, "")
        assert manager.data.high_scores[0].player_name == "Anonymous"
