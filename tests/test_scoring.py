"""Tests for munchers.game.scoring and achievements."""

from dataclasses import replace

import pytest

from munchers.game.achievements import ACHIEVEMENTS, check_achievements
from munchers.game.scoring import (
    accuracy_multiplier,
    calculate_stars,
    evaluate,
    score,
    three_star_minimum,
    total,
    update_objectives,
)
from munchers.levels.catalog import (
    Level,
    LevelCatalog,
    LevelParameters,
    Objective,
    ObjectiveCondition,
    ObjectiveType,
)
from munchers.rules.rule_engine import Rule
from munchers.world.cell import Position

_COMPLETE = Objective("complete", ObjectiveType.PRIMARY, ObjectiveCondition.COMPLETE, 50, required=True)
_FAST = Objective("fast", ObjectiveType.BONUS, ObjectiveCondition.TIME, 30, target=30)
_RICH = Objective("rich", ObjectiveType.BONUS, ObjectiveCondition.SCORE, 20, target=40)


def _level(*objectives: Objective) -> Level:
    return Level(
        id=5,
        name="Test",
        parameters=LevelParameters(rows=3, cols=3, time_limit=60, rule=Rule.MULTIPLES, target_number=2),
        objectives=objectives,
    )


class TestScore:
    """Tests for the final score formula."""

    def test_worked_example(self) -> None:
        breakdown = score(
            base=10,
            objectives=(),
            completed_ids=(),
            time_left=30,
            time_limit=60,
            accuracy=80,
            streak=3,
            difficulty_tier=2,
        )
        assert breakdown.time_bonus == 2
        assert breakdown.difficulty_bonus == 2
        assert breakdown.streak_bonus == 30
        assert breakdown.accuracy_multiplier == pytest.approx(1.6)
        assert total(breakdown) == 70
        assert breakdown.total == 70

    def test_objective_bonus(self) -> None:
        breakdown = score(50, (_COMPLETE, _FAST), ["complete"], 0, 60, 50, 0, 1)
        assert breakdown.objective_bonus == 50
        assert breakdown.time_bonus == 0
        assert breakdown.difficulty_bonus == 0
        assert total(breakdown) == 100

    def test_time_bonus_capped_at_half_base(self) -> None:
        breakdown = score(40, (), (), 90, 60, 50, 0, 1)
        assert breakdown.time_bonus == 20

    @pytest.mark.parametrize(
        ("accuracy", "expected"),
        [(0, 0.5), (10, 0.5), (50, 1.0), (75, 1.5), (100, 2.0)],
    )
    def test_accuracy_multiplier_clamped(self, accuracy: int, expected: float) -> None:
        assert accuracy_multiplier(accuracy) == pytest.approx(expected)

    @pytest.mark.parametrize(("tier", "bonus"), [(1, 0), (2, 20), (3, 50), (4, 100), (5, 200)])
    def test_difficulty_bonus(self, tier: int, bonus: int) -> None:
        assert score(100, (), (), 0, 60, 50, 0, tier).difficulty_bonus == bonus


class TestObjectives:
    """Tests for objective evaluation and crediting."""

    def test_conditions(self, make_state) -> None:
        state = make_state([[3, 5, 7], [9, 11, 13], [15, 17, 19]], score=45, time_left=31)
        assert evaluate(_COMPLETE, state)
        assert evaluate(_FAST, state)
        assert evaluate(_RICH, state)
        assert not evaluate(_FAST, replace(state, time_left=29))
        no_target = Objective("x", ObjectiveType.BONUS, ObjectiveCondition.SCORE, 5)
        assert not evaluate(no_target, state)

    def test_accuracy_and_mistakes(self, make_state) -> None:
        state = make_state([[2, 3, 5]], correct_eats=3, mistakes=1)
        precise = Objective("acc", ObjectiveType.BONUS, ObjectiveCondition.ACCURACY, 5, target=75)
        clean = Objective("clean", ObjectiveType.BONUS, ObjectiveCondition.NO_MISTAKES, 5)
        assert state.accuracy == 75
        assert evaluate(precise, state)
        assert not evaluate(clean, state)

    def test_each_objective_credited_once(self, make_state) -> None:
        state = make_state(
            [[2, 3, 5]],
            objectives=(_RICH,),
            score=40,
        )
        once = update_objectives(state)
        twice = update_objectives(once)
        assert once.completed_objectives == ("rich",)
        assert once.score == 60
        assert twice.score == 60
        assert twice.completed_objectives == ("rich",)

    def test_credit_can_satisfy_later_objective(self, make_state) -> None:
        state = make_state(
            [[3, 5, 7]],
            objectives=(_COMPLETE, _RICH),
            score=0,
        )
        nxt = update_objectives(state)
        assert nxt.completed_objectives == ("complete", "rich")
        assert nxt.score == 70


class TestStars:
    """Tests for star ratings."""

    def test_three_star_minimum(self) -> None:
        assert three_star_minimum(_level(_COMPLETE, _FAST)) == 75

    def test_one_star_for_completion(self) -> None:
        assert calculate_stars(500, ["complete"], _level(_COMPLETE, _FAST, _RICH)) == 1

    def test_two_stars_with_some_bonus(self) -> None:
        assert calculate_stars(500, ["complete", "fast"], _level(_COMPLETE, _FAST, _RICH)) == 2

    def test_three_stars_needs_score(self) -> None:
        level = _level(_COMPLETE, _FAST, _RICH)
        done = ["complete", "fast", "rich"]
        assert calculate_stars(75, done, level) == 3
        assert calculate_stars(74, done, level) == 2

    def test_shipped_catalog_thresholds(self, catalog: LevelCatalog) -> None:
        level = catalog.get(1)
        assert level is not None
        assert three_star_minimum(level) == 75


class TestAchievements:
    """Tests for achievement checks."""

    def test_first_win_awards(self, make_state) -> None:
        level = _level(_COMPLETE)
        first = replace(level, id=1)
        state = make_state(
            [[3, 5, 7]],
            muncher=Position(0, 0),
            level=first,
            game_won=True,
            correct_eats=4,
            time_limit=90,
            time_left=70,
        )
        ids = [a.id for a in check_achievements(state, total_score=200)]
        assert ids == ["first_steps", "speed_demon", "perfectionist", "no_mistakes"]

    def test_skips_already_earned(self, make_state) -> None:
        state = make_state([[3, 5, 7]], level=_level(_COMPLETE), game_won=True, time_left=0)
        ids = [a.id for a in check_achievements(state, 0, ["perfectionist"])]
        assert ids == ["no_mistakes"]

    def test_streak_and_total_score(self, make_state) -> None:
        state = make_state([[3, 5, 7]], best_streak=10, game_over=True)
        ids = [a.id for a in check_achievements(state, 1500)]
        assert ids == ["streak_master", "high_scorer"]

    def test_catalog_values(self) -> None:
        by_id = {a.id: a for a in ACHIEVEMENTS}
        assert list(by_id) == [
            "first_steps",
            "speed_demon",
            "perfectionist",
            "streak_master",
            "no_mistakes",
            "high_scorer",
            "tutorial_master",
            "lightning_fast",
        ]
        assert {k: a.points for k, a in by_id.items()} == {
            "first_steps": 10,
            "speed_demon": 50,
            "perfectionist": 30,
            "streak_master": 40,
            "no_mistakes": 25,
            "high_scorer": 100,
            "tutorial_master": 75,
            "lightning_fast": 100,
        }
        assert by_id["no_mistakes"].name == "Flawless Victory"
