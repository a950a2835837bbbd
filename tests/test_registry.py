"""Tests for the classifier registry, the rule evaluator and the exercise catalog."""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.pose_validation.config import UNIMPLEMENTED_MESSAGE
from src.pose_validation.exercises import (
    EXERCISES,
    get_all_exercises,
    get_exercise,
    resolve_exercise,
)
from src.pose_validation.pose import Joint, Keypoint, Pose, ValidationResult
from src.pose_validation.registry import EXERCISE_RULES, classify, get_rule
from src.pose_validation.rules import Band, Check, ExerciseRule, Ladder, evaluate, render
from src.pose_validation.validators import validate_ankle_pumps


def _ankles_pose() -> Pose:
    return Pose(keypoints=[
        Keypoint(name=Joint.LEFT_ANKLE, x=100, y=400, score=0.8),
        Keypoint(name=Joint.RIGHT_ANKLE, x=200, y=400, score=0.8),
    ])


class TestRegistry:

    def test_rules_cover_catalog(self):
        assert set(EXERCISE_RULES) == {1, 2, 3, 4, 5}
        assert set(EXERCISE_RULES) == set(EXERCISES)
        for id_, rule in EXERCISE_RULES.items():
            assert rule.name == EXERCISES[id_].name

    @pytest.mark.parametrize("exercise_id", [99, 0, -1, 6])
    def test_unknown_id_fallback(self, exercise_id):
        result = classify(exercise_id, _ankles_pose())
        assert result == ValidationResult(is_valid=False, message=UNIMPLEMENTED_MESSAGE)
        assert result.model_dump(by_alias=True) == {
            "isValid": False,
            "message": "Exercise validation not implemented",
        }

    def test_dispatch(self):
        pose = _ankles_pose()
        assert classify(5, pose) == validate_ankle_pumps(pose)

    def test_empty_pose_never_raises(self):
        for exercise_id in EXERCISE_RULES:
            result = classify(exercise_id, Pose())
            assert not result.is_valid
            assert result.message.startswith("⚠️")

    def test_get_rule(self):
        assert get_rule(3).name == "Knee Extension"
        assert get_rule(42) is None


class TestRender:

    FEATURES = {"value": 12.0, "side": "left", "flag": True, "missing": None}

    def test_literal_is_formatted(self):
        assert render("Your {side} arm", self.FEATURES) == "Your left arm"

    def test_ladder_first_match_wins(self):
        ladder = Ladder(
            (Band("value", 20, "high"), Band("value", 10, "mid"), Band("value", 0, "low")),
            default="none",
        )
        assert render(ladder, self.FEATURES) == "mid"
        assert render(ladder, {**self.FEATURES, "value": -5}) == "none"

    def test_band_with_missing_feature_does_not_match(self):
        assert render(Band("missing", 0, "yes", "no"), self.FEATURES) == "no"

    def test_check_otherwise(self):
        check = Check(lambda f: not f["flag"], "then", "otherwise")
        assert render(check, self.FEATURES) == "otherwise"

    def test_nested_sections(self):
        message = ("A ", Check(lambda f: f["flag"], ("B ", Band("value", 5, "C"))), ".")
        assert render(message, self.FEATURES) == "A B C."

    def test_invalid_fallback_when_render_is_empty(self):
        rule = ExerciseRule(
            exercise_id=100,
            name="Test",
            required_joints=(Joint.LEFT_ANKLE,),
            reposition_message="reposition",
            extract=lambda pose: {},
            is_valid=lambda f: False,
            valid_message="valid",
            invalid_message=Ladder((Check(lambda f: False, "never"),)),
            invalid_fallback="fallback",
        )
        assert evaluate(rule, _ankles_pose()) == ValidationResult.invalid("fallback")
        assert evaluate(rule, Pose()) == ValidationResult.invalid("reposition")


class TestExerciseCatalog:

    def test_get_by_id(self):
        assert get_exercise(exercise_id=1).name == "Neck Rotation"

    def test_get_by_name_case_insensitive(self):
        assert get_exercise(exercise_name="hip BRIDGE").id == 4

    def test_unknown_exercise(self):
        with pytest.raises(ValueError):
            get_exercise(exercise_id=9)
        with pytest.raises(ValueError):
            get_exercise(exercise_name="Burpees")
        with pytest.raises(ValueError):
            get_exercise()

    def test_all_exercises_ordered(self):
        exercises = get_all_exercises()
        assert [ex.id for ex in exercises] == [1, 2, 3, 4, 5]
        assert all(ex.description and ex.image for ex in exercises)

    @pytest.mark.parametrize("value, expected_id", [
        (3, 3), ("4", 4), (" 2 ", 2), ("ankle pumps", 5), ("Neck Rotation", 1),
    ])
    def test_resolve_exercise(self, value, expected_id):
        assert resolve_exercise(value).id == expected_id

    @pytest.mark.parametrize("value", [0, "7", "Burpees"])
    def test_resolve_unknown_exercise(self, value):
        with pytest.raises(ValueError):
            resolve_exercise(value)
