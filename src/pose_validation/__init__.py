"""
Pose-validation engine for the physio coach.

Turns the keypoints of one detected body into a validity verdict and a
coaching message for the selected exercise.
"""

from .pose import Joint, Keypoint, Pose, ValidationResult
from .geometry import angle, is_confident, lookup
from .exercises import Exercise, get_exercise, get_all_exercises, resolve_exercise
from .registry import EXERCISE_RULES, classify, get_rule

__all__ = [
    "Joint",
    "Keypoint",
    "Pose",
    "ValidationResult",
    "angle",
    "is_confident",
    "lookup",
    "Exercise",
    "get_exercise",
    "get_all_exercises",
    "resolve_exercise",
    "EXERCISE_RULES",
    "classify",
    "get_rule",
]
