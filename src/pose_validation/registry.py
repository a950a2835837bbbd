"""
Exercise classifier registry.

Maps an exercise id to its rule and dispatches a pose to it. Holds no
per-exercise state; every call is a pure function of the pose.
"""

import logging
from typing import Optional

from .config import UNIMPLEMENTED_MESSAGE
from .pose import Pose, ValidationResult
from .rules import ExerciseRule, evaluate
from .validators import (
    ANKLE_PUMPS,
    HIP_BRIDGE,
    KNEE_EXTENSION,
    NECK_ROTATION,
    SHOULDER_FLEXION,
)

logger = logging.getLogger(__name__)

EXERCISE_RULES: dict[int, ExerciseRule] = {
    rule.exercise_id: rule
    for rule in (NECK_ROTATION, SHOULDER_FLEXION, KNEE_EXTENSION, HIP_BRIDGE, ANKLE_PUMPS)
}


def get_rule(exercise_id: int) -> Optional[ExerciseRule]:
    return EXERCISE_RULES.get(exercise_id)


def classify(exercise_id: int, pose: Pose) -> ValidationResult:
    """Validate *pose* for the given exercise.

    Unknown ids return the fixed "not implemented" result instead of raising.
    """
    rule = EXERCISE_RULES.get(exercise_id)
    if rule is None:
        logger.warning("No validation rule for exercise id %r", exercise_id)
        return ValidationResult.invalid(UNIMPLEMENTED_MESSAGE)
    return evaluate(rule, pose)
