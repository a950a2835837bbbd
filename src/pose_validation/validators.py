"""
Per-exercise validation rules.

Each exercise is one ``ExerciseRule`` entry: a feature extractor plus the
coaching ladders that turn those features into text. Thresholds are in
pixels / degrees for a 640x480 capture. Shoulder flexion and hip bridge use
raw pixel differences directly as their "percent" magnitude.
"""

import math
from typing import Optional

from .config import (
    ANKLE_PUMPS_ID,
    HIP_BRIDGE_ID,
    KNEE_EXTENSION_ID,
    NECK_ROTATION_ID,
    SHOULDER_FLEXION_ID,
)
from .geometry import angle, is_confident, lookup, midpoint_y, round_half_up
from .pose import Joint, Pose, ValidationResult
from .rules import Band, Check, ExerciseRule, Features, Ladder, evaluate

# ========================================
# THRESHOLDS
# ========================================

NECK_MIN_ROTATION = 20          # rotation % above which the pose counts
HEAD_TILT_PX = 10               # max ear height difference before warning

KNEE_EXTENDED_RANGE = (160, 200)
HIP_BRIDGE_KNEE_BENT_RANGE = (75, 150)

_SIDES = ("left", "right")

_JOINTS = {
    "left": {
        "shoulder": Joint.LEFT_SHOULDER, "elbow": Joint.LEFT_ELBOW,
        "wrist": Joint.LEFT_WRIST, "hip": Joint.LEFT_HIP,
        "knee": Joint.LEFT_KNEE, "ankle": Joint.LEFT_ANKLE,
    },
    "right": {
        "shoulder": Joint.RIGHT_SHOULDER, "elbow": Joint.RIGHT_ELBOW,
        "wrist": Joint.RIGHT_WRIST, "hip": Joint.RIGHT_HIP,
        "knee": Joint.RIGHT_KNEE, "ankle": Joint.RIGHT_ANKLE,
    },
}


def _side(pose: Pose, side: str, part: str):
    return lookup(pose, _JOINTS[side][part])


def _in_range(value: Optional[float], bounds: tuple[float, float]) -> bool:
    low, high = bounds
    return value is not None and low < value < high


def _leg_angle(pose: Pose, side: str) -> Optional[float]:
    return angle(
        _side(pose, side, "hip"),
        _side(pose, side, "knee"),
        _side(pose, side, "ankle"),
    )


# ========================================
# 1. NECK ROTATION
# ========================================

def neck_rotation_features(pose: Pose) -> Optional[Features]:
    nose = lookup(pose, Joint.NOSE)
    left_shoulder = lookup(pose, Joint.LEFT_SHOULDER)
    right_shoulder = lookup(pose, Joint.RIGHT_SHOULDER)

    shoulder_width = abs(left_shoulder.x - right_shoulder.x)
    if shoulder_width == 0:
        return None

    offset = nose.x - (left_shoulder.x + right_shoulder.x) / 2.0
    rotation = abs(offset) * 100.0 / shoulder_width
    if not math.isfinite(rotation):
        return None

    left_ear = lookup(pose, Joint.LEFT_EAR)
    right_ear = lookup(pose, Joint.RIGHT_EAR)
    head_tilted = (
        is_confident(left_ear)
        and is_confident(right_ear)
        and abs(left_ear.y - right_ear.y) > HEAD_TILT_PX
    )

    return {
        "rotation": rotation,
        "rotation_rounded": round_half_up(rotation),
        "direction": "right" if offset > 0 else "left",
        "head_tilted": head_tilted,
    }


NECK_ROTATION = ExerciseRule(
    exercise_id=NECK_ROTATION_ID,
    name="Neck Rotation",
    required_joints=(Joint.NOSE, Joint.LEFT_SHOULDER, Joint.RIGHT_SHOULDER),
    reposition_message="⚠️ Position yourself so your face and shoulders are clearly visible",
    extract=neck_rotation_features,
    is_valid=lambda f: f["rotation"] > NECK_MIN_ROTATION,
    valid_message=(
        "✅ ",
        Ladder(
            (
                Band("rotation", 40, "Excellent rotation! Hold for 2-3 seconds, then slowly return to center"),
                Band("rotation", 30, "Good rotation! Try rotating a bit more to the {direction}"),
            ),
            default="Nice start! Rotate your head further to the {direction} - aim for 45 degrees",
        ),
        Check(lambda f: f["head_tilted"], " Keep your head level - avoid tilting up or down"),
        ". Move slowly and smoothly.",
    ),
    invalid_message=Ladder(
        (
            Band(
                "rotation", 10,
                "🔄 Rotate your head more to the {direction}. You're at about "
                "{rotation_rounded} degrees - aim for 45 degrees. Keep your shoulders still.",
            ),
        ),
        default=(
            "🔄 Start by rotating your head slowly to the left or right. Keep your shoulders "
            "facing forward and only move your neck. Aim for a 45-degree rotation."
        ),
    ),
)


# ========================================
# 2. SHOULDER FLEXION
# ========================================

def _arm_features(pose: Pose, side: str) -> Optional[Features]:
    shoulder = _side(pose, side, "shoulder")
    elbow = _side(pose, side, "elbow")
    wrist = _side(pose, side, "wrist")
    if not (is_confident(shoulder) and is_confident(elbow) and is_confident(wrist)):
        return None
    return {
        "side": side,
        "height_diff": shoulder.y - wrist.y,
        "elbow_angle": angle(shoulder, elbow, wrist),
        "raised": wrist.y < shoulder.y,
    }


def shoulder_flexion_features(pose: Pose) -> Features:
    arms = [_arm_features(pose, side) for side in _SIDES]
    measured = [arm for arm in arms if arm is not None]
    raised = [arm for arm in measured if arm["raised"]]

    # Prefer a raised arm (left first); otherwise report the first measured one
    arm = (raised or measured or [None])[0]
    if arm is None:
        return {"raised": False, "measured": False}
    return {**arm, "measured": True}


SHOULDER_FLEXION = ExerciseRule(
    exercise_id=SHOULDER_FLEXION_ID,
    name="Shoulder Flexion",
    required_joints=(Joint.LEFT_SHOULDER, Joint.RIGHT_SHOULDER),
    reposition_message="⚠️ Please ensure your shoulders are visible in the camera",
    extract=shoulder_flexion_features,
    is_valid=lambda f: f["raised"],
    valid_message=(
        "✅ ",
        Ladder(
            (
                Band("height_diff", 30, "Excellent! Your {side} arm is well raised above your shoulder. "),
                Band("height_diff", 15, "Good! Your {side} arm is raised. "),
            ),
            default="Your {side} arm is slightly raised. ",
        ),
        Ladder((
            Check(
                lambda f: _in_range(f["elbow_angle"], (150, 210)),
                "Keep your arm straight and fully extended toward the ceiling.",
            ),
            Check(
                lambda f: f["elbow_angle"] is not None and f["elbow_angle"] < 150,
                "⚠️ Straighten your elbow more - your arm should be fully extended.",
            ),
        )),
        " Keep your back straight and hold for 5 seconds.",
    ),
    invalid_message=Ladder(
        (
            Check(
                lambda f: f["measured"] and f["height_diff"] < 0,
                "🔄 Raise your {side} arm higher. Your wrist should be well above your "
                "shoulder. Lift straight up toward the ceiling, not forward.",
            ),
        ),
        default=(
            "🔄 Raise one arm straight up toward the ceiling. Keep your elbow straight, palm "
            "facing forward, and lift slowly until your arm is fully vertical. Keep your "
            "other arm relaxed at your side."
        ),
    ),
)


# ========================================
# 3. KNEE EXTENSION
# ========================================

def knee_extension_features(pose: Pose) -> Features:
    angles = {side: _leg_angle(pose, side) for side in _SIDES}
    extended = {side: _in_range(angles[side], KNEE_EXTENDED_RANGE) for side in _SIDES}

    sitting = (
        midpoint_y(lookup(pose, Joint.LEFT_HIP), lookup(pose, Joint.RIGHT_HIP))
        < midpoint_y(lookup(pose, Joint.LEFT_KNEE), lookup(pose, Joint.RIGHT_KNEE))
    )

    extended_side = next((side for side in _SIDES if extended[side]), None)
    if extended_side is not None:
        side = extended_side
    else:
        side = next((s for s in _SIDES if angles[s] is not None), None)

    knee_angle = angles[side] if side is not None else None
    other = "right" if side == "left" else "left"

    return {
        "side": side,
        "knee_angle": knee_angle,
        "flexion": round_half_up(180 - knee_angle) if knee_angle is not None else None,
        "extended": extended_side is not None,
        "other_extended": side is not None and extended[other],
        "measured": knee_angle is not None,
        "sitting": sitting,
    }


KNEE_EXTENSION = ExerciseRule(
    exercise_id=KNEE_EXTENSION_ID,
    name="Knee Extension",
    required_joints=(Joint.LEFT_HIP, Joint.RIGHT_HIP, Joint.LEFT_KNEE, Joint.RIGHT_KNEE),
    reposition_message="⚠️ Please sit so your hips and knees are visible in the camera",
    extract=knee_extension_features,
    is_valid=lambda f: f["extended"],
    valid_message=(
        "✅ Perfect! Your {side} knee is fully extended. ",
        Check(
            lambda f: _in_range(f["knee_angle"], (175, 185)),
            "Excellent straight leg! ",
            "Try to straighten it a bit more - aim for 180 degrees. ",
        ),
        Check(
            lambda f: f["sitting"],
            "Good posture! ",
            "⚠️ Make sure you're sitting upright with your back straight. ",
        ),
        Check(
            lambda f: f["other_extended"],
            "You can extend one leg at a time - try focusing on one leg.",
            "Keep your other foot on the ground. Hold this position for 5 seconds, then slowly lower.",
        ),
    ),
    invalid_message=Ladder(
        (
            Check(
                lambda f: f["measured"],
                (
                    Ladder((
                        Check(
                            lambda f: f["knee_angle"] < KNEE_EXTENDED_RANGE[0],
                            "🔄 Straighten your {side} knee more. You're {flexion} degrees from "
                            "full extension. Sit tall, engage your thigh muscle, and lift your "
                            "foot until your leg is completely straight. ",
                        ),
                        Band(
                            "knee_angle", KNEE_EXTENDED_RANGE[1],
                            "🔄 Your {side} leg appears overextended. Lower it slightly to a "
                            "comfortable straight position. ",
                        ),
                    )),
                    Check(
                        lambda f: not f["sitting"],
                        "⚠️ Make sure you're sitting upright, not leaning forward or backward.",
                    ),
                ),
            ),
        ),
        default=(
            "🔄 Sit upright in a chair. Slowly extend one knee fully until your leg is "
            "straight. Keep your back straight and hold for 5 seconds before lowering."
        ),
    ),
    invalid_fallback=(
        "🔄 Fully extend your knee. Sit upright, engage your quadriceps, and lift your foot "
        "until your leg is completely straight (180 degrees)."
    ),
)


# ========================================
# 4. HIP BRIDGE
# ========================================

def hip_bridge_features(pose: Pose) -> Features:
    left_hip = lookup(pose, Joint.LEFT_HIP)
    right_hip = lookup(pose, Joint.RIGHT_HIP)
    avg_hip_y = midpoint_y(left_hip, right_hip)
    avg_shoulder_y = midpoint_y(
        lookup(pose, Joint.LEFT_SHOULDER), lookup(pose, Joint.RIGHT_SHOULDER)
    )

    knee_angles = [_leg_angle(pose, side) for side in _SIDES]

    return {
        # Smaller y is higher in the frame
        "hip_lift": avg_shoulder_y - avg_hip_y,
        "lifted": avg_hip_y < avg_shoulder_y,
        "knees_bent": any(_in_range(a, HIP_BRIDGE_KNEE_BENT_RANGE) for a in knee_angles),
        "hip_tilt": abs(left_hip.y - right_hip.y),
    }


HIP_BRIDGE = ExerciseRule(
    exercise_id=HIP_BRIDGE_ID,
    name="Hip Bridge",
    required_joints=(Joint.LEFT_HIP, Joint.RIGHT_HIP, Joint.LEFT_SHOULDER, Joint.RIGHT_SHOULDER),
    reposition_message=(
        "⚠️ Please lie down so your full body (shoulders to hips) is visible in the camera. "
        "Position yourself side-on to the camera."
    ),
    extract=hip_bridge_features,
    is_valid=lambda f: f["lifted"],
    valid_message=(
        "✅ Great! Your hips are lifted. ",
        Ladder(
            (
                Band("hip_lift", 15, "Excellent height! "),
                Band("hip_lift", 8, "Good lift! Try lifting a bit higher. "),
            ),
            default="You're lifting, but aim for higher. ",
        ),
        Check(
            lambda f: f["knees_bent"],
            "Keep your knees bent and feet flat on the ground. ",
            "⚠️ Make sure your knees are bent at about 90 degrees with feet flat. ",
        ),
        Band("hip_tilt", 15, "⚠️ Keep your hips level - avoid tilting to one side. "),
        "Squeeze your glutes and hold for 10 seconds. Keep your shoulders and head on the ground.",
    ),
    invalid_message=(
        "🔄 Lift your hips higher. ",
        Check(lambda f: abs(f["hip_lift"]) < 30, "You're still in the starting position. "),
        Ladder((
            Check(lambda f: f["hip_lift"] < 0, "Your hips need to be higher than your shoulders. "),
            Check(
                lambda f: f["hip_lift"] < 5,
                "Lift just a bit more - aim for your body to form a straight line from "
                "shoulders to knees. ",
            ),
        )),
        Check(
            lambda f: f["knees_bent"],
            "Keep your knees bent, feet flat on the ground, and slowly lift your hips. ",
            "⚠️ Make sure you're lying on your back with knees bent at 90 degrees and feet flat. ",
        ),
        "Press through your heels and engage your glutes. Your body should form a bridge shape.",
    ),
)


# ========================================
# 5. ANKLE PUMPS
# ========================================

def ankle_pumps_features(pose: Pose) -> Features:
    # A single frame cannot show the pumping motion; only visibility is judged
    return {
        "left_visible": is_confident(lookup(pose, Joint.LEFT_ANKLE)),
        "right_visible": is_confident(lookup(pose, Joint.RIGHT_ANKLE)),
    }


_ANKLE_REPOSITION = (
    "⚠️ Position your feet so your ankles are clearly visible in the camera. "
    "Sit or lie down with your legs extended or slightly bent."
)

ANKLE_PUMPS = ExerciseRule(
    exercise_id=ANKLE_PUMPS_ID,
    name="Ankle Pumps",
    required_joints=(Joint.LEFT_ANKLE, Joint.RIGHT_ANKLE),
    reposition_message=_ANKLE_REPOSITION,
    extract=ankle_pumps_features,
    is_valid=lambda f: True,
    valid_message=(
        "✅ Your ankles are visible. ",
        Ladder(
            (
                Check(
                    lambda f: f["left_visible"] and f["right_visible"],
                    "Focus on one foot at a time or both together. ",
                ),
                Check(lambda f: f["left_visible"], "Work your left ankle. "),
            ),
            default="Work your right ankle. ",
        ),
        "Point your toes away from your body (plantarflexion), then pull them toward your "
        "body (dorsiflexion). ",
        "Move slowly and deliberately through the full range of motion. ",
        "Aim for 15-20 repetitions per foot. ",
        "This exercise improves circulation and ankle mobility.",
    ),
    invalid_message=_ANKLE_REPOSITION,
)


# ========================================
# CONVENIENCE ENTRY POINTS
# ========================================

def validate_neck_rotation(pose: Pose) -> ValidationResult:
    return evaluate(NECK_ROTATION, pose)


def validate_shoulder_flexion(pose: Pose) -> ValidationResult:
    return evaluate(SHOULDER_FLEXION, pose)


def validate_knee_extension(pose: Pose) -> ValidationResult:
    return evaluate(KNEE_EXTENSION, pose)


def validate_hip_bridge(pose: Pose) -> ValidationResult:
    return evaluate(HIP_BRIDGE, pose)


def validate_ankle_pumps(pose: Pose) -> ValidationResult:
    return evaluate(ANKLE_PUMPS, pose)
