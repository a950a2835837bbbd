"""
Joint geometry utilities.

Keypoint lookup, the confidence gate and the three-point joint angle used by
every exercise rule.
"""

import math
from typing import Optional

import numpy as np

from .config import CONFIDENCE_THRESHOLD
from .pose import Joint, Keypoint, Pose


def lookup(pose: Pose, joint: Joint) -> Optional[Keypoint]:
    """Return the first keypoint named *joint*, or None if the pose lacks it."""
    for kp in pose.keypoints:
        if kp.name == joint:
            return kp
    return None


def is_confident(kp: Optional[Keypoint]) -> bool:
    """True when the keypoint exists and passes the confidence gate."""
    return kp is not None and kp.score >= CONFIDENCE_THRESHOLD


def angle(
    p1: Optional[Keypoint],
    p2: Optional[Keypoint],
    p3: Optional[Keypoint],
) -> Optional[float]:
    """Calculate the angle at vertex p2 formed by points p1-p2-p3.

    The difference of the two rays' directions (via atan2) is taken in
    absolute value and reflected into [0, 180].

    Args:
        p1, p2, p3: Keypoints; p2 is the vertex.

    Returns:
        Angle in degrees, or None if any point is missing, below the
        confidence gate, or the result is not finite.
    """
    if not (is_confident(p1) and is_confident(p2) and is_confident(p3)):
        return None

    radians = (
        np.arctan2(p3.y - p2.y, p3.x - p2.x)
        - np.arctan2(p1.y - p2.y, p1.x - p2.x)
    )
    degrees = abs(float(np.degrees(radians)))
    if degrees > 180.0:
        degrees = 360.0 - degrees

    if not math.isfinite(degrees):
        return None
    return degrees


def midpoint_y(a: Keypoint, b: Keypoint) -> float:
    return (a.y + b.y) / 2.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (UI display rounding)."""
    return int(math.floor(value + 0.5))
