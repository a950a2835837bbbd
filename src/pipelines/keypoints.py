"""
MediaPipe BlazePose (33 landmarks) → 17-joint Pose conversion.

MediaPipe reports normalized [0, 1] coordinates and a per-landmark
visibility; the validation engine expects pixel coordinates in the source
frame and a confidence score.
"""

from typing import Sequence

import numpy as np

from src.pose_validation.pose import Joint, Keypoint, Pose

# BlazePose landmark index for each engine joint
BLAZEPOSE_INDEX: dict[Joint, int] = {
    Joint.NOSE: 0,
    Joint.LEFT_EYE: 2,
    Joint.RIGHT_EYE: 5,
    Joint.LEFT_EAR: 7,
    Joint.RIGHT_EAR: 8,
    Joint.LEFT_SHOULDER: 11,
    Joint.RIGHT_SHOULDER: 12,
    Joint.LEFT_ELBOW: 13,
    Joint.RIGHT_ELBOW: 14,
    Joint.LEFT_WRIST: 15,
    Joint.RIGHT_WRIST: 16,
    Joint.LEFT_HIP: 23,
    Joint.RIGHT_HIP: 24,
    Joint.LEFT_KNEE: 25,
    Joint.RIGHT_KNEE: 26,
    Joint.LEFT_ANKLE: 27,
    Joint.RIGHT_ANKLE: 28,
}

NUM_BLAZEPOSE_LANDMARKS = 33


def pose_from_array(landmarks: np.ndarray, width: int, height: int) -> Pose:
    """Convert one frame of landmarks to a Pose.

    Args:
        landmarks: Shape (33, 4) with [x, y, z, visibility], x/y normalized.
        width, height: Source frame size in pixels.

    Returns:
        Pose with the 17 engine joints in pixel coordinates. Landmarks with
        non-finite x/y are left out.

    Raises:
        ValueError: If the array shape is wrong.
    """
    arr = np.asarray(landmarks, dtype=np.float32)
    if arr.ndim != 2 or arr.shape[0] != NUM_BLAZEPOSE_LANDMARKS or arr.shape[1] < 4:
        raise ValueError(
            f"Expected landmarks of shape ({NUM_BLAZEPOSE_LANDMARKS}, 4), got {arr.shape}."
        )

    keypoints = []
    for joint, idx in BLAZEPOSE_INDEX.items():
        x, y, _z, visibility = arr[idx, :4]
        # Non-finite coordinates are dropped; the joint reads as missing
        if not (np.isfinite(x) and np.isfinite(y)):
            continue
        keypoints.append(Keypoint(
            name=joint,
            x=float(x) * width,
            y=float(y) * height,
            score=float(np.clip(np.nan_to_num(visibility), 0.0, 1.0)),
        ))
    return Pose(keypoints=keypoints)


def pose_from_landmarks(landmarks: Sequence, width: int, height: int) -> Pose:
    """Convert MediaPipe ``NormalizedLandmark`` objects (``.x .y .z .visibility``)."""
    arr = np.array(
        [[lm.x, lm.y, lm.z, lm.visibility or 0.0] for lm in landmarks],
        dtype=np.float32,
    )
    return pose_from_array(arr, width, height)
