"""
Configuration constants for the pose-validation engine.

Thresholds are tuned for a 640x480 capture and are deliberately not read
from the environment: every frame must be judged against the same values.
"""

# Minimum keypoint score for a joint to be used at all
CONFIDENCE_THRESHOLD: float = 0.4

# Returned by the registry for exercise ids it has no rule for
UNIMPLEMENTED_MESSAGE: str = "Exercise validation not implemented"

# Exercise ids handled by the rule table
NECK_ROTATION_ID: int = 1
SHOULDER_FLEXION_ID: int = 2
KNEE_EXTENSION_ID: int = 3
HIP_BRIDGE_ID: int = 4
ANKLE_PUMPS_ID: int = 5
