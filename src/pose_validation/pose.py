"""
Pose data models for the validation engine.

Uses Pydantic so the same models validate keypoints posted to the API and
the ones produced by the local estimator adapter.
"""

from enum import Enum

from pydantic import BaseModel, Field


class Joint(str, Enum):
    """The 17 COCO / MoveNet body joints."""
    NOSE = "nose"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"


class Keypoint(BaseModel):
    """A named landmark in pixel coordinates of the source frame."""
    name: Joint
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    score: float = Field(ge=0.0, le=1.0, description="Detection confidence (0-1)")

    class Config:
        frozen = True


class Pose(BaseModel):
    """All keypoints of one detected body in one frame."""
    keypoints: list[Keypoint] = Field(default_factory=list)

    class Config:
        frozen = True


class ValidationResult(BaseModel):
    """Verdict for a single frame: validity plus the coaching text."""
    is_valid: bool = Field(alias="isValid")
    message: str

    class Config:
        frozen = True
        populate_by_name = True

    @classmethod
    def valid(cls, message: str) -> "ValidationResult":
        return cls(is_valid=True, message=message)

    @classmethod
    def invalid(cls, message: str) -> "ValidationResult":
        return cls(is_valid=False, message=message)
