"""
Configuration constants for the physio coach frame pipeline and API.

Centralizes capture settings, estimator paths, feedback colors and
environment variable loading.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(_ENV_PATH)

# ---------------------------------------------------------------------------
# Pose estimator
# ---------------------------------------------------------------------------
# Download from: https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_full/float16/latest/pose_landmarker_full.task
POSE_LANDMARKER_MODEL: Path = Path(
    os.environ.get(
        "POSE_LANDMARKER_MODEL",
        str(PROJECT_ROOT / "models" / "pose_landmarker_full.task"),
    )
)
MIN_POSE_DETECTION_CONFIDENCE: float = 0.3
MIN_TRACKING_CONFIDENCE: float = 0.3

# ---------------------------------------------------------------------------
# Capture / frame cycle
# ---------------------------------------------------------------------------
CAMERA_INDEX: int = int(os.environ.get("CAMERA_INDEX", "0"))
FRAME_WIDTH: int = int(os.environ.get("FRAME_WIDTH", "640"))
FRAME_HEIGHT: int = int(os.environ.get("FRAME_HEIGHT", "480"))
TARGET_FPS: float = float(os.environ.get("TARGET_FPS", "30"))
ESTIMATOR_TIMEOUT_S: float = float(os.environ.get("ESTIMATOR_TIMEOUT_S", "1.0"))

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT: str = "%(levelname)s | %(name)s | %(message)s"

# ---------------------------------------------------------------------------
# Feedback rendering
# ---------------------------------------------------------------------------
AFFIRMATIVE_COLOR: str = "#4ade80"
CORRECTIVE_COLOR: str = "#f87171"
NEUTRAL_COLOR: str = "#fbbf24"

NO_POSE_MESSAGE: str = "No pose detected. Please position yourself in front of the camera"
NO_EXERCISE_MESSAGE: str = "Please select an exercise"
EXERCISE_SELECTED_MESSAGE: str = "Perform the exercise. AI is analyzing..."

# Keypoints drawn on the overlay must pass this score
DRAW_SCORE_THRESHOLD: float = 0.4
KEYPOINT_RADIUS: int = 6
