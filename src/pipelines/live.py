"""
Live webcam coach.

Runs the frame cycle locally: OpenCV captures the webcam, the MediaPipe
PoseLandmarker estimates keypoints, and an OpenCV window shows the skeleton
points plus the coaching text in its feedback color.

Keys:
    1-5  select an exercise
    0    clear the selection
    q    quit

Run:
    cd <project_root>
    python -m src.pipelines.live --exercise 3
    python -m src.pipelines.live --exercise "hip bridge"
    python -m src.pipelines.live --config config/live.yaml
"""

import argparse
import asyncio
import logging
import os
import sys
import textwrap
import threading
import time
from pathlib import Path
from typing import Callable, Optional

# Suppress noisy TF / MediaPipe logs before any MediaPipe import
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")
os.environ.setdefault("GLOG_minloglevel", "3")

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from src.pipelines import config as cfg
from src.pipelines.frame_cycle import FrameCycle, FrameFeedback
from src.pipelines.keypoints import pose_from_landmarks
from src.pipelines.session import ExerciseSession
from src.pose_validation.exercises import resolve_exercise
from src.pose_validation.pose import Pose
from src.utils.io_utils import load_config

logger = logging.getLogger(__name__)


def hex_to_bgr(color: str) -> tuple[int, int, int]:
    color = color.lstrip("#")
    r, g, b = (int(color[i:i + 2], 16) for i in (0, 2, 4))
    return b, g, r


class MediaPipePoseEstimator:
    """Webcam + MediaPipe PoseLandmarker as a frame-cycle pose estimator."""

    def __init__(self, capture: cv2.VideoCapture, model_path: Path):
        if not Path(model_path).exists():
            raise FileNotFoundError(
                f"Pose landmarker model not found at {model_path}. "
                "Download pose_landmarker_full.task from the MediaPipe model zoo."
            )
        options = vision.PoseLandmarkerOptions(
            base_options=python.BaseOptions(model_asset_path=str(model_path)),
            running_mode=vision.RunningMode.VIDEO,
            num_poses=1,
            min_pose_detection_confidence=cfg.MIN_POSE_DETECTION_CONFIDENCE,
            min_tracking_confidence=cfg.MIN_TRACKING_CONFIDENCE,
        )
        self.landmarker = vision.PoseLandmarker.create_from_options(options)
        self.capture = capture
        self.last_frame: Optional[np.ndarray] = None
        self._lock = threading.Lock()
        self._last_timestamp_ms = -1

    def _read_and_detect(self) -> list[Pose]:
        # A detection abandoned by a timeout may still hold the landmarker
        if not self._lock.acquire(blocking=False):
            return []
        try:
            ok, frame = self.capture.read()
            if not ok:
                logger.warning("Camera frame could not be read")
                return []
            self.last_frame = frame
            height, width = frame.shape[:2]

            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)

            # VIDEO mode requires strictly increasing timestamps
            timestamp_ms = max(int(time.monotonic() * 1000), self._last_timestamp_ms + 1)
            self._last_timestamp_ms = timestamp_ms
            result = self.landmarker.detect_for_video(image, timestamp_ms)

            return [
                pose_from_landmarks(landmarks, width, height)
                for landmarks in result.pose_landmarks
            ]
        finally:
            self._lock.release()

    async def estimate_poses(self) -> list[Pose]:
        return await asyncio.to_thread(self._read_and_detect)

    def close(self) -> None:
        self.landmarker.close()


class OpenCVRenderer:
    """Draws confident keypoints and the feedback text; handles key presses."""

    WINDOW_NAME = "Physio Coach"

    def __init__(
        self,
        estimator: MediaPipePoseEstimator,
        session: ExerciseSession,
        on_quit: Callable[[], None],
    ):
        self.estimator = estimator
        self.session = session
        self.on_quit = on_quit

    def render(self, feedback: FrameFeedback) -> None:
        frame = self.estimator.last_frame
        if frame is None:
            return
        canvas = frame.copy()

        if feedback.pose is not None:
            for kp in feedback.pose.keypoints:
                if kp.score > cfg.DRAW_SCORE_THRESHOLD:
                    cv2.circle(
                        canvas, (int(kp.x), int(kp.y)), cfg.KEYPOINT_RADIUS,
                        (255, 255, 0), thickness=-1,
                    )

        # Hershey fonts are ASCII-only; drop the status glyphs
        text = feedback.text.encode("ascii", "ignore").decode().strip()
        color = hex_to_bgr(feedback.color)
        for i, line in enumerate(textwrap.wrap(text, width=60)):
            cv2.putText(
                canvas, line, (10, 25 + 22 * i),
                cv2.FONT_HERSHEY_SIMPLEX, 0.55, color, 1, cv2.LINE_AA,
            )

        cv2.imshow(self.WINDOW_NAME, canvas)
        self._handle_key(cv2.waitKey(1) & 0xFF)

    def _handle_key(self, key: int) -> None:
        if key == ord("q"):
            self.on_quit()
        elif key == ord("0"):
            self.session.clear()
        elif ord("1") <= key <= ord("9"):
            try:
                self.session.select(key - ord("0"))
            except ValueError as exc:
                logger.warning("%s", exc)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Live physio exercise coach")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML file overriding the environment defaults")
    parser.add_argument("--exercise", type=str, default=None,
                        help="Exercise ID (1-5) or name to start with")
    parser.add_argument("--camera", type=int, default=None, help="Camera index")
    return parser.parse_args(argv)


def _resolve_settings(args: argparse.Namespace) -> dict:
    settings = {
        "camera_index": cfg.CAMERA_INDEX,
        "frame_width": cfg.FRAME_WIDTH,
        "frame_height": cfg.FRAME_HEIGHT,
        "target_fps": cfg.TARGET_FPS,
        "estimator_timeout_s": cfg.ESTIMATOR_TIMEOUT_S,
        "model_path": str(cfg.POSE_LANDMARKER_MODEL),
        "exercise": None,
    }
    if args.config:
        settings.update(load_config(args.config) or {})
    if args.camera is not None:
        settings["camera_index"] = args.camera
    if args.exercise is not None:
        settings["exercise"] = args.exercise
    return settings


async def _run(settings: dict) -> None:
    capture = cv2.VideoCapture(int(settings["camera_index"]))
    estimator = None
    try:
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, int(settings["frame_width"]))
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, int(settings["frame_height"]))
        if not capture.isOpened():
            raise RuntimeError(f"Could not open camera {settings['camera_index']}")

        session = ExerciseSession()
        if settings.get("exercise") is not None:
            session.select(resolve_exercise(settings["exercise"]).id)

        stop_event = asyncio.Event()
        estimator = MediaPipePoseEstimator(capture, Path(settings["model_path"]))
        renderer = OpenCVRenderer(estimator, session, on_quit=stop_event.set)
        cycle = FrameCycle(
            estimator=estimator,
            renderer=renderer,
            session=session,
            target_fps=float(settings["target_fps"]),
            estimator_timeout=float(settings["estimator_timeout_s"]),
        )
        await cycle.run(stop_event)
    finally:
        if estimator is not None:
            estimator.close()
        capture.release()
        cv2.destroyAllWindows()


def main(argv: Optional[list[str]] = None) -> None:
    logging.basicConfig(level=cfg.LOG_LEVEL, format=cfg.LOG_FORMAT)
    settings = _resolve_settings(_parse_args(argv))
    logger.info("Starting live coach (camera=%s)", settings["camera_index"])
    asyncio.run(_run(settings))


if __name__ == "__main__":
    main()
