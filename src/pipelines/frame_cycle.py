"""
Frame cycle: estimate, validate, render.

One cycle per display frame:
    1. Ask the pose estimator for the bodies in the current frame
       (the only suspension point of the cycle).
    2. Pick the first pose and the session's active exercise.
    3. Classify the pose and build the feedback text + color.
    4. Hand the feedback to the renderer.

``FrameCycle.run`` is a cooperative loop with an explicit stop signal. A
tick requested while the previous one is still waiting on the estimator is
skipped rather than queued.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from src.pose_validation.exercises import Exercise
from src.pose_validation.pose import Pose
from src.pose_validation.registry import classify

from .config import (
    AFFIRMATIVE_COLOR,
    CORRECTIVE_COLOR,
    ESTIMATOR_TIMEOUT_S,
    NEUTRAL_COLOR,
    NO_EXERCISE_MESSAGE,
    NO_POSE_MESSAGE,
    TARGET_FPS,
)
from .session import ExerciseSession

logger = logging.getLogger(__name__)


class PoseEstimator(Protocol):
    """External keypoint source: returns every body found in the current frame."""

    async def estimate_poses(self) -> list[Pose]:
        ...


class FeedbackRenderer(Protocol):
    def render(self, feedback: "FrameFeedback") -> None:
        ...


@dataclass(frozen=True)
class FrameFeedback:
    """What the renderer shows for one frame."""
    text: str
    color: str
    is_valid: bool
    pose: Optional[Pose] = None


def build_feedback(poses: list[Pose], exercise: Optional[Exercise]) -> FrameFeedback:
    """Judge one frame.

    Args:
        poses: Bodies detected in the frame; only the first is judged.
        exercise: The session's active exercise, or None.

    Returns:
        FrameFeedback with neutral color when there is no pose or no
        exercise, otherwise affirmative / corrective by validity.
    """
    if not poses:
        return FrameFeedback(text=NO_POSE_MESSAGE, color=NEUTRAL_COLOR, is_valid=False)

    pose = poses[0]
    if exercise is None:
        return FrameFeedback(
            text=NO_EXERCISE_MESSAGE, color=NEUTRAL_COLOR, is_valid=False, pose=pose,
        )

    result = classify(exercise.id, pose)
    return FrameFeedback(
        text=result.message,
        color=AFFIRMATIVE_COLOR if result.is_valid else CORRECTIVE_COLOR,
        is_valid=result.is_valid,
        pose=pose,
    )


class FrameCycle:
    """Cooperative estimate-validate-render scheduler."""

    def __init__(
        self,
        estimator: PoseEstimator,
        renderer: FeedbackRenderer,
        session: ExerciseSession,
        target_fps: float = TARGET_FPS,
        estimator_timeout: Optional[float] = ESTIMATOR_TIMEOUT_S,
    ):
        self.estimator = estimator
        self.renderer = renderer
        self.session = session
        self.frame_interval = 1.0 / target_fps if target_fps > 0 else 0.0
        self.estimator_timeout = estimator_timeout

        self.frames_processed = 0
        self.skipped_frames = 0
        self._in_flight = False
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def _estimate(self) -> list[Pose]:
        try:
            if self.estimator_timeout:
                return await asyncio.wait_for(
                    self.estimator.estimate_poses(), timeout=self.estimator_timeout,
                )
            return await self.estimator.estimate_poses()
        except asyncio.TimeoutError:
            logger.warning(
                "Pose estimator exceeded %.2fs, treating frame as empty.",
                self.estimator_timeout,
            )
        except Exception:
            logger.exception("Pose estimator failed, treating frame as empty.")
        return []

    async def tick(self) -> Optional[FrameFeedback]:
        """Run one full cycle.

        Returns:
            The rendered feedback, or None if the previous cycle was still
            in flight and this frame was skipped.
        """
        if self._in_flight:
            self.skipped_frames += 1
            logger.debug("Frame skipped (previous cycle in flight)")
            return None

        self._in_flight = True
        try:
            poses = await self._estimate()
            feedback = build_feedback(poses, self.session.active)
            self.renderer.render(feedback)
            self.frames_processed += 1
            return feedback
        finally:
            self._in_flight = False

    async def run(self, stop_event: asyncio.Event) -> None:
        """Tick at the target frame rate until *stop_event* is set."""
        logger.info("Frame cycle started (frame interval %.3fs)", self.frame_interval)
        while not stop_event.is_set():
            started = time.monotonic()
            await self.tick()

            remaining = self.frame_interval - (time.monotonic() - started)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=max(remaining, 0.0))
            except asyncio.TimeoutError:
                pass
        logger.info(
            "Frame cycle stopped: %d frames processed, %d skipped",
            self.frames_processed, self.skipped_frames,
        )

    def start(self) -> asyncio.Task:
        """Schedule ``run`` on the current event loop."""
        if self._task is not None and not self._task.done():
            return self._task
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop_event))
        return self._task

    async def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
