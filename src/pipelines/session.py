"""
Exercise session state.

The single "active exercise" slot, written by a user action and read once
per frame. Access is serialized with a lock so the slot can be shared
between the API worker threads and the frame cycle.
"""

import logging
import threading
from typing import Optional

from src.pose_validation.exercises import Exercise, get_exercise

logger = logging.getLogger(__name__)


class ExerciseSession:
    """Holds the currently selected exercise (a scalar, never a history)."""

    def __init__(self, exercise: Optional[Exercise] = None):
        self._lock = threading.Lock()
        self._active = exercise

    @property
    def active(self) -> Optional[Exercise]:
        with self._lock:
            return self._active

    def select(self, exercise_id: int) -> Exercise:
        """Make *exercise_id* the active exercise.

        Raises:
            ValueError: If the id is not in the catalog.
        """
        exercise = get_exercise(exercise_id=exercise_id)
        with self._lock:
            self._active = exercise
        logger.info("Active exercise: %s (id=%d)", exercise.name, exercise.id)
        return exercise

    def clear(self) -> None:
        with self._lock:
            self._active = None
        logger.info("Active exercise cleared")
