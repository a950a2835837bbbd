"""
Exercise catalog.

Reference data for the five supported physical-therapy exercises: the
identifiers the classifier registry dispatches on, plus the display name,
instructions and illustration shown to the user.
"""

from typing import Optional, Union

from pydantic import BaseModel


class Exercise(BaseModel):
    id: int
    name: str
    description: str
    image: str

    class Config:
        frozen = True


EXERCISES: dict[int, Exercise] = {
    1: Exercise(
        id=1,
        name="Neck Rotation",
        image="images/neck-rotation.png",
        description="Gently rotate your neck left and right to improve cervical mobility.",
    ),
    2: Exercise(
        id=2,
        name="Shoulder Flexion",
        image="images/shoulder-flexion.png",
        description="Raise your arm straight forward toward the ceiling. Keep your back straight.",
    ),
    3: Exercise(
        id=3,
        name="Knee Extension",
        image="images/knee-extension.png",
        description="Sit upright and extend your knee fully. Hold for 1–2 seconds and relax.",
    ),
    4: Exercise(
        id=4,
        name="Hip Bridge",
        image="images/hip-bridge.png",
        description="Lift your hips upward while lying on your back. Squeeze your glutes.",
    ),
    5: Exercise(
        id=5,
        name="Ankle Pumps",
        image="images/ankle-pump.png",
        description="Move your foot up and down to activate ankle mobility and blood circulation.",
    ),
}

# Name to ID mapping for lookup by name
EXERCISE_NAME_TO_ID: dict[str, int] = {
    ex.name.lower(): id_ for id_, ex in EXERCISES.items()
}


def get_exercise(exercise_id: Optional[int] = None,
                 exercise_name: Optional[str] = None) -> Exercise:
    """
    Get an exercise by ID or name.

    Args:
        exercise_id: Exercise ID (1-5)
        exercise_name: Exercise name (case-insensitive)

    Returns:
        The matching Exercise

    Raises:
        ValueError: If exercise not found
    """
    if exercise_id is not None:
        if exercise_id in EXERCISES:
            return EXERCISES[exercise_id]
        raise ValueError(
            f"Exercise ID {exercise_id} not found. Valid IDs: {sorted(EXERCISES)}"
        )

    if exercise_name is not None:
        name_lower = exercise_name.strip().lower()
        if name_lower in EXERCISE_NAME_TO_ID:
            return EXERCISES[EXERCISE_NAME_TO_ID[name_lower]]
        raise ValueError(f"Exercise '{exercise_name}' not found")

    raise ValueError("Must provide either exercise_id or exercise_name")


def resolve_exercise(value: Union[int, str]) -> Exercise:
    """Look up an exercise from a CLI/config value: an ID (``3``, ``"3"``) or a name."""
    if isinstance(value, int) or str(value).strip().isdigit():
        return get_exercise(exercise_id=int(value))
    return get_exercise(exercise_name=str(value))


def get_all_exercises() -> list[Exercise]:
    """Get all exercises ordered by ID."""
    return [EXERCISES[id_] for id_ in sorted(EXERCISES)]
