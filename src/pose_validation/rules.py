"""
Declarative exercise rules and the generic evaluator.

Every exercise follows the same shape:

    1. Confidence gate   - required joints must pass the score threshold,
                           otherwise the user is asked to reposition.
    2. Feature extraction - derived geometric quantities (dict of features).
    3. Validity           - a predicate over the features.
    4. Message rendering  - the valid or invalid branch is rendered from
                           message sections (coaching ladders and checks).

A branch is a sequence of sections. A section is one of:

    str     Literal text; formatted with the features (``{side}`` etc.).
    Check   Predicate over the features; renders ``then`` or ``otherwise``.
    Band    Check that the named feature is strictly above a threshold.
    Ladder  Ordered checks/bands, first match wins, else ``default``.

``then``/``otherwise``/``default`` may themselves be a section or a
sequence of sections.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

from .geometry import is_confident, lookup
from .pose import Joint, Pose, ValidationResult

logger = logging.getLogger(__name__)

Features = dict[str, Any]
Predicate = Callable[[Features], bool]


@dataclass(frozen=True)
class Check:
    """Render ``then`` when the predicate holds, else ``otherwise``."""
    when: Predicate
    then: "Message"
    otherwise: "Message" = ""

    def matches(self, features: Features) -> bool:
        return bool(self.when(features))


@dataclass(frozen=True)
class Band:
    """One rung of a coaching ladder: ``features[feature] > above``."""
    feature: str
    above: float
    then: "Message"
    otherwise: "Message" = ""

    def matches(self, features: Features) -> bool:
        value = features.get(self.feature)
        return value is not None and value > self.above


@dataclass(frozen=True)
class Ladder:
    """Ordered rungs; the first matching rung is rendered."""
    rungs: tuple[Union[Check, Band], ...]
    default: "Message" = ""


Section = Union[str, Check, Band, Ladder]
Message = Union[Section, Sequence[Section]]


@dataclass(frozen=True)
class ExerciseRule:
    """Everything needed to judge one exercise from a single pose."""
    exercise_id: int
    name: str
    required_joints: tuple[Joint, ...]
    reposition_message: str
    extract: Callable[[Pose], Optional[Features]]
    is_valid: Predicate
    valid_message: Message
    invalid_message: Message
    invalid_fallback: str = ""


def render(message: Message, features: Features) -> str:
    """Render a message tree against the extracted features."""
    if isinstance(message, str):
        return message.format(**features) if message else ""

    if isinstance(message, (Check, Band)):
        chosen = message.then if message.matches(features) else message.otherwise
        return render(chosen, features)

    if isinstance(message, Ladder):
        for rung in message.rungs:
            if rung.matches(features):
                return render(rung.then, features)
        return render(message.default, features)

    return "".join(render(section, features) for section in message)


def passes_gate(pose: Pose, joints: Sequence[Joint]) -> bool:
    return all(is_confident(lookup(pose, joint)) for joint in joints)


def evaluate(rule: ExerciseRule, pose: Pose) -> ValidationResult:
    """Judge *pose* against *rule*.

    Never raises for missing or low-confidence joints: those route to the
    rule's reposition message.
    """
    if not passes_gate(pose, rule.required_joints):
        return ValidationResult.invalid(rule.reposition_message)

    features = rule.extract(pose)
    if features is None:
        # Joints present but geometrically unusable (e.g. zero shoulder width)
        return ValidationResult.invalid(rule.reposition_message)

    if rule.is_valid(features):
        return ValidationResult.valid(render(rule.valid_message, features))

    message = render(rule.invalid_message, features) or rule.invalid_fallback
    logger.debug("%s: invalid pose (%s)", rule.name, features)
    return ValidationResult.invalid(message)
