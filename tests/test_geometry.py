"""Tests for keypoint lookup, the confidence gate and joint angles."""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.pose_validation.geometry import (
    angle,
    is_confident,
    lookup,
    midpoint_y,
    round_half_up,
)
from src.pose_validation.pose import Joint, Keypoint, Pose


def _kp(x: float, y: float, score: float = 0.9, name: Joint = Joint.NOSE) -> Keypoint:
    return Keypoint(name=name, x=x, y=y, score=score)


# ============================================================================
# Test: Lookup & confidence gate
# ============================================================================

class TestLookup:

    def test_lookup_present(self):
        pose = Pose(keypoints=[
            _kp(10, 20, name=Joint.NOSE),
            _kp(30, 40, name=Joint.LEFT_KNEE),
        ])
        kp = lookup(pose, Joint.LEFT_KNEE)
        assert kp is not None
        assert (kp.x, kp.y) == (30, 40)

    def test_lookup_absent(self):
        pose = Pose(keypoints=[_kp(10, 20, name=Joint.NOSE)])
        assert lookup(pose, Joint.RIGHT_ANKLE) is None

    def test_lookup_returns_first_match(self):
        pose = Pose(keypoints=[
            _kp(1, 1, name=Joint.NOSE),
            _kp(2, 2, name=Joint.NOSE),
        ])
        assert lookup(pose, Joint.NOSE).x == 1

    def test_lookup_accepts_string_names(self):
        pose = Pose(keypoints=[{"name": "left_hip", "x": 5, "y": 6, "score": 0.7}])
        assert lookup(pose, Joint.LEFT_HIP).y == 6

    def test_confidence_gate_boundary(self):
        assert is_confident(_kp(0, 0, score=0.4))
        assert not is_confident(_kp(0, 0, score=0.39))
        assert not is_confident(None)


# ============================================================================
# Test: Angles
# ============================================================================

class TestAngle:

    def test_straight_line_is_180(self):
        assert angle(_kp(100, 100), _kp(200, 100), _kp(300, 100)) == pytest.approx(180.0)

    def test_right_angle(self):
        assert angle(_kp(100, 0), _kp(100, 100), _kp(200, 100)) == pytest.approx(90.0)

    def test_angle_is_symmetric_in_outer_points(self):
        a, b, c = _kp(10, 80), _kp(50, 50), _kp(120, 70)
        assert angle(a, b, c) == pytest.approx(angle(c, b, a))

    def test_raw_difference_above_180_is_reflected(self):
        # Rays at -170 and +170 degrees: raw difference 340 -> 20
        p1 = _kp(100 * math.cos(math.radians(-170)), 100 * math.sin(math.radians(-170)))
        p3 = _kp(100 * math.cos(math.radians(170)), 100 * math.sin(math.radians(170)))
        assert angle(p1, _kp(0, 0), p3) == pytest.approx(20.0)

    @pytest.mark.parametrize("low_idx", [0, 1, 2])
    def test_low_confidence_returns_none(self, low_idx):
        points = [_kp(0, 0), _kp(50, 50), _kp(100, 0)]
        points[low_idx] = _kp(points[low_idx].x, points[low_idx].y, score=0.3)
        assert angle(*points) is None

    @pytest.mark.parametrize("missing_idx", [0, 1, 2])
    def test_missing_point_returns_none(self, missing_idx):
        points = [_kp(0, 0), _kp(50, 50), _kp(100, 0)]
        points[missing_idx] = None
        assert angle(*points) is None

    def test_random_triples_in_range(self):
        rng = np.random.RandomState(0)
        for _ in range(200):
            xs, ys = rng.uniform(0, 640, 3), rng.uniform(0, 480, 3)
            result = angle(*[_kp(x, y) for x, y in zip(xs, ys)])
            assert result is not None
            assert 0.0 <= result <= 180.0


class TestHelpers:

    def test_midpoint_y(self):
        assert midpoint_y(_kp(0, 100), _kp(0, 300)) == 200

    @pytest.mark.parametrize("value, expected", [
        (2.5, 3), (44.5, 45), (44.49, 44), (0.0, 0), (-0.5, 0),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected
