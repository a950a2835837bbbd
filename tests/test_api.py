"""Tests for the FastAPI backend (session selection and per-frame validation)."""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.pipelines.config import (
    AFFIRMATIVE_COLOR,
    CORRECTIVE_COLOR,
    EXERCISE_SELECTED_MESSAGE,
    NEUTRAL_COLOR,
    NO_EXERCISE_MESSAGE,
    NO_POSE_MESSAGE,
)
from src.pipelines.main import app


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        app.state.session.clear()
        yield test_client


def _kp(name: str, x: float, y: float, score: float = 0.9) -> dict:
    return {"name": name, "x": x, "y": y, "score": score}


# Seated, left leg straight (180 deg), right leg bent
KNEE_EXTENSION_POSE = {
    "keypoints": [
        _kp("left_hip", 300, 300), _kp("left_knee", 400, 300), _kp("left_ankle", 500, 300),
        _kp("right_hip", 200, 300), _kp("right_knee", 200, 400), _kp("right_ankle", 300, 400),
    ]
}


class TestCatalogAndSession:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_list_exercises(self, client):
        body = client.get("/api/exercises").json()
        assert [ex["name"] for ex in body] == [
            "Neck Rotation", "Shoulder Flexion", "Knee Extension", "Hip Bridge", "Ankle Pumps",
        ]

    def test_select_and_read_session(self, client):
        response = client.post("/api/session/exercise", json={"exercise_id": 3})
        assert response.status_code == 200
        assert response.json()["exercise"]["name"] == "Knee Extension"
        assert response.json()["message"] == EXERCISE_SELECTED_MESSAGE

        assert client.get("/api/session").json()["exercise"]["id"] == 3

    def test_select_unknown_exercise(self, client):
        response = client.post("/api/session/exercise", json={"exercise_id": 42})
        assert response.status_code == 404
        assert response.json()["error_code"] == "UNKNOWN_EXERCISE"

    def test_clear_session(self, client):
        client.post("/api/session/exercise", json={"exercise_id": 1})
        response = client.delete("/api/session/exercise")
        assert response.json()["exercise"] is None
        assert client.get("/api/session").json()["exercise"] is None


class TestFrameValidation:

    def test_frame_without_selection(self, client):
        body = client.post("/api/frame", json={"poses": [KNEE_EXTENSION_POSE]}).json()
        assert body == {"message": NO_EXERCISE_MESSAGE, "color": NEUTRAL_COLOR, "isValid": False}

    def test_frame_without_pose(self, client):
        client.post("/api/session/exercise", json={"exercise_id": 3})
        body = client.post("/api/frame", json={"poses": []}).json()
        assert body["message"] == NO_POSE_MESSAGE
        assert body["color"] == NEUTRAL_COLOR

    def test_valid_frame(self, client):
        client.post("/api/session/exercise", json={"exercise_id": 3})
        body = client.post("/api/frame", json={"poses": [KNEE_EXTENSION_POSE]}).json()
        assert body["isValid"] is True
        assert body["color"] == AFFIRMATIVE_COLOR
        assert "Excellent straight leg!" in body["message"]

    def test_invalid_frame(self, client):
        client.post("/api/session/exercise", json={"exercise_id": 2})
        body = client.post("/api/frame", json={"poses": [KNEE_EXTENSION_POSE]}).json()
        assert body["isValid"] is False
        assert body["color"] == CORRECTIVE_COLOR
        assert body["message"] == "⚠️ Please ensure your shoulders are visible in the camera"

    def test_stateless_validate(self, client):
        response = client.post(
            "/api/validate", json={"exercise_id": 3, "pose": KNEE_EXTENSION_POSE},
        )
        assert response.status_code == 200
        assert response.json()["isValid"] is True

    def test_stateless_validate_unknown_exercise(self, client):
        response = client.post(
            "/api/validate", json={"exercise_id": 99, "pose": KNEE_EXTENSION_POSE},
        )
        assert response.json() == {
            "isValid": False,
            "message": "Exercise validation not implemented",
        }

    def test_unknown_joint_name_rejected(self, client):
        pose = {"keypoints": [_kp("left_pinky", 1, 2)]}
        response = client.post("/api/validate", json={"exercise_id": 5, "pose": pose})
        assert response.status_code == 422

    def test_score_out_of_range_rejected(self, client):
        pose = {"keypoints": [_kp("left_ankle", 1, 2, score=1.5)]}
        response = client.post("/api/validate", json={"exercise_id": 5, "pose": pose})
        assert response.status_code == 422

    @pytest.mark.parametrize("bad_value", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_coordinate_rejected(self, client, bad_value):
        # Python's json module accepts these non-standard literals
        body = (
            '{"exercise_id": 1, "pose": {"keypoints": ['
            f'{{"name": "nose", "x": {bad_value}, "y": 120, "score": 0.9}},'
            '{"name": "left_shoulder", "x": 420, "y": 200, "score": 0.9},'
            '{"name": "right_shoulder", "x": 220, "y": 200, "score": 0.9}]}}'
        )
        response = client.post(
            "/api/validate", content=body, headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_REQUEST"
        assert "pose.keypoints.0.x" in response.json()["message"]

    def test_non_finite_coordinate_rejected_in_frame(self, client):
        client.post("/api/session/exercise", json={"exercise_id": 1})
        body = '{"poses": [{"keypoints": [{"name": "nose", "x": NaN, "y": 1, "score": 0.9}]}]}'
        response = client.post(
            "/api/frame", content=body, headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422
