"""
FastAPI entry point for the physio coach backend.

The browser client runs the pose estimator itself and posts the detected
keypoints once per frame; the backend judges them against the active
exercise and returns the coaching text and color.

Endpoints:
    GET    /health
    GET    /api/exercises
    GET    /api/session
    POST   /api/session/exercise     select the active exercise
    DELETE /api/session/exercise     clear the selection
    POST   /api/frame                judge one frame for the active session
    POST   /api/validate             judge a pose for an explicit exercise id

Run:
    cd <project_root>
    uvicorn src.pipelines.main:app --host 0.0.0.0 --port 8000 --reload
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``src.*`` imports work when running
# with ``uvicorn src.pipelines.main:app`` from the project root.
# ---------------------------------------------------------------------------
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from src.pipelines.config import EXERCISE_SELECTED_MESSAGE, LOG_FORMAT, LOG_LEVEL
from src.pipelines.frame_cycle import build_feedback
from src.pipelines.session import ExerciseSession
from src.pose_validation.exercises import Exercise, get_all_exercises
from src.pose_validation.pose import Pose, ValidationResult
from src.pose_validation.registry import classify

logger = logging.getLogger("physio_coach")
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


# ============================================================================
# Pydantic request / response models
# ============================================================================

class SelectExerciseRequest(BaseModel):
    exercise_id: int = Field(..., description="Exercise ID (1-5)")


class SessionResponse(BaseModel):
    exercise: Optional[Exercise] = None
    message: str


class FrameRequest(BaseModel):
    poses: list[Pose] = Field(
        default_factory=list,
        description="Bodies detected in the frame; only the first is judged",
    )


class FrameResponse(BaseModel):
    message: str
    color: str
    is_valid: bool = Field(alias="isValid")

    class Config:
        populate_by_name = True


class ValidateRequest(BaseModel):
    exercise_id: int
    pose: Pose


class ErrorResponse(BaseModel):
    error_code: str
    message: str


# ============================================================================
# App lifecycle: one exercise session per server
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting physio coach backend …")
    app.state.session = ExerciseSession()
    yield
    logger.info("Shutting down.")


app = FastAPI(
    title="Physio Coach API",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS: the camera page is served separately from the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _session() -> ExerciseSession:
    return app.state.session


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Echoing the raw input could carry NaN/inf, which JSON cannot encode
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, details)
    return JSONResponse(
        status_code=422,
        content={"error_code": "INVALID_REQUEST", "message": details},
    )


# ============================================================================
# Health-check & catalog
# ============================================================================

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/exercises", response_model=list[Exercise])
async def list_exercises():
    return get_all_exercises()


# ============================================================================
# Session selection
# ============================================================================

@app.get("/api/session", response_model=SessionResponse)
async def get_session():
    exercise = _session().active
    if exercise is None:
        return SessionResponse(exercise=None, message="Please select an exercise first")
    return SessionResponse(exercise=exercise, message=EXERCISE_SELECTED_MESSAGE)


@app.post(
    "/api/session/exercise",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse}},
)
async def select_exercise(request: SelectExerciseRequest):
    try:
        exercise = _session().select(request.exercise_id)
    except ValueError as exc:
        return JSONResponse(
            status_code=404,
            content={"error_code": "UNKNOWN_EXERCISE", "message": str(exc)},
        )
    return SessionResponse(exercise=exercise, message=EXERCISE_SELECTED_MESSAGE)


@app.delete("/api/session/exercise", response_model=SessionResponse)
async def clear_exercise():
    _session().clear()
    return SessionResponse(exercise=None, message="Please select an exercise first")


# ============================================================================
# Per-frame validation
# ============================================================================

@app.post("/api/frame", response_model=FrameResponse)
async def validate_frame(request: FrameRequest):
    """Judge one frame against the active exercise (the frame cycle's step 2-3)."""
    feedback = build_feedback(request.poses, _session().active)
    return FrameResponse(
        message=feedback.text, color=feedback.color, is_valid=feedback.is_valid,
    )


@app.post("/api/validate", response_model=ValidationResult)
async def validate_pose(request: ValidateRequest):
    """Stateless validation; unknown exercise ids yield the fallback result."""
    return classify(request.exercise_id, request.pose)
