"""
Frame pipeline and FastAPI backend for the physio coach.

Per frame:
    Stage 1: Pose estimation (external: browser client or MediaPipe adapter)
    Stage 2: Session lookup (active exercise)
    Stage 3: Rule-based pose validation (src.pose_validation)
    Stage 4: Feedback rendering (text + color)
"""
