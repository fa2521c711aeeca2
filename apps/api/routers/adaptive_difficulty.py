"""
Adaptive Difficulty API Router

Endpoints for:
- The adaptive difficulty dashboard
- Submitting workout feedback (triggers the automatic adjustment check)
- Manual "make it harder / easier" requests
"""
import logging

from fastapi import APIRouter, Depends

from core.auth import get_current_user_id, get_owned_plan
from core.config import settings
from core.exceptions import TrainingPlanNotFoundError
from models import TrainingPlan
from schemas import (
    AdaptiveDashboardResponse,
    ManualAdjustmentRequest,
    ManualAdjustmentResponse,
    WorkoutFeedbackCreate,
    WorkoutFeedbackSubmitted,
)
from services.adaptive_difficulty import AdaptiveDifficultyEngine, get_adaptive_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/training-plans", tags=["Adaptive Difficulty"])


@router.get("/{plan_id}/adaptive-difficulty", response_model=AdaptiveDashboardResponse)
def get_adaptive_difficulty(
    plan: TrainingPlan = Depends(get_owned_plan),
    user_id: str = Depends(get_current_user_id),
    engine: AdaptiveDifficultyEngine = Depends(get_adaptive_engine),
):
    """
    Dashboard data: current multiplier, performance score, the last 5
    adjustments, up to 3 recommendations and this week's stats.
    """
    dashboard = engine.get_adaptive_data(user_id, plan.id)
    if dashboard is None:
        raise TrainingPlanNotFoundError(plan.id)
    return dashboard.to_dict()


@router.post("/{plan_id}/workout-feedback", response_model=WorkoutFeedbackSubmitted, status_code=201)
def submit_workout_feedback(
    payload: WorkoutFeedbackCreate,
    plan: TrainingPlan = Depends(get_owned_plan),
    user_id: str = Depends(get_current_user_id),
    engine: AdaptiveDifficultyEngine = Depends(get_adaptive_engine),
):
    """
    Store feedback for a workout, then check whether the plan should be
    adjusted automatically.
    """
    data = payload.model_dump(exclude={"week_number"}, exclude_none=True)
    feedback = engine.submit_workout_feedback(user_id, plan.id, data)

    adjustment_applied = False
    if settings.AUTO_ADJUST_ON_FEEDBACK:
        adjustment_applied = engine.auto_adjust_difficulty(
            user_id, plan.id, payload.week_number or 1,
        )

    return {
        "message": "Feedback submitted successfully",
        "feedback_id": feedback.id,
        "adjustment_applied": adjustment_applied,
    }


@router.post("/{plan_id}/adjust-difficulty", response_model=ManualAdjustmentResponse)
def adjust_difficulty(
    request: ManualAdjustmentRequest,
    plan: TrainingPlan = Depends(get_owned_plan),
    user_id: str = Depends(get_current_user_id),
    engine: AdaptiveDifficultyEngine = Depends(get_adaptive_engine),
):
    """
    Rescale the rest of the plan on request and describe what changed.
    """
    variance = engine.apply_manual_adjustment(
        user_id, plan.id, request.adjustment_type, request.week_number or 1,
    )
    return {
        "message": "Difficulty adjusted successfully",
        "variance": variance.to_dict(),
    }
