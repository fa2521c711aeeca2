"""
Training Plans API Router

Read-only endpoints for:
- A plan with its weekly schedule
- The plan's adjustment history
"""

from fastapi import APIRouter, Depends
from typing import List

from core.auth import get_owned_plan
from models import TrainingPlan
from schemas import TrainingAdjustmentResponse, TrainingPlanResponse
from services.adaptive_difficulty import AdaptiveDifficultyEngine, get_adaptive_engine

router = APIRouter(prefix="/v1/training-plans", tags=["Training Plans"])


@router.get("/{plan_id}", response_model=TrainingPlanResponse)
def get_training_plan(plan: TrainingPlan = Depends(get_owned_plan)):
    """Get a training plan, including its current weekly schedule."""
    return plan


@router.get("/{plan_id}/adjustments", response_model=List[TrainingAdjustmentResponse])
def list_plan_adjustments(
    plan: TrainingPlan = Depends(get_owned_plan),
    engine: AdaptiveDifficultyEngine = Depends(get_adaptive_engine),
):
    """Full adjustment history for a plan, newest first."""
    return engine.list_adjustments(plan.id)
