"""
Workout Feedback Submission

Stores a runner's report on a scheduled workout. Feedback is immutable
once written; performance analysis only ever reads it.
"""

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from core.exceptions import RatingOutOfRangeError, TrainingPlanNotFoundError
from models import TrainingPlan, WorkoutFeedback

logger = logging.getLogger(__name__)

RATING_FIELDS = (
    "difficulty_rating",
    "effort_rating",
    "enjoyment_rating",
    "energy_level",
    "recovery_rating",
)

FEEDBACK_FIELDS = {
    "workout_date", "workout_type", "planned_distance", "actual_distance",
    "planned_duration", "actual_duration", "completed", "pace_achieved",
    "weather_conditions", "notes", *RATING_FIELDS,
}


def validate_ratings(data: Dict[str, Any]) -> None:
    """All 1-10 scales must be in range when present."""
    for name in RATING_FIELDS:
        value = data.get(name)
        if value is not None and not (1 <= value <= 10):
            raise RatingOutOfRangeError(name, value)


def submit_workout_feedback(
    db: Session,
    user_id: str,
    plan_id: int,
    data: Dict[str, Any],
) -> WorkoutFeedback:
    """
    Record feedback for a workout on a plan.

    Raises:
        TrainingPlanNotFoundError: the plan does not exist
        RatingOutOfRangeError: a rating is outside 1-10
    """
    plan = db.query(TrainingPlan).filter(TrainingPlan.id == plan_id).first()
    if not plan:
        raise TrainingPlanNotFoundError(plan_id)

    validate_ratings(data)

    feedback = WorkoutFeedback(
        user_id=user_id,
        training_plan_id=plan_id,
        **{k: v for k, v in data.items() if k in FEEDBACK_FIELDS},
    )
    db.add(feedback)
    db.flush()

    logger.info(
        f"Workout feedback stored for plan {plan_id}",
        extra={"extra_fields": {
            "plan_id": plan_id,
            "workout_date": str(feedback.workout_date),
            "completed": feedback.completed,
        }},
    )
    return feedback
