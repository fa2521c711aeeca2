"""
Performance Analysis Service

Reduces a runner's recent workout feedback for one training plan into a
small metrics tuple:

- completion_rate: completed / total rows in the window (0-1)
- average_difficulty_rating / average_effort_rating: means over completed
  rows only, a missing rating counts as 5
- consistency_score: 1 - population variance of difficulty ratings / 10,
  floored at 0
- improvement_trend: newer-half mean effort minus older-half mean effort

With no feedback in the window the neutral defaults are returned, so new
plans are assumed to be going fine until there is data saying otherwise.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import WorkoutFeedback

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_WEEKS = 2
NEUTRAL_RATING = 5.0


@dataclass
class PerformanceMetrics:
    completion_rate: float = 1.0
    average_difficulty_rating: float = NEUTRAL_RATING
    average_effort_rating: float = NEUTRAL_RATING
    consistency_score: float = 1.0
    improvement_trend: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_variance(values: Sequence[float]) -> float:
    """Population variance (divide by n). Empty input has zero variance."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def _mean_or_neutral(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else NEUTRAL_RATING


def _rating(value: Optional[int]) -> float:
    return float(value) if value else NEUTRAL_RATING


def compute_performance_metrics(feedback: Sequence[WorkoutFeedback]) -> PerformanceMetrics:
    """
    Build metrics from feedback rows ordered newest first.

    Pure function; the query lives in analyze_performance().
    """
    if not feedback:
        return PerformanceMetrics()

    completed = [f for f in feedback if f.completed]
    completion_rate = len(completed) / len(feedback)

    difficulties = [_rating(f.difficulty_rating) for f in completed]
    efforts = [_rating(f.effort_rating) for f in completed]

    average_difficulty = _mean_or_neutral(difficulties)
    average_effort = _mean_or_neutral(efforts)

    consistency_score = max(0.0, 1 - calculate_variance(difficulties) / 10)

    # Rows are newest first: the newest floor(n/2) form the second half,
    # everything older (including the middle row for odd n) the first half.
    midpoint = len(completed) // 2
    second_half = efforts[:midpoint]
    first_half = efforts[midpoint:]
    improvement_trend = _mean_or_neutral(second_half) - _mean_or_neutral(first_half)

    return PerformanceMetrics(
        completion_rate=completion_rate,
        average_difficulty_rating=average_difficulty,
        average_effort_rating=average_effort,
        consistency_score=consistency_score,
        improvement_trend=improvement_trend,
    )


def get_recent_feedback(
    db: Session,
    user_id: str,
    plan_id: int,
    since: date,
) -> List[WorkoutFeedback]:
    """Feedback rows dated on or after `since`, newest first."""
    return (
        db.query(WorkoutFeedback)
        .filter(
            WorkoutFeedback.user_id == user_id,
            WorkoutFeedback.training_plan_id == plan_id,
            WorkoutFeedback.workout_date >= since,
        )
        .order_by(WorkoutFeedback.workout_date.desc(), WorkoutFeedback.id.desc())
        .all()
    )


def analyze_performance(
    db: Session,
    user_id: str,
    plan_id: int,
    weeks_period: int = DEFAULT_WINDOW_WEEKS,
    today: Optional[date] = None,
) -> PerformanceMetrics:
    """Analyze feedback from the last `weeks_period` weeks."""
    today = today or date.today()
    cutoff = today - timedelta(days=weeks_period * 7)

    feedback = get_recent_feedback(db, user_id, plan_id, cutoff)
    if not feedback:
        logger.debug(f"No feedback for plan {plan_id} since {cutoff}, using neutral metrics")

    return compute_performance_metrics(feedback)


def calculate_performance_score(metrics: PerformanceMetrics) -> float:
    """
    Weighted composite used for display and the adjustment audit trail.

    40% completion, 30% rating balance around 5.5, 20% consistency,
    10% trend.
    """
    return (
        metrics.completion_rate * 0.4
        + (1 - abs(metrics.average_difficulty_rating - 5.5) / 10) * 0.3
        + metrics.consistency_score * 0.2
        + max(0.0, 1 + metrics.improvement_trend / 10) * 0.1
    )


def count_weekly_workouts(
    db: Session,
    user_id: str,
    plan_id: int,
    today: Optional[date] = None,
) -> int:
    """Number of feedback rows in the trailing 7 days."""
    today = today or date.today()
    one_week_ago = today - timedelta(days=7)

    count = (
        db.query(func.count(WorkoutFeedback.id))
        .filter(
            WorkoutFeedback.user_id == user_id,
            WorkoutFeedback.training_plan_id == plan_id,
            WorkoutFeedback.workout_date >= one_week_ago,
        )
        .scalar()
    )
    return count or 0
