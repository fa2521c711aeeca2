"""
Adaptive Difficulty Engine

Per-request entry point over the analysis, recommendation, adjustment
and dashboard services. Holds only a session and a clock; build one per
request (see get_adaptive_engine) rather than sharing an instance.

Flow:
    dashboard -> analyze_performance -> generate_recommendations
    feedback / runner request -> auto_adjust_difficulty / apply_manual_adjustment
    -> schedule + audit log -> read back by the dashboard
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from models import TrainingAdjustment, WorkoutFeedback
from services import adaptive_dashboard, adjustment_audit, difficulty_adjuster, workout_feedback
from services.adjustment_recommendations import AdjustmentRecommendation, generate_recommendations
from services.performance_analysis import DEFAULT_WINDOW_WEEKS, PerformanceMetrics, analyze_performance


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AdaptiveDifficultyEngine:
    """Adaptive difficulty operations bound to one database session."""

    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.clock = clock or _utcnow

    def analyze_performance(
        self, user_id: str, plan_id: int, weeks_period: int = DEFAULT_WINDOW_WEEKS,
    ) -> PerformanceMetrics:
        return analyze_performance(
            self.db, user_id, plan_id, weeks_period, today=self.clock().date(),
        )

    def generate_recommendations(self, metrics: PerformanceMetrics) -> List[AdjustmentRecommendation]:
        return generate_recommendations(metrics)

    def auto_adjust_difficulty(self, user_id: str, plan_id: int, current_week: int) -> bool:
        return difficulty_adjuster.auto_adjust_difficulty(
            self.db, user_id, plan_id, current_week, now=self.clock(),
        )

    def apply_manual_adjustment(
        self, user_id: str, plan_id: int, adjustment_type: str, week_number: int,
    ) -> difficulty_adjuster.SessionVarianceSummary:
        return difficulty_adjuster.apply_manual_adjustment(
            self.db, user_id, plan_id, adjustment_type, week_number, now=self.clock(),
        )

    def get_adaptive_data(
        self, user_id: str, plan_id: int,
    ) -> Optional[adaptive_dashboard.AdaptiveDashboard]:
        return adaptive_dashboard.get_adaptive_data(self.db, user_id, plan_id, now=self.clock())

    def submit_workout_feedback(
        self, user_id: str, plan_id: int, data: Dict[str, Any],
    ) -> WorkoutFeedback:
        return workout_feedback.submit_workout_feedback(self.db, user_id, plan_id, data)

    def list_adjustments(self, plan_id: int) -> List[TrainingAdjustment]:
        return adjustment_audit.recent_adjustments(self.db, plan_id)


def get_adaptive_engine(db: Session = Depends(get_db)) -> AdaptiveDifficultyEngine:
    """FastAPI dependency: a fresh engine per request."""
    return AdaptiveDifficultyEngine(db)
