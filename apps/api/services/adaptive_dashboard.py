"""
Adaptive Difficulty Dashboard

Read model for the training-plan dashboard: current multiplier,
performance score, recent adjustments, top recommendations and weekly
stats. Pure read; nothing here writes.

Label helpers are lookup tables with fallbacks, so an unknown code from
an older row renders as "Adjusted" / "System adjustment" instead of
failing the whole dashboard.
"""

import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from models import TrainingAdjustment, TrainingPlan
from services.adjustment_audit import recent_adjustments
from services.adjustment_recommendations import AdjustmentRecommendation, generate_recommendations
from services.performance_analysis import (
    analyze_performance,
    calculate_performance_score,
    count_weekly_workouts,
)
from services.schedule_codec import round_half_up

logger = logging.getLogger(__name__)

RECENT_ADJUSTMENT_LIMIT = 5
RECOMMENDATION_LIMIT = 3

ADJUSTMENT_TYPE_LABELS = {
    "difficulty_increase": "Made Harder",
    "difficulty_decrease": "Made Easier",
    "volume_increase": "Increased Volume",
    "volume_decrease": "Reduced Volume",
    "pace_adjustment": "Pace Adjusted",
    "schedule_change": "Schedule Changed",
}

ADJUSTMENT_REASON_LABELS = {
    "user_requested_increase": "You requested to make it harder",
    "user_requested_decrease": "You requested to make it easier",
    "manual_adjustment": "Manual adjustment",
    "performance_based": "Based on your performance",
    "completion_rate_low": "To help with completion",
    "difficulty_too_high": "Training was too challenging",
    "difficulty_too_low": "Training was too easy",
    # Recommendation rule codes
    "high_completion_low_difficulty": "Workouts felt too easy",
    "low_completion_high_difficulty": "Workouts felt too hard to complete",
    "improving_fitness_trend": "Your fitness is improving",
    "inconsistent_performance": "Your performance has been inconsistent",
    "consistently_high_effort": "Your effort has been consistently very high",
}


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_relative_date(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    """'Today', 'Yesterday', 'N days ago', or '19 Oct 2026' after a week."""
    if value is None:
        return "Unknown"
    now = _as_utc(now or datetime.now(timezone.utc))
    value = _as_utc(value)

    diff_days = (now - value).days
    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    return f"{value.day} {value.strftime('%b')} {value.year}"


def format_adjustment_type(adjustment_type: Optional[str]) -> str:
    return ADJUSTMENT_TYPE_LABELS.get(adjustment_type, "Adjusted")


def format_adjustment_reason(reason: Optional[str]) -> str:
    return ADJUSTMENT_REASON_LABELS.get(reason, "System adjustment")


def get_adjustment_description(adjustment_type: Optional[str], multiplier: float) -> str:
    change = "increased" if multiplier > 1 else "decreased"
    percentage = int(round_half_up(abs((multiplier - 1) * 100)))

    if adjustment_type == "difficulty_increase":
        return f"Training intensity increased by {percentage}% - distances and paces are more challenging"
    if adjustment_type == "difficulty_decrease":
        return f"Training intensity reduced by {percentage}% - distances and paces are more manageable"
    return f"Training plan {change} by {percentage}%"


def parse_multiplier(value: Optional[str]) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Unreadable difficulty multiplier {value!r}, using 1.0")
        return 1.0


@dataclass
class AdjustmentView:
    date: str
    type: str
    reason: str
    multiplier: float
    description: str
    automatic: bool


@dataclass
class WeeklyStats:
    completion_rate: float
    average_difficulty: float
    average_effort: float
    total_workouts: int


@dataclass
class AdaptiveDashboard:
    current_difficulty: float
    performance_score: float
    recent_adjustments: List[AdjustmentView] = field(default_factory=list)
    recommendations: List[AdjustmentRecommendation] = field(default_factory=list)
    weekly_stats: Optional[WeeklyStats] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["recommendations"] = [r.to_dict() for r in self.recommendations]
        return data


def to_adjustment_view(adjustment: TrainingAdjustment, now: Optional[datetime] = None) -> AdjustmentView:
    multiplier = parse_multiplier(adjustment.difficulty_multiplier)
    return AdjustmentView(
        date=format_relative_date(adjustment.adjustment_date, now),
        type=format_adjustment_type(adjustment.adjustment_type),
        reason=format_adjustment_reason(adjustment.reason),
        multiplier=multiplier,
        description=get_adjustment_description(adjustment.adjustment_type, multiplier),
        automatic=bool(adjustment.automatic_adjustment),
    )


def get_adaptive_data(
    db: Session,
    user_id: str,
    plan_id: int,
    now: Optional[datetime] = None,
) -> Optional[AdaptiveDashboard]:
    """Assemble the dashboard, or None if the plan does not exist."""
    now = now or datetime.now(timezone.utc)

    plan = db.query(TrainingPlan).filter(TrainingPlan.id == plan_id).first()
    if not plan:
        return None

    metrics = analyze_performance(db, user_id, plan_id, today=now.date())
    recommendations = generate_recommendations(metrics)
    adjustments = recent_adjustments(db, plan_id, limit=RECENT_ADJUSTMENT_LIMIT)

    current_difficulty = (
        parse_multiplier(adjustments[0].difficulty_multiplier) if adjustments else 1.0
    )

    return AdaptiveDashboard(
        current_difficulty=current_difficulty,
        performance_score=calculate_performance_score(metrics),
        recent_adjustments=[to_adjustment_view(a, now) for a in adjustments],
        # Rule-table order, not sorted by confidence
        recommendations=recommendations[:RECOMMENDATION_LIMIT],
        weekly_stats=WeeklyStats(
            completion_rate=metrics.completion_rate,
            average_difficulty=metrics.average_difficulty_rating,
            average_effort=metrics.average_effort_rating,
            total_workouts=count_weekly_workouts(db, user_id, plan_id, today=now.date()),
        ),
    )
