"""
Difficulty Adjustment Service

Applies difficulty changes to a training plan.

Automatic path (auto_adjust_difficulty):
    1. Analyze recent feedback and run the recommendation rules
    2. Keep recommendations with confidence >= 80
    3. Skip if the plan was adjusted in the last 7 days
    4. Take the first qualifying recommendation (rule order), derive a
       bounded multiplier and log it

    Automatic adjustments are advisory: they are logged but do not
    rewrite the weekly schedule.

Manual path (apply_manual_adjustment):
    Scales every distance session from the plan's current week to its
    last week by a fixed multiplier (1.15 harder / 0.85 easier), rewrites
    the schedule in one update, logs the adjustment and returns a
    runner-facing summary of what changed.

Pace moves with distance: harder means more distance at a faster pace
(seconds x 1/multiplier), easier means less distance at a slower pace
(seconds x multiplier).
"""

import copy
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from core.exceptions import TrainingPlanNotFoundError
from models import TrainingPlan
from services.adjustment_audit import has_recent_adjustment, log_adjustment
from services.adjustment_recommendations import AdjustmentType, generate_recommendations
from services.performance_analysis import (
    PerformanceMetrics,
    analyze_performance,
    calculate_performance_score,
)
from services.schedule_codec import (
    DAYS_OF_WEEK,
    PlannedSession,
    format_distance,
    format_pace,
    round_half_up,
    week_key,
)

logger = logging.getLogger(__name__)

AUTO_ADJUST_MIN_CONFIDENCE = 80
AUTO_ADJUST_COOLDOWN = timedelta(days=7)

MANUAL_MULTIPLIERS = {
    AdjustmentType.DIFFICULTY_INCREASE.value: 1.15,
    AdjustmentType.DIFFICULTY_DECREASE.value: 0.85,
}
MANUAL_REASONS = {
    AdjustmentType.DIFFICULTY_INCREASE.value: "user_requested_increase",
    AdjustmentType.DIFFICULTY_DECREASE.value: "user_requested_decrease",
}
MANUAL_PERFORMANCE_SCORE = 1.0  # no metrics are computed for a manual request

MAX_SAMPLE_CHANGES = 8


# ============ Multipliers ============

def calculate_auto_multiplier(adjustment_type: AdjustmentType, metrics: PerformanceMetrics) -> float:
    """Bounded multiplier for an automatic adjustment."""
    if adjustment_type == AdjustmentType.DIFFICULTY_INCREASE:
        return min(1.2, 1.0 + 0.1 * (1 - metrics.average_difficulty_rating / 10))
    if adjustment_type == AdjustmentType.DIFFICULTY_DECREASE:
        return max(0.8, 1.0 - 0.1 * (metrics.average_difficulty_rating / 10))
    if adjustment_type == AdjustmentType.VOLUME_INCREASE:
        return min(1.15, 1.0 + 0.05 * metrics.improvement_trend)
    if adjustment_type == AdjustmentType.VOLUME_DECREASE:
        return max(0.85, 1.0 - 0.1 * (1 - metrics.completion_rate))
    return 1.0


def adjust_pace(pace_seconds: int, multiplier: float) -> int:
    """Faster (fewer s/km) when harder, slower when easier."""
    factor = 1 / multiplier if multiplier > 1 else multiplier
    return int(round_half_up(pace_seconds * factor))


# ============ Automatic ============

def auto_adjust_difficulty(
    db: Session,
    user_id: str,
    plan_id: int,
    current_week: int,
    now: Optional[datetime] = None,
) -> bool:
    """
    Log an automatic adjustment if the metrics call for one.

    Returns:
        True if an adjustment was recorded, False otherwise
    """
    now = now or datetime.now(timezone.utc)

    metrics = analyze_performance(db, user_id, plan_id, today=now.date())
    candidates = [
        r for r in generate_recommendations(metrics)
        if r.confidence >= AUTO_ADJUST_MIN_CONFIDENCE
    ]
    if not candidates:
        logger.debug(f"Plan {plan_id}: no high-confidence recommendation")
        return False

    plan = db.query(TrainingPlan).filter(TrainingPlan.id == plan_id).first()
    if not plan:
        return False

    # Read-then-write; two concurrent calls can both pass this check.
    if has_recent_adjustment(db, plan_id, now - AUTO_ADJUST_COOLDOWN):
        logger.debug(f"Plan {plan_id}: adjusted within cooldown, skipping")
        return False

    top = candidates[0]
    multiplier = calculate_auto_multiplier(top.type, metrics)
    performance_score = calculate_performance_score(metrics)

    log_adjustment(
        db,
        user_id=user_id,
        plan_id=plan_id,
        adjustment_type=top.type.value,
        reason=top.reason,
        multiplier=multiplier,
        performance_score=performance_score,
        automatic=True,
        week_number=current_week,
        notes=f"Auto-adjustment: {top.suggestion}",
        adjustment_date=now,
    )
    db.flush()

    logger.info(
        f"Auto-adjusted plan {plan_id}: {top.type.value} x{multiplier:.2f}",
        extra={"extra_fields": {
            "plan_id": plan_id,
            "adjustment_type": top.type.value,
            "reason": top.reason,
            "multiplier": round(multiplier, 2),
        }},
    )
    return True


# ============ Manual ============

@dataclass
class SessionChange:
    """Before/after for one rescaled session."""
    week: int
    day: str
    session_type: Optional[str]
    original_distance_km: float
    new_distance_km: float
    original_pace_seconds: int
    new_pace_seconds: int
    pace_direction: str  # "Faster" / "Easier"

    @property
    def distance_change_km(self) -> float:
        return self.new_distance_km - self.original_distance_km

    @property
    def impact(self) -> str:
        change = self.distance_change_km
        if change > 0:
            return f"+{change:.1f}km longer"
        return f"{abs(change):.1f}km shorter"


@dataclass
class ChangeSample:
    session: str
    distance_change: str
    pace_change: str
    impact: str


@dataclass
class VarianceTotals:
    total_sessions: int
    average_change: str
    next_steps: str


@dataclass
class SessionVarianceSummary:
    title: str
    description: str
    sessions_modified: int
    weeks_affected: int
    changes: List[ChangeSample] = field(default_factory=list)
    summary: Optional[VarianceTotals] = None

    def to_dict(self) -> dict:
        return asdict(self)


def rescale_schedule(
    weekly_schedule: dict,
    first_week: int,
    last_week: int,
    multiplier: float,
    pace_direction: str,
) -> tuple:
    """
    Rescale distance sessions in weeks first_week..last_week.

    Returns (new_schedule, changes). The input is not mutated; sessions
    without a positive distance are left exactly as stored.
    """
    schedule = copy.deepcopy(weekly_schedule or {})
    changes: List[SessionChange] = []

    for week in range(first_week, last_week + 1):
        key = week_key(schedule, week)
        if key is None:
            continue
        week_data = schedule[key]
        if not isinstance(week_data, dict):
            continue

        for day in DAYS_OF_WEEK:
            stored = week_data.get(day)
            if not isinstance(stored, dict):
                continue

            session = PlannedSession.from_stored(stored)
            if not session.has_distance:
                continue

            new_distance = round_half_up(session.distance_km * multiplier, 1)
            new_pace = adjust_pace(session.pace_seconds, multiplier)

            changes.append(SessionChange(
                week=week,
                day=day.capitalize(),
                session_type=session.session_type,
                original_distance_km=session.distance_km,
                new_distance_km=new_distance,
                original_pace_seconds=session.pace_seconds,
                new_pace_seconds=new_pace,
                pace_direction=pace_direction,
            ))
            week_data[day] = session.rescaled(new_distance, new_pace)

    return schedule, changes


def _sample(change: SessionChange) -> ChangeSample:
    return ChangeSample(
        session=f"Week {change.week} {change.day}: {change.session_type}",
        distance_change=(
            f"{format_distance(change.original_distance_km)} → "
            f"{format_distance(change.new_distance_km)}"
        ),
        pace_change=(
            f"{format_pace(change.original_pace_seconds)} → "
            f"{format_pace(change.new_pace_seconds)} per km"
        ),
        impact=change.impact,
    )


def build_variance_summary(
    adjustment_type: str,
    multiplier: float,
    changes: List[SessionChange],
    weeks_affected: int,
) -> SessionVarianceSummary:
    """Runner-facing description of a manual adjustment."""
    harder = adjustment_type == AdjustmentType.DIFFICULTY_INCREASE.value
    percentage = int(round_half_up(abs((multiplier - 1) * 100)))

    if changes:
        average_change = sum(c.distance_change_km for c in changes) / len(changes)
    else:
        average_change = 0.0

    if average_change > 0:
        average_text = f"+{average_change:.1f}km average increase per session"
    else:
        average_text = f"{abs(average_change):.1f}km average decrease per session"

    return SessionVarianceSummary(
        title="Training Made Harder" if harder else "Training Made Easier",
        description=(
            f"Your training has been increased by {percentage}% to provide more challenge"
            if harder else
            f"Your training has been reduced by {percentage}% to make it more manageable"
        ),
        sessions_modified=len(changes),
        weeks_affected=weeks_affected,
        changes=[_sample(c) for c in changes[:MAX_SAMPLE_CHANGES]],
        summary=VarianceTotals(
            total_sessions=len(changes),
            average_change=average_text,
            next_steps=(
                "Focus on gradual progression and listen to your body"
                if harder else
                "Use this time to build consistency and confidence"
            ),
        ),
    )


def apply_manual_adjustment(
    db: Session,
    user_id: str,
    plan_id: int,
    adjustment_type: str,
    week_number: int,
    now: Optional[datetime] = None,
) -> SessionVarianceSummary:
    """
    Rescale the remaining weeks of a plan on the runner's request.

    Raises:
        TrainingPlanNotFoundError: the plan does not exist (nothing is written)
    """
    now = now or datetime.now(timezone.utc)

    plan = db.query(TrainingPlan).filter(TrainingPlan.id == plan_id).first()
    if not plan:
        raise TrainingPlanNotFoundError(plan_id)

    multiplier = MANUAL_MULTIPLIERS.get(adjustment_type, 1.0)
    reason = MANUAL_REASONS.get(adjustment_type, "manual_adjustment")
    pace_direction = (
        "Faster" if adjustment_type == AdjustmentType.DIFFICULTY_INCREASE.value else "Easier"
    )

    total_weeks = plan.duration
    current_week = plan.current_week or 1

    new_schedule, changes = rescale_schedule(
        plan.weekly_schedule, current_week, total_weeks, multiplier, pace_direction,
    )

    plan.weekly_schedule = new_schedule
    plan.updated_at = now

    log_adjustment(
        db,
        user_id=user_id,
        plan_id=plan_id,
        adjustment_type=adjustment_type,
        reason=reason,
        multiplier=multiplier,
        performance_score=MANUAL_PERFORMANCE_SCORE,
        automatic=False,
        week_number=week_number,
        notes=f"Manual adjustment: {len(changes)} sessions modified",
        adjustment_date=now,
    )
    db.flush()

    logger.info(
        f"Manual adjustment on plan {plan_id}: {adjustment_type} x{multiplier:.2f}, "
        f"{len(changes)} sessions modified",
        extra={"extra_fields": {
            "plan_id": plan_id,
            "adjustment_type": adjustment_type,
            "multiplier": multiplier,
            "sessions_modified": len(changes),
        }},
    )

    return build_variance_summary(
        adjustment_type,
        multiplier,
        changes,
        weeks_affected=max(0, total_weeks - current_week + 1),
    )
