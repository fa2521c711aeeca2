"""
Training Adjustment Audit Service

Records every applied difficulty adjustment, manual or automatic.
The log is append-only (see models.TrainingAdjustment) and doubles as
the source of the current difficulty multiplier and of the automatic
adjustment cooldown.
"""

from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import Session

from models import TrainingAdjustment

BASELINE_MULTIPLIER = "1.00"


def format_decimal(value: float) -> str:
    """Two-decimal string as stored in the audit columns."""
    return f"{value:.2f}"


def log_adjustment(
    db: Session,
    user_id: str,
    plan_id: int,
    adjustment_type: str,
    reason: str,
    multiplier: float,
    performance_score: float,
    automatic: bool,
    week_number: int,
    notes: Optional[str] = None,
    previous_value: str = BASELINE_MULTIPLIER,
    adjustment_date: Optional[datetime] = None,
) -> TrainingAdjustment:
    """
    Log an applied adjustment.

    Args:
        db: Database session
        user_id: Runner the plan belongs to
        plan_id: Training plan being adjusted
        adjustment_type: difficulty_increase, difficulty_decrease, etc.
        reason: Machine-readable reason code
        multiplier: Difficulty multiplier that was applied
        performance_score: Composite score at the time of adjustment
        automatic: True for engine-initiated adjustments
        week_number: Plan week the adjustment was requested in
        notes: Free-text description
        previous_value: Multiplier before the change
        adjustment_date: When the adjustment applies; defaults to now (UTC).
            Callers pass their own clock so the cooldown check and the
            stored date agree.

    Returns:
        Created TrainingAdjustment entry
    """
    entry = TrainingAdjustment(
        user_id=user_id,
        training_plan_id=plan_id,
        adjustment_date=adjustment_date or datetime.now(timezone.utc),
        adjustment_type=adjustment_type,
        reason=reason,
        previous_value=previous_value,
        new_value=format_decimal(multiplier),
        difficulty_multiplier=format_decimal(multiplier),
        performance_score=format_decimal(performance_score),
        automatic_adjustment=automatic,
        week_number=week_number,
        notes=notes,
    )

    db.add(entry)
    # Don't commit here - let the caller manage the transaction

    return entry


def has_recent_adjustment(db: Session, plan_id: int, since: datetime) -> bool:
    """True if any adjustment was logged for the plan at or after `since`."""
    return (
        db.query(TrainingAdjustment.id)
        .filter(
            TrainingAdjustment.training_plan_id == plan_id,
            TrainingAdjustment.adjustment_date >= since,
        )
        .first()
        is not None
    )


def recent_adjustments(
    db: Session,
    plan_id: int,
    limit: Optional[int] = None,
) -> List[TrainingAdjustment]:
    """Adjustments for a plan, newest first."""
    query = (
        db.query(TrainingAdjustment)
        .filter(TrainingAdjustment.training_plan_id == plan_id)
        .order_by(TrainingAdjustment.adjustment_date.desc(), TrainingAdjustment.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()
