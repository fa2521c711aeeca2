from sqlalchemy import Column, Integer, Boolean, Date, DateTime, Numeric, Text, String, Index, JSON, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from core.database import Base
from datetime import datetime, timezone


# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrainingPlan(Base):
    """
    Training plan for a runner.

    The weekly schedule is a document keyed by week number, then by
    lowercase day of week, each day holding a session such as
    {"type": "easy_run", "distance": "5km", "pace": "6:00"}.

    Only the adaptive difficulty engine rewrites the schedule in place;
    plan creation is owned by the plan generator.
    """
    __tablename__ = "training_plan"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False)  # Index in __table_args__
    goal_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Plan metadata
    plan_name = Column(Text, nullable=False)
    plan_type = Column(Text, nullable=False)  # 'beginner', 'intermediate', 'advanced', 'marathon', 'half_marathon', '10k', '5k', 'custom'
    status = Column(Text, default="active", nullable=False)  # 'active', 'completed', 'paused', 'cancelled'

    # Plan structure
    duration = Column(Integer, nullable=False)  # weeks
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    current_week = Column(Integer, default=1, nullable=True)
    weekly_schedule = Column(JSONType, nullable=False, default=dict)
    preferences = Column(JSONType, nullable=True)

    __table_args__ = (
        Index("ix_training_plan_user_id", "user_id"),
        Index("ix_training_plan_status", "status"),
    )


class WorkoutFeedback(Base):
    """
    A runner's report on one scheduled workout.

    Ratings are 1-10 scales:
    - difficulty_rating: 1 = too easy, 10 = too hard
    - effort_rating: perceived exertion
    - energy_level: before the workout

    Rows are immutable once submitted and are the only input to
    performance analysis.
    """
    __tablename__ = "workout_feedback"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False)
    training_plan_id = Column(Integer, nullable=False)
    workout_date = Column(Date, nullable=False)
    workout_type = Column(Text, nullable=False, default="run")  # "easy_run", "tempo_run", "long_run", etc.

    planned_distance = Column(Numeric(5, 2), nullable=True)  # km
    actual_distance = Column(Numeric(5, 2), nullable=True)  # km
    planned_duration = Column(Integer, nullable=True)  # minutes
    actual_duration = Column(Integer, nullable=True)  # minutes

    completed = Column(Boolean, nullable=False, default=False)
    difficulty_rating = Column(Integer, nullable=True)
    effort_rating = Column(Integer, nullable=True)
    enjoyment_rating = Column(Integer, nullable=True)
    energy_level = Column(Integer, nullable=True)
    recovery_rating = Column(Integer, nullable=True)
    pace_achieved = Column(Text, nullable=True)  # MM:SS
    weather_conditions = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_workout_feedback_user_plan", "user_id", "training_plan_id"),
        Index("ix_workout_feedback_workout_date", "workout_date"),
    )


class TrainingAdjustment(Base):
    """
    Audit log of applied difficulty adjustments.

    Append-only: written once per applied adjustment (manual or automatic)
    and read back for history, the dashboard and the automatic-adjustment
    cooldown. Multiplier and score are stored as 2-decimal strings.

    Adjustment types:
    - 'difficulty_increase' / 'difficulty_decrease'
    - 'volume_increase' / 'volume_decrease'
    - 'pace_adjustment'
    - 'schedule_change'
    """
    __tablename__ = "training_adjustment"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False)
    training_plan_id = Column(Integer, nullable=False)
    adjustment_date = Column(DateTime(timezone=True), server_default=func.now(), default=_utcnow, nullable=False)

    adjustment_type = Column(Text, nullable=False)
    reason = Column(Text, nullable=False)  # "high_completion_low_difficulty", "user_requested_increase", etc.
    previous_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    difficulty_multiplier = Column(Text, nullable=False)  # e.g. "1.15"
    performance_score = Column(Text, nullable=True)  # e.g. "0.82"
    automatic_adjustment = Column(Boolean, default=True, nullable=False)
    week_number = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_training_adjustment_plan_id", "training_plan_id"),
        Index("ix_training_adjustment_adjustment_date", "adjustment_date"),
    )


class AuditLogImmutableError(RuntimeError):
    """Raised when code tries to rewrite or remove an audit row."""


@event.listens_for(TrainingAdjustment, "before_update")
def _reject_adjustment_update(mapper, connection, target):
    raise AuditLogImmutableError(
        f"training_adjustment {target.id} is append-only and cannot be updated"
    )


@event.listens_for(TrainingAdjustment, "before_delete")
def _reject_adjustment_delete(mapper, connection, target):
    raise AuditLogImmutableError(
        f"training_adjustment {target.id} is append-only and cannot be deleted"
    )
