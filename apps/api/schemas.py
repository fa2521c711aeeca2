from pydantic import BaseModel, ConfigDict
from datetime import datetime, date
from typing import Optional, List, Dict, Any


class WorkoutFeedbackCreate(BaseModel):
    """Schema for submitting workout feedback"""
    workout_date: date
    workout_type: str = "run"  # "easy_run", "tempo_run", "long_run", etc.
    completed: bool = False
    difficulty_rating: Optional[int] = None  # 1-10 (1=too easy, 10=too hard)
    effort_rating: Optional[int] = None  # 1-10 perceived exertion
    enjoyment_rating: Optional[int] = None  # 1-10
    energy_level: Optional[int] = None  # 1-10 before the workout
    recovery_rating: Optional[int] = None  # 1-10 after the workout
    planned_distance: Optional[float] = None  # km
    actual_distance: Optional[float] = None  # km
    planned_duration: Optional[int] = None  # minutes
    actual_duration: Optional[int] = None  # minutes
    pace_achieved: Optional[str] = None  # MM:SS
    weather_conditions: Optional[str] = None
    notes: Optional[str] = None
    week_number: Optional[int] = None  # plan week, used for the auto-adjustment check


class WorkoutFeedbackSubmitted(BaseModel):
    message: str
    feedback_id: int
    adjustment_applied: bool


class ManualAdjustmentRequest(BaseModel):
    """Schema for a runner-requested difficulty change"""
    adjustment_type: str  # 'difficulty_increase' or 'difficulty_decrease'
    week_number: Optional[int] = None


class ChangeSampleResponse(BaseModel):
    session: str
    distance_change: str
    pace_change: str
    impact: str


class VarianceTotalsResponse(BaseModel):
    total_sessions: int
    average_change: str
    next_steps: str


class SessionVarianceResponse(BaseModel):
    title: str
    description: str
    sessions_modified: int
    weeks_affected: int
    changes: List[ChangeSampleResponse]
    summary: VarianceTotalsResponse


class ManualAdjustmentResponse(BaseModel):
    message: str
    variance: SessionVarianceResponse


class RecommendationResponse(BaseModel):
    type: str
    suggestion: str
    confidence: int
    reason: str


class AdjustmentViewResponse(BaseModel):
    date: str
    type: str
    reason: str
    multiplier: float
    description: str
    automatic: bool


class WeeklyStatsResponse(BaseModel):
    completion_rate: float
    average_difficulty: float
    average_effort: float
    total_workouts: int


class AdaptiveDashboardResponse(BaseModel):
    """Schema for the adaptive difficulty dashboard"""
    current_difficulty: float
    performance_score: float
    recent_adjustments: List[AdjustmentViewResponse]
    recommendations: List[RecommendationResponse]
    weekly_stats: WeeklyStatsResponse


class TrainingAdjustmentResponse(BaseModel):
    """Schema for an audit log entry"""
    id: int
    training_plan_id: int
    adjustment_date: datetime
    adjustment_type: str
    reason: str
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    difficulty_multiplier: str
    performance_score: Optional[str] = None
    automatic_adjustment: bool
    week_number: int
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TrainingPlanResponse(BaseModel):
    """Schema for a training plan with its weekly schedule"""
    id: int
    user_id: str
    plan_name: str
    plan_type: str
    status: str
    duration: int
    start_date: date
    end_date: date
    current_week: Optional[int] = None
    weekly_schedule: Dict[Any, Any]
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
