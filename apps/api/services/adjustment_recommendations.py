"""
Adjustment Recommendation Rules

A fixed rule table over PerformanceMetrics. Rules are evaluated
independently, so several can fire; the result keeps rule-table order
(not sorted by confidence).

| Condition                                  | Type                | Confidence |
|--------------------------------------------|---------------------|------------|
| completion >= 0.90 and difficulty <= 3.5   | difficulty_increase | 85         |
| completion <= 0.60 and difficulty >= 7.5   | difficulty_decrease | 90         |
| effort <= 6.0 and trend > 1.0              | volume_increase     | 75         |
| consistency <= 0.5                         | schedule_change     | 70         |
| effort >= 8.5                              | pace_adjustment     | 80         |
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import List

from services.performance_analysis import PerformanceMetrics


class AdjustmentType(str, Enum):
    DIFFICULTY_INCREASE = "difficulty_increase"
    DIFFICULTY_DECREASE = "difficulty_decrease"
    VOLUME_INCREASE = "volume_increase"
    VOLUME_DECREASE = "volume_decrease"
    PACE_ADJUSTMENT = "pace_adjustment"
    SCHEDULE_CHANGE = "schedule_change"


@dataclass
class AdjustmentRecommendation:
    type: AdjustmentType
    suggestion: str
    confidence: int  # 0-100
    reason: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = self.type.value
        return data


def generate_recommendations(metrics: PerformanceMetrics) -> List[AdjustmentRecommendation]:
    """Apply the rule table. An empty list means nothing needs changing."""
    recommendations: List[AdjustmentRecommendation] = []

    # Finishing everything and finding it easy
    if metrics.completion_rate >= 0.9 and metrics.average_difficulty_rating <= 3.5:
        recommendations.append(AdjustmentRecommendation(
            type=AdjustmentType.DIFFICULTY_INCREASE,
            suggestion="Your completion rate is excellent and workouts feel too easy. "
                       "Consider increasing training intensity.",
            confidence=85,
            reason="high_completion_low_difficulty",
        ))

    # Missing sessions and finding them hard
    if metrics.completion_rate <= 0.6 and metrics.average_difficulty_rating >= 7.5:
        recommendations.append(AdjustmentRecommendation(
            type=AdjustmentType.DIFFICULTY_DECREASE,
            suggestion="Workouts seem too challenging with low completion rates. "
                       "Consider reducing intensity.",
            confidence=90,
            reason="low_completion_high_difficulty",
        ))

    if metrics.average_effort_rating <= 6.0 and metrics.improvement_trend > 1.0:
        recommendations.append(AdjustmentRecommendation(
            type=AdjustmentType.VOLUME_INCREASE,
            suggestion="You're adapting well to current training. "
                       "Consider adding more training volume.",
            confidence=75,
            reason="improving_fitness_trend",
        ))

    if metrics.consistency_score <= 0.5:
        recommendations.append(AdjustmentRecommendation(
            type=AdjustmentType.SCHEDULE_CHANGE,
            suggestion="Your performance varies significantly. "
                       "Consider adjusting your training schedule or rest days.",
            confidence=70,
            reason="inconsistent_performance",
        ))

    if metrics.average_effort_rating >= 8.5:
        recommendations.append(AdjustmentRecommendation(
            type=AdjustmentType.PACE_ADJUSTMENT,
            suggestion="Your effort levels are consistently very high. "
                       "Consider adjusting target paces for easier workouts.",
            confidence=80,
            reason="consistently_high_effort",
        ))

    return recommendations
