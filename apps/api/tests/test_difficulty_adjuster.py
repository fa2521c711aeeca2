"""
Tests for Difficulty Adjustment Service

Manual adjustments rewrite the remaining weeks of the schedule; automatic
adjustments only record an audit row, subject to a confidence threshold
and a 7-day cooldown.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import NotFoundError
from models import TrainingAdjustment
from services.adaptive_difficulty import AdaptiveDifficultyEngine
from services.adjustment_recommendations import AdjustmentType
from services.difficulty_adjuster import (
    adjust_pace,
    apply_manual_adjustment,
    auto_adjust_difficulty,
    calculate_auto_multiplier,
    rescale_schedule,
)
from services.performance_analysis import PerformanceMetrics
from conftest import TEST_USER_ID


def _adjustments(db_session):
    return db_session.query(TrainingAdjustment).order_by(TrainingAdjustment.id).all()


class TestPaceAdjustment:
    def test_harder_is_faster(self):
        assert adjust_pace(300, 1.15) == 261

    def test_easier_is_slower_by_multiplier(self):
        # 0.85 < 1, so seconds are multiplied by 0.85 directly
        assert adjust_pace(300, 0.85) == 255

    def test_neutral(self):
        assert adjust_pace(300, 1.0) == 300


class TestAutoMultiplier:
    def test_increase_bounded(self):
        metrics = PerformanceMetrics(average_difficulty_rating=3.0)
        assert calculate_auto_multiplier(AdjustmentType.DIFFICULTY_INCREASE, metrics) == pytest.approx(1.07)

    def test_decrease_bounded(self):
        metrics = PerformanceMetrics(average_difficulty_rating=8.0)
        assert calculate_auto_multiplier(AdjustmentType.DIFFICULTY_DECREASE, metrics) == pytest.approx(0.92)

    def test_volume_increase_capped(self):
        metrics = PerformanceMetrics(improvement_trend=9.0)
        assert calculate_auto_multiplier(AdjustmentType.VOLUME_INCREASE, metrics) == 1.15

    def test_volume_decrease_scales_with_missed_sessions(self):
        metrics = PerformanceMetrics(completion_rate=0.0)
        assert calculate_auto_multiplier(AdjustmentType.VOLUME_DECREASE, metrics) == pytest.approx(0.9)

    def test_other_types_are_neutral(self):
        for adjustment_type in (AdjustmentType.PACE_ADJUSTMENT, AdjustmentType.SCHEDULE_CHANGE):
            assert calculate_auto_multiplier(adjustment_type, PerformanceMetrics()) == 1.0


class TestRescaleSchedule:
    def test_input_is_not_mutated(self, sample_schedule):
        new_schedule, _ = rescale_schedule(sample_schedule, 1, 2, 1.15, "Faster")

        assert sample_schedule["1"]["monday"]["distance"] == "10km"
        assert new_schedule["1"]["monday"]["distance"] == "11.5km"

    def test_missing_weeks_are_skipped(self, sample_schedule):
        _, changes = rescale_schedule(sample_schedule, 1, 5, 1.15, "Faster")

        assert [(c.week, c.day) for c in changes] == [(1, "Monday"), (2, "Saturday")]

    def test_empty_schedule(self):
        assert rescale_schedule(None, 1, 4, 0.85, "Easier") == ({}, [])


class TestManualAdjustment:

    def test_increase_rewrites_schedule(self, db_session, test_plan):
        variance = apply_manual_adjustment(
            db_session, TEST_USER_ID, test_plan.id, "difficulty_increase", week_number=1,
        )
        db_session.commit()
        db_session.refresh(test_plan)

        schedule = test_plan.weekly_schedule
        assert schedule["1"]["monday"] == {"type": "easy_run", "distance": "11.5km", "pace": "4:21"}
        assert schedule["2"]["saturday"] == {
            "type": "long_run", "distance": "18.4km", "pace": "5:13", "notes": "hilly route",
        }

        assert variance.title == "Training Made Harder"
        assert variance.description == "Your training has been increased by 15% to provide more challenge"
        assert variance.sessions_modified == 2
        assert variance.weeks_affected == 2
        assert variance.changes[0].distance_change == "10km → 11.5km"
        assert variance.changes[0].pace_change == "5:00 → 4:21 per km"
        assert variance.summary.next_steps == "Focus on gradual progression and listen to your body"

    def test_decrease_rewrites_schedule(self, db_session, test_plan):
        variance = apply_manual_adjustment(
            db_session, TEST_USER_ID, test_plan.id, "difficulty_decrease", week_number=1,
        )
        db_session.commit()

        monday = test_plan.weekly_schedule["1"]["monday"]
        assert monday["distance"] == "8.5km"
        assert monday["pace"] == "4:15"

        assert variance.title == "Training Made Easier"
        assert variance.description == "Your training has been reduced by 15% to make it more manageable"
        assert variance.changes[0].impact == "1.5km shorter"
        assert variance.summary.next_steps == "Use this time to build consistency and confidence"

    def test_rest_and_zero_distance_sessions_untouched(self, db_session, test_plan):
        apply_manual_adjustment(db_session, TEST_USER_ID, test_plan.id, "difficulty_increase", 1)
        db_session.commit()

        week = test_plan.weekly_schedule["1"]
        assert week["wednesday"] == {"type": "rest"}
        assert week["friday"] == {"type": "cross_training", "distance": "0km", "pace": "6:00"}

    def test_starts_from_current_week(self, db_session, make_plan, sample_schedule):
        plan = make_plan(weekly_schedule=sample_schedule, duration=2, current_week=2)

        variance = apply_manual_adjustment(db_session, TEST_USER_ID, plan.id, "difficulty_increase", 2)
        db_session.commit()

        assert plan.weekly_schedule["1"]["monday"]["distance"] == "10km"
        assert plan.weekly_schedule["2"]["saturday"]["distance"] == "18.4km"
        assert variance.sessions_modified == 1
        assert variance.weeks_affected == 1

    def test_logs_audit_row(self, db_session, test_plan):
        apply_manual_adjustment(db_session, TEST_USER_ID, test_plan.id, "difficulty_increase", 1)
        db_session.commit()

        [row] = _adjustments(db_session)
        assert row.adjustment_type == "difficulty_increase"
        assert row.reason == "user_requested_increase"
        assert row.difficulty_multiplier == "1.15"
        assert row.previous_value == "1.00"
        assert row.performance_score == "1.00"
        assert row.automatic_adjustment is False
        assert row.notes == "Manual adjustment: 2 sessions modified"

    def test_unknown_type_is_logged_as_neutral(self, db_session, test_plan):
        apply_manual_adjustment(db_session, TEST_USER_ID, test_plan.id, "volume_increase", 1)
        db_session.commit()

        assert test_plan.weekly_schedule["1"]["monday"]["distance"] == "10km"
        [row] = _adjustments(db_session)
        assert row.difficulty_multiplier == "1.00"
        assert row.reason == "manual_adjustment"

    def test_missing_plan_writes_nothing(self, db_session):
        with pytest.raises(NotFoundError):
            apply_manual_adjustment(db_session, TEST_USER_ID, 9999, "difficulty_increase", 1)

        assert _adjustments(db_session) == []


class TestAutoAdjustment:

    def test_increase_when_sessions_feel_easy(self, db_session, test_plan, add_feedback):
        for days_ago in (1, 2, 3):
            add_feedback(test_plan, days_ago=days_ago, completed=True, difficulty=3)

        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1)
        db_session.commit()

        [row] = _adjustments(db_session)
        assert row.adjustment_type == "difficulty_increase"
        assert row.reason == "high_completion_low_difficulty"
        assert row.difficulty_multiplier == "1.07"
        assert row.automatic_adjustment is True
        assert row.week_number == 1
        assert row.notes.startswith("Auto-adjustment: ")

    def test_decrease_when_struggling(self, db_session, test_plan, add_feedback):
        add_feedback(test_plan, days_ago=1, completed=True, difficulty=8)
        add_feedback(test_plan, days_ago=2, completed=False)
        add_feedback(test_plan, days_ago=3, completed=True, difficulty=8)
        add_feedback(test_plan, days_ago=4, completed=False)

        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1)

        [row] = _adjustments(db_session)
        assert row.adjustment_type == "difficulty_decrease"
        assert row.difficulty_multiplier == "0.92"

    def test_pace_recommendation_logs_neutral_multiplier(self, db_session, test_plan, add_feedback):
        add_feedback(test_plan, days_ago=1, completed=True, difficulty=5, effort=9)
        add_feedback(test_plan, days_ago=2, completed=True, difficulty=5, effort=9)

        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1)

        [row] = _adjustments(db_session)
        assert row.adjustment_type == "pace_adjustment"
        assert row.difficulty_multiplier == "1.00"

    def test_schedule_is_not_rewritten(self, db_session, test_plan, add_feedback, sample_schedule):
        add_feedback(test_plan, days_ago=1, completed=True, difficulty=2)

        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1)
        db_session.commit()
        db_session.refresh(test_plan)

        assert test_plan.weekly_schedule == sample_schedule

    def test_no_feedback_no_adjustment(self, db_session, test_plan):
        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1) is False
        assert _adjustments(db_session) == []

    def test_low_confidence_only_is_ignored(self, db_session, test_plan, add_feedback):
        """Inconsistent ratings only produce a 70-confidence schedule change."""
        add_feedback(test_plan, days_ago=1, completed=True, difficulty=1)
        add_feedback(test_plan, days_ago=2, completed=True, difficulty=10)

        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1) is False
        assert _adjustments(db_session) == []

    def test_cooldown_blocks_second_adjustment(self, db_session, test_plan, add_feedback):
        add_feedback(test_plan, days_ago=1, completed=True, difficulty=2)

        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1)
        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1) is False
        assert len(_adjustments(db_session)) == 1

    def test_manual_adjustment_also_starts_cooldown(self, db_session, test_plan, add_feedback, add_adjustment):
        add_adjustment(test_plan, days_ago=6)
        add_feedback(test_plan, days_ago=1, completed=True, difficulty=2)

        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1) is False

    def test_cooldown_expires_after_seven_days(self, db_session, test_plan, add_feedback, add_adjustment):
        add_adjustment(test_plan, days_ago=8)
        add_feedback(test_plan, days_ago=1, completed=True, difficulty=2)

        assert auto_adjust_difficulty(db_session, TEST_USER_ID, test_plan.id, current_week=1)
        assert len(_adjustments(db_session)) == 2


class TestEngineClock:
    """Audit rows are dated by the engine's clock, not the wall clock."""

    @staticmethod
    def _engine(db_session, days_ahead=10):
        fixed = datetime.now(timezone.utc) + timedelta(days=days_ahead)
        return AdaptiveDifficultyEngine(db_session, clock=lambda: fixed), fixed

    def test_cooldown_holds_under_fixed_clock(self, db_session, test_plan, add_feedback):
        add_feedback(test_plan, days_ago=1, completed=True, difficulty=2)
        engine, _ = self._engine(db_session)

        assert engine.auto_adjust_difficulty(TEST_USER_ID, test_plan.id, current_week=1) is True
        assert engine.auto_adjust_difficulty(TEST_USER_ID, test_plan.id, current_week=1) is False
        assert len(_adjustments(db_session)) == 1

    def test_automatic_row_dated_by_clock(self, db_session, test_plan, add_feedback):
        add_feedback(test_plan, days_ago=1, completed=True, difficulty=2)
        engine, fixed = self._engine(db_session)

        engine.auto_adjust_difficulty(TEST_USER_ID, test_plan.id, current_week=1)

        [row] = _adjustments(db_session)
        assert row.adjustment_date.replace(tzinfo=None) == fixed.replace(tzinfo=None)

    def test_manual_row_dated_by_clock(self, db_session, test_plan):
        engine, fixed = self._engine(db_session, days_ahead=3)

        engine.apply_manual_adjustment(TEST_USER_ID, test_plan.id, "difficulty_increase", 1)

        [row] = _adjustments(db_session)
        assert row.adjustment_date.replace(tzinfo=None) == fixed.replace(tzinfo=None)
