"""
Pytest configuration and fixtures

Tests run against an in-memory SQLite database. The schema is created
before each test and dropped after it, so nothing leaks between tests.
"""
import os
import sys
from datetime import date, datetime, timedelta, timezone

import pytest

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Must be set before core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-social-runner-api-0123456789")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from core.database import Base, SessionLocal, engine, get_db  # noqa: E402
from core.security import create_access_token  # noqa: E402
from models import TrainingAdjustment, TrainingPlan, WorkoutFeedback  # noqa: E402

TEST_USER_ID = "runner-123"
OTHER_USER_ID = "runner-456"


@pytest.fixture(scope="function")
def db_session():
    """
    Database session on a fresh schema.

    Tables are dropped after the test - nothing persists.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sample_schedule():
    """Two-week schedule with distance, rest and zero-distance sessions."""
    return {
        "1": {
            "monday": {"type": "easy_run", "distance": "10km", "pace": "5:00"},
            "wednesday": {"type": "rest"},
            "friday": {"type": "cross_training", "distance": "0km", "pace": "6:00"},
        },
        "2": {
            "saturday": {"type": "long_run", "distance": "16km", "pace": "6:00", "notes": "hilly route"},
        },
    }


@pytest.fixture
def make_plan(db_session):
    """Factory for training plans."""
    def _make_plan(weekly_schedule=None, duration=2, current_week=1, user_id=TEST_USER_ID):
        start = date.today() - timedelta(days=7 * (current_week - 1))
        plan = TrainingPlan(
            user_id=user_id,
            plan_name="10K Builder",
            plan_type="10k",
            duration=duration,
            start_date=start,
            end_date=start + timedelta(weeks=duration),
            current_week=current_week,
            weekly_schedule=weekly_schedule if weekly_schedule is not None else {},
            preferences={"daysPerWeek": 3},
        )
        db_session.add(plan)
        db_session.commit()
        db_session.refresh(plan)
        return plan

    return _make_plan


@pytest.fixture
def test_plan(make_plan, sample_schedule):
    return make_plan(weekly_schedule=sample_schedule)


@pytest.fixture
def add_feedback(db_session):
    """Factory for workout feedback rows."""
    def _add_feedback(plan, days_ago=0, completed=True, difficulty=None, effort=None,
                      user_id=TEST_USER_ID):
        feedback = WorkoutFeedback(
            user_id=user_id,
            training_plan_id=plan.id,
            workout_date=date.today() - timedelta(days=days_ago),
            workout_type="easy_run",
            completed=completed,
            difficulty_rating=difficulty,
            effort_rating=effort,
        )
        db_session.add(feedback)
        db_session.commit()
        return feedback

    return _add_feedback


@pytest.fixture
def add_adjustment(db_session):
    """Factory for audit rows with an explicit date."""
    def _add_adjustment(plan, days_ago=0, adjustment_type="difficulty_increase",
                        reason="user_requested_increase", multiplier="1.15"):
        adjustment = TrainingAdjustment(
            user_id=plan.user_id,
            training_plan_id=plan.id,
            adjustment_date=datetime.now(timezone.utc) - timedelta(days=days_ago),
            adjustment_type=adjustment_type,
            reason=reason,
            previous_value="1.00",
            new_value=multiplier,
            difficulty_multiplier=multiplier,
            performance_score="1.00",
            automatic_adjustment=False,
            week_number=1,
        )
        db_session.add(adjustment)
        db_session.commit()
        return adjustment

    return _add_adjustment


@pytest.fixture
def client(db_session):
    """TestClient bound to the test session."""
    from fastapi.testclient import TestClient
    from main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": TEST_USER_ID})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers():
    token = create_access_token({"sub": OTHER_USER_ID})
    return {"Authorization": f"Bearer {token}"}
