"""
Authentication and authorization dependencies.

Provides FastAPI dependencies for:
- Getting the current authenticated user id
- Loading a training plan the current user owns
"""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from core.database import get_db
from core.exceptions import PlanAccessDeniedError, TrainingPlanNotFoundError, UnauthorizedError
from core.security import decode_access_token
from models import TrainingPlan

# Use auto_error=False to handle missing credentials manually and return 401 (not 403)
security = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Get the current user id from the JWT subject claim.

    Raises UnauthorizedError if the token is missing or invalid.
    """
    # Check if credentials are missing (return 401, not 403)
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid authentication credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")

    return str(user_id)


def get_owned_plan(
    plan_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TrainingPlan:
    """
    Load a training plan, ensuring it belongs to the current user.

    - 404 if the plan does not exist
    - 403 if it belongs to someone else
    """
    plan = db.query(TrainingPlan).filter(TrainingPlan.id == plan_id).first()
    if not plan:
        raise TrainingPlanNotFoundError(plan_id)
    if plan.user_id != user_id:
        raise PlanAccessDeniedError(plan_id)
    return plan
