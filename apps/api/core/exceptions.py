"""
API error types.

Each carries an HTTP status and a stable ``error_code``; main.py renders
them as ``{"detail": ..., "error_code": ...}``. Conditions the adaptive
engine recovers from (no feedback yet, adjustment cooldown) are not
errors and never raise.
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class APIException(HTTPException):
    """Base for errors returned to API clients."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(APIException):
    """A referenced record (usually the training plan) does not exist."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND"
        )


class ValidationError(APIException):
    """Input passed schema validation but breaks a domain rule, e.g. a rating outside 1-10."""

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        )


class UnauthorizedError(APIException):
    """Missing, expired or unsigned bearer token."""

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(APIException):
    """The plan exists but belongs to another runner."""

    def __init__(self, detail: str = "You do not have access to this training plan"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class TrainingPlanNotFoundError(NotFoundError):
    """No training plan with this id; raised before any write."""

    def __init__(self, plan_id: Any):
        super().__init__("Training plan", plan_id)
        self.error_code = "TRAINING_PLAN_NOT_FOUND"
        self.plan_id = plan_id


class PlanAccessDeniedError(ForbiddenError):
    """The plan belongs to a different runner than the token's subject."""

    def __init__(self, plan_id: Any):
        super().__init__(f"Training plan {plan_id} belongs to another runner")
        self.error_code = "PLAN_ACCESS_DENIED"
        self.plan_id = plan_id


class RatingOutOfRangeError(ValidationError):
    """A workout feedback rating outside its 1-10 scale."""

    def __init__(self, field: str, value: Any, low: int = 1, high: int = 10):
        super().__init__(f"{field} must be between {low} and {high}, got {value}", field=field)
        self.value = value
