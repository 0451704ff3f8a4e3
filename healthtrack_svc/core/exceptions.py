"""
Shared exception classes and error handling utilities for HealthTrack API.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import UserNotFoundError, MeasurementNotFoundError

    # In service layer - raise domain exceptions
    raise UserNotFoundError(user_id=42)

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASS
# =============================================================================

class HealthTrackError(Exception):
    """
    Base exception for all HealthTrack domain errors.

    Carries an HTTP status code, a human-readable detail message and
    optional context that is echoed back in the JSON error body.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = {k: v for k, v in kwargs.items() if v is not None}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result: Dict[str, Any] = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# USER EXCEPTIONS
# =============================================================================

class UserNotFoundError(HealthTrackError):
    """Raised when a user account does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "User not found"

    def __init__(self, user_id: Optional[int] = None, **kwargs: Any):
        detail = f"User {user_id} not found" if user_id is not None else self.detail
        super().__init__(detail=detail, user_id=user_id, **kwargs)


class DuplicateUserError(HealthTrackError):
    """Raised when attempting to create a user whose username is taken."""

    status_code = status.HTTP_409_CONFLICT
    detail = "User already exists"

    def __init__(self, username: Optional[str] = None, **kwargs: Any):
        detail = f"User '{username}' already exists" if username else self.detail
        super().__init__(detail=detail, username=username, **kwargs)


class InvalidRoleError(HealthTrackError):
    """Raised when a user does not have the role an operation requires."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "User has the wrong role for this operation"


# =============================================================================
# MEASUREMENT EXCEPTIONS
# =============================================================================

class MeasurementNotFoundError(HealthTrackError):
    """Raised when a measurement does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Measurement not found"

    def __init__(self, measurement_id: Optional[int] = None, **kwargs: Any):
        detail = f"Measurement {measurement_id} not found" if measurement_id is not None else self.detail
        super().__init__(detail=detail, measurement_id=measurement_id, **kwargs)


class InvalidMeasurementDataError(HealthTrackError):
    """Raised when measurement data does not fit the measurement's type."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid measurement data"


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class DatabaseError(HealthTrackError):
    """Raised when a database operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Database operation failed"

    def __init__(self, operation: Optional[str] = None, **kwargs: Any):
        detail = f"Database error during {operation}" if operation else self.detail
        super().__init__(detail=detail, operation=operation, **kwargs)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def healthtrack_exception_handler(
    request: Request,
    exc: HealthTrackError
) -> JSONResponse:
    """Log a domain error and turn it into a JSON response."""
    logger.warning(
        f"HealthTrackError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(HealthTrackError, healthtrack_exception_handler)
