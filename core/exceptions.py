"""
Custom exception classes and error handling.

Provides consistent error responses across the API. Every detail string is
written for a child or parent to read.
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any


FRIENDLY_ERROR = "Something went wrong. Let's try again."
CHECK_IN_FIRST = "Check in first so we can build today's plan."


class APIException(HTTPException):
    """Base API exception with consistent structure."""

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
    """Resource not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND"
        )


class ValidationError(APIException):
    """Validation error."""

    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(
            status_code=422,
            detail=detail,
            error_code=error_code
        )
        self.field = field


class ConflictError(APIException):
    """Request conflicts with current state (e.g., arc already running)."""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )

