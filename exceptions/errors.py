"""
Custom exception classes for the application.

Error responses share one envelope: {"error": {code, message, details, timestamp}}.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "FORECAST_INVALID_INPUT")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# FORECAST ERRORS
# ===================

class ForecastInputError(ValidationError):
    """
    Forecast called with the wrong input types.

    Raised for caller contract violations (e.g. shipments passed as a dict),
    never for dirty shipment fields, which are excluded instead.
    """

    def __init__(self, argument: str, expected: str, received: Any):
        super().__init__(
            code="FORECAST_INVALID_INPUT",
            message=f"{argument} must be {expected}, got {type(received).__name__}",
            details={"argument": argument, "expected": expected, "received": type(received).__name__}
        )
