"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    DatabaseError,

    # Forecast
    ForecastInputError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "DatabaseError",

    # Forecast
    "ForecastInputError",
]
