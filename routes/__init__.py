"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.capacity_forecast import router as capacity_forecast_router

__all__ = [
    "capacity_forecast_router",
]
