"""
Capacity forecast API routes.

Provides the 8-week warehouse capacity forecast and the tier display
lookups used by the capacity table.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from config import ConnectionError as DatabaseConnectionError
from models.forecast import CapacityForecast, ForecastPreviewRequest, TierStyle
from models.warehouse import WarehouseRegistry
from services.capacity_forecast_service import get_capacity_forecast_service
from services.capacity_alert_service import tier_styles
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/capacity-forecast", tags=["Capacity Forecast"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    if isinstance(e, DatabaseConnectionError):
        logger.error("database_unavailable", error=str(e))
        return JSONResponse(
            status_code=503,
            content={
                "error": {
                    "code": "DATABASE_UNAVAILABLE",
                    "message": "Capacity data is unavailable"
                }
            }
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# FORECAST ROUTES
# ===================

@router.get("", response_model=CapacityForecast)
async def get_capacity_forecast(
    horizon_weeks: Optional[int] = Query(None, ge=1, le=26, description="Weeks to project"),
):
    """
    Get the capacity forecast from current warehouse capacity and shipments.

    Starts at the current ISO week. Each week lists projected bins,
    percent used and alert tier per warehouse, plus a recommendation
    when any warehouse is not OK.
    """
    try:
        service = get_capacity_forecast_service()
        return service.forecast_from_database(horizon_weeks=horizon_weeks)

    except Exception as e:
        return handle_error(e)


@router.post("/preview", response_model=CapacityForecast)
async def preview_capacity_forecast(request: ForecastPreviewRequest):
    """
    Forecast from caller-supplied shipments and occupancy.

    Useful for what-if checks before shipments are scheduled.
    Uses the configured registry unless warehouse_capacities is given.
    """
    try:
        registry = None
        if request.warehouse_capacities is not None:
            registry = WarehouseRegistry.from_capacities(request.warehouse_capacities)

        service = get_capacity_forecast_service()
        return service.forecast(
            request.shipments,
            request.current_occupancy,
            registry=registry,
            start_week=request.start_week,
            start_year=request.start_year,
            horizon_weeks=request.horizon_weeks,
        )

    except Exception as e:
        return handle_error(e)


@router.get("/tiers", response_model=list[TierStyle])
async def get_alert_tiers():
    """
    Get display color and label for each alert tier.

    Ordered least to most severe: ok, warning, critical, overflow.
    """
    return tier_styles()
