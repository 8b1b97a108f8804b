"""
Business logic services.

Each service handles one domain area.
"""

from services.capacity_alert_service import (
    classify_utilization,
    color_for,
    label_for,
    recommend,
)
from services.capacity_data_service import CapacityDataService, get_capacity_data_service
from services.capacity_forecast_service import (
    CapacityForecastService,
    get_capacity_forecast_service,
    classify_shipments,
    inflow,
    accumulate,
    generate_forecast,
)

__all__ = [
    "classify_utilization",
    "color_for",
    "label_for",
    "recommend",
    "CapacityDataService",
    "get_capacity_data_service",
    "CapacityForecastService",
    "get_capacity_forecast_service",
    "classify_shipments",
    "inflow",
    "accumulate",
    "generate_forecast",
]
