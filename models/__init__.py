"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    FrozenSchema,
)
from models.shipment import (
    LifecycleState,
    PENDING_STATES,
    RESOLVED_STATES,
    ShipmentRecord,
)
from models.warehouse import (
    Warehouse,
    WarehouseRegistry,
    WarehouseCapacityRow,
)
from models.forecast import (
    AlertTier,
    SEVERITY_ORDER,
    WarehouseProjection,
    Recommendation,
    WeekBucket,
    CapacityForecast,
    TierStyle,
    ForecastPreviewRequest,
)

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",

    # Shipment
    "LifecycleState",
    "PENDING_STATES",
    "RESOLVED_STATES",
    "ShipmentRecord",

    # Warehouse
    "Warehouse",
    "WarehouseRegistry",
    "WarehouseCapacityRow",

    # Forecast
    "AlertTier",
    "SEVERITY_ORDER",
    "WarehouseProjection",
    "Recommendation",
    "WeekBucket",
    "CapacityForecast",
    "TierStyle",
    "ForecastPreviewRequest",
]
