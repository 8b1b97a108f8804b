"""
Capacity forecast schemas.

A forecast is an ordered list of week buckets, one per week in the
horizon, each holding the projected utilization of every warehouse.
All output models are frozen.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import Field, field_serializer, field_validator

from models.base import BaseSchema, FrozenSchema


class AlertTier(str, Enum):
    """Utilization severity tiers, least to most severe."""
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    OVERFLOW = "overflow"


# Severity order (higher = worse)
SEVERITY_ORDER = {
    AlertTier.OK: 0,
    AlertTier.WARNING: 1,
    AlertTier.CRITICAL: 2,
    AlertTier.OVERFLOW: 3,
}


def worst_tier(tiers) -> AlertTier:
    """Most severe tier in an iterable; OK if empty."""
    return max(tiers, key=SEVERITY_ORDER.__getitem__, default=AlertTier.OK)


# ===================
# FORECAST OUTPUT
# ===================

class WarehouseProjection(FrozenSchema):
    """Projected utilization of one warehouse in one week."""

    capacity: int = Field(..., ge=0, description="Total bins (0 if not configured)")
    projected_bins_used: float = Field(..., description="Current occupancy + inflow through this week")
    percent_used: int = Field(..., description="projected / capacity × 100, rounded half up")
    alert: AlertTier
    incoming_bins: float = Field(0.0, ge=0, description="Inflow landing in this week only")
    capacity_configured: bool = Field(True, description="False when capacity is 0 or missing")

    @property
    def available_bins(self) -> float:
        return self.capacity - self.projected_bins_used


class Recommendation(FrozenSchema):
    """Suggested action for a week that is not healthy."""

    severity: AlertTier
    message: str
    action: str
    warehouses: tuple[str, ...] = Field(..., description="Warehouses at the week's worst tier")
    divert_to: Optional[str] = Field(None, description="Warehouse suggested to absorb diverted volume")


class WeekBucket(FrozenSchema):
    """
    One week of the forecast.

    warehouses is a read-only mapping; it serializes as a plain object.
    """

    week_offset: int = Field(..., ge=0)
    week_number: int = Field(..., ge=1, le=53)
    label: str
    warehouses: Mapping[str, WarehouseProjection]
    total_alert: AlertTier
    recommendation: Optional[Recommendation] = None

    @field_validator("warehouses", mode="after")
    @classmethod
    def _read_only_warehouses(cls, v: Mapping[str, WarehouseProjection]) -> Mapping[str, WarehouseProjection]:
        return MappingProxyType(dict(v))

    @field_serializer("warehouses")
    def _serialize_warehouses(self, v: Mapping[str, WarehouseProjection]) -> dict[str, WarehouseProjection]:
        return dict(v)


class CapacityForecast(FrozenSchema):
    """Forecast envelope returned by the assembler."""

    start_week: int
    start_year: Optional[int] = None
    horizon_weeks: int
    weeks: tuple[WeekBucket, ...]
    warnings: tuple[str, ...] = Field((), description="Configuration problems, e.g. missing capacity")


class TierStyle(FrozenSchema):
    """Display color and label for a tier."""

    tier: AlertTier
    color: str
    label: str


# ===================
# REQUEST SCHEMAS
# ===================

class ForecastPreviewRequest(BaseSchema):
    """Forecast from caller-supplied data instead of the database."""

    shipments: list[dict[str, Any]] = Field(default_factory=list, description="Raw shipment records")
    current_occupancy: dict[str, float] = Field(default_factory=dict, description="Warehouse → bins in use")
    warehouse_capacities: Optional[dict[str, Optional[int]]] = Field(
        None,
        description="Warehouse → total bins; configured registry when omitted"
    )
    start_week: Optional[int] = Field(None, ge=1, le=53, description="ISO week of offset 0; current week when omitted")
    start_year: Optional[int] = Field(None, ge=2000, le=2100, description="ISO year of start_week")
    horizon_weeks: Optional[int] = Field(None, ge=1, le=26, description="Weeks to project")
