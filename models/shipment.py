"""
Shipment records as seen by the capacity forecast.

Shipments are owned by the shipment tracking side of the system; the
forecast only reads them. Field coercion is lenient: a bad value becomes
"absent" so the record is excluded rather than failing the forecast.
"""

import math
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from models.base import FrozenSchema


class LifecycleState(str, Enum):
    """Shipment lifecycle states."""
    PLANNED = "planned"
    IN_TRANSIT = "in_transit"
    AT_PORT = "at_port"
    ARRIVED = "arrived"
    UNLOADING = "unloading"
    INSPECTING = "inspecting"
    RECEIVING = "receiving"
    STORED = "stored"
    ARCHIVED = "archived"
    CANCELLED = "cancelled"
    DELAYED = "delayed"


# Already reflected in current occupancy, or never arriving
RESOLVED_STATES = frozenset({
    LifecycleState.STORED,
    LifecycleState.ARCHIVED,
    LifecycleState.CANCELLED,
})

PENDING_STATES = frozenset(set(LifecycleState) - RESOLVED_STATES)


# Status values used by the shipment tracking screens
LEGACY_STATUS_MAP = {
    "planned_airfreight": LifecycleState.PLANNED,
    "planned_seafreight": LifecycleState.PLANNED,
    "in_transit_airfreight": LifecycleState.IN_TRANSIT,
    "in_transit_seafreight": LifecycleState.IN_TRANSIT,
    "in_transit_seaway": LifecycleState.IN_TRANSIT,
    "in_transit_roadway": LifecycleState.IN_TRANSIT,
    "moored": LifecycleState.AT_PORT,
    "berth_working": LifecycleState.AT_PORT,
    "berth_complete": LifecycleState.AT_PORT,
    "clearing_customs": LifecycleState.AT_PORT,
    "arrived_klm": LifecycleState.ARRIVED,
    "arrived_pta": LifecycleState.ARRIVED,
    "in_warehouse": LifecycleState.ARRIVED,
    "inspection_pending": LifecycleState.INSPECTING,
    "inspection_in_progress": LifecycleState.INSPECTING,
    "inspection_passed": LifecycleState.INSPECTING,
    "inspection_failed": LifecycleState.INSPECTING,
    "receiving_goods": LifecycleState.RECEIVING,
    "received": LifecycleState.RECEIVING,
    "canceled": LifecycleState.CANCELLED,
}


def parse_lifecycle_state(value: Any) -> Optional[LifecycleState]:
    """
    Resolve a raw status into a LifecycleState.

    Accepts enum members, canonical values ("in_transit", "in-transit",
    "In Transit") and legacy tracking statuses ("in_transit_seaway").

    Returns:
        LifecycleState, or None if the status is missing or unknown
    """
    if isinstance(value, LifecycleState):
        return value
    if not isinstance(value, str):
        return None

    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    if not key:
        return None

    try:
        return LifecycleState(key)
    except ValueError:
        return LEGACY_STATUS_MAP.get(key)


def parse_arrival_week(value: Any) -> Optional[int]:
    """
    Coerce a raw week number to an int in 1-53.

    "12" → 12, 12.0 → 12, "12.5" → None, "week 12" → None, True → None.
    """
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, str):
        value = value.strip()
        try:
            value = float(value)
        except ValueError:
            return None

    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        value = int(value)

    if not isinstance(value, int):
        return None

    return value if 1 <= value <= 53 else None


def parse_bin_volume(value: Any) -> float:
    """Coerce a raw volume to float; missing or non-numeric → 0.0."""
    if isinstance(value, bool) or value is None:
        return 0.0

    try:
        volume = float(value)
    except (TypeError, ValueError):
        return 0.0

    return volume if math.isfinite(volume) else 0.0


class ShipmentRecord(FrozenSchema):
    """
    A shipment as read by the capacity forecast.

    Accepts snake_case, camelCase, and the tracking table's column names.
    """

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    order_reference: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("order_reference", "orderReference", "order_ref", "orderRef"),
        description="Supplier order reference (not unique)"
    )
    destination_warehouse: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(
            "destination_warehouse", "destinationWarehouse",
            "receiving_warehouse", "receivingWarehouse",
        ),
        description="Warehouse the shipment will be stored in"
    )
    arrival_week: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("arrival_week", "arrivalWeek", "week_number", "weekNumber"),
        description="ISO week the shipment lands"
    )
    bin_volume: float = Field(
        0.0,
        validation_alias=AliasChoices("bin_volume", "binVolume", "pallet_qty", "palletQty"),
        description="Bins occupied once stored (1 pallet = 1 bin)"
    )
    lifecycle_state: Optional[LifecycleState] = Field(
        None,
        validation_alias=AliasChoices("lifecycle_state", "lifecycleState", "latest_status", "latestStatus"),
        description="Current lifecycle state"
    )

    @field_validator("order_reference", mode="before")
    @classmethod
    def _coerce_reference(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("destination_warehouse", mode="before")
    @classmethod
    def _coerce_warehouse(cls, v: Any) -> Optional[str]:
        if not isinstance(v, str):
            return None
        return v.strip() or None

    @field_validator("arrival_week", mode="before")
    @classmethod
    def _coerce_week(cls, v: Any) -> Optional[int]:
        return parse_arrival_week(v)

    @field_validator("bin_volume", mode="before")
    @classmethod
    def _coerce_volume(cls, v: Any) -> float:
        return parse_bin_volume(v)

    @field_validator("lifecycle_state", mode="before")
    @classmethod
    def _coerce_state(cls, v: Any) -> Optional[LifecycleState]:
        return parse_lifecycle_state(v)

    @property
    def is_pending(self) -> bool:
        """Still expected to add occupancy."""
        return self.lifecycle_state in PENDING_STATES
