"""
Capacity forecast service: Core business logic.

Projects bin utilization per warehouse over a rolling horizon of ISO
weeks from current occupancy plus pending inbound shipments.

Pipeline:
    shipments → classify_shipments → inflow → accumulate → WeekBucket list

Occupancy only grows across the horizon: no dispatch/release event exists,
so the projection is a worst case. A signed inflow model would be added
in accumulate().
"""

import math
import sys
from decimal import Decimal, ROUND_HALF_UP
from datetime import date
from typing import Any, Callable, Mapping, Optional, Sequence, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from config.warehouses import CURRENT_WEEK_LABEL, DEFAULT_HORIZON_WEEKS, PERCENT_USED_CAP
from exceptions import ForecastInputError
from models.base import FrozenSchema
from models.forecast import (
    AlertTier,
    CapacityForecast,
    WarehouseProjection,
    WeekBucket,
    worst_tier,
)
from models.shipment import RESOLVED_STATES, ShipmentRecord, parse_bin_volume
from models.warehouse import WarehouseRegistry
from services.capacity_alert_service import classify_utilization, recommend, total_alert
from services.capacity_data_service import get_capacity_data_service
from utils.week_utils import advance_week, current_iso_week, is_valid_week

logger = structlog.get_logger(__name__)


# (warehouse, ISO week) → bin volumes of pending shipments landing that week
PendingInflow = dict[tuple[str, int], list[float]]

InflowLookup = Callable[[str, int], float]

RawShipment = Union[Mapping[str, Any], ShipmentRecord]

# Bin totals saturate here instead of overflowing to inf
MAX_BINS = sys.float_info.max


class ClassificationSummary(FrozenSchema):
    """Counts of shipments kept and excluded by the classifier."""

    total: int = 0
    pending: int = 0
    resolved: int = 0
    unknown_state: int = 0
    unassigned: int = 0
    no_week: int = 0
    invalid: int = 0
    unassigned_bins: float = 0.0


# ===================
# SHIPMENT CLASSIFIER
# ===================

def _require_sequence(shipments: Any) -> None:
    if not isinstance(shipments, (list, tuple)):
        raise ForecastInputError("shipments", "a list of shipment records", shipments)


def _to_record(raw: Any) -> Optional[ShipmentRecord]:
    """Coerce one raw shipment; None if its fields cannot be read at all."""
    if isinstance(raw, ShipmentRecord):
        return raw
    if not isinstance(raw, Mapping):
        raise ForecastInputError("shipment", "a mapping or ShipmentRecord", raw)
    try:
        return ShipmentRecord.model_validate(dict(raw))
    except PydanticValidationError:
        return None


def classify_shipments_with_summary(
    shipments: Sequence[RawShipment],
    registry: WarehouseRegistry,
) -> tuple[PendingInflow, ClassificationSummary]:
    """
    Bucket pending shipments by (warehouse, arrival week).

    A shipment is excluded (never an error) when:
    - its state is stored, archived or cancelled (already in occupancy)
    - its state is missing or unknown
    - its destination is not a registry warehouse
    - its arrival week is missing or not a week number

    Args:
        shipments: List of raw shipment dicts or ShipmentRecords
        registry: Known warehouses

    Returns:
        (pending inflow mapping, summary counts)

    Raises:
        ForecastInputError: If shipments is not a list, or an element is
            neither a mapping nor a ShipmentRecord
    """
    _require_sequence(shipments)

    pending: PendingInflow = {}
    counts = {
        "pending": 0,
        "resolved": 0,
        "unknown_state": 0,
        "unassigned": 0,
        "no_week": 0,
        "invalid": 0,
    }
    unassigned_bins = 0.0

    for raw in shipments:
        record = _to_record(raw)

        if record is None:
            counts["invalid"] += 1
            continue

        if record.lifecycle_state is None:
            counts["unknown_state"] += 1
            continue

        if record.lifecycle_state in RESOLVED_STATES:
            counts["resolved"] += 1
            continue

        if record.destination_warehouse not in registry:
            counts["unassigned"] += 1
            unassigned_bins += max(0.0, record.bin_volume)
            continue

        if record.arrival_week is None:
            counts["no_week"] += 1
            continue

        key = (record.destination_warehouse, record.arrival_week)
        pending.setdefault(key, []).append(record.bin_volume)
        counts["pending"] += 1

    summary = ClassificationSummary(
        total=len(shipments),
        unassigned_bins=unassigned_bins,
        **counts,
    )
    return pending, summary


def classify_shipments(
    shipments: Sequence[RawShipment],
    registry: WarehouseRegistry,
) -> PendingInflow:
    """Pending inflow by (warehouse, week). See classify_shipments_with_summary()."""
    pending, _ = classify_shipments_with_summary(shipments, registry)
    return pending


# ===================
# WEEKLY INFLOW AGGREGATOR
# ===================

def _bin_total(volumes) -> float:
    """math.fsum of non-negative volumes, saturating at MAX_BINS."""
    try:
        return min(math.fsum(volumes), MAX_BINS)
    except OverflowError:
        return MAX_BINS


def inflow(pending: PendingInflow, warehouse: str, week: int) -> float:
    """
    Total bins landing at a warehouse in one week.

    Negative volumes are clamped to 0 so the projection never decreases.
    """
    volumes = pending.get((warehouse, week), ())
    return _bin_total(max(0.0, v) for v in volumes)


# ===================
# FORECAST ACCUMULATOR
# ===================

def percent_of_capacity(bins_used: float, capacity: int) -> int:
    """
    bins_used / capacity × 100, rounded half up (84.5 → 85).

    Capped at PERCENT_USED_CAP, also when the ratio itself overflows.
    """
    ratio = 100 * bins_used / capacity
    if not math.isfinite(ratio) or ratio >= PERCENT_USED_CAP:
        return PERCENT_USED_CAP
    rounded = Decimal(repr(ratio)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return min(int(rounded), PERCENT_USED_CAP)


def week_label(week_offset: int, week_number: int) -> str:
    if week_offset == 0:
        return CURRENT_WEEK_LABEL
    return f"Week {week_number}"


def _occupancy_of(current_occupancy: Mapping[str, Any], warehouse: str) -> float:
    return max(0.0, parse_bin_volume(current_occupancy.get(warehouse)))


def _project(
    occupancy: float,
    weekly_inflow: list[float],
    capacity: int,
) -> WarehouseProjection:
    projected = min(occupancy + _bin_total(weekly_inflow), MAX_BINS)

    if capacity <= 0:
        return WarehouseProjection(
            capacity=0,
            projected_bins_used=projected,
            percent_used=0,
            alert=AlertTier.OK,
            incoming_bins=min(weekly_inflow[-1], MAX_BINS),
            capacity_configured=False,
        )

    percent = percent_of_capacity(projected, capacity)
    return WarehouseProjection(
        capacity=capacity,
        projected_bins_used=projected,
        percent_used=percent,
        alert=classify_utilization(percent),
        incoming_bins=min(weekly_inflow[-1], MAX_BINS),
    )


def accumulate(
    current_occupancy: Mapping[str, Any],
    inflow_lookup: InflowLookup,
    registry: WarehouseRegistry,
    *,
    start_week: int,
    horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
    start_year: Optional[int] = None,
) -> list[WeekBucket]:
    """
    Build the week buckets for the horizon.

    For week offset i and warehouse w:
        projected[w][i] = occupancy[w] + Σ_{j ≤ i} inflow(w, week_j)

    Week numbers wrap after week 52/53 (ISO rules when start_year is known,
    52 otherwise). Buckets are ordered by offset.

    Args:
        current_occupancy: Warehouse → bins in use now (missing = 0)
        inflow_lookup: (warehouse, week) → bins landing that week
        registry: Known warehouses
        start_week: ISO week of offset 0
        horizon_weeks: Number of buckets
        start_year: ISO year of start_week, if known

    Returns:
        List of WeekBucket, offset 0 first

    Raises:
        ForecastInputError: If start_week or horizon_weeks is invalid
    """
    if not isinstance(current_occupancy, Mapping):
        raise ForecastInputError("current_occupancy", "a mapping of warehouse to bins", current_occupancy)
    if isinstance(horizon_weeks, bool) or not isinstance(horizon_weeks, int) or horizon_weeks < 1:
        raise ForecastInputError("horizon_weeks", "a positive integer", horizon_weeks)
    if isinstance(start_week, bool) or not isinstance(start_week, int) or not is_valid_week(start_week, start_year):
        raise ForecastInputError("start_week", "an ISO week number valid for start_year", start_week)

    week_numbers = [
        advance_week(start_week, offset, start_year)[0]
        for offset in range(horizon_weeks)
    ]

    occupancy = {
        warehouse.name: _occupancy_of(current_occupancy, warehouse.name)
        for warehouse in registry.warehouses
    }
    weekly_inflow: dict[str, list[float]] = {name: [] for name in occupancy}

    buckets = []
    for offset, week_number in enumerate(week_numbers):
        projections = {}
        for warehouse in registry.warehouses:
            weekly_inflow[warehouse.name].append(inflow_lookup(warehouse.name, week_number))
            projections[warehouse.name] = _project(
                occupancy[warehouse.name],
                weekly_inflow[warehouse.name],
                warehouse.total_bins or 0,
            )

        label = week_label(offset, week_number)
        buckets.append(WeekBucket(
            week_offset=offset,
            week_number=week_number,
            label=label,
            warehouses=projections,
            total_alert=total_alert(projections),
            recommendation=recommend(projections, label),
        ))

    return buckets


# ===================
# FORECAST ASSEMBLER
# ===================

def default_registry() -> WarehouseRegistry:
    """Registry from WAREHOUSE_CAPACITIES (or the built-in defaults)."""
    return WarehouseRegistry.from_capacities(settings.warehouse_capacities)


def generate_forecast(
    shipments: Sequence[RawShipment],
    current_occupancy: Mapping[str, Any],
    registry: Optional[WarehouseRegistry] = None,
    *,
    start_week: Optional[int] = None,
    start_year: Optional[int] = None,
    horizon_weeks: Optional[int] = None,
) -> list[WeekBucket]:
    """
    Generate the capacity forecast.

    Identical inputs always give identical output; inputs are not mutated.
    When start_week is omitted, the current ISO week (and year) is used.

    Args:
        shipments: Raw shipment records
        current_occupancy: Warehouse → bins in use now
        registry: Known warehouses (configured registry if None)
        start_week: ISO week of offset 0
        start_year: ISO year of start_week
        horizon_weeks: Weeks to project (settings.forecast_horizon_weeks if None)

    Returns:
        List of WeekBucket, offset 0 first
    """
    if registry is None:
        registry = default_registry()
    if start_week is None:
        start_year, start_week = current_iso_week()
    if horizon_weeks is None:
        horizon_weeks = settings.forecast_horizon_weeks

    pending = classify_shipments(shipments, registry)

    return accumulate(
        current_occupancy,
        lambda warehouse, week: inflow(pending, warehouse, week),
        registry,
        start_week=start_week,
        horizon_weeks=horizon_weeks,
        start_year=start_year,
    )


class CapacityForecastService:
    """
    Capacity forecast orchestration.

    Runs the forecast pipeline with logging, configuration warnings,
    and loading inputs from the database.
    """

    def __init__(self):
        self.horizon_weeks = settings.forecast_horizon_weeks

    def _warnings(
        self,
        registry: WarehouseRegistry,
        summary: ClassificationSummary,
    ) -> list[str]:
        warnings = []

        for warehouse in registry.warehouses:
            if not warehouse.capacity_configured:
                logger.warning("warehouse_capacity_missing", warehouse=warehouse.name)
                warnings.append(
                    f"Capacity not configured for {warehouse.name}; utilization reported as 0%"
                )

        if summary.unassigned:
            logger.info(
                "unassigned_shipments_excluded",
                count=summary.unassigned,
                bins=summary.unassigned_bins,
            )
            warnings.append(
                f"{summary.unassigned} pending shipment(s) ({summary.unassigned_bins:g} bins) "
                f"have no known destination warehouse and are not forecast"
            )

        return warnings

    def forecast(
        self,
        shipments: Sequence[RawShipment],
        current_occupancy: Mapping[str, Any],
        registry: Optional[WarehouseRegistry] = None,
        start_week: Optional[int] = None,
        start_year: Optional[int] = None,
        horizon_weeks: Optional[int] = None,
        today: Optional[date] = None,
    ) -> CapacityForecast:
        """
        Forecast from explicit inputs.

        Args:
            shipments: Raw shipment records
            current_occupancy: Warehouse → bins in use now
            registry: Known warehouses (configured registry if None)
            start_week: ISO week of offset 0 (current week if None)
            start_year: ISO year of start_week
            horizon_weeks: Weeks to project
            today: Reference date used when start_week is None

        Returns:
            CapacityForecast envelope
        """
        if registry is None:
            registry = default_registry()
        if horizon_weeks is None:
            horizon_weeks = self.horizon_weeks
        if start_week is None:
            start_year, start_week = current_iso_week(today)

        pending, summary = classify_shipments_with_summary(shipments, registry)
        logger.debug(
            "shipments_classified",
            total=summary.total,
            pending=summary.pending,
            resolved=summary.resolved,
            unknown_state=summary.unknown_state,
            unassigned=summary.unassigned,
            no_week=summary.no_week,
            invalid=summary.invalid,
        )

        weeks = accumulate(
            current_occupancy,
            lambda warehouse, week: inflow(pending, warehouse, week),
            registry,
            start_week=start_week,
            horizon_weeks=horizon_weeks,
            start_year=start_year,
        )

        worst = worst_tier(bucket.total_alert for bucket in weeks)
        logger.info(
            "capacity_forecast_generated",
            start_week=start_week,
            start_year=start_year,
            horizon_weeks=horizon_weeks,
            warehouses=len(registry),
            worst_alert=worst.value,
        )

        return CapacityForecast(
            start_week=start_week,
            start_year=start_year,
            horizon_weeks=horizon_weeks,
            weeks=weeks,
            warnings=self._warnings(registry, summary),
        )

    def forecast_from_database(
        self,
        horizon_weeks: Optional[int] = None,
        today: Optional[date] = None,
    ) -> CapacityForecast:
        """
        Forecast from the shipments and warehouse_capacity tables.

        Registry comes from warehouse_capacity when it has rows,
        otherwise from configuration.

        Raises:
            DatabaseError: If loading fails
        """
        data_service = get_capacity_data_service()
        registry, occupancy = data_service.get_capacity_snapshot()
        shipments = data_service.get_open_shipments()

        return self.forecast(
            shipments,
            occupancy,
            registry=registry if len(registry) else None,
            horizon_weeks=horizon_weeks,
            today=today,
        )


# Singleton instance
_capacity_forecast_service: Optional[CapacityForecastService] = None


def get_capacity_forecast_service() -> CapacityForecastService:
    """Get or create CapacityForecastService instance."""
    global _capacity_forecast_service
    if _capacity_forecast_service is None:
        _capacity_forecast_service = CapacityForecastService()
    return _capacity_forecast_service
