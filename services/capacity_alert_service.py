"""
Capacity alert service: tier classification and recommendations.

Maps utilization percentages to severity tiers, provides the display
lookups used by the capacity table, and turns a week's per-warehouse
tiers into a recommendation.

Tier thresholds (percent of total bins):
    > 100        OVERFLOW
    95 .. 100    CRITICAL
    80 .. < 95   WARNING
    < 80         OK
"""

from numbers import Real
from typing import Mapping, Optional, Union

from config.warehouses import (
    CURRENT_WEEK_LABEL,
    WARNING_THRESHOLD_PCT,
    CRITICAL_THRESHOLD_PCT,
    OVERFLOW_THRESHOLD_PCT,
)
from exceptions import ForecastInputError
from models.forecast import (
    AlertTier,
    Recommendation,
    TierStyle,
    WarehouseProjection,
    worst_tier,
)


GREEN = "#28a745"
AMBER = "#ffc107"
RED = "#dc3545"

TIER_COLORS = {
    AlertTier.OK: GREEN,
    AlertTier.WARNING: AMBER,
    AlertTier.CRITICAL: RED,
    AlertTier.OVERFLOW: RED,
}

TIER_LABELS = {
    AlertTier.OK: "OK",
    AlertTier.WARNING: "WARNING",
    AlertTier.CRITICAL: "CRITICAL",
    AlertTier.OVERFLOW: "OVERFLOW",
}


# ===================
# CLASSIFICATION
# ===================

def classify_utilization(percent_used: Real) -> AlertTier:
    """
    Map a utilization percentage to an alert tier.

    Thresholds are checked from most to least severe, so exactly one
    tier matches.

    Args:
        percent_used: Projected bins / capacity × 100

    Returns:
        AlertTier

    Raises:
        ForecastInputError: If percent_used is not a number
    """
    if isinstance(percent_used, bool) or not isinstance(percent_used, Real):
        raise ForecastInputError("percent_used", "a number", percent_used)

    if percent_used > OVERFLOW_THRESHOLD_PCT:
        return AlertTier.OVERFLOW
    if percent_used >= CRITICAL_THRESHOLD_PCT:
        return AlertTier.CRITICAL
    if percent_used >= WARNING_THRESHOLD_PCT:
        return AlertTier.WARNING
    return AlertTier.OK


def color_for(tier: Union[AlertTier, str]) -> str:
    """Hex display color for a tier. Unknown tiers raise ValueError."""
    return TIER_COLORS[AlertTier(tier)]


def label_for(tier: Union[AlertTier, str]) -> str:
    """Display label for a tier. Unknown tiers raise ValueError."""
    return TIER_LABELS[AlertTier(tier)]


def tier_styles() -> list[TierStyle]:
    """Color and label for every tier, least to most severe."""
    return [
        TierStyle(tier=tier, color=color_for(tier), label=label_for(tier))
        for tier in AlertTier
    ]


def total_alert(projections: Mapping[str, WarehouseProjection]) -> AlertTier:
    """Worst tier across all warehouses for one week."""
    return worst_tier(p.alert for p in projections.values())


# ===================
# RECOMMENDATIONS
# ===================

def _format_bins(value: float) -> str:
    """85.0 → "85", 12.5 → "12.5"."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def _when(week_label: str) -> str:
    if week_label == CURRENT_WEEK_LABEL:
        return "this week"
    return f"in {week_label}"


def _divert_target(
    projections: Mapping[str, WarehouseProjection],
    exclude: set[str],
) -> Optional[str]:
    """Lowest-utilization configured warehouse not in exclude; ties go alphabetical."""
    candidates = [
        (projection.percent_used, name)
        for name, projection in projections.items()
        if name not in exclude and projection.capacity_configured
    ]
    if not candidates:
        return None
    return min(candidates)[1]


def recommend(
    projections: Mapping[str, WarehouseProjection],
    week_label: str,
) -> Optional[Recommendation]:
    """
    Build the recommendation for one week.

    Rules:
    - OK week → None
    - WARNING → flag the warehouse(s), suggest reviewing their inbound volume
    - CRITICAL / OVERFLOW → name the warehouse(s), suggest diverting inbound
      volume to the least utilized other warehouse

    Args:
        projections: Warehouse name → projection for the week
        week_label: Bucket label ("This Week", "Week 23")

    Returns:
        Recommendation, or None when every warehouse is OK
    """
    severity = total_alert(projections)
    if severity == AlertTier.OK:
        return None

    affected = sorted(name for name, p in projections.items() if p.alert == severity)
    names = ", ".join(affected)
    when = _when(week_label)

    if severity == AlertTier.OVERFLOW:
        details = "; ".join(
            f"{name} {projections[name].percent_used}%, "
            f"{_format_bins(projections[name].projected_bins_used - projections[name].capacity)} bins over"
            for name in affected
        )
    else:
        details = "; ".join(f"{name} {projections[name].percent_used}%" for name in affected)

    if severity == AlertTier.WARNING:
        return Recommendation(
            severity=severity,
            message=f"WARNING: {names} approaching capacity {when} ({details})",
            action=f"Review upcoming inbound volume for {names}",
            warehouses=tuple(affected),
        )

    if severity == AlertTier.OVERFLOW:
        message = f"OVERFLOW: {names} will exceed capacity {when} ({details})"
    else:
        message = f"CRITICAL: {names} nearing full capacity {when} ({details})"

    target = _divert_target(projections, exclude=set(affected))
    if target is None:
        action = f"No alternative warehouse available: defer or reschedule inbound volume for {names}"
    else:
        target_projection = projections[target]
        free_bins = max(0.0, target_projection.available_bins)
        action = (
            f"Divert incoming volume for {names} to {target} "
            f"({target_projection.percent_used}% projected, {_format_bins(free_bins)} bins free)"
        )

    return Recommendation(
        severity=severity,
        message=message,
        action=action,
        warehouses=tuple(affected),
        divert_to=target,
    )
