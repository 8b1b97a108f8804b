"""
Warehouse registry defaults and forecast constants.

Overridden at runtime by WAREHOUSE_CAPACITIES in the environment or by the
warehouse_capacity table.
"""

# =============================================================================
# WAREHOUSE CAPACITY (bins)
# =============================================================================
# 1 pallet = 1 bin, so capacity and inbound pallet counts share a unit.

DEFAULT_WAREHOUSE_CAPACITY = {
    "PRETORIA": 650,
    "KLAPMUTS": 384,
    "Offsite": 384,
}


# =============================================================================
# FORECAST HORIZON
# =============================================================================

# Weeks projected, including the current week
DEFAULT_HORIZON_WEEKS = 8

# Label for offset 0; later weeks are labelled "Week N"
CURRENT_WEEK_LABEL = "This Week"


# =============================================================================
# UTILIZATION THRESHOLDS (percent of total bins)
# =============================================================================
# Inclusive lower bounds, except overflow which starts strictly above 100.

WARNING_THRESHOLD_PCT = 80
CRITICAL_THRESHOLD_PCT = 95
OVERFLOW_THRESHOLD_PCT = 100

# Largest percent_used reported; projections too large to express saturate here
PERCENT_USED_CAP = 999_999
