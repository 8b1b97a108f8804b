"""
Capacity data service for loading forecast inputs.

Reads the warehouse_capacity and shipments tables. Read-only: capacity
edits and shipment updates happen elsewhere.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from exceptions import DatabaseError
from models.warehouse import WarehouseCapacityRow, WarehouseRegistry

logger = structlog.get_logger(__name__)


SHIPMENT_COLUMNS = "order_ref, receiving_warehouse, week_number, pallet_qty, latest_status"


class CapacityDataService:
    """
    Loads warehouse capacity and shipments for the capacity forecast.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.capacity_table = "warehouse_capacity"
        self.shipments_table = "shipments"

    def get_capacity_rows(self) -> list[WarehouseCapacityRow]:
        """
        Get all warehouse capacity rows, ordered by warehouse name.

        Raises:
            DatabaseError: If query fails
        """
        logger.debug("loading_warehouse_capacity")

        try:
            result = (
                self.db.table(self.capacity_table)
                .select("warehouse_name, total_capacity, bins_used")
                .order("warehouse_name")
                .execute()
            )
        except Exception as e:
            logger.error("load_warehouse_capacity_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return [WarehouseCapacityRow(**row) for row in result.data]

    def get_capacity_snapshot(self) -> tuple[WarehouseRegistry, dict[str, float]]:
        """
        Get the registry and current occupancy.

        Returns:
            (registry of total capacities, warehouse → bins used)
        """
        rows = self.get_capacity_rows()

        registry = WarehouseRegistry.from_capacities({
            row.warehouse_name: row.total_capacity for row in rows
        })
        occupancy = {row.warehouse_name: row.bins_used or 0 for row in rows}

        logger.info(
            "warehouse_capacity_loaded",
            warehouses=len(registry),
            bins_used=sum(occupancy.values()),
        )

        return registry, occupancy

    def get_open_shipments(self) -> list[dict]:
        """
        Get shipment rows for forecasting.

        All rows are returned; the classifier drops stored,
        archived and cancelled shipments.

        Raises:
            DatabaseError: If query fails
        """
        logger.debug("loading_shipments_for_forecast")

        try:
            result = (
                self.db.table(self.shipments_table)
                .select(SHIPMENT_COLUMNS)
                .execute()
            )
        except Exception as e:
            logger.error("load_shipments_failed", error=str(e))
            raise DatabaseError("select", str(e))

        logger.info("shipments_loaded", count=len(result.data))
        return list(result.data)


# Singleton instance
_capacity_data_service: Optional[CapacityDataService] = None


def get_capacity_data_service() -> CapacityDataService:
    """Get or create CapacityDataService instance."""
    global _capacity_data_service
    if _capacity_data_service is None:
        _capacity_data_service = CapacityDataService()
    return _capacity_data_service
