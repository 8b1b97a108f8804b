"""
Warehouse registry schemas.

The registry is fixed for one forecast run. Capacity is measured in bins.
"""

from typing import Mapping, Optional

from pydantic import Field

from models.base import BaseSchema, FrozenSchema


class Warehouse(FrozenSchema):
    """A storage facility and its total bin capacity."""

    name: str = Field(..., min_length=1, max_length=100, description="Warehouse name (registry key)")
    total_bins: Optional[int] = Field(
        None,
        ge=0,
        description="Total bins; None or 0 means capacity is not configured"
    )

    @property
    def capacity_configured(self) -> bool:
        return bool(self.total_bins)


class WarehouseRegistry(FrozenSchema):
    """
    Known warehouses, in display order.

    Behaves like a read-only mapping of name → Warehouse.
    """

    warehouses: tuple[Warehouse, ...] = ()

    @classmethod
    def from_capacities(cls, capacities: Mapping[str, Optional[int]]) -> "WarehouseRegistry":
        """
        Build a registry from a {name: total_bins} mapping.

        Args:
            capacities: Warehouse name → total bins (None allowed)

        Returns:
            WarehouseRegistry preserving the mapping's order
        """
        return cls(warehouses=tuple(
            Warehouse(name=name, total_bins=total_bins)
            for name, total_bins in capacities.items()
        ))

    @property
    def names(self) -> list[str]:
        return [w.name for w in self.warehouses]

    def get(self, name: Optional[str]) -> Optional[Warehouse]:
        for warehouse in self.warehouses:
            if warehouse.name == name:
                return warehouse
        return None

    def capacity_of(self, name: str) -> int:
        """Total bins for a warehouse; 0 if unknown or unconfigured."""
        warehouse = self.get(name)
        return (warehouse.total_bins or 0) if warehouse else 0

    def __contains__(self, name: object) -> bool:
        return any(w.name == name for w in self.warehouses)

    def __len__(self) -> int:
        return len(self.warehouses)


class WarehouseCapacityRow(BaseSchema):
    """Row from the warehouse_capacity table."""

    warehouse_name: str
    total_capacity: Optional[int] = None
    bins_used: Optional[float] = None
