"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import patch
from typing import Generator

from models.warehouse import WarehouseRegistry

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None):
        self._data = data or []
        self._count = count

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None):
        self._data = data or []
        self._count = count

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._data.copy(), self._count)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(config["data"], config["count"])


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("warehouse_capacity", [
                {"warehouse_name": "PRETORIA", "total_capacity": 650, "bins_used": 400}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase, monkeypatch) -> Generator:
    """
    Patch the database client with mock.

    Also clears the cached CapacityDataService so it picks up the mock.
    """
    monkeypatch.setattr("services.capacity_data_service._capacity_data_service", None)
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.capacity_data_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def registry() -> WarehouseRegistry:
    """The three production warehouses."""
    return WarehouseRegistry.from_capacities({
        "PRETORIA": 650,
        "KLAPMUTS": 384,
        "Offsite": 384,
    })


@pytest.fixture
def pretoria_registry() -> WarehouseRegistry:
    """Single 100-bin warehouse (percent == bins)."""
    return WarehouseRegistry.from_capacities({"PRETORIA": 100})


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/capacity-forecast/tiers")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("shipments", [...])
            response = test_client_with_mock_db.get("/api/capacity-forecast")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
