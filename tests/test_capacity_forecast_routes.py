"""
API tests for the capacity forecast routes.

Run: pytest tests/test_capacity_forecast_routes.py -v
"""

from unittest.mock import MagicMock, patch

from config import ConnectionError as DatabaseConnectionError
from exceptions import DatabaseError
from tests.factories import ShipmentFactory, WarehouseCapacityFactory


def _preview_body(**overrides) -> dict:
    body = {
        "shipments": [ShipmentFactory.create(arrival_week=10, bin_volume=15)],
        "current_occupancy": {"PRETORIA": 70},
        "warehouse_capacities": {"PRETORIA": 100},
        "start_week": 10,
        "start_year": 2026,
        "horizon_weeks": 4,
    }
    body.update(overrides)
    return body


class TestTiersEndpoint:
    """GET /api/capacity-forecast/tiers"""

    def test_returns_all_tiers(self, test_client):
        response = test_client.get("/api/capacity-forecast/tiers")

        assert response.status_code == 200
        assert response.json() == [
            {"tier": "ok", "color": "#28a745", "label": "OK"},
            {"tier": "warning", "color": "#ffc107", "label": "WARNING"},
            {"tier": "critical", "color": "#dc3545", "label": "CRITICAL"},
            {"tier": "overflow", "color": "#dc3545", "label": "OVERFLOW"},
        ]


class TestPreviewEndpoint:
    """POST /api/capacity-forecast/preview"""

    def test_forecast_from_body(self, test_client):
        response = test_client.post("/api/capacity-forecast/preview", json=_preview_body())

        assert response.status_code == 200
        data = response.json()
        assert data["start_week"] == 10
        assert data["horizon_weeks"] == 4
        assert len(data["weeks"]) == 4

        first = data["weeks"][0]
        assert first["label"] == "This Week"
        assert first["warehouses"]["PRETORIA"]["projected_bins_used"] == 85
        assert first["warehouses"]["PRETORIA"]["percent_used"] == 85
        assert first["total_alert"] == "warning"
        assert first["recommendation"]["severity"] == "warning"

    def test_overflow_recommendation(self, test_client):
        body = _preview_body(
            shipments=[
                ShipmentFactory.create(arrival_week=10, bin_volume=15),
                ShipmentFactory.create(arrival_week=11, bin_volume=20),
            ],
        )

        response = test_client.post("/api/capacity-forecast/preview", json=body)

        second = response.json()["weeks"][1]
        assert second["label"] == "Week 11"
        assert second["warehouses"]["PRETORIA"]["percent_used"] == 105
        assert second["total_alert"] == "overflow"
        assert second["recommendation"]["divert_to"] is None

    def test_unassigned_shipments_reported_in_warnings(self, test_client):
        body = _preview_body(
            shipments=[ShipmentFactory.create(destination_warehouse="DURBAN", bin_volume=12)],
        )

        response = test_client.post("/api/capacity-forecast/preview", json=body)

        assert response.status_code == 200
        assert len(response.json()["warnings"]) == 1

    def test_huge_volumes_return_overflow(self, test_client):
        body = _preview_body(
            shipments=[
                ShipmentFactory.create(arrival_week=10, bin_volume=1e308),
                ShipmentFactory.create(arrival_week=10, bin_volume=1e308),
            ],
        )

        response = test_client.post("/api/capacity-forecast/preview", json=body)

        assert response.status_code == 200
        first = response.json()["weeks"][0]
        assert first["total_alert"] == "overflow"
        assert first["warehouses"]["PRETORIA"]["percent_used"] == 999_999

    def test_invalid_horizon_rejected(self, test_client):
        response = test_client.post(
            "/api/capacity-forecast/preview",
            json=_preview_body(horizon_weeks=0),
        )

        assert response.status_code == 422

    def test_week_53_in_short_year_returns_error_envelope(self, test_client):
        response = test_client.post(
            "/api/capacity-forecast/preview",
            json=_preview_body(start_week=53, start_year=2025),
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "FORECAST_INVALID_INPUT"


class TestForecastEndpoint:
    """GET /api/capacity-forecast"""

    def test_forecast_from_database(self, test_client_with_mock_db, mock_supabase):
        mock_supabase.set_table_data("warehouse_capacity", [
            WarehouseCapacityFactory.create_row("PRETORIA", 100, 70),
        ])
        mock_supabase.set_table_data("shipments", [
            ShipmentFactory.create_row(week_number=1, pallet_qty=15),
        ])

        response = test_client_with_mock_db.get("/api/capacity-forecast?horizon_weeks=3")

        assert response.status_code == 200
        data = response.json()
        assert len(data["weeks"]) == 3
        assert list(data["weeks"][0]["warehouses"]) == ["PRETORIA"]

    def test_horizon_out_of_range_rejected(self, test_client):
        response = test_client.get("/api/capacity-forecast?horizon_weeks=27")

        assert response.status_code == 422

    def test_database_error_returns_envelope(self, test_client):
        service = MagicMock()
        service.forecast_from_database.side_effect = DatabaseError("select", "timeout")

        with patch("routes.capacity_forecast.get_capacity_forecast_service", return_value=service):
            response = test_client.get("/api/capacity-forecast")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "DATABASE_ERROR"

    def test_database_not_configured_returns_503(self, test_client):
        service = MagicMock()
        service.forecast_from_database.side_effect = DatabaseConnectionError("not configured")

        with patch("routes.capacity_forecast.get_capacity_forecast_service", return_value=service):
            response = test_client.get("/api/capacity-forecast")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "DATABASE_UNAVAILABLE"

    def test_unexpected_error_returns_500(self, test_client):
        service = MagicMock()
        service.forecast_from_database.side_effect = RuntimeError("boom")

        with patch("routes.capacity_forecast.get_capacity_forecast_service", return_value=service):
            response = test_client.get("/api/capacity-forecast")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"


class TestHealthEndpoint:
    """GET /health"""

    def test_reports_database_state(self, test_client):
        with patch("main.check_connection", return_value={"status": "not_configured"}):
            response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"]["status"] == "not_configured"
