"""
Test suite for the warehouse capacity forecast.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_capacity_forecast_service.py -v
"""
