"""
Tests for the shared BaseService request handling.
"""

import pytest
from fastapi.testclient import TestClient

from shared.base_service import BaseService


@pytest.fixture
def service():
    """BaseService with one route that always fails."""
    service = BaseService("sample", 8080)

    @service.app.get("/explode")
    async def explode():
        raise RuntimeError("unexpected failure")

    return service


@pytest.fixture
def client(service):
    return TestClient(service.app, raise_server_exceptions=False)


class TestBaseService:
    """Test cases for BaseService."""

    def test_unhandled_exception_returns_internal_error(self, client):
        response = client.get("/explode")

        assert response.status_code == 500
        data = response.json()
        assert data["code"] == "INTERNAL_ERROR"
        assert data["message"] == "Internal server error"

    def test_unhandled_exception_is_counted(self, service, client):
        client.get("/explode")

        labels = {"method": "GET", "endpoint": "/explode", "status_code": "500"}
        assert service.metrics.get_sample_value("http_requests_total", labels) == 1
        assert service.metrics.get_sample_value(
            "http_request_duration_seconds_count", {"method": "GET", "endpoint": "/explode"}
        ) == 1
        assert service.metrics.get_sample_value(
            "errors_total", {"error_type": "INTERNAL_ERROR", "service": "sample"}
        ) == 1

    def test_successful_request_is_counted(self, service, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
        assert service.metrics.get_sample_value("http_requests_total", labels) == 1
