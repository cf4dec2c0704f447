"""Integration tests for health check endpoints and the error envelope."""

from unittest.mock import patch

from fastapi.testclient import TestClient


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_200(self, client: TestClient) -> None:
        """Test that /health endpoint returns 200 status."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_healthy_status(self, client: TestClient) -> None:
        """Test that /health endpoint returns healthy status."""
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["timestamp"] is not None
        assert data["version"] == "0.1.0"


class TestReadinessEndpoint:
    """Tests for /health/ready endpoint."""

    def test_readiness_returns_200_when_healthy(self, client: TestClient) -> None:
        """Test that /health/ready returns 200 when storage answers."""
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["realtime_connections"] == 0

    def test_readiness_database_check_includes_latency(self, client: TestClient) -> None:
        """Test that database check includes latency measurement."""
        data = client.get("/health/ready").json()

        db_check = next(c for c in data["checks"] if c["name"] == "database")
        assert db_check["healthy"] is True
        assert db_check["latency_ms"] is not None

    def test_readiness_returns_503_when_database_unhealthy(self, client: TestClient) -> None:
        """Test that /health/ready returns 503 with the failing check's error."""
        with patch(
            "src.api.routes.health.check_database_connection",
            return_value={"healthy": False, "error": "Connection timeout"},
        ):
            response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        db_check = next(c for c in data["checks"] if c["name"] == "database")
        assert db_check["error"] == "Connection timeout"

    def test_readiness_counts_live_connections(self, client: TestClient) -> None:
        """Test that open WebSocket connections are reported."""
        from tests.conftest import create_test_token

        with client.websocket_connect(f"/ws/meetings?token={create_test_token()}"):
            data = client.get("/health/ready").json()

        assert data["realtime_connections"] == 1


class TestErrorResponseSchema:
    """Tests for error response schema compliance."""

    def test_unknown_route_uses_envelope(self, client: TestClient) -> None:
        response = client.get("/nonexistent-endpoint")

        assert response.status_code == 404
        data = response.json()
        assert data["statusCode"] == 404
        assert data["error"] == "http_error"
        assert data["path"] == "/nonexistent-endpoint"
        assert "timestamp" in data

    def test_unhandled_exception_is_masked(self, client: TestClient) -> None:
        """Test that unexpected errors return a generic 500 envelope."""
        with patch(
            "src.api.routes.health.check_database_connection",
            side_effect=RuntimeError("secret internals"),
        ):
            response = client.get("/health/ready")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "internal_error"
        assert "secret internals" not in data["message"]
