"""Tests for health check endpoints."""

from fastapi.testclient import TestClient

from chat_agent.api.main import app

client = TestClient(app)


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_200(self):
        """Health check should return 200 OK."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_ok_status(self):
        """Health check should return exactly {status: ok}."""
        response = client.get("/health")
        assert response.json() == {"status": "ok"}
