"""
Tests for application-level behavior.

Tests cover:
- Service info, endpoint index and health check
- Unknown routes
- Unhandled exceptions (500) in production and development
- Request ID propagation
"""

import pytest

from portfolio_api.core.config import settings
from portfolio_api.main import app


@pytest.fixture
def failing_route():
    """Temporarily register a route that raises."""

    @app.get("/api/_boom")
    def boom():
        raise RuntimeError("database exploded")

    yield "/api/_boom"

    app.router.routes = [r for r in app.router.routes if getattr(r, "path", None) != "/api/_boom"]


class TestServiceInfo:
    """Tests for the informational endpoints."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["status"] == "running"

    def test_api_index(self, client):
        body = client.get("/api").json()

        assert body["endpoints"]["health"] == "GET /api/health"
        assert body["endpoints"]["contacts"]["create"] == "POST /api/contacts"
        assert body["endpoints"]["posts"]["auth"] == "POST /api/posts/admin/auth"

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Portfolio API is running"
        assert body["environment"] == settings.ENVIRONMENT


class TestErrorHandling:
    """Tests for the global error handlers."""

    def test_unknown_route(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route /api/nope not found"}

    def test_method_not_allowed_keeps_status(self, client):
        response = client.put("/api/health")

        assert response.status_code == 405
        assert response.json()["success"] is False

    def test_unhandled_exception_hides_detail(self, client, failing_route, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")

        response = client.get(failing_route)

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}

    def test_unhandled_exception_detail_in_development(self, client, failing_route, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "development")

        response = client.get(failing_route)

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Internal server error"
        assert body["error"] == "database exploded"


class TestRequestContext:
    """Tests for the request context middleware."""

    def test_request_id_generated(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Request-ID"].startswith("req_")

    def test_request_id_passed_through(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_unsafe_request_id_replaced(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "bad id; with spaces"})
        assert response.headers["X-Request-ID"].startswith("req_")
