"""
Tests for health check endpoints.
"""

from sqlalchemy.exc import OperationalError


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Basic health check should return healthy status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "tipsy-api"
        assert data["environment"] == "test"

    def test_detailed_health_check(self, client):
        response = client.get("/api/health/detailed")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["database"]["status"] == "healthy"

    def test_detailed_health_reports_database_failure(self, client, db_session, monkeypatch):
        def broken_execute(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr(db_session, "execute", broken_execute)
        response = client.get("/api/health/detailed")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"

    def test_correlation_and_security_headers(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found", "code": "NOT_FOUND"}
