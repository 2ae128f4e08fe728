"""Tests for /health and / endpoints."""

from fastapi.testclient import TestClient

from docledger.database import Database
from docledger.main import create_app


class TestHealth:

    def test_health_returns_200(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["db"] == "ok"
        assert "uptime_seconds" in data
        assert "version" in data

    def test_health_degraded_when_database_closed(self, settings, tmp_path):
        database = Database(f"sqlite:///{tmp_path / 'closed.db'}")
        with TestClient(create_app(settings=settings, database=database)) as c:
            resp = c.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "degraded"

    def test_root_returns_api_info(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["name"] == "docledger API"


class TestResponseHeaders:

    def test_response_includes_middleware_headers(self, client):
        resp = client.get("/health")
        assert "x-request-id" in resp.headers
        assert "x-response-time" in resp.headers

    def test_request_id_is_propagated(self, client):
        resp = client.get("/", headers={"X-Request-ID": "trace-123"})
        assert resp.headers["x-request-id"] == "trace-123"
