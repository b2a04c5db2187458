"""Tests for the /health endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from pagelog.api import create_app
from pagelog.core.settings import PagelogSettings


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "pagelog"
        assert body["checks"]["database"]["status"] == "healthy"
        assert body["checks"]["database"]["latency_ms"] >= 0

    def test_ready(self, client):
        assert client.get("/health/ready").status_code == 200

    def test_live(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_database_down(self, engine, monkeypatch):
        settings = PagelogSettings(
            _env_file=None,
            database_url="sqlite:///:memory:",
            record_requests=False,
            log_requests=False,
        )
        app = create_app(settings, engine=engine)

        def refuse():
            raise OperationalError("SELECT 1", {}, Exception("unable to open database"))

        with TestClient(app) as client:
            monkeypatch.setattr(engine, "connect", refuse)
            response = client.get("/health/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unhealthy"
        assert "unable to open database" in body["checks"]["database"]["error"]
