"""
Tests for the relay health check endpoints.

Validates the / liveness probe and the /health route's credential
status and session count.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from relay.health import reset_status, router, set_credentials_status, set_session_counter


def _make_app() -> FastAPI:
    """Minimal FastAPI app with just the health router."""
    app = FastAPI()
    app.include_router(router)
    return app


class TestHealthEndpoint:
    """Tests for the / and /health endpoints."""

    def setup_method(self) -> None:
        reset_status()

    def teardown_method(self) -> None:
        reset_status()

    def test_root_reports_running(self) -> None:
        resp = TestClient(_make_app()).get("/")
        assert resp.status_code == 200
        assert resp.text == "Server is running"

    def test_health_without_credentials_degraded(self) -> None:
        resp = TestClient(_make_app()).get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "degraded"
        assert data["service"] == "relay"
        assert data["credentials_configured"] is False
        assert data["active_sessions"] == 0

    def test_health_with_credentials_ok(self) -> None:
        set_credentials_status(True)
        data = TestClient(_make_app()).get("/health").json()
        assert data["status"] == "ok"
        assert data["credentials_configured"] is True

    def test_health_reports_active_sessions(self) -> None:
        set_session_counter(lambda: 3)
        data = TestClient(_make_app()).get("/health").json()
        assert data["active_sessions"] == 3
