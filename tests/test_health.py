"""Tests for /health and /ready observability endpoints.

Uses FastAPI TestClient with stand-in services to verify liveness and
readiness probes without external dependencies.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from replydesk.health import register_health_routes

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_app(services: dict | None = None) -> FastAPI:
    """Create a minimal FastAPI app with health routes and given services."""
    app = FastAPI()
    app.state.services = services or {}
    register_health_routes(app)
    return app


def _cache(refreshed: bool) -> MagicMock:
    cache = MagicMock()
    cache.last_refreshed_at = datetime.now(tz=UTC) if refreshed else None
    return cache


# ---------------------------------------------------------------------------
# /health (liveness)
# ---------------------------------------------------------------------------

class TestHealthEndpoint:
    """GET /health liveness probe."""

    def test_health_returns_200(self) -> None:
        client = TestClient(_make_app())

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


# ---------------------------------------------------------------------------
# /ready (readiness)
# ---------------------------------------------------------------------------

class TestReadyEndpoint:
    """GET /ready readiness probe."""

    def test_ready_returns_200_when_services_ok(self) -> None:
        app = _make_app({"gmail_client": object(), "thread_cache": _cache(refreshed=True)})
        client = TestClient(app)

        response = client.get("/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"] == {"gmail": "ok", "thread_cache": "ok"}

    def test_ready_returns_503_before_first_refresh(self) -> None:
        app = _make_app({"gmail_client": object(), "thread_cache": _cache(refreshed=False)})
        client = TestClient(app)

        response = client.get("/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "not_ready"
        assert body["checks"]["thread_cache"] == "fail"

    def test_ready_returns_503_when_gmail_missing(self) -> None:
        app = _make_app({"gmail_client": None, "thread_cache": None})
        client = TestClient(app)

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"] == {"gmail": "fail", "thread_cache": "fail"}
