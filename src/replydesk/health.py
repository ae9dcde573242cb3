"""Health and readiness endpoints.

Provides two top-level routes:

- ``GET /health`` -- Liveness probe.  Returns 200 if the process is alive.
- ``GET /ready``  -- Readiness probe.  Returns 200 only when the Gmail client
  is initialized **and** the thread cache has completed a refresh.  Returns
  503 with per-check details otherwise.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


def register_health_routes(app: FastAPI) -> None:
    """Register ``/health`` and ``/ready`` endpoints on *app*.

    Args:
        app: The FastAPI application instance.
    """

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe -- always returns 200 if the process is running."""
        return {"status": "healthy"}

    @app.get("/ready")
    async def ready(request: Request) -> JSONResponse:
        """Readiness probe -- checks Gmail client and first cache refresh."""
        services: dict[str, Any] = request.app.state.services
        checks: dict[str, str] = {}

        checks["gmail"] = "ok" if services.get("gmail_client") is not None else "fail"

        cache = services.get("thread_cache")
        if cache is not None and cache.last_refreshed_at is not None:
            checks["thread_cache"] = "ok"
        else:
            checks["thread_cache"] = "fail"

        all_ok = all(v == "ok" for v in checks.values())
        status = "ready" if all_ok else "not_ready"
        code = 200 if all_ok else 503

        return JSONResponse(content={"status": status, "checks": checks}, status_code=code)
