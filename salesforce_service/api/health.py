"""Liveness and diagnostics routes."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health_check(request: Request) -> JSONResponse:
    """Report storage and cache reachability; 503 when a backend ping fails."""
    state = request.app.state
    services: dict[str, str] = {}
    try:
        if state.settings.uses_memory_storage:
            services["storage"] = "memory"
        else:
            state.store.ping()
            services["database"] = "connected"
            state.cache.ping()
            services["redis"] = "connected"
    except Exception as exc:
        logger.error("health check failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "timestamp": _timestamp(), "error": str(exc)},
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "healthy", "timestamp": _timestamp(), "services": services},
    )


@router.get("/test-delay", include_in_schema=False)
async def delayed_response(request: Request, ms: int = Query(default=1000, ge=0)) -> dict:
    """Sleep for ``ms`` milliseconds; only served when ``APP_ENV=test``."""
    if request.app.state.settings.env != "test":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    await asyncio.sleep(ms / 1000)
    return {"message": "Delayed response", "delayMs": ms, "timestamp": _timestamp()}
