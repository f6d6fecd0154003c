"""
Health API for the admin backend.

Lightweight endpoints for operational monitoring without exposing secrets.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from salespath_admin.core.database import check_connection
from salespath_admin.core.logging import latency_bucket_ms, get_request_id

logger = logging.getLogger("salespath")

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@router.get("/api/health")
def health():
    """Database probe: 200 healthy / 500 unhealthy."""
    start = time.perf_counter()
    connected = check_connection()
    latency_ms = (time.perf_counter() - start) * 1000

    logger.info(
        "health.db",
        extra={
            "request_id": get_request_id(),
            "status": "healthy" if connected else "unhealthy",
            "latency_bucket": latency_bucket_ms(latency_ms),
        },
    )

    payload = {
        "status": "healthy" if connected else "unhealthy",
        "database": "connected" if connected else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if not connected:
        return JSONResponse(status_code=500, content=payload)
    return payload
