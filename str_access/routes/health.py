"""
Health and readiness check endpoints.

/health only says the process is up; /ready also checks that the
reservation store can be read.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from str_access.dependencies import get_reservation_store
from str_access.services.reservation_store import ReservationStore

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check() -> JSONResponse:
    """
    Liveness probe endpoint.

    Example:
        >>> GET /health
        {"ok": true, "status": "running"}
    """
    return JSONResponse(content={"ok": True, "status": "running"})


@router.get("/ready")
def readiness_check(store: ReservationStore = Depends(get_reservation_store)) -> JSONResponse:
    """
    Readiness probe endpoint.

    Returns 200 if the reservation store is readable, 503 otherwise.

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"reservation_store": "ok"}}
    """
    checks = {}

    if store.check_health():
        checks["reservation_store"] = "ok"
        return JSONResponse(content={"status": "ready", "checks": checks})

    logger.error("readiness_check_failed", reason="reservation_store_not_accessible")
    checks["reservation_store"] = "failed"
    return JSONResponse(
        status_code=503,
        content={"status": "not ready", "checks": checks},
    )
