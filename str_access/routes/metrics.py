"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP str_access_unlock_requests_total Unlock requests by outcome
        # TYPE str_access_unlock_requests_total counter
        str_access_unlock_requests_total{result="stub-ok"} 3.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """Expose metrics in Prometheus text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
