"""Hospitable webhook receiver route."""

import json
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from str_access.config import HOSPITABLE_WEBHOOK_SECRET
from str_access.dependencies import get_reservation_store, get_webhook_observations
from str_access.exceptions import StoreUnavailableError
from str_access.metrics import webhooks_received
from str_access.normalizers.reservations import extract_identity
from str_access.services.observations import ObservationSlot
from str_access.services.reservation_store import ReservationStore
from str_access.services.webhook_signature import find_signature, verify_signature
from str_access.utils.datetime import to_iso, utc_now

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/webhooks/hospitable")
async def receive_hospitable_webhook(
    request: Request,
    store: ReservationStore = Depends(get_reservation_store),
    observations: ObservationSlot = Depends(get_webhook_observations),
) -> JSONResponse:
    """
    Handle incoming Hospitable reservation webhooks.

    The body is stored as-is (full replace) under its reservation id and
    guest access code. Hospitable may nest the reservation as ``data`` or
    ``body.data``:

        {
            "action": "reservation.changed",
            "data": {"id": "res_123", "code": "5039895833", "checkInISO": "...", ...}
        }

    Authentication: optional HMAC-SHA256 of the raw body, keyed with
    HOSPITABLE_WEBHOOK_SECRET. Without a secret every delivery is accepted.

    Returns:
        JSONResponse: {"ok": true} acknowledgment
    """
    raw_body = await request.body()

    payload: Any
    try:
        payload = json.loads(raw_body) if raw_body else {}
        parse_error = None
    except ValueError as e:
        payload = raw_body.decode("utf-8", errors="replace")
        parse_error = e

    # Kept even for rejected deliveries so signature problems can be debugged
    observations.record({"at": to_iso(utc_now()), "body": payload})

    if not verify_signature(raw_body, find_signature(request.headers), HOSPITABLE_WEBHOOK_SECRET):
        logger.warning("webhook_invalid_signature")
        webhooks_received.labels(status="invalid_signature").inc()
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"ok": False, "error": "Invalid signature"},
        )

    if parse_error is not None:
        logger.warning("webhook_invalid_json", error=str(parse_error))
        webhooks_received.labels(status="invalid_json").inc()
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "error": "Invalid JSON"},
        )

    reservation_id, code = extract_identity(payload)

    try:
        record = store.upsert(reservation_id, code, payload)
    except StoreUnavailableError as e:
        logger.error("webhook_store_failed", code=code, reservation_id=reservation_id, error=str(e))
        webhooks_received.labels(status="store_unavailable").inc()
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "error": "Storage unavailable"},
        )

    webhook_event = None
    if isinstance(payload, dict):
        webhook_event = payload.get("action") or payload.get("event")

    logger.info(
        "webhook_received",
        code=record.code or "-",
        reservation_id=record.id or "-",
        webhook_event=webhook_event,
    )
    webhooks_received.labels(status="accepted").inc()

    return JSONResponse(content={"ok": True})
