"""
Diagnostic routes: last webhook, last unlock, store dump and seeding.

Mounted only when ENABLE_DEBUG_ROUTES is true.
"""

import copy
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from str_access.dependencies import (
    get_reservation_store,
    get_unlock_observations,
    get_webhook_observations,
)
from str_access.exceptions import StoreUnavailableError
from str_access.normalizers.reservations import extract_reservation_data
from str_access.services.observations import ObservationSlot
from str_access.services.reservation_store import ReservationStore

router = APIRouter()
logger = structlog.get_logger(__name__)

SAMPLE_RESERVATION_PAYLOAD: dict[str, Any] = {
    "data": {
        "id": "res_hospitable_5039895833",
        "code": "5039895833",
        "reservationId": "res_hospitable_5039895833",
        "propertyId": "prop_jersey_001",
        "address": "Test Address - NYC",
        "checkInISO": "2026-01-03T12:00:00-05:00",
        "checkOutISO": "2026-01-10T11:00:00-05:00",
        "steps": [
            {
                "id": "building",
                "title": "Building entrance",
                "description": "Use the button to unlock the building door.",
                "actionLabel": "Open building door",
            },
            {
                "id": "apartment",
                "title": "Apartment door",
                "description": "Use the button to unlock the apartment door.",
                "actionLabel": "Open apartment door",
            },
        ],
        "wifi": {
            "ssid": "MY_WIFI",
            "password": "MY_PASSWORD",
            "notes": "Network is 2.4G/5G; use the same password.",
        },
    }
}


@router.get("/last-hospitable-webhook")
def last_webhook(
    observations: ObservationSlot = Depends(get_webhook_observations),
) -> JSONResponse:
    latest = observations.latest()
    if latest is None:
        return JSONResponse(content={"msg": "No webhook yet"})
    return JSONResponse(content=latest)


@router.get("/last-unlock")
def last_unlock(
    observations: ObservationSlot = Depends(get_unlock_observations),
) -> JSONResponse:
    latest = observations.latest()
    if latest is None:
        return JSONResponse(content={"msg": "No unlock yet"})
    return JSONResponse(content=latest)


@router.get("/reservations")
def dump_reservations(store: ReservationStore = Depends(get_reservation_store)) -> JSONResponse:
    """Return the whole store in its {byCode, byId} layout."""
    try:
        return JSONResponse(content=store.snapshot())
    except StoreUnavailableError as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "error": str(e)},
        )


@router.api_route("/seed", methods=["GET", "POST"])
async def seed_reservation(
    request: Request,
    store: ReservationStore = Depends(get_reservation_store),
) -> JSONResponse:
    """
    Store a test reservation.

    POST {"payload": {...}} stores the given payload; GET, or a POST without
    a payload, stores SAMPLE_RESERVATION_PAYLOAD.
    """
    payload: Any = None
    if request.method == "POST":
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            payload = body.get("payload")

    if not payload:
        payload = copy.deepcopy(SAMPLE_RESERVATION_PAYLOAD)

    data = extract_reservation_data(payload)
    reservation_id = str(data.get("id") or data.get("reservationId") or "res_test_1")
    code = str(data.get("code") or data.get("platform_id") or "5039895833")

    try:
        record = store.upsert(reservation_id, code, payload)
    except StoreUnavailableError as e:
        logger.exception("seed_failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": str(e)},
        )

    logger.info("reservation_seeded", code=record.code, reservation_id=record.id)
    return JSONResponse(content={"ok": True, "saved": record.to_dict()})
