"""Guest-facing reservation lookup routes."""

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from str_access.dependencies import get_reservation_resolver
from str_access.exceptions import ReservationNotFoundError
from str_access.services.access_phase import AccessPhase, evaluate_access_phase
from str_access.services.reservation_resolver import ReservationResolver
from str_access.services.step_photos import build_countdown, order_steps, resolve_step_photo
from str_access.utils.datetime import utc_now

router = APIRouter()
logger = structlog.get_logger(__name__)


def _not_found(code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"ok": False, "error": "Not found", "code": code},
    )


@router.get("/reservations/by-code/{code}")
def get_reservation_by_code(
    code: str,
    resolver: ReservationResolver = Depends(get_reservation_resolver),
) -> JSONResponse:
    """
    Return the enriched reservation for an access code.

    Example:
        >>> GET /api/reservations/by-code/5039895833
        {"ok": true, "code": "5039895833", "id": "res_1", "updatedAt": "...",
         "reservation": {"reservationId": "res_1", "checkInISO": "...", ...}}
    """
    try:
        resolved = resolver.resolve(code)
    except ReservationNotFoundError:
        logger.info("reservation_lookup_not_found", code=code)
        return _not_found(code)

    return JSONResponse(
        content={
            "ok": True,
            "code": resolved.reservation.code or code,
            "id": resolved.record.id,
            "updatedAt": resolved.record.updated_at,
            "reservation": resolved.reservation.to_response(),
        }
    )


@router.get("/reservations/by-code/{code}/access")
def get_reservation_access(
    code: str,
    resolver: ReservationResolver = Depends(get_reservation_resolver),
) -> JSONResponse:
    """
    Return what the instructions page needs right now: the access phase,
    the countdown to the next boundary and the ordered unlock steps with
    their photos.
    """
    try:
        resolved = resolver.resolve(code)
    except ReservationNotFoundError:
        return _not_found(code)

    reservation = resolved.reservation
    now = utc_now()
    phase = evaluate_access_phase(now, reservation.check_in_iso, reservation.check_out_iso)
    countdown = build_countdown(phase, now, reservation.check_in_iso, reservation.check_out_iso)

    steps = []
    for step in order_steps(reservation.steps):
        item = step.model_dump(by_alias=True, mode="json")
        item["photoUrl"] = resolve_step_photo(step.id, step.photo_url, reservation.photos)
        steps.append(item)

    return JSONResponse(
        content={
            "ok": True,
            "code": reservation.code or code,
            "phase": phase.value,
            "buttonsEnabled": phase == AccessPhase.ACTIVE,
            "countdown": countdown.to_dict(),
            "steps": steps,
        }
    )
