"""Guest unlock route."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from str_access.dependencies import get_unlock_authorizer
from str_access.exceptions import (
    AccessNotActiveError,
    InvalidRequestError,
    ReservationNotFoundError,
)
from str_access.schemas.unlock import UnlockRequestPayload
from str_access.services.unlock_authorizer import UnlockAuthorizer

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _read_payload(request: Request) -> UnlockRequestPayload:
    """Parse the body leniently; anything that is not a JSON object counts as empty."""
    body: Any
    try:
        body = await request.json()
    except ValueError:
        body = None
    return UnlockRequestPayload.model_validate(body if isinstance(body, dict) else {})


@router.post("/unlock")
async def unlock(
    request: Request,
    authorizer: UnlockAuthorizer = Depends(get_unlock_authorizer),
) -> JSONResponse:
    """
    Unlock one step (door) of a reservation.

    Allowed only while the stay is active. The physical outcome is reported
    in ``result``; agent failures still return 200.

    Expected body:
        {"code": "5039895833", "stepId": "building", "action": "building"}

    Returns:
        200 {ok, code, stepId, action, result}
        400 missing code/stepId (including an empty or non-object body),
        404 unknown code, 403 stay not active
    """
    payload = await _read_payload(request)

    try:
        # The agent call blocks, keep it off the event loop
        result = await run_in_threadpool(
            authorizer.authorize, payload.code, payload.step_id, payload.action or None
        )
    except InvalidRequestError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "error": "Missing code or stepId"},
        )
    except ReservationNotFoundError as e:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"ok": False, "error": "Reservation not found", "code": e.code},
        )
    except AccessNotActiveError as e:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={
                "ok": False,
                "error": "Access not active",
                "phase": e.phase,
                "code": e.code,
                "stepId": e.step_id,
            },
        )

    return JSONResponse(content=result.to_response())
