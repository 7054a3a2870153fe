from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from str_access.db.writers._upsert import upsert_rows
from str_access.models.reservations import ReservationByCode, ReservationById

logger = structlog.get_logger(__name__)


def upsert_reservation(
    engine: Engine,
    reservation_id: Optional[str],
    code: Optional[str],
    payload: Any,
    updated_at: datetime,
) -> None:
    """
    Write a reservation under its code and id keys in one transaction.

    The stored payload is fully replaced, never merged. Readers see either
    the previous record or the new one.

    Args:
        engine: SQLAlchemy Engine
        reservation_id: Reservation ID (byId key), or None
        code: Guest access code (byCode key), or None
        payload: Raw webhook or seed body
        updated_at: Write timestamp
    """
    row = {
        "reservation_id": reservation_id,
        "code": code,
        "raw_payload": payload,
        "updated_at": updated_at,
    }

    with engine.begin() as conn:
        if code:
            upsert_rows(conn, ReservationByCode, [{"code_key": code, **row}], "code_key")
        if reservation_id:
            upsert_rows(conn, ReservationById, [{"id_key": reservation_id, **row}], "id_key")

    logger.info("reservation_upserted", code=code, reservation_id=reservation_id)
