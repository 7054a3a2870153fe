from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from str_access.models.reservations import ReservationByCode, ReservationById

_COLUMNS = ("reservation_id", "code", "raw_payload", "updated_at")


def _row_to_dict(row: Any) -> dict[str, Any]:
    return {col: getattr(row, col) for col in _COLUMNS}


def get_reservation_by_code_key(conn: Connection, code: str) -> Optional[dict[str, Any]]:
    """
    Fetch the record stored under the byCode index key ``code``.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        code (str): Index key to look up.

    Returns:
        Optional[dict[str, Any]]: Row columns, or None if the key is absent
    """
    row = conn.execute(
        select(ReservationByCode).where(ReservationByCode.code_key == code)
    ).fetchone()
    return _row_to_dict(row) if row else None


def get_reservation_by_id_key(conn: Connection, reservation_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch the record stored under the byId index key ``reservation_id``.
    """
    row = conn.execute(
        select(ReservationById).where(ReservationById.id_key == reservation_id)
    ).fetchone()
    return _row_to_dict(row) if row else None


def list_code_index(conn: Connection) -> list[tuple[str, dict[str, Any]]]:
    """Return every (code_key, record) pair in the byCode index."""
    rows = conn.execute(select(ReservationByCode).order_by(ReservationByCode.code_key))
    return [(row.code_key, _row_to_dict(row)) for row in rows]


def list_id_index(conn: Connection) -> list[tuple[str, dict[str, Any]]]:
    """Return every (id_key, record) pair in the byId index."""
    rows = conn.execute(select(ReservationById).order_by(ReservationById.id_key))
    return [(row.id_key, _row_to_dict(row)) for row in rows]
