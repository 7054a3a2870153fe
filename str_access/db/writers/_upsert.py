"""
Dialect-aware upsert helper.

Postgres and SQLite both support INSERT ... ON CONFLICT DO UPDATE with the
same SQLAlchemy API, so writers can stay dialect-agnostic.
"""

from typing import Any, Callable

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection

_DIALECT_INSERTS: dict[str, Callable[..., Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_rows(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_column: str,
    update_columns: list[str] | None = None,
) -> None:
    """
    Insert rows, replacing the listed columns when the key already exists.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class (e.g., ReservationByCode)
        rows: List of row dicts to upsert
        conflict_column: Primary key column for ON CONFLICT
        update_columns: Columns to overwrite on conflict (default: every non-key column)

    Raises:
        ValueError: If the connection's dialect has no ON CONFLICT support here

    Example:
        >>> with engine.begin() as conn:
        ...     upsert_rows(conn, ReservationByCode, [{"code_key": "5039", ...}], "code_key")
    """
    if not rows:
        return

    insert = _DIALECT_INSERTS.get(conn.dialect.name)
    if insert is None:
        raise ValueError(f"Upsert not supported for dialect {conn.dialect.name!r}")

    if update_columns is None:
        update_columns = [col for col in rows[0] if col != conflict_column]

    stmt = insert(table).values(rows)
    set_dict = {col: getattr(stmt.excluded, col) for col in update_columns}
    stmt = stmt.on_conflict_do_update(index_elements=[conflict_column], set_=set_dict)

    conn.execute(stmt)
