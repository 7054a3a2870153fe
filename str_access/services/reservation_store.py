"""
Reservation persistence.

Records are indexed twice, by access code and by reservation ID:

    {"byCode": {"5039895833": record}, "byId": {"res_123": record}}

Every write fully replaces the record under both keys. Two backends share
the ReservationStore protocol: a JSON file (default) and SQL tables (when
DATABASE_URL is set).
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from datetime import datetime
from typing import Any, Optional, Protocol

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from str_access.db.engine import check_engine_health, get_engine, init_db
from str_access.db.readers.reservations import (
    get_reservation_by_code_key,
    get_reservation_by_id_key,
    list_code_index,
    list_id_index,
)
from str_access.db.writers.reservations import upsert_reservation
from str_access.exceptions import StoreUnavailableError
from str_access.schemas.reservations import ReservationRecord
from str_access.utils.datetime import to_iso, utc_now

logger = structlog.get_logger(__name__)


class ReservationStore(Protocol):
    """Persistence contract for reservation records."""

    def upsert(
        self, reservation_id: Optional[str], code: Optional[str], payload: Any
    ) -> ReservationRecord:
        """Replace the record under its code and id keys and return it."""
        ...

    def get_by_code(self, code: str) -> Optional[ReservationRecord]:
        """Index lookup only; no content scan."""
        ...

    def get_by_id(self, reservation_id: str) -> Optional[ReservationRecord]: ...

    def list_by_code(self) -> list[ReservationRecord]:
        """Every record in the byCode index."""
        ...

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """The whole store in its persisted {byCode, byId} layout."""
        ...

    def check_health(self) -> bool: ...


def _empty_layout() -> dict[str, dict[str, Any]]:
    return {"byCode": {}, "byId": {}}


class JsonFileReservationStore:
    """
    Reservation store backed by a single JSON file.

    Writes are read-modify-write under a process lock and land through a temp
    file swapped in with os.replace, so readers never see a partial file.

    Example:
        >>> store = JsonFileReservationStore("data/reservations.json")
        >>> store.upsert("res_1", "5039895833", {"data": {...}})
        >>> store.get_by_code("5039895833").id
        'res_1'
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read(self) -> dict[str, dict[str, Any]]:
        if not os.path.exists(self.path):
            return _empty_layout()

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = f.read().strip()
            db = json.loads(raw) if raw else {}
        except (OSError, ValueError) as e:
            logger.error("reservation_store_read_failed", path=self.path, error=str(e))
            raise StoreUnavailableError(f"Cannot read reservations file {self.path}") from e

        if not isinstance(db, dict):
            raise StoreUnavailableError(f"Reservations file {self.path} is not a JSON object")
        if not isinstance(db.get("byCode"), dict):
            db["byCode"] = {}
        if not isinstance(db.get("byId"), dict):
            db["byId"] = {}
        return db

    def _write(self, db: dict[str, dict[str, Any]]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(db, f, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error("reservation_store_write_failed", path=self.path, error=str(e))
            raise StoreUnavailableError(f"Cannot write reservations file {self.path}") from e

    @staticmethod
    def _record(raw: Any) -> Optional[ReservationRecord]:
        if not isinstance(raw, dict):
            return None
        return ReservationRecord(
            id=str(raw["id"]) if raw.get("id") else None,
            code=str(raw["code"]) if raw.get("code") else None,
            updated_at=str(raw.get("updatedAt") or ""),
            payload=raw.get("payload"),
        )

    def upsert(
        self, reservation_id: Optional[str], code: Optional[str], payload: Any
    ) -> ReservationRecord:
        record = ReservationRecord(
            id=str(reservation_id) if reservation_id else None,
            code=str(code) if code else None,
            updated_at=to_iso(utc_now()),
            payload=payload,
        )

        with self._lock:
            db = self._read()
            if record.code:
                db["byCode"][record.code] = record.to_dict()
            if record.id:
                db["byId"][record.id] = record.to_dict()
            self._write(db)

        logger.info("reservation_upserted", code=record.code, reservation_id=record.id)
        return record

    def get_by_code(self, code: str) -> Optional[ReservationRecord]:
        return self._record(self._read()["byCode"].get(code))

    def get_by_id(self, reservation_id: str) -> Optional[ReservationRecord]:
        return self._record(self._read()["byId"].get(reservation_id))

    def list_by_code(self) -> list[ReservationRecord]:
        records = (self._record(raw) for raw in self._read()["byCode"].values())
        return [r for r in records if r is not None]

    def snapshot(self) -> dict[str, dict[str, Any]]:
        return self._read()

    def check_health(self) -> bool:
        try:
            self._read()
        except StoreUnavailableError:
            return False
        return True


class SqlReservationStore:
    """
    Reservation store backed by the reservations_by_code / reservations_by_id tables.

    Both index rows are written in one transaction.
    """

    def __init__(self, engine: Engine, create_tables: bool = True):
        self.engine = engine
        if create_tables:
            init_db(engine)

    @staticmethod
    def _record(row: Optional[dict[str, Any]]) -> Optional[ReservationRecord]:
        if row is None:
            return None
        updated_at = row["updated_at"]
        return ReservationRecord(
            id=row["reservation_id"],
            code=row["code"],
            updated_at=to_iso(updated_at) if isinstance(updated_at, datetime) else "",
            payload=row["raw_payload"],
        )

    def upsert(
        self, reservation_id: Optional[str], code: Optional[str], payload: Any
    ) -> ReservationRecord:
        now = utc_now()
        record_id = str(reservation_id) if reservation_id else None
        record_code = str(code) if code else None

        try:
            upsert_reservation(self.engine, record_id, record_code, payload, now)
        except SQLAlchemyError as e:
            logger.error("reservation_store_write_failed", error=str(e))
            raise StoreUnavailableError("Cannot write reservation") from e

        return ReservationRecord(
            id=record_id, code=record_code, updated_at=to_iso(now), payload=payload
        )

    def get_by_code(self, code: str) -> Optional[ReservationRecord]:
        try:
            with self.engine.connect() as conn:
                return self._record(get_reservation_by_code_key(conn, code))
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Cannot read reservations") from e

    def get_by_id(self, reservation_id: str) -> Optional[ReservationRecord]:
        try:
            with self.engine.connect() as conn:
                return self._record(get_reservation_by_id_key(conn, reservation_id))
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Cannot read reservations") from e

    def list_by_code(self) -> list[ReservationRecord]:
        try:
            with self.engine.connect() as conn:
                rows = list_code_index(conn)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Cannot read reservations") from e
        return [r for r in (self._record(row) for _, row in rows) if r is not None]

    def snapshot(self) -> dict[str, dict[str, Any]]:
        try:
            with self.engine.connect() as conn:
                by_code = list_code_index(conn)
                by_id = list_id_index(conn)
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Cannot read reservations") from e

        def _layout(rows: list[tuple[str, dict[str, Any]]]) -> dict[str, Any]:
            out: dict[str, Any] = {}
            for key, row in rows:
                record = self._record(row)
                if record is not None:
                    out[key] = record.to_dict()
            return out

        return {"byCode": _layout(by_code), "byId": _layout(by_id)}

    def check_health(self) -> bool:
        return check_engine_health(self.engine)


def build_reservation_store(
    database_url: Optional[str], reservations_file: str
) -> ReservationStore:
    """Pick the SQL store when a database URL is configured, else the JSON file."""
    if database_url:
        logger.info("reservation_store_selected", backend="sql")
        return SqlReservationStore(get_engine(database_url))

    logger.info("reservation_store_selected", backend="json", path=reservations_file)
    return JsonFileReservationStore(reservations_file)
