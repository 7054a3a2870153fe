# models/reservations.py

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from str_access.models.base import Base

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
PayloadType = JSON().with_variant(JSONB(), "postgresql")


class _ReservationRecordColumns:
    """Columns shared by both reservation index tables."""

    reservation_id = Column(String(255), nullable=True)
    code = Column(String(255), nullable=True, index=True)
    raw_payload = Column(PayloadType, nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ReservationByCode(_ReservationRecordColumns, Base):
    """
    Reservation records indexed by guest access code.

    ``code_key`` is the index key the record was written under. It normally
    equals ``code`` but lookups treat ``code`` as canonical.
    """

    __tablename__ = "reservations_by_code"

    code_key = Column(String(255), primary_key=True)


class ReservationById(_ReservationRecordColumns, Base):
    """
    Reservation records indexed by reservation ID.
    """

    __tablename__ = "reservations_by_id"

    id_key = Column(String(255), primary_key=True)
