"""
Reservation lookup by access code, with property-configuration enrichment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from str_access.exceptions import ReservationNotFoundError, StoreUnavailableError
from str_access.metrics import reservation_lookups
from str_access.normalizers.reservations import normalize_reservation
from str_access.schemas.properties import PropertyConfig
from str_access.schemas.reservations import NormalizedReservation, ReservationRecord
from str_access.services.property_config import ConfigResolver
from str_access.services.reservation_store import ReservationStore

logger = structlog.get_logger(__name__)


@dataclass
class ResolvedReservation:
    """A stored record together with its normalized, enriched view."""

    record: ReservationRecord
    reservation: NormalizedReservation


def find_record_by_code(store: ReservationStore, code: str) -> Optional[ReservationRecord]:
    """
    Find the record whose access code is ``code``.

    Tries the byCode index first, then scans every indexed record comparing
    the record's own ``code`` field, so records written under a stale or
    mistyped key are still found.
    """
    if not code:
        return None

    record = store.get_by_code(code)
    if record is not None:
        return record

    for candidate in store.list_by_code():
        if (candidate.code or "") == code:
            logger.info("reservation_found_by_scan", code=code)
            return candidate
    return None


def enrich_reservation(
    reservation: NormalizedReservation, config: PropertyConfig
) -> NormalizedReservation:
    """
    Fill gaps in a reservation from its property configuration.

    Values supplied by the reservation are kept, except the map address,
    which the configuration overrides whenever it sets one; the displayed
    address then mirrors the map address.

    Args:
        reservation: Normalized reservation (not modified)
        config: Effective property configuration

    Returns:
        A new NormalizedReservation
    """
    enriched = reservation.model_copy(deep=True)

    if not enriched.property_id and config.property_id:
        enriched.property_id = config.property_id

    if not enriched.photos:
        enriched.photos = list(config.photos)

    if enriched.wifi is None and config.wifi is not None:
        enriched.wifi = config.wifi.model_copy()

    if config.map_address:
        enriched.map_address = config.map_address

    if enriched.map_address:
        enriched.address = enriched.map_address

    return enriched


class ReservationResolver:
    """
    Looks up a reservation by access code and builds the guest-facing view.

    Example:
        >>> resolver = ReservationResolver(store, ConfigResolver(config_store))
        >>> resolved = resolver.resolve("5039895833")
        >>> resolved.reservation.check_in_iso
        '2026-01-03T12:00:00-05:00'
    """

    def __init__(self, store: ReservationStore, config_resolver: ConfigResolver):
        self.store = store
        self.config_resolver = config_resolver

    def find_record(self, code: str) -> ReservationRecord:
        """
        Return the stored record for ``code``.

        Raises:
            ReservationNotFoundError: If no record matches, or the store cannot be read
        """
        try:
            record = find_record_by_code(self.store, code)
        except StoreUnavailableError as e:
            logger.error("reservation_store_unavailable", code=code, error=str(e))
            record = None

        if record is None:
            reservation_lookups.labels(status="not_found").inc()
            raise ReservationNotFoundError(code)

        reservation_lookups.labels(status="found").inc()
        return record

    def resolve(self, code: str) -> ResolvedReservation:
        """
        Resolve, normalize and enrich the reservation for ``code``.

        Raises:
            ReservationNotFoundError: If no record matches
        """
        record = self.find_record(code)
        reservation = normalize_reservation(record.payload, record.id, record.code)

        config = self.config_resolver.resolve(code, reservation.property_id or None)
        enriched = enrich_reservation(reservation, config)
        return ResolvedReservation(record=record, reservation=enriched)
