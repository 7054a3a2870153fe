"""
Unit tests for reservation lookup and enrichment.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import Mock

import pytest

from str_access.exceptions import ReservationNotFoundError, StoreUnavailableError
from str_access.normalizers.reservations import normalize_reservation
from str_access.schemas.properties import PropertyConfig
from str_access.schemas.reservations import WifiInfo
from str_access.services.property_config import ConfigResolver
from str_access.services.reservation_resolver import (
    ReservationResolver,
    enrich_reservation,
    find_record_by_code,
)
from str_access.services.reservation_store import JsonFileReservationStore

GUEST_CODE = "5039895833"


@pytest.mark.unit
def test_resolve_returns_record_and_normalized_view(
    reservation_store: JsonFileReservationStore,
    config_resolver: ConfigResolver,
    make_payload: Callable[..., dict[str, Any]],
) -> None:
    reservation_store.upsert("res_1", GUEST_CODE, make_payload())

    resolved = ReservationResolver(reservation_store, config_resolver).resolve(GUEST_CODE)

    assert resolved.record.id == "res_1"
    assert resolved.reservation.code == GUEST_CODE
    assert resolved.reservation.address == "Test Address - NYC"
    assert [s.id for s in resolved.reservation.steps] == ["building", "apartment"]


@pytest.mark.unit
def test_unknown_code_raises_not_found(
    reservation_store: JsonFileReservationStore, config_resolver: ConfigResolver
) -> None:
    with pytest.raises(ReservationNotFoundError) as exc:
        ReservationResolver(reservation_store, config_resolver).resolve("000")
    assert exc.value.code == "000"


@pytest.mark.unit
def test_lookup_falls_back_to_record_content_when_index_key_differs(
    tmp_path: Path, config_resolver: ConfigResolver, make_payload: Callable[..., dict[str, Any]]
) -> None:
    """A record stored under a stale key is still found by its own code field."""
    path = tmp_path / "reservations.json"
    path.write_text(
        json.dumps(
            {
                "byCode": {
                    "res_hospitable_5039895833": {
                        "id": "res_1",
                        "code": GUEST_CODE,
                        "updatedAt": "2026-01-01T00:00:00.000Z",
                        "payload": make_payload(),
                    }
                },
                "byId": {},
            }
        )
    )
    store = JsonFileReservationStore(str(path))

    assert store.get_by_code(GUEST_CODE) is None
    record = find_record_by_code(store, GUEST_CODE)
    assert record is not None
    assert record.id == "res_1"

    resolved = ReservationResolver(store, config_resolver).resolve(GUEST_CODE)
    assert resolved.reservation.code == GUEST_CODE


@pytest.mark.unit
def test_find_record_by_empty_code_is_none(reservation_store: JsonFileReservationStore) -> None:
    assert find_record_by_code(reservation_store, "") is None


@pytest.mark.unit
def test_unavailable_store_degrades_to_not_found(config_resolver: ConfigResolver) -> None:
    store = Mock()
    store.get_by_code.side_effect = StoreUnavailableError("disk gone")

    with pytest.raises(ReservationNotFoundError):
        ReservationResolver(store, config_resolver).resolve(GUEST_CODE)


@pytest.mark.unit
def test_resolve_is_idempotent(
    reservation_store: JsonFileReservationStore,
    config_resolver: ConfigResolver,
    properties: dict[str, Any],
    make_payload: Callable[..., dict[str, Any]],
) -> None:
    properties["byCode"][GUEST_CODE] = {"photos": ["/img/front.jpg"], "mapAddress": "1 Main St"}
    reservation_store.upsert("res_1", GUEST_CODE, make_payload())
    resolver = ReservationResolver(reservation_store, config_resolver)

    first = resolver.resolve(GUEST_CODE)
    second = resolver.resolve(GUEST_CODE)

    assert first.reservation == second.reservation
    assert first.record == second.record


@pytest.mark.unit
def test_resolve_enriches_from_property_layer(
    reservation_store: JsonFileReservationStore,
    config_resolver: ConfigResolver,
    properties: dict[str, Any],
    make_payload: Callable[..., dict[str, Any]],
) -> None:
    properties["byPropertyId"]["prop_jersey_001"] = {
        "photos": ["/img/entrance.jpg"],
        "wifi": {"ssid": "JERSEY", "password": "secret"},
        "mapAddress": "10 Jersey Ave, Jersey City",
    }
    reservation_store.upsert("res_1", GUEST_CODE, make_payload())

    reservation = ReservationResolver(reservation_store, config_resolver).resolve(
        GUEST_CODE
    ).reservation

    assert reservation.photos == ["/img/entrance.jpg"]
    assert reservation.wifi is not None
    assert reservation.wifi.ssid == "JERSEY"
    assert reservation.map_address == "10 Jersey Ave, Jersey City"
    assert reservation.address == "10 Jersey Ave, Jersey City"


# ---------------------------------------------------------------------------
# enrich_reservation
# ---------------------------------------------------------------------------


def _reservation(**data: Any):  # type: ignore[no-untyped-def]
    return normalize_reservation({"data": data})


@pytest.mark.unit
def test_enrichment_keeps_reservation_photos() -> None:
    reservation = _reservation(photos=["/img/mine.jpg"])
    config = PropertyConfig(photos=["/img/config.jpg"])

    assert enrich_reservation(reservation, config).photos == ["/img/mine.jpg"]


@pytest.mark.unit
def test_enrichment_fills_missing_fields() -> None:
    reservation = _reservation(code="1")
    config = PropertyConfig(
        photos=["/img/config.jpg"],
        wifi=WifiInfo(ssid="CFG", password="pw"),
        property_id="prop_2",
    )

    enriched = enrich_reservation(reservation, config)

    assert enriched.property_id == "prop_2"
    assert enriched.photos == ["/img/config.jpg"]
    assert enriched.wifi == WifiInfo(ssid="CFG", password="pw")
    assert enriched.address == ""


@pytest.mark.unit
def test_enrichment_keeps_reservation_wifi_and_property_id() -> None:
    reservation = _reservation(propertyId="prop_1", wifi={"ssid": "MINE", "password": "a"})
    config = PropertyConfig(wifi=WifiInfo(ssid="CFG", password="b"), property_id="prop_2")

    enriched = enrich_reservation(reservation, config)

    assert enriched.property_id == "prop_1"
    assert enriched.wifi is not None
    assert enriched.wifi.ssid == "MINE"


@pytest.mark.unit
def test_configured_map_address_overrides_and_address_mirrors_it() -> None:
    reservation = _reservation(address="Wrong Street 1", mapAddress="Wrong Street 1")
    enriched = enrich_reservation(reservation, PropertyConfig(map_address="Right Street 2"))

    assert enriched.map_address == "Right Street 2"
    assert enriched.address == "Right Street 2"


@pytest.mark.unit
def test_address_mirrors_reservation_map_address_without_config() -> None:
    reservation = _reservation(address="Street 1", mapAddress="Map Street 1")
    enriched = enrich_reservation(reservation, PropertyConfig())

    assert enriched.address == "Map Street 1"


@pytest.mark.unit
def test_enrichment_does_not_modify_input() -> None:
    reservation = _reservation()
    enrich_reservation(reservation, PropertyConfig(photos=["/img/x.jpg"], map_address="M"))

    assert reservation.photos == []
    assert reservation.map_address == ""
