"""
Integration tests for the JSON file reservation store.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from str_access.exceptions import StoreUnavailableError
from str_access.services.reservation_store import (
    JsonFileReservationStore,
    SqlReservationStore,
    build_reservation_store,
)

GUEST_CODE = "5039895833"


@pytest.mark.integration
def test_missing_file_reads_as_empty(tmp_path: Path) -> None:
    store = JsonFileReservationStore(str(tmp_path / "reservations.json"))

    assert store.get_by_code(GUEST_CODE) is None
    assert store.snapshot() == {"byCode": {}, "byId": {}}
    assert not (tmp_path / "reservations.json").exists()


@pytest.mark.integration
def test_upsert_persists_layout(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "reservations.json"
    store = JsonFileReservationStore(str(path))

    store.upsert("res_1", GUEST_CODE, {"data": {"id": "res_1"}})

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk["byCode"][GUEST_CODE] == on_disk["byId"]["res_1"]
    assert on_disk["byCode"][GUEST_CODE]["payload"] == {"data": {"id": "res_1"}}
    # No temp files left behind
    assert [p.name for p in path.parent.iterdir()] == ["reservations.json"]


@pytest.mark.integration
def test_records_survive_a_new_store_instance(tmp_path: Path) -> None:
    path = str(tmp_path / "reservations.json")
    JsonFileReservationStore(path).upsert("res_1", GUEST_CODE, {"data": {}})

    record = JsonFileReservationStore(path).get_by_id("res_1")

    assert record is not None
    assert record.code == GUEST_CODE


@pytest.mark.integration
def test_numeric_keys_in_file_are_read_as_strings(tmp_path: Path) -> None:
    path = tmp_path / "reservations.json"
    path.write_text(
        json.dumps(
            {"byCode": {"42": {"id": 7, "code": 42, "updatedAt": "", "payload": {}}}, "byId": {}}
        ),
        encoding="utf-8",
    )

    record = JsonFileReservationStore(str(path)).get_by_code("42")

    assert record is not None
    assert record.id == "7"
    assert record.code == "42"


@pytest.mark.integration
def test_empty_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "reservations.json"
    path.write_text("", encoding="utf-8")

    assert JsonFileReservationStore(str(path)).list_by_code() == []


@pytest.mark.integration
@pytest.mark.parametrize("content", ["{oops", "[1, 2, 3]"])
def test_corrupt_file_raises_store_unavailable(tmp_path: Path, content: str) -> None:
    path = tmp_path / "reservations.json"
    path.write_text(content, encoding="utf-8")
    store = JsonFileReservationStore(str(path))

    with pytest.raises(StoreUnavailableError):
        store.get_by_code(GUEST_CODE)
    with pytest.raises(StoreUnavailableError):
        store.upsert("res_1", GUEST_CODE, {})
    assert store.check_health() is False
    # The corrupt file is left untouched
    assert path.read_text(encoding="utf-8") == content


@pytest.mark.integration
def test_build_reservation_store_picks_backend(tmp_path: Path) -> None:
    json_store = build_reservation_store(None, str(tmp_path / "reservations.json"))
    sql_store = build_reservation_store(
        f"sqlite:///{tmp_path / 'reservations.db'}", str(tmp_path / "unused.json")
    )

    assert isinstance(json_store, JsonFileReservationStore)
    assert isinstance(sql_store, SqlReservationStore)
