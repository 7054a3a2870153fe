"""
Shared fixtures: temp-file reservation stores, payload builders and an app
client with every collaborator overridden.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generator, Optional
from unittest.mock import Mock

import pytest

# Keep the app's default stores away from the working tree
_TMP_DIR = tempfile.mkdtemp(prefix="str-access-tests-")
os.environ.setdefault("RESERVATIONS_FILE", os.path.join(_TMP_DIR, "reservations.json"))
os.environ.setdefault("PROPERTIES_FILE", os.path.join(_TMP_DIR, "properties.json"))
os.environ.pop("DATABASE_URL", None)
os.environ.pop("HOSPITABLE_WEBHOOK_SECRET", None)

from fastapi.testclient import TestClient  # noqa: E402

from str_access.dependencies import (  # noqa: E402
    get_agent_dispatcher,
    get_config_resolver,
    get_reservation_store,
    get_unlock_observations,
    get_webhook_observations,
)
from str_access.main import app  # noqa: E402
from str_access.services.agent_dispatcher import AgentDispatcher, DispatchOutcome  # noqa: E402
from str_access.services.observations import ObservationSlot  # noqa: E402
from str_access.services.property_config import (  # noqa: E402
    ConfigResolver,
    PropertyConfigSnapshot,
)
from str_access.services.reservation_store import JsonFileReservationStore  # noqa: E402

GUEST_CODE = "5039895833"


def iso(dt: datetime) -> str:
    return dt.isoformat()


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def make_payload(now: datetime) -> Callable[..., dict[str, Any]]:
    """
    Factory for Hospitable-shaped payloads ({"data": {...}}).

    By default the stay started an hour ago and ends in two days.
    """

    def _make(
        code: str = GUEST_CODE,
        reservation_id: str = "res_hospitable_5039895833",
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
        **overrides: Any,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": reservation_id,
            "code": code,
            "propertyId": "prop_jersey_001",
            "address": "Test Address - NYC",
            "checkInISO": iso(check_in or now - timedelta(hours=1)),
            "checkOutISO": iso(check_out or now + timedelta(days=2)),
            "steps": [
                {
                    "id": "building",
                    "title": "Building entrance",
                    "description": "Use the button to unlock the building door.",
                    "actionLabel": "Open building door",
                },
                {
                    "id": "apartment",
                    "title": "Apartment door",
                    "description": "Use the button to unlock the apartment door.",
                    "actionLabel": "Open apartment door",
                },
            ],
        }
        data.update(overrides)
        return {"data": data}

    return _make


@pytest.fixture
def reservation_store(tmp_path: Any) -> JsonFileReservationStore:
    return JsonFileReservationStore(str(tmp_path / "reservations.json"))


@pytest.fixture
def properties() -> dict[str, Any]:
    """Mutable property layers backing the config_resolver fixture."""
    return {"defaults": {}, "byCode": {}, "byPropertyId": {}}


@pytest.fixture
def config_resolver(properties: dict[str, Any]) -> ConfigResolver:
    class _DictStore:
        # Re-read on every load so tests can edit layers after setup
        def load(self) -> PropertyConfigSnapshot:
            return PropertyConfigSnapshot.from_dict(properties)

    return ConfigResolver(_DictStore())


@pytest.fixture
def dispatcher() -> Mock:
    mock = Mock(spec=AgentDispatcher)
    mock.dispatch.return_value = DispatchOutcome(result="agent-ok", response={"ok": True})
    return mock


@pytest.fixture
def unlock_slot() -> ObservationSlot:
    return ObservationSlot("test_last_unlock")


@pytest.fixture
def webhook_slot() -> ObservationSlot:
    return ObservationSlot("test_last_webhook")


@pytest.fixture
def client(
    reservation_store: JsonFileReservationStore,
    config_resolver: ConfigResolver,
    dispatcher: Mock,
    unlock_slot: ObservationSlot,
    webhook_slot: ObservationSlot,
) -> Generator[TestClient, None, None]:
    """TestClient with storage, configuration, agent and observation slots isolated."""
    app.dependency_overrides[get_reservation_store] = lambda: reservation_store
    app.dependency_overrides[get_config_resolver] = lambda: config_resolver
    app.dependency_overrides[get_agent_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_unlock_observations] = lambda: unlock_slot
    app.dependency_overrides[get_webhook_observations] = lambda: webhook_slot

    yield TestClient(app)

    app.dependency_overrides.clear()
