"""
FastAPI dependency injection providers.

Every collaborator a route needs (reservation store, configuration resolver,
agent dispatcher, observation slots) comes from a provider here, so tests can
swap any of them with app.dependency_overrides.

Testing Example:
    >>> from fastapi.testclient import TestClient
    >>> from str_access.services.reservation_store import JsonFileReservationStore
    >>>
    >>> store = JsonFileReservationStore(str(tmp_path / "reservations.json"))
    >>> app.dependency_overrides[get_reservation_store] = lambda: store
    >>> client = TestClient(app)
    >>> client.get("/api/reservations/by-code/5039895833")
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from str_access.config import DATABASE_URL, PROPERTIES_FILE, RESERVATIONS_FILE
from str_access.services.agent_dispatcher import AgentDispatcher
from str_access.services.observations import (
    ObservationSlot,
    last_unlock_slot,
    last_webhook_slot,
)
from str_access.services.property_config import ConfigResolver, JsonFilePropertyConfigStore
from str_access.services.reservation_resolver import ReservationResolver
from str_access.services.reservation_store import ReservationStore, build_reservation_store
from str_access.services.unlock_authorizer import UnlockAuthorizer


@lru_cache(maxsize=None)
def get_reservation_store() -> ReservationStore:
    """
    Provide the process-wide reservation store.

    SQL tables when DATABASE_URL is set, otherwise the RESERVATIONS_FILE JSON file.
    """
    return build_reservation_store(DATABASE_URL, RESERVATIONS_FILE)


def get_config_resolver() -> ConfigResolver:
    """Provide a resolver over the PROPERTIES_FILE layers (re-read on every resolve)."""
    return ConfigResolver(JsonFilePropertyConfigStore(PROPERTIES_FILE))


@lru_cache(maxsize=None)
def get_agent_dispatcher() -> AgentDispatcher:
    return AgentDispatcher()


def get_unlock_observations() -> ObservationSlot:
    return last_unlock_slot


def get_webhook_observations() -> ObservationSlot:
    return last_webhook_slot


def get_reservation_resolver(
    store: ReservationStore = Depends(get_reservation_store),
    config_resolver: ConfigResolver = Depends(get_config_resolver),
) -> ReservationResolver:
    return ReservationResolver(store, config_resolver)


def get_unlock_authorizer(
    resolver: ReservationResolver = Depends(get_reservation_resolver),
    config_resolver: ConfigResolver = Depends(get_config_resolver),
    dispatcher: AgentDispatcher = Depends(get_agent_dispatcher),
    observations: ObservationSlot = Depends(get_unlock_observations),
) -> UnlockAuthorizer:
    """
    Provide an UnlockAuthorizer wired to the request's collaborators.

    Overriding get_reservation_store, get_config_resolver, get_agent_dispatcher
    or get_unlock_observations is enough to isolate unlock routes in tests.
    """
    return UnlockAuthorizer(resolver, config_resolver, dispatcher, observations)
