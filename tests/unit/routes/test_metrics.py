"""
Unit tests for metrics endpoint.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from str_access.main import app
from str_access.metrics import (
    agent_latency,
    reservation_lookups,
    unlock_requests,
    webhooks_received,
)
from str_access.services.reservation_store import JsonFileReservationStore


@pytest.fixture
def metrics_client() -> TestClient:
    return TestClient(app)


@pytest.mark.unit
def test_metrics_endpoint_returns_prometheus_format(metrics_client: TestClient) -> None:
    response = metrics_client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]


@pytest.mark.unit
def test_metrics_endpoint_contains_custom_metrics(metrics_client: TestClient) -> None:
    reservation_lookups.labels(status="found").inc()
    unlock_requests.labels(result="stub-ok").inc()
    agent_latency.labels(result="agent-ok").observe(0.2)
    webhooks_received.labels(status="accepted").inc()

    content = metrics_client.get("/metrics").text

    assert "str_access_reservation_lookups_total" in content
    assert "str_access_unlock_requests_total" in content
    assert "str_access_agent_latency_seconds" in content
    assert "str_access_webhooks_received_total" in content


@pytest.mark.unit
def test_unlock_is_counted(
    client: TestClient,
    reservation_store: JsonFileReservationStore,
    make_payload: Callable[..., dict[str, Any]],
) -> None:
    reservation_store.upsert("res_1", "5039895833", make_payload())
    sample = ("str_access_unlock_requests_total", {"result": "stub-ok"})
    before = REGISTRY.get_sample_value(*sample) or 0.0

    client.post("/api/unlock", json={"code": "5039895833", "stepId": "building"})

    assert REGISTRY.get_sample_value(*sample) == before + 1
