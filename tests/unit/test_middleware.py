"""
Unit tests for middleware components.
"""

from __future__ import annotations

import pytest
import structlog
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from str_access.middleware import RequestIDMiddleware


@pytest.fixture
def app_with_middleware() -> FastAPI:
    """Create FastAPI app with RequestIDMiddleware for testing."""
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)

    @app.get("/echo")
    async def echo_endpoint(request: Request) -> dict[str, str]:
        bound = structlog.contextvars.get_contextvars()
        return {
            "request_id": request.state.request_id,
            "log_request_id": bound.get("request_id", ""),
        }

    return app


@pytest.fixture
def middleware_client(app_with_middleware: FastAPI) -> TestClient:
    return TestClient(app_with_middleware)


@pytest.mark.unit
def test_request_id_middleware_adds_header(middleware_client: TestClient) -> None:
    response = middleware_client.get("/echo")

    assert response.status_code == 200
    assert len(response.headers["X-Request-ID"]) == 36  # UUID length


@pytest.mark.unit
def test_request_id_matches_header_state_and_log_context(middleware_client: TestClient) -> None:
    response = middleware_client.get("/echo")

    data = response.json()
    assert data["request_id"] == response.headers["X-Request-ID"]
    assert data["log_request_id"] == data["request_id"]


@pytest.mark.unit
def test_request_id_middleware_unique_per_request(middleware_client: TestClient) -> None:
    first = middleware_client.get("/echo").headers["X-Request-ID"]
    second = middleware_client.get("/echo").headers["X-Request-ID"]

    assert first != second


@pytest.mark.unit
def test_app_responses_carry_request_id(client: TestClient) -> None:
    response = client.get("/health")

    assert "X-Request-ID" in response.headers
