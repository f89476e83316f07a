from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from purple_shop.core.db import get_session
from purple_shop.core.version import APP_VERSION
from purple_shop.main import app


@pytest.mark.asyncio
async def test_health_returns_expected_payload(api_client: AsyncClient) -> None:
    response = await api_client.get("/health")

    assert response.status_code == 200

    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["version"] == APP_VERSION
    assert payload["checks"] == {"database": "ok"}

    # Ensure timestamp is ISO-8601 parsable
    datetime.fromisoformat(payload["timestamp"])


class _BrokenSession:
    async def execute(self, *args: object, **kwargs: object) -> None:
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.mark.asyncio
async def test_health_reports_database_failure() -> None:
    async def _broken_session() -> AsyncIterator[_BrokenSession]:
        yield _BrokenSession()

    app.dependency_overrides[get_session] = _broken_session
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/health")
    finally:
        app.dependency_overrides.pop(get_session, None)

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "unhealthy"
    assert payload["checks"] == {"database": "error"}


@pytest.mark.asyncio
async def test_request_id_header_generated(api_client: AsyncClient) -> None:
    response = await api_client.get("/health")

    request_id = response.headers.get("X-Request-ID")
    assert request_id
    assert len(request_id) >= 8


@pytest.mark.asyncio
async def test_request_id_header_preserved_from_client(api_client: AsyncClient) -> None:
    desired_request_id = "test-request-id-123"
    response = await api_client.get("/health", headers={"X-Request-ID": desired_request_id})

    assert response.headers.get("X-Request-ID") == desired_request_id


@pytest.mark.asyncio
async def test_access_log_contains_request_metadata(
    api_client: AsyncClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level("INFO", logger="purple_shop.access")

    await api_client.get("/health")

    log_record = next(record for record in caplog.records if record.name == "purple_shop.access")

    assert getattr(log_record, "http_method", None) == "GET"
    assert getattr(log_record, "http_path", None) == "/health"
    assert getattr(log_record, "status_code", None) == 200
    assert isinstance(getattr(log_record, "duration_ms", None), float)
