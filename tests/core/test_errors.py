from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field

from purple_shop.core.errors import (
    ApplicationError,
    AuthenticationError,
    ErrorCode,
    NotFoundError,
    build_error_payload,
    register_exception_handlers,
)


class ValidateBody(BaseModel):
    init_data: str = Field(min_length=1)


def make_failing_app() -> FastAPI:
    shop = FastAPI()
    register_exception_handlers(shop)

    @shop.get("/missing-user")
    async def missing_user() -> None:
        raise ApplicationError(
            ErrorCode.USER_DATA_MISSING,
            "No user data in initData",
            details={"project_id": "p-1"},
        )

    @shop.get("/unknown-project")
    async def unknown_project() -> None:
        raise NotFoundError(ErrorCode.PROJECT_NOT_FOUND, "Project not found or bot token missing")

    @shop.get("/forged")
    async def forged() -> None:
        raise AuthenticationError(ErrorCode.INVALID_INIT_DATA, "Invalid initData signature")

    @shop.get("/teapot")
    async def teapot() -> None:
        raise ApplicationError("TEAPOT", "Short and stout", status_code=418)

    @shop.post("/validate")
    async def validate(body: ValidateBody) -> ValidateBody:
        return body

    @shop.get("/staff-only")
    async def staff_only() -> None:
        raise HTTPException(status_code=403, detail="Forbidden")

    @shop.get("/duplicate")
    async def duplicate() -> None:
        raise HTTPException(
            status_code=409,
            detail={
                "code": ErrorCode.CONFLICT,
                "message": "Project already exists",
                "details": {"name": "Purple Shopping"},
            },
        )

    @shop.get("/explode")
    async def explode() -> None:
        raise RuntimeError("database exploded")

    return shop


@pytest_asyncio.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=make_failing_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://shop.test") as http:
        yield http


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("path", "status_code", "code"),
    [
        ("/missing-user", 400, "USER_DATA_MISSING"),
        ("/unknown-project", 404, "PROJECT_NOT_FOUND"),
        ("/forged", 401, "INVALID_INIT_DATA"),
        ("/teapot", 418, "TEAPOT"),
        ("/staff-only", 403, "FORBIDDEN"),
        ("/duplicate", 409, "CONFLICT"),
        ("/nowhere", 404, "NOT_FOUND"),
        ("/explode", 500, "INTERNAL_ERROR"),
    ],
)
async def test_failures_render_error_envelope(
    client: AsyncClient, path: str, status_code: int, code: str
) -> None:
    response = await client.get(path)

    assert response.status_code == status_code
    assert response.json()["error"]["code"] == code


@pytest.mark.asyncio
async def test_application_error_keeps_details(client: AsyncClient) -> None:
    body = (await client.get("/missing-user")).json()

    assert body == {
        "error": {
            "code": "USER_DATA_MISSING",
            "message": "No user data in initData",
            "details": {"project_id": "p-1"},
        }
    }


@pytest.mark.asyncio
async def test_envelope_omits_details_when_absent(client: AsyncClient) -> None:
    error = (await client.get("/unknown-project")).json()["error"]

    assert "details" not in error


@pytest.mark.asyncio
async def test_request_validation_reports_fields(client: AsyncClient) -> None:
    response = await client.post("/validate", json={"init_data": ""})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["message"] == "Request validation failed"
    assert set(error["details"]) == {"init_data"}


@pytest.mark.asyncio
async def test_mapping_detail_passes_through(client: AsyncClient) -> None:
    error = (await client.get("/duplicate")).json()["error"]

    assert error["message"] == "Project already exists"
    assert error["details"] == {"name": "Purple Shopping"}


@pytest.mark.asyncio
async def test_unexpected_exception_hides_internals(
    client: AsyncClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level("ERROR", logger="purple_shop.errors")

    error = (await client.get("/explode")).json()["error"]

    assert error["message"] == "Internal server error. Please try again later."
    assert "database exploded" not in error["message"]
    assert any(record.exc_info for record in caplog.records if record.name == "purple_shop.errors")


def test_build_error_payload_without_details() -> None:
    assert build_error_payload(code=ErrorCode.NOT_FOUND, message="Missing") == {
        "error": {"code": "NOT_FOUND", "message": "Missing"}
    }
