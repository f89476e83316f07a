"""Liveness endpoint with a database round-trip."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from purple_shop.core.db import get_session
from purple_shop.core.logging import get_logger
from purple_shop.core.version import APP_VERSION

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

CheckStatus = Literal["ok", "error"]


class HealthResponse(BaseModel):
    status: Literal["healthy", "unhealthy"]
    timestamp: datetime
    checks: dict[str, CheckStatus]
    version: str


async def check_database(session: AsyncSession) -> CheckStatus:
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.warning("Database health check failed", exc_info=True)
        return "error"
    return "ok"


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(session: AsyncSession = Depends(get_session)) -> HealthResponse:  # noqa: B008
    """Always answers 200; ``status`` turns ``unhealthy`` when a dependency check fails."""
    checks: dict[str, CheckStatus] = {"database": await check_database(session)}
    return HealthResponse(
        status="healthy" if all(value == "ok" for value in checks.values()) else "unhealthy",
        timestamp=datetime.now(tz=timezone.utc),
        checks=checks,
        version=APP_VERSION,
    )


__all__ = ["HealthResponse", "check_database", "router"]
