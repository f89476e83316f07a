"""Async SQLAlchemy engine bound to DATABASE_URL and the request-scoped session dependency."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from purple_shop.core.config import settings


def engine_options(database_url: str) -> dict[str, Any]:
    # SQLite (tests, local runs) shares one connection so an in-memory database survives.
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **engine_options(settings.database_url),
)
AsyncSessionFactory = async_sessionmaker(engine, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionFactory() as session:
        yield session


async def dispose_engine() -> None:
    await engine.dispose()


__all__ = ["AsyncSessionFactory", "dispose_engine", "engine", "engine_options", "get_session"]
