from __future__ import annotations

import os
from collections.abc import AsyncIterator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

MEMORY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Must be in place before purple_shop.core.config builds its settings.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", MEMORY_DATABASE_URL)
os.environ.setdefault("LOG_LEVEL", "WARNING")

from purple_shop.core.db import engine_options, get_session  # noqa: E402
from purple_shop.main import app  # noqa: E402
from purple_shop.models.base import Base  # noqa: E402


@pytest_asyncio.fixture()
async def db_session() -> AsyncIterator[AsyncSession]:
    """Session on a fresh in-memory database with every table created."""
    engine = create_async_engine(MEMORY_DATABASE_URL, **engine_options(MEMORY_DATABASE_URL))
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    try:
        async with async_sessionmaker(engine, expire_on_commit=False)() as session:
            yield session
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def api_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    async def session_override() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = session_override
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://shop.test") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_session, None)
