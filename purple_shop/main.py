"""ASGI entrypoint: ``uvicorn purple_shop.main:app``."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from purple_shop.api.routes import build_api_router, root_router
from purple_shop.core.config import Settings, settings
from purple_shop.core.db import AsyncSessionFactory, dispose_engine
from purple_shop.core.errors import register_exception_handlers
from purple_shop.core.logging import configure_logging, get_logger
from purple_shop.core.middleware import (
    AccessLogMiddleware,
    RequestIDMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from purple_shop.core.version import APP_VERSION
from purple_shop.repositories.project import ProjectRepository
from purple_shop.services.project_bots import (
    WEBHOOK_ENVIRONMENTS,
    bot_registry,
    register_project_webhooks,
)

CORS_METHODS = ["GET", "POST", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Accept", "X-Request-ID"]

configure_logging(settings.log_level)
logger = get_logger(__name__)


def build_lifespan(config: Settings) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting %s %s", app.title, APP_VERSION)
        if config.environment in WEBHOOK_ENVIRONMENTS:
            async with AsyncSessionFactory() as session:
                projects = await ProjectRepository(session).list_with_bot()
            await register_project_webhooks(projects, config)
        yield
        await bot_registry.shutdown_all()
        await dispose_engine()

    return lifespan


def create_app(config: Settings = settings) -> FastAPI:
    application = FastAPI(
        title=config.project_name,
        version=APP_VERSION,
        debug=config.debug,
        docs_url="/docs" if config.debug else None,
        redoc_url=None,
        lifespan=build_lifespan(config),
    )
    register_exception_handlers(application)

    # Starlette runs the last-added middleware first.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        max_age=86400,
    )
    application.add_middleware(
        SecurityHeadersMiddleware,
        enable_hsts=config.environment in {"staging", "production"},
    )
    application.add_middleware(AccessLogMiddleware)
    application.add_middleware(
        RequestSizeLimitMiddleware,
        max_request_bytes=config.max_request_bytes,
    )
    application.add_middleware(RequestIDMiddleware)

    application.include_router(root_router)
    application.include_router(build_api_router(config.api_v1_prefix))
    return application


app = create_app()

__all__ = ["app", "build_lifespan", "create_app"]
