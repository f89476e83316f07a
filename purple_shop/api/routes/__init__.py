"""Routers mounted by ``create_app``: health at the root, everything else under the API prefix."""

from fastapi import APIRouter

from purple_shop.api.routes import health, telegram, webhook

root_router = APIRouter()
root_router.include_router(health.router)


def build_api_router(prefix: str) -> APIRouter:
    api_router = APIRouter(prefix=prefix)
    api_router.include_router(telegram.router)
    api_router.include_router(webhook.router)
    return api_router


__all__ = ["build_api_router", "root_router"]
