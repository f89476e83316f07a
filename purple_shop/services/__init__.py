"""Business logic services orchestrating domain operations."""

from purple_shop.services.analytics import build_analytics
from purple_shop.services.cart import Cart, InMemoryCartStorage
from purple_shop.services.telegram_auth import TelegramAuthService

__all__ = [
    "Cart",
    "InMemoryCartStorage",
    "TelegramAuthService",
    "build_analytics",
]
