"""Database and domain models shared across the backend."""

from purple_shop.models.project import Project
from purple_shop.models.telegram_user import TelegramUser

__all__ = [
    "Project",
    "TelegramUser",
]
