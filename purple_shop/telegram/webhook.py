"""Registering, removing and inspecting a project bot's Telegram webhook.

Each call opens a short-lived :class:`telegram.Bot` for the given token. Input
problems and Telegram API errors come back as an unsuccessful
:class:`WebhookResult`; nothing here raises for them.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Final
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict
from telegram import Bot
from telegram.error import TelegramError

from purple_shop.core.logging import get_logger
from purple_shop.telegram.bot import webhook_secret

logger = get_logger(__name__)

MAX_CONNECTIONS: Final[int] = 100

BotFactory = Callable[[str], Bot]


class WebhookInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    url: str
    has_custom_certificate: bool = False
    pending_update_count: int = 0
    max_connections: int | None = None
    ip_address: str | None = None
    last_error_date: datetime | None = None
    last_error_message: str | None = None
    last_synchronization_error_date: datetime | None = None


class WebhookResult(BaseModel):
    success: bool
    error: str | None = None
    webhook_info: WebhookInfo | None = None


def generate_webhook_url(project_id: str, site_url: str, api_prefix: str = "/api") -> str:
    """URL Telegram posts this project's updates to."""
    return f"{site_url.rstrip('/')}{api_prefix}/webhook/{project_id}"


async def set_webhook(
    bot_token: str,
    webhook_url: str,
    *,
    bot_factory: BotFactory = Bot,
) -> WebhookResult:
    if not bot_token or not webhook_url:
        return WebhookResult(success=False, error="Bot token and webhook URL are required")
    if ":" not in bot_token:
        return WebhookResult(success=False, error="Invalid bot token format")

    try:
        parts = urlsplit(webhook_url)
        hostname = parts.hostname
    except ValueError:
        hostname = None
    if hostname is None or not parts.scheme:
        return WebhookResult(success=False, error="Invalid webhook URL format")
    if parts.scheme != "https":
        return WebhookResult(success=False, error="Webhook URL must use HTTPS protocol")

    try:
        async with bot_factory(bot_token) as bot:
            await bot.set_webhook(
                url=webhook_url,
                max_connections=MAX_CONNECTIONS,
                drop_pending_updates=True,
                secret_token=webhook_secret(bot_token),
            )
            info = await bot.get_webhook_info()
    except TelegramError as exc:
        logger.error(
            "Telegram setWebhook failed: %s", exc.message, extra={"webhook_url": webhook_url}
        )
        return WebhookResult(success=False, error=exc.message)

    logger.info("Webhook set", extra={"webhook_url": webhook_url})
    return WebhookResult(success=True, webhook_info=WebhookInfo.model_validate(info))


async def remove_webhook(bot_token: str, *, bot_factory: BotFactory = Bot) -> WebhookResult:
    if not bot_token or ":" not in bot_token:
        return WebhookResult(success=False, error="Invalid bot token")

    try:
        async with bot_factory(bot_token) as bot:
            await bot.delete_webhook(drop_pending_updates=True)
    except TelegramError as exc:
        logger.error("Telegram deleteWebhook failed: %s", exc.message)
        return WebhookResult(success=False, error=exc.message)

    logger.info("Webhook removed for bot token ending with ...%s", bot_token[-4:])
    return WebhookResult(success=True)


async def get_webhook_info(bot_token: str, *, bot_factory: BotFactory = Bot) -> WebhookResult:
    if not bot_token or ":" not in bot_token:
        return WebhookResult(success=False, error="Invalid bot token")

    try:
        async with bot_factory(bot_token) as bot:
            info = await bot.get_webhook_info()
    except TelegramError as exc:
        logger.error("Telegram getWebhookInfo failed: %s", exc.message)
        return WebhookResult(success=False, error=exc.message)

    return WebhookResult(success=True, webhook_info=WebhookInfo.model_validate(info))


__all__ = [
    "WebhookInfo",
    "WebhookResult",
    "generate_webhook_url",
    "get_webhook_info",
    "remove_webhook",
    "set_webhook",
]
