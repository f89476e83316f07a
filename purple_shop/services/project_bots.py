"""Per-project bot instances and their webhook registration."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable, Iterable
from typing import Final, Protocol

from purple_shop.core.config import Settings, settings
from purple_shop.core.logging import get_logger
from purple_shop.models.project import Project
from purple_shop.telegram.bot import ProjectBot
from purple_shop.telegram.keyboards import mini_app_url
from purple_shop.telegram.webhook import WebhookResult, generate_webhook_url, set_webhook

logger = get_logger(__name__)

WEBHOOK_ENVIRONMENTS: Final[frozenset[str]] = frozenset({"staging", "production"})

BotFactory = Callable[..., ProjectBot]


class ActiveProjectLookup(Protocol):
    async def get_active(self, project_id: uuid.UUID | str) -> Project | None: ...


class ProjectBotRegistry:
    """Keeps one bot per project, rebuilt when the project's token changes."""

    def __init__(self, *, site_url: str, bot_factory: BotFactory = ProjectBot) -> None:
        self._site_url = site_url
        self._bot_factory = bot_factory
        self._bots: dict[str, ProjectBot] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._bots)

    async def get_for_project(
        self, project_id: uuid.UUID | str, projects: ActiveProjectLookup
    ) -> ProjectBot | None:
        """Return the bot for an active project with a token, or ``None``."""
        project = await projects.get_active(project_id)
        if project is None or not project.telegram_bot_token:
            logger.info("No bot configured for project %s", project_id)
            await self._discard(str(project_id))
            return None

        key = str(project.id)
        async with self._lock:
            stale = self._bots.get(key)
            if stale is not None and stale.token == project.telegram_bot_token:
                return stale
            bot = self._bot_factory(
                project_id=key,
                project_name=project.display_name,
                token=project.telegram_bot_token,
                mini_app_url=mini_app_url(key, self._site_url),
            )
            self._bots[key] = bot

        if stale is not None:
            await stale.shutdown()
        logger.info("Shop bot created", extra={"project_id": key})
        return bot

    async def shutdown_all(self) -> None:
        async with self._lock:
            bots = list(self._bots.values())
            self._bots.clear()
        for bot in bots:
            await bot.shutdown()

    async def _discard(self, key: str) -> None:
        async with self._lock:
            bot = self._bots.pop(key, None)
        if bot is not None:
            await bot.shutdown()


async def register_project_webhooks(
    projects: Iterable[Project],
    config: Settings = settings,
) -> dict[str, WebhookResult]:
    """Point every project's bot at this deployment.

    Only staging and production register webhooks. A failure for one project
    is logged and does not stop the others.
    """
    if config.environment not in WEBHOOK_ENVIRONMENTS:
        logger.info(
            "Skipping webhook registration outside deployed environments",
            extra={"environment": config.environment},
        )
        return {}

    results: dict[str, WebhookResult] = {}
    for project in projects:
        if not project.telegram_bot_token:
            continue
        project_id = str(project.id)
        url = generate_webhook_url(project_id, config.site_url, config.api_v1_prefix)
        result = await set_webhook(project.telegram_bot_token, url)
        if not result.success:
            logger.warning(
                "Webhook setup failed for project %s: %s",
                project_id,
                result.error,
                extra={"project_id": project_id},
            )
        results[project_id] = result
    return results


bot_registry = ProjectBotRegistry(site_url=settings.site_url)


def get_bot_registry() -> ProjectBotRegistry:
    return bot_registry


__all__ = [
    "ProjectBotRegistry",
    "WEBHOOK_ENVIRONMENTS",
    "bot_registry",
    "get_bot_registry",
    "register_project_webhooks",
]
