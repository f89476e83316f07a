"""Telegram webhook endpoints, one URL per project bot."""

from __future__ import annotations

import hmac
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from telegram.error import TelegramError

from purple_shop.core.db import get_session
from purple_shop.core.errors import ApplicationError, ErrorCode, NotFoundError
from purple_shop.core.logging import get_logger
from purple_shop.repositories.project import ProjectRepository
from purple_shop.services.project_bots import ProjectBotRegistry, get_bot_registry
from purple_shop.telegram.bot import ProjectBot

logger = get_logger("purple_shop.api.webhook")
router = APIRouter(prefix="/webhook", tags=["telegram"])

SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"
BOT_NOT_CONFIGURED = "Bot not configured for this project"


class WebhookVerification(BaseModel):
    status: str = "ok"
    message: str = "Webhook verified successfully"
    project_id: str


class WebhookAck(BaseModel):
    status: str = "ok"


async def get_project_bot(
    project_id: str,
    session: AsyncSession = Depends(get_session),  # noqa: B008
    registry: ProjectBotRegistry = Depends(get_bot_registry),  # noqa: B008
) -> ProjectBot:
    bot = await registry.get_for_project(project_id, ProjectRepository(session))
    if bot is None:
        raise NotFoundError(ErrorCode.PROJECT_NOT_FOUND, BOT_NOT_CONFIGURED)
    return bot


@router.get("/{project_id}", response_model=WebhookVerification, summary="Verify project webhook")
async def verify_webhook(
    project_id: str,
    bot: ProjectBot = Depends(get_project_bot),  # noqa: B008
) -> WebhookVerification:
    return WebhookVerification(project_id=project_id)


@router.post(
    "/{project_id}",
    response_model=WebhookAck,
    status_code=status.HTTP_200_OK,
    summary="Handle Telegram webhook updates",
)
async def receive_update(
    project_id: str,
    request: Request,
    bot: ProjectBot = Depends(get_project_bot),  # noqa: B008
) -> WebhookAck:
    """Hand a Telegram update to the project's bot.

    Updates are acknowledged with 200 even when the bot fails to handle them,
    so Telegram does not redeliver.
    """
    received_secret = request.headers.get(SECRET_TOKEN_HEADER, "")
    if not hmac.compare_digest(received_secret.encode(), bot.secret_token.encode()):
        raise ApplicationError(
            ErrorCode.FORBIDDEN,
            "Invalid Telegram webhook secret.",
            status_code=status.HTTP_403_FORBIDDEN,
        )

    try:
        payload: Any = await request.json()
    except ValueError as exc:
        raise ApplicationError(ErrorCode.VALIDATION_ERROR, "Invalid JSON in webhook body") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("update_id"), int):
        raise ApplicationError(ErrorCode.VALIDATION_ERROR, "Webhook body is not a Telegram update")

    try:
        await bot.process_payload(payload)
    except TelegramError:
        logger.exception("Telegram update failed", extra={"project_id": project_id})
    else:
        logger.info("Telegram update processed", extra={"project_id": project_id})
    return WebhookAck()


__all__ = ["get_project_bot", "router"]
