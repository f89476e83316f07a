"""
Telegram Mini-App authentication endpoint.

The storefront posts the initData it received from the Telegram client; the
backend checks it against the bot token of the project the storefront belongs
to.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from purple_shop.core.db import get_session
from purple_shop.core.errors import (
    ApplicationError,
    AuthenticationError,
    ErrorCode,
    NotFoundError,
)
from purple_shop.repositories.project import ProjectRepository
from purple_shop.schemas.telegram_auth import TelegramValidationResult, ValidateTelegramUserRequest
from purple_shop.services.telegram_auth import (
    INVALID_SIGNATURE,
    PROJECT_UNAVAILABLE,
    USER_DATA_MISSING,
    TelegramAuthService,
    build_telegram_auth_service,
)

router = APIRouter(prefix="/projects/{project_id}/telegram", tags=["telegram"])


async def get_telegram_auth_service(
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> TelegramAuthService:
    return build_telegram_auth_service(ProjectRepository(session))


@router.post(
    "/validate",
    response_model=TelegramValidationResult,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
async def validate_telegram_user(
    project_id: str,
    request: ValidateTelegramUserRequest,
    service: TelegramAuthService = Depends(get_telegram_auth_service),  # noqa: B008
) -> TelegramValidationResult:
    """
    Validate Telegram Mini-App initData for a project's storefront.

    **Errors:**
    - 404 PROJECT_NOT_FOUND: project is unknown, inactive, or has no bot token
    - 401 INVALID_INIT_DATA: hash missing, signature mismatch, or auth_date expired
    - 400 USER_DATA_MISSING: initData is authentic but carries no user
    """
    result = await service.validate_telegram_user(request.init_data, project_id)
    if result.success:
        return result

    if result.error == PROJECT_UNAVAILABLE:
        raise NotFoundError(ErrorCode.PROJECT_NOT_FOUND, result.error)
    if result.error == INVALID_SIGNATURE:
        raise AuthenticationError(ErrorCode.INVALID_INIT_DATA, result.error)
    if result.error == USER_DATA_MISSING:
        raise ApplicationError(ErrorCode.USER_DATA_MISSING, result.error)
    raise ApplicationError(
        ErrorCode.INTERNAL_ERROR,
        result.error or "Validation failed",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


__all__ = ["get_telegram_auth_service", "router"]
