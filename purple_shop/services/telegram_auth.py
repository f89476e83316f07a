"""Establishes customer sessions by checking initData against a project's bot token."""

from __future__ import annotations

import uuid
from typing import Final, Protocol

from purple_shop.core.config import settings
from purple_shop.core.logging import get_logger
from purple_shop.models.project import Project
from purple_shop.schemas.telegram_auth import ProjectSummary, TelegramValidationResult
from purple_shop.telegram.init_data import validate_init_data

logger = get_logger(__name__)

PROJECT_UNAVAILABLE: Final[str] = "Project not found or bot token missing"
INVALID_SIGNATURE: Final[str] = "Invalid initData signature"
USER_DATA_MISSING: Final[str] = "No user data in initData"
VALIDATION_FAILED: Final[str] = "Validation failed"


class ProjectLookup(Protocol):
    async def get_active(self, project_id: uuid.UUID | str) -> Project | None: ...


class TelegramAuthService:
    """Business logic around Mini-App customer authentication."""

    def __init__(
        self,
        project_repository: ProjectLookup,
        *,
        max_age_seconds: int,
    ) -> None:
        self._project_repository = project_repository
        self._max_age_seconds = max_age_seconds

    async def validate_telegram_user(
        self,
        init_data_raw: str,
        project_id: uuid.UUID | str,
    ) -> TelegramValidationResult:
        """Validate initData for the given project and return the session payload.

        Failures are reported through ``success=False`` and a short message; the
        detailed reason is only logged.
        """
        try:
            project = await self._project_repository.get_active(project_id)
        except Exception:
            logger.exception("Project lookup failed", extra={"project_id": str(project_id)})
            return TelegramValidationResult(success=False, error=VALIDATION_FAILED)

        if project is None or not project.telegram_bot_token:
            logger.info("Telegram validation for unavailable project %s", project_id)
            return TelegramValidationResult(success=False, error=PROJECT_UNAVAILABLE)

        result = validate_init_data(
            init_data_raw,
            project.telegram_bot_token,
            max_age_seconds=self._max_age_seconds,
        )
        if not result.is_valid:
            logger.warning(
                "initData validation failed: %s",
                result.reason,
                extra={"project_id": str(project.id)},
            )
            return TelegramValidationResult(success=False, error=INVALID_SIGNATURE)

        if result.user is None:
            return TelegramValidationResult(success=False, error=USER_DATA_MISSING)

        logger.info(
            "Telegram user authenticated",
            extra={"project_id": str(project.id), "telegram_id": result.user.id},
        )
        return TelegramValidationResult(
            success=True,
            user=result.user,
            auth_date=result.auth_date,
            project=ProjectSummary(id=str(project.id), name=project.display_name),
        )


def build_telegram_auth_service(project_repository: ProjectLookup) -> TelegramAuthService:
    """Factory returning a TelegramAuthService wired with current settings."""

    return TelegramAuthService(
        project_repository,
        max_age_seconds=settings.telegram_init_data_max_age_seconds,
    )


__all__ = [
    "INVALID_SIGNATURE",
    "PROJECT_UNAVAILABLE",
    "ProjectLookup",
    "TelegramAuthService",
    "USER_DATA_MISSING",
    "VALIDATION_FAILED",
    "build_telegram_auth_service",
]
