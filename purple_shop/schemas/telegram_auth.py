"""
Pydantic schemas for Telegram Mini-App session establishment.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from purple_shop.models.telegram_user import TelegramUser


class ValidateTelegramUserRequest(BaseModel):
    """Request schema for POST /api/projects/{project_id}/telegram/validate."""

    init_data: str = Field(
        ...,
        description="initData string from Telegram WebApp.initData",
        min_length=1,
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "init_data": (
                    "user=%7B%22id%22%3A123...%7D&auth_date=1700000000"
                    "&chat_type=sender&hash=abc123..."
                )
            }
        }
    )


class ProjectSummary(BaseModel):
    id: str
    name: str


class TelegramValidationResult(BaseModel):
    """Outcome of validating a customer's initData against a project's bot."""

    success: bool
    error: str | None = None
    user: TelegramUser | None = None
    auth_date: int | None = None
    project: ProjectSummary | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "user": {
                    "id": 123456789,
                    "first_name": "John",
                    "last_name": "Doe",
                    "username": "johndoe",
                    "language_code": "en",
                },
                "auth_date": 1700000000,
                "project": {
                    "id": "123e4567-e89b-12d3-a456-426614174000",
                    "name": "Purple Shopping",
                },
            }
        }
    )
