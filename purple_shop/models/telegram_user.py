"""Telegram Mini-App user payload carried inside initData."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class TelegramUser(BaseModel):
    """User record decoded from the ``user`` field of initData."""

    id: int
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None
    is_premium: Optional[bool] = None
    photo_url: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")
