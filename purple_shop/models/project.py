"""Project: one tenant shop and the Telegram bot its Mini-App runs under."""

from __future__ import annotations

from sqlalchemy import String, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from purple_shop.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

DEFAULT_PROJECT_NAME = "Purple Shopping"


class Project(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "projects"

    name: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    # Secret for initData signatures; projects without one cannot authenticate customers.
    telegram_bot_token: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(default=True, server_default=true(), index=True)

    @property
    def display_name(self) -> str:
        return self.name or DEFAULT_PROJECT_NAME

    def __repr__(self) -> str:
        return f"Project(id={self.id!s}, name={self.name!r}, is_active={self.is_active})"


__all__ = ["DEFAULT_PROJECT_NAME", "Project"]
