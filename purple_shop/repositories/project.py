"""Project repository: tenant lookups, including the bot token used for initData."""

from __future__ import annotations

import uuid

from sqlalchemy import select

from purple_shop.models.project import Project
from purple_shop.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Encapsulates persistence logic for Project entities."""

    async def create(
        self,
        *,
        name: str | None,
        telegram_bot_token: str | None = None,
        description: str | None = None,
        is_active: bool = True,
    ) -> Project:
        project = Project(
            name=name,
            telegram_bot_token=telegram_bot_token,
            description=description,
            is_active=is_active,
        )
        await self.add(project)
        await self.session.refresh(project)
        return project

    async def get(self, project_id: uuid.UUID | str) -> Project | None:
        parsed = _parse_project_id(project_id)
        if parsed is None:
            return None
        return await self.session.get(Project, parsed)

    async def get_active(self, project_id: uuid.UUID | str) -> Project | None:
        """Return the project only while it is active."""
        parsed = _parse_project_id(project_id)
        if parsed is None:
            return None
        stmt = select(Project).where(Project.id == parsed, Project.is_active.is_(True))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_with_bot(self) -> list[Project]:
        """Active projects that have a bot token, oldest first."""
        stmt = (
            select(Project)
            .where(Project.is_active.is_(True), Project.telegram_bot_token.is_not(None))
            .order_by(Project.created_at)
        )
        result = await self.session.execute(stmt)
        return [project for project in result.scalars() if project.telegram_bot_token]


def _parse_project_id(project_id: uuid.UUID | str) -> uuid.UUID | None:
    if isinstance(project_id, uuid.UUID):
        return project_id
    try:
        return uuid.UUID(project_id)
    except ValueError:
        return None


__all__ = ["ProjectRepository"]
