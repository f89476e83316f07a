"""Data access layer abstractions and implementations."""

from purple_shop.repositories.base import BaseRepository
from purple_shop.repositories.project import ProjectRepository

__all__ = [
    "BaseRepository",
    "ProjectRepository",
]
