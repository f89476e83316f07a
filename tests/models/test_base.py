"""Tests for base model functionality."""

from __future__ import annotations

from sqlalchemy import Uuid

from purple_shop.models.base import Base, TimestampMixin
from purple_shop.models.project import Project


def test_timestamp_mixin_columns() -> None:
    assert hasattr(TimestampMixin, "created_at")
    assert hasattr(TimestampMixin, "updated_at")


def test_projects_table_is_registered() -> None:
    table = Base.metadata.tables["projects"]

    assert Project.__table__ is table
    assert set(table.c.keys()) == {
        "id",
        "name",
        "description",
        "telegram_bot_token",
        "is_active",
        "created_at",
        "updated_at",
    }


def test_project_primary_key_is_uuid() -> None:
    column = Project.__table__.c.id

    assert column.primary_key
    assert isinstance(column.type, Uuid)
    assert column.default is not None


def test_is_active_is_indexed() -> None:
    indexed = [list(index.columns.keys()) for index in Project.__table__.indexes]

    assert ["is_active"] in indexed


def test_display_name_defaults() -> None:
    assert Project(name=None).display_name == "Purple Shopping"
    assert Project(name="Shwe Store").display_name == "Shwe Store"
