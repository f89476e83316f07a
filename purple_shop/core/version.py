"""Resolve the running backend version from package metadata or pyproject.toml."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Final

import tomllib

DISTRIBUTION_NAME: Final[str] = "purple-shop-backend"
PYPROJECT_PATH: Final[Path] = Path(__file__).resolve().parents[2] / "pyproject.toml"
UNKNOWN_VERSION: Final[str] = "0.0.0"


def resolve_version(pyproject_path: Path = PYPROJECT_PATH) -> str:
    """Installed metadata wins; a source checkout falls back to pyproject.toml."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        pass

    if not pyproject_path.is_file():
        return UNKNOWN_VERSION
    with pyproject_path.open("rb") as fp:
        project = tomllib.load(fp).get("project") or {}
    declared = project.get("version") if isinstance(project, dict) else None
    return declared if isinstance(declared, str) else UNKNOWN_VERSION


APP_VERSION: Final[str] = resolve_version()

__all__ = ["APP_VERSION", "resolve_version"]
