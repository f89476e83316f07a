from __future__ import annotations

from pathlib import Path

import pytest

from purple_shop.core import version as version_module


def _raise(_: str) -> str:
    raise version_module.PackageNotFoundError


def test_installed_metadata_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(version_module, "version", lambda _: "2.3.4")

    assert version_module.resolve_version() == "2.3.4"


def test_resolve_version_uses_pyproject_fallback(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "purple-shop-backend"\nversion = "9.9.9"\n')
    monkeypatch.setattr(version_module, "version", _raise)

    assert version_module.resolve_version(pyproject) == "9.9.9"


def test_resolve_version_reads_repository_pyproject(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(version_module, "version", _raise)

    assert version_module.resolve_version() == "0.1.0"


def test_resolve_version_defaults_when_no_metadata(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setattr(version_module, "version", _raise)

    assert version_module.resolve_version(tmp_path / "missing.toml") == "0.0.0"


def test_resolve_version_defaults_without_declared_version(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "purple-shop-backend"\n')
    monkeypatch.setattr(version_module, "version", _raise)

    assert version_module.resolve_version(pyproject) == "0.0.0"
