"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from craftbrew.utils.formatting import set_quiet
from fakes import FakeClient


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG directories into tmp_path and widen Rich output."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("COLUMNS", "200")
    return tmp_path


@pytest.fixture(autouse=True)
def reset_craftbrew_logger() -> Iterator[None]:
    """Undo handlers and quiet mode installed by the CLI."""
    yield
    set_quiet(False)
    logger = logging.getLogger("craftbrew")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def manifests_dir(tmp_path: Path) -> Path:
    """Directory for manifest files, matching the default config location."""
    path = tmp_path / "config" / "craftbrew" / "manifests"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def write_manifest(manifests_dir: Path) -> Callable[[str, str], Path]:
    """Factory writing a manifest file into ``manifests_dir``."""

    def _write(name: str, content: str) -> Path:
        path = manifests_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fake_client() -> FakeClient:
    """Empty fake package manager supporting every kind."""
    return FakeClient()
