"""Shared pytest fixtures for dartwidgets tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from dartwidgets.core.config import MAX_DEPTH_ENV


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's DARTWIDGETS_MAX_DEPTH out of the tests."""
    monkeypatch.delenv(MAX_DEPTH_ENV, raising=False)


@pytest.fixture
def write_dart(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes a Dart source file under tmp_path."""

    def _write(name: str, source: str) -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write
