"""Shared fixtures: a real directory tree per test, scanned through FileWorkspace."""

from pathlib import Path

import pytest

from snippet_sync.config import Settings
from snippet_sync.pipeline.loader import FileWorkspace


@pytest.fixture
def write(tmp_path):
    """Write a file under tmp_path, creating parent directories."""
    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8", newline="")
        return path
    return _write


@pytest.fixture
def workspace(tmp_path):
    return FileWorkspace(Settings(root=str(tmp_path)))
