"""Fixtures for CLI tests.

Every CLI test runs with its config, state and cache directories under
tmp_path so no real configuration or backup is read or written.
"""

import os
import time
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG base directories into tmp_path."""
    base = tmp_path / "xdg"
    for name, sub in (
        ("XDG_CONFIG_HOME", "config"),
        ("XDG_STATE_HOME", "state"),
        ("XDG_CACHE_HOME", "cache"),
    ):
        monkeypatch.setenv(name, str(base / sub))
    return base


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Directory holding the files scanned by a test."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def aged_file():
    """Create a file whose timestamps lie a number of days before now."""

    def _create(path: Path, content: bytes = b"data", age_days: float = 0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        ts = time.time() - age_days * 86400
        os.utime(path, (ts, ts))
        return path

    return _create
