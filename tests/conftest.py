"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from reclaim.core.categorize import detect_file_type
from reclaim.core.filesystem import LocalFilesystem
from reclaim.core.safelist import DefaultSafeList
from reclaim.models.file_record import FilePermissions, FileRecord, FileType

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)

RecordFactory = Callable[..., FileRecord]


class FakeFilesystem(LocalFilesystem):
    """Local filesystem with injectable failures and open-file snapshot.

    Attributes:
        in_use: Paths reported as held open.
        fail_remove: Maps a path to the OSError raised when deleting it.
        denied_dirs: Directories whose listing raises PermissionError.
        free: Free space reported for any volume (None = real value).
    """

    def __init__(self) -> None:
        self.in_use: set[str] = set()
        self.fail_remove: dict[str, OSError] = {}
        self.denied_dirs: set[str] = set()
        self.free: int | None = None
        self.trashed: list[str] = []
        self.removed: list[str] = []

    def scandir(self, path: str) -> list[os.DirEntry[str]]:
        if path in self.denied_dirs:
            raise PermissionError(13, "Permission denied", path)
        return super().scandir(path)

    def move_to_trash(self, path: str) -> None:
        # Trash is emulated by a plain delete so tests never touch the user's trash
        self._fail(path)
        os.unlink(path)
        self.trashed.append(path)

    def remove(self, path: str) -> None:
        self._fail(path)
        super().remove(path)
        self.removed.append(path)

    def open_files(self) -> set[str]:
        return set(self.in_use)

    def free_space(self, path: str) -> int:
        if self.free is not None:
            return self.free
        return super().free_space(path)

    def _fail(self, path: str) -> None:
        error = self.fail_remove.get(path)
        if error is not None:
            raise error


@pytest.fixture
def now() -> datetime:
    """Fixed current time used by injected clocks."""
    return NOW


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Clock returning the fixed current time."""
    return lambda: NOW


@pytest.fixture
def fake_fs() -> FakeFilesystem:
    """Filesystem with no injected failures."""
    return FakeFilesystem()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Isolated home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def safe_list(home: Path) -> DefaultSafeList:
    """Default safe list rooted at the isolated home, without macOS version entries."""
    return DefaultSafeList(home=home, os_version=None)


@pytest.fixture
def make_record() -> RecordFactory:
    """Factory building FileRecords with ages relative to NOW."""

    def _make(
        path: str,
        size: int = 1024,
        *,
        age_days: float = 0,
        accessed_days: float | None = None,
        file_type: FileType | None = None,
        in_use: bool = False,
        deletable: bool = True,
    ) -> FileRecord:
        modified = NOW - timedelta(days=age_days)
        accessed = NOW - timedelta(days=accessed_days if accessed_days is not None else age_days)
        return FileRecord(
            path=path,
            size=size,
            created=modified,
            modified=modified,
            accessed=accessed,
            file_type=file_type or detect_file_type(path),
            in_use=in_use,
            permissions=FilePermissions(deletable=deletable),
        )

    return _make


@pytest.fixture
def write_file() -> Callable[..., Path]:
    """Create a real file with content and an optional age relative to NOW."""

    def _write(path: Path, content: bytes = b"data", *, age_days: float | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        if age_days is not None:
            ts = (NOW - timedelta(days=age_days)).timestamp()
            os.utime(path, (ts, ts))
        return path

    return _write
