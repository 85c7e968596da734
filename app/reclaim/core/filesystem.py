"""Filesystem access used by the scanner, backup manager and cleanup engine.

All disk I/O of the core goes through a FilesystemProvider so tests can
substitute failures (permission errors, vanished files, busy files)
without touching the real disk. LocalFilesystem is the default.
"""

import logging
import os
import shutil
from abc import ABC, abstractmethod

import psutil
from send2trash import send2trash

from reclaim.models.file_record import FilePermissions

logger = logging.getLogger(__name__)


class FilesystemProvider(ABC):
    """Abstract filesystem primitives."""

    @abstractmethod
    def lstat(self, path: str) -> os.stat_result:
        """Stat a path without following symlinks."""

    @abstractmethod
    def scandir(self, path: str) -> list[os.DirEntry[str]]:
        """List the entries of a directory.

        Raises:
            PermissionError: If the directory cannot be read.
            FileNotFoundError: If the directory does not exist.
        """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a path exists (a dangling symlink exists)."""

    @abstractmethod
    def permissions(self, path: str) -> FilePermissions:
        """Return the permission flags of a path for the current user."""

    @abstractmethod
    def move_to_trash(self, path: str) -> None:
        """Move a path to the trash."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Permanently remove a path."""

    @abstractmethod
    def open_files(self) -> set[str]:
        """Return the paths currently held open by any process."""

    @abstractmethod
    def free_space(self, path: str) -> int:
        """Return the free bytes on the volume holding path."""


class LocalFilesystem(FilesystemProvider):
    """FilesystemProvider backed by the local disk."""

    def lstat(self, path: str) -> os.stat_result:
        return os.lstat(path)

    def scandir(self, path: str) -> list[os.DirEntry[str]]:
        with os.scandir(path) as it:
            return list(it)

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def permissions(self, path: str) -> FilePermissions:
        parent = os.path.dirname(path) or "."
        return FilePermissions(
            readable=os.access(path, os.R_OK),
            writable=os.access(path, os.W_OK),
            deletable=os.access(parent, os.W_OK | os.X_OK),
        )

    def move_to_trash(self, path: str) -> None:
        send2trash(path)

    def remove(self, path: str) -> None:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.unlink(path)

    def open_files(self) -> set[str]:
        paths: set[str] = set()
        # Processes that deny access report open_files as None
        for proc in psutil.process_iter(["open_files"]):
            for item in proc.info.get("open_files") or ():
                paths.add(item.path)
        logger.debug("Open file snapshot: %d paths", len(paths))
        return paths

    def free_space(self, path: str) -> int:
        existing = os.path.abspath(path)
        while not os.path.exists(existing):
            parent = os.path.dirname(existing)
            if parent == existing:
                break
            existing = parent
        return psutil.disk_usage(existing).free
