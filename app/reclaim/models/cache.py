"""Cache location models.

A cache location is one directory known to hold regenerable data,
together with the files found below it.
"""

import os
from dataclasses import dataclass
from enum import Enum

from reclaim.models.errors import ScanError
from reclaim.models.file_record import CleanupCategory, FileRecord


class CacheSource(str, Enum):
    """Kind of software a cache location belongs to."""

    SYSTEM = "system"
    APPLICATION = "application"
    BROWSER = "browser"
    DEVELOPER = "developer"
    AI_AGENT = "ai_agent"

    @property
    def category(self) -> CleanupCategory:
        """Cleanup category the files of this source belong to."""
        if self == CacheSource.SYSTEM:
            return CleanupCategory.SYSTEM_CACHES
        if self == CacheSource.BROWSER:
            return CleanupCategory.BROWSER_CACHES
        return CleanupCategory.APPLICATION_CACHES


@dataclass(frozen=True, slots=True)
class KnownCache:
    """Cache directories of one piece of software.

    Attributes:
        owner: Display name ("Chrome", "npm", "Cursor").
        source: Kind of software.
        patterns: Directory paths using ``{home}`` and ``{cache}``
            placeholders; one component may hold a ``*`` wildcard.
        regenerable: False for data the owner cannot rebuild (build
            archives); such files are never tagged as caches for
            unattended cleanups.
    """

    owner: str
    source: CacheSource
    patterns: tuple[str, ...]
    regenerable: bool = True


@dataclass(frozen=True, slots=True)
class CacheLocation:
    """A discovered cache directory and its contents.

    Attributes:
        source: Kind of software owning the cache.
        owner: Display name of the owner, or the directory name for
            caches without a known owner.
        path: Absolute directory path.
        files: Files found below the directory.
        errors: Errors met while listing the directory.
    """

    source: CacheSource
    owner: str
    path: str
    files: tuple[FileRecord, ...]
    errors: tuple[ScanError, ...] = ()

    @property
    def size(self) -> int:
        """Combined size of all files in bytes."""
        return sum(f.size for f in self.files)

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def description(self) -> str:
        """Human-readable label such as "Chrome - Cache"."""
        return f"{self.owner} - {os.path.basename(self.path)}"
