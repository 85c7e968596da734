"""File metadata models produced by the scanner.

This module defines the immutable record describing a single file on
disk, its coarse file-type tag, permission flags, and the set of
cleanup categories a file can be labelled with.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class FileKind(str, Enum):
    """Coarse classification of a file by location and extension.

    Attributes:
        CACHE: File inside a cache directory.
        LOG: Log file (log directory or .log extension).
        TEMPORARY: File inside a temp directory or with a temp extension.
        DOCUMENT: Office documents, PDFs and similar.
        APPLICATION: Application bundle.
        ARCHIVE: Compressed archives and disk images.
        MEDIA: Images, audio and video.
        OTHER: Anything else; the extension is carried by FileType.
    """

    CACHE = "cache"
    LOG = "log"
    TEMPORARY = "temporary"
    DOCUMENT = "document"
    APPLICATION = "application"
    ARCHIVE = "archive"
    MEDIA = "media"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class FileType:
    """File-type tag with an open ``other`` variant.

    Only the OTHER kind carries an extension payload, so two tags
    compare equal when they have the same kind and, for OTHER, the
    same lowercase extension.

    Attributes:
        kind: The coarse file kind.
        extension: Raw lowercase extension without the dot (OTHER only).
    """

    kind: FileKind
    extension: str = ""

    def __post_init__(self) -> None:
        """Reject an extension payload on non-OTHER kinds."""
        if self.kind != FileKind.OTHER and self.extension:
            msg = f"Only the 'other' file type carries an extension, got {self.kind.value}"
            raise ValueError(msg)

    @classmethod
    def of(cls, kind: FileKind) -> FileType:
        """Create a tag for one of the fixed kinds."""
        return cls(kind=kind)

    @classmethod
    def other(cls, extension: str) -> FileType:
        """Create an OTHER tag carrying the given extension."""
        return cls(kind=FileKind.OTHER, extension=extension.lower().lstrip("."))

    @classmethod
    def parse(cls, value: str) -> FileType:
        """Parse the string form produced by ``str(file_type)``.

        Args:
            value: A kind name ("log") or an other-variant ("other(iso)").

        Returns:
            The matching FileType. Unknown names become OTHER with that
            name as extension.
        """
        if value.startswith("other(") and value.endswith(")"):
            return cls.other(value[len("other(") : -1])
        try:
            kind = FileKind(value)
        except ValueError:
            return cls.other(value)
        if kind == FileKind.OTHER:
            return cls.other("")
        return cls.of(kind)

    def __str__(self) -> str:
        if self.kind == FileKind.OTHER:
            return f"other({self.extension})"
        return self.kind.value


@dataclass(frozen=True, slots=True)
class FilePermissions:
    """Permission flags of a file for the current user."""

    readable: bool = True
    writable: bool = True
    deletable: bool = True


class CleanupCategory(str, Enum):
    """Non-exclusive reason why a file is a cleanup candidate."""

    SYSTEM_CACHES = "system_caches"
    APPLICATION_CACHES = "application_caches"
    BROWSER_CACHES = "browser_caches"
    TEMPORARY_FILES = "temporary_files"
    LARGE_FILES = "large_files"
    OLD_FILES = "old_files"
    LOG_FILES = "log_files"
    DOWNLOADS = "downloads"
    DUPLICATES = "duplicates"


# Categories an unattended cleanup run may touch without interactive confirmation
SAFE_AUTOMATED_CATEGORIES: frozenset[CleanupCategory] = frozenset(
    {
        CleanupCategory.SYSTEM_CACHES,
        CleanupCategory.APPLICATION_CACHES,
        CleanupCategory.BROWSER_CACHES,
        CleanupCategory.TEMPORARY_FILES,
    }
)


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Metadata of a single file discovered during scanning.

    Records are immutable; a changed file is represented by a fresh
    record from a new scan.

    Attributes:
        path: Absolute filesystem path.
        size: Size in bytes.
        created: Creation (or inode change) time, timezone-aware.
        modified: Last content modification time, timezone-aware.
        accessed: Last access time, timezone-aware.
        file_type: File-type tag.
        in_use: Whether the file was held open when it was scanned.
        permissions: Permission flags for the current user.
    """

    path: str
    size: int
    created: datetime
    modified: datetime
    accessed: datetime
    file_type: FileType
    in_use: bool = False
    permissions: FilePermissions = field(default_factory=FilePermissions)

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size < 0:
            msg = f"Size cannot be negative, got {self.size}"
            raise ValueError(msg)

    @property
    def name(self) -> str:
        """Final path component."""
        return os.path.basename(self.path)

    @property
    def extension(self) -> str:
        """Lowercase extension without the leading dot ("" if none)."""
        return os.path.splitext(self.path)[1].lower().lstrip(".")
