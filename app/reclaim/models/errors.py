"""Error taxonomies for scanning, cleanup and restore.

Per-item failures are reported as values inside result objects rather
than raised. Each error carries a kind plus an optional path or message
payload and is built through a named constructor.

Operation-level failures (an archive that cannot be written, a backup
that cannot be restored at all) are raised as exceptions derived from
ReclaimError.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ScanErrorKind(str, Enum):
    """Kinds of non-fatal scan errors."""

    PERMISSION_DENIED = "permission_denied"
    PATH_NOT_FOUND = "path_not_found"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ScanError:
    """Non-fatal error recorded while scanning.

    Attributes:
        kind: Error kind.
        path: Affected path (permission_denied, path_not_found).
        message: Free-form detail (unknown).
    """

    kind: ScanErrorKind
    path: str | None = None
    message: str | None = None

    @classmethod
    def permission_denied(cls, path: str) -> ScanError:
        return cls(kind=ScanErrorKind.PERMISSION_DENIED, path=path)

    @classmethod
    def path_not_found(cls, path: str) -> ScanError:
        return cls(kind=ScanErrorKind.PATH_NOT_FOUND, path=path)

    @classmethod
    def cancelled(cls) -> ScanError:
        return cls(kind=ScanErrorKind.CANCELLED)

    @classmethod
    def unknown(cls, message: str, path: str | None = None) -> ScanError:
        return cls(kind=ScanErrorKind.UNKNOWN, path=path, message=message)

    def __str__(self) -> str:
        return _describe(self.kind.value, self.path, self.message)


class CleanupErrorKind(str, Enum):
    """Kinds of cleanup errors."""

    FILE_PROTECTED = "file_protected"
    FILE_IN_USE = "file_in_use"
    PERMISSION_DENIED = "permission_denied"
    FILE_NOT_FOUND = "file_not_found"
    CANCELLED = "cancelled"
    BACKUP_FAILED = "backup_failed"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class CleanupError:
    """Error recorded during a cleanup invocation.

    Attributes:
        kind: Error kind.
        path: Affected path, for the per-file kinds.
        message: Cause description (backup_failed, unknown).
    """

    kind: CleanupErrorKind
    path: str | None = None
    message: str | None = None

    @classmethod
    def file_protected(cls, path: str) -> CleanupError:
        return cls(kind=CleanupErrorKind.FILE_PROTECTED, path=path)

    @classmethod
    def file_in_use(cls, path: str) -> CleanupError:
        return cls(kind=CleanupErrorKind.FILE_IN_USE, path=path)

    @classmethod
    def permission_denied(cls, path: str) -> CleanupError:
        return cls(kind=CleanupErrorKind.PERMISSION_DENIED, path=path)

    @classmethod
    def file_not_found(cls, path: str) -> CleanupError:
        return cls(kind=CleanupErrorKind.FILE_NOT_FOUND, path=path)

    @classmethod
    def cancelled(cls) -> CleanupError:
        return cls(kind=CleanupErrorKind.CANCELLED)

    @classmethod
    def backup_failed(cls, cause: str) -> CleanupError:
        return cls(kind=CleanupErrorKind.BACKUP_FAILED, message=cause)

    @classmethod
    def unknown(cls, message: str, path: str | None = None) -> CleanupError:
        return cls(kind=CleanupErrorKind.UNKNOWN, path=path, message=message)

    @property
    def is_deletion_failure(self) -> bool:
        """Whether this error fails the deletion transaction."""
        return self.kind in (
            CleanupErrorKind.PERMISSION_DENIED,
            CleanupErrorKind.FILE_NOT_FOUND,
            CleanupErrorKind.UNKNOWN,
        )

    def __str__(self) -> str:
        return _describe(self.kind.value, self.path, self.message)


class RestoreErrorKind(str, Enum):
    """Kinds of restore errors."""

    BACKUP_NOT_FOUND = "backup_not_found"
    BACKUP_CORRUPTED = "backup_corrupted"
    DESTINATION_NOT_WRITABLE = "destination_not_writable"
    INSUFFICIENT_SPACE = "insufficient_space"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class RestoreError:
    """Error recorded while restoring a backup.

    Attributes:
        kind: Error kind.
        path: Original path of the affected entry, if entry-specific.
        message: Free-form detail.
    """

    kind: RestoreErrorKind
    path: str | None = None
    message: str | None = None

    @classmethod
    def backup_not_found(cls, location: str | None = None) -> RestoreError:
        return cls(kind=RestoreErrorKind.BACKUP_NOT_FOUND, path=location)

    @classmethod
    def backup_corrupted(cls, path: str | None = None, message: str | None = None) -> RestoreError:
        return cls(kind=RestoreErrorKind.BACKUP_CORRUPTED, path=path, message=message)

    @classmethod
    def destination_not_writable(cls, path: str) -> RestoreError:
        return cls(kind=RestoreErrorKind.DESTINATION_NOT_WRITABLE, path=path)

    @classmethod
    def insufficient_space(cls, message: str) -> RestoreError:
        return cls(kind=RestoreErrorKind.INSUFFICIENT_SPACE, message=message)

    @classmethod
    def unknown(cls, message: str, path: str | None = None) -> RestoreError:
        return cls(kind=RestoreErrorKind.UNKNOWN, path=path, message=message)

    def __str__(self) -> str:
        return _describe(self.kind.value, self.path, self.message)


def _describe(kind: str, path: str | None, message: str | None) -> str:
    """Render an error as ``kind: path (message)``."""
    text = kind
    if path:
        text = f"{text}: {path}"
    if message:
        text = f"{text} ({message})"
    return text


class ReclaimError(Exception):
    """Base exception for operation-level failures."""


class BackupError(ReclaimError):
    """Raised when a backup archive cannot be created, read or deleted."""


class RestoreFailedError(ReclaimError):
    """Raised when a backup cannot be restored at all.

    Attributes:
        error: The typed restore error describing the failure.
    """

    def __init__(self, error: RestoreError) -> None:
        super().__init__(str(error))
        self.error = error
