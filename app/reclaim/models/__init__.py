"""Data models for reclaim.

This module exports the core data structures used throughout the application.
"""

from reclaim.models.analysis import (
    AnalysisResult,
    DownloadsFileInfo,
    DownloadsFileType,
    DuplicateGroup,
    LogFileInfo,
)
from reclaim.models.backup import (
    Backup,
    BackupManifest,
    BackupResult,
    ManifestEntry,
    RestoreResult,
    RetentionSummary,
)
from reclaim.models.cache import CacheLocation, CacheSource, KnownCache
from reclaim.models.cleanup import (
    CleanupOptions,
    CleanupOutcome,
    CleanupProgress,
    CleanupResult,
    EngineState,
    ValidationResult,
)
from reclaim.models.errors import (
    BackupError,
    CleanupError,
    CleanupErrorKind,
    ReclaimError,
    RestoreError,
    RestoreErrorKind,
    RestoreFailedError,
    ScanError,
    ScanErrorKind,
)
from reclaim.models.file_record import (
    SAFE_AUTOMATED_CATEGORIES,
    CleanupCategory,
    FileKind,
    FilePermissions,
    FileRecord,
    FileType,
)
from reclaim.models.scan_result import ScanProgress, ScanResult

__all__ = [
    "SAFE_AUTOMATED_CATEGORIES",
    "AnalysisResult",
    "Backup",
    "BackupError",
    "BackupManifest",
    "BackupResult",
    "CacheLocation",
    "CacheSource",
    "CleanupCategory",
    "CleanupError",
    "CleanupErrorKind",
    "CleanupOptions",
    "CleanupOutcome",
    "CleanupProgress",
    "CleanupResult",
    "DownloadsFileInfo",
    "DownloadsFileType",
    "DuplicateGroup",
    "EngineState",
    "FileKind",
    "FilePermissions",
    "FileRecord",
    "FileType",
    "KnownCache",
    "LogFileInfo",
    "ManifestEntry",
    "ReclaimError",
    "RestoreError",
    "RestoreErrorKind",
    "RestoreFailedError",
    "RestoreResult",
    "RetentionSummary",
    "ScanError",
    "ScanErrorKind",
    "ScanProgress",
    "ScanResult",
    "ValidationResult",
]
