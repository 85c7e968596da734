"""Classification rules shared by the scanner and the analyzer.

Every rule here is a pure function of a file record, the safe list and
the current time. The scanner tags records with a file type through
detect_file_type and the analyzer buckets them through
Categorizer.categorize; both go through this module so there is one
definition of what counts as a cache, a log or an old file.
"""

import os
from collections.abc import Callable
from datetime import UTC, datetime

from reclaim.core.cache_locations import (
    AI_AGENT_CACHES,
    BROWSER_CACHES,
    DEVELOPER_CACHES,
    path_markers,
)
from reclaim.core.config import LARGE_FILE_THRESHOLD_BYTES
from reclaim.core.safelist import SafeList
from reclaim.models.file_record import CleanupCategory, FileKind, FileRecord, FileType

SECONDS_PER_DAY = 86400
OLD_FILE_DAYS = 365

TEMP_EXTENSIONS = frozenset({"tmp", "temp", "cache"})
TEMP_DIR_NAMES = frozenset({"tmp", "temp", ".tmp", "temporary items"})
TEMP_ROOTS = ("/tmp/", "/var/tmp/", "/private/tmp/", "/private/var/tmp/")
CACHE_DIR_NAMES = frozenset({"caches", "cache", ".cache"})
SYSTEM_CACHE_PREFIXES = ("/library/caches/", "/var/cache/")
LOG_DIR_NAMES = frozenset({"logs", "log"})

ARCHIVE_EXTENSIONS = frozenset({"zip", "tar", "gz", "bz2", "xz", "7z", "rar", "dmg", "pkg", "iso"})
MEDIA_EXTENSIONS = frozenset(
    {
        "jpg", "jpeg", "png", "gif", "bmp", "tiff", "heic", "webp",
        "mp4", "mov", "avi", "mkv", "mp3", "m4a", "wav", "aac", "flac",
    }
)
DOCUMENT_EXTENSIONS = frozenset(
    {
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "pages", "numbers",
        "key", "rtf", "odt", "ods", "odp", "txt", "md", "csv",
    }
)

BROWSER_CACHE_MARKERS = path_markers(BROWSER_CACHES)
TOOL_CACHE_MARKERS = path_markers((*DEVELOPER_CACHES, *AI_AGENT_CACHES))

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current time in UTC."""
    return datetime.now(UTC)


def age_days(timestamp: datetime, now: datetime) -> int:
    """Return the number of whole days elapsed since timestamp.

    Naive timestamps are taken as UTC. Timestamps in the future count
    as zero days old.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    seconds = (now - timestamp).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // SECONDS_PER_DAY)


def _dir_components(lower_path: str) -> list[str]:
    return lower_path.split("/")[:-1]


def _extension(path: str) -> str:
    return os.path.splitext(path)[1].lower().lstrip(".")


def is_temporary_path(path: str) -> bool:
    """Check whether a path lies in a temp directory or has a temp extension."""
    lower = path.lower()
    if lower.startswith(TEMP_ROOTS):
        return True
    if any(c in TEMP_DIR_NAMES for c in _dir_components(lower)):
        return True
    return _extension(lower) in TEMP_EXTENSIONS


def is_log_path(path: str) -> bool:
    """Check whether a path lies in a log directory."""
    return any(c in LOG_DIR_NAMES for c in _dir_components(path.lower()))


def is_in_app_bundle(path: str) -> bool:
    """Check whether a path is an .app bundle or lies inside one."""
    return any(c.endswith(".app") for c in path.lower().split("/"))


def detect_file_type(path: str) -> FileType:
    """Tag a path with a coarse file type.

    Location wins over extension: anything under a cache directory is a
    cache, under a log directory a log, under a temp directory temporary.
    Plain ``.txt`` files are documents, never logs.
    """
    lower = path.lower()
    components = _dir_components(lower)
    ext = _extension(lower)

    if any(c in CACHE_DIR_NAMES for c in components):
        return FileType.of(FileKind.CACHE)
    if any(c in LOG_DIR_NAMES for c in components):
        return FileType.of(FileKind.LOG)
    if is_temporary_path(path):
        return FileType.of(FileKind.TEMPORARY)
    if ext == "log":
        return FileType.of(FileKind.LOG)
    if ext == "app":
        return FileType.of(FileKind.APPLICATION)
    if ext in ARCHIVE_EXTENSIONS:
        return FileType.of(FileKind.ARCHIVE)
    if ext in MEDIA_EXTENSIONS:
        return FileType.of(FileKind.MEDIA)
    if ext in DOCUMENT_EXTENSIONS:
        return FileType.of(FileKind.DOCUMENT)
    return FileType.other(ext)


class Categorizer:
    """Assigns cleanup categories to file records.

    Attributes:
        safe_list: Safe list consulted for the old-file exclusion.
        large_file_threshold: Inclusive size threshold for large files.
        clock: Source of the current time.
    """

    def __init__(
        self,
        safe_list: SafeList,
        large_file_threshold: int = LARGE_FILE_THRESHOLD_BYTES,
        clock: Clock = utc_now,
    ) -> None:
        self.safe_list = safe_list
        self.large_file_threshold = large_file_threshold
        self.clock = clock

    def categorize(self, file: FileRecord) -> set[CleanupCategory]:
        """Return every category a file belongs to (possibly none)."""
        categories: set[CleanupCategory] = set()
        lower = file.path.lower()

        cache = self._cache_category(lower)
        if cache is not None:
            categories.add(cache)

        if is_temporary_path(file.path):
            categories.add(CleanupCategory.TEMPORARY_FILES)

        if is_log_path(file.path):
            categories.add(CleanupCategory.LOG_FILES)

        if "/downloads/" in lower:
            categories.add(CleanupCategory.DOWNLOADS)

        if file.size >= self.large_file_threshold:
            categories.add(CleanupCategory.LARGE_FILES)

        if self.is_old(file):
            categories.add(CleanupCategory.OLD_FILES)

        return categories

    def is_old(self, file: FileRecord) -> bool:
        """Check the old-file rule, including its unconditional exclusions."""
        if age_days(file.accessed, self.clock()) < OLD_FILE_DAYS:
            return False
        if file.file_type.kind == FileKind.APPLICATION or is_in_app_bundle(file.path):
            return False
        return not self.safe_list.is_protected(file.path)

    @staticmethod
    def _cache_category(lower: str) -> CleanupCategory | None:
        if "/system/library/caches/" in lower or lower.startswith(SYSTEM_CACHE_PREFIXES):
            return CleanupCategory.SYSTEM_CACHES
        if any(marker in lower for marker in BROWSER_CACHE_MARKERS):
            return CleanupCategory.BROWSER_CACHES
        if "/library/caches/" in lower or "/.cache/" in lower:
            return CleanupCategory.APPLICATION_CACHES
        if any(marker in lower for marker in TOOL_CACHE_MARKERS):
            return CleanupCategory.APPLICATION_CACHES
        return None
