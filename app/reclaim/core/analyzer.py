"""Storage analysis over scan results.

The analyzer buckets scanned files into cleanup categories, detects
duplicate content and offers composable filters. It holds no state
between calls; every result is recomputable from a ScanResult.
"""

import logging
import os
import re
from collections import defaultdict
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor

from reclaim.core.categorize import Categorizer, Clock, age_days, utc_now
from reclaim.core.config import MAX_AGE_THRESHOLD_DAYS, MIN_AGE_THRESHOLD_DAYS
from reclaim.core.safelist import SafeList
from reclaim.models.analysis import (
    AnalysisResult,
    DownloadsFileInfo,
    DownloadsFileType,
    DuplicateGroup,
    LogFileInfo,
)
from reclaim.models.file_record import CleanupCategory, FileRecord, FileType
from reclaim.models.scan_result import ScanResult
from reclaim.utils.checksum import sha256_file

logger = logging.getLogger(__name__)

DUPLICATE_MIN_SIZE = 1024 * 1024
OLD_DOWNLOAD_DAYS = 90

FilePredicate = Callable[[FileRecord], bool]

_DOWNLOAD_TYPES: tuple[tuple[DownloadsFileType, frozenset[str]], ...] = (
    (
        DownloadsFileType.DOCUMENT,
        frozenset(
            {
                "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "pages", "numbers",
                "key", "rtf", "txt", "csv", "odt", "ods", "odp",
            }
        ),
    ),
    (
        DownloadsFileType.IMAGE,
        frozenset(
            {
                "jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "heic", "heif", "webp",
                "svg", "ico", "raw", "cr2", "nef", "dng",
            }
        ),
    ),
    (
        DownloadsFileType.ARCHIVE,
        frozenset(
            {"zip", "tar", "gz", "bz2", "7z", "rar", "xz", "tgz", "tbz2", "iso", "sit", "sitx", "zipx"}
        ),
    ),
    (
        DownloadsFileType.INSTALLER,
        frozenset(
            {"dmg", "pkg", "app", "mpkg", "exe", "msi", "deb", "rpm", "appimage", "flatpakref", "snap"}
        ),
    ),
)

_APP_DIR_MARKERS: tuple[re.Pattern[str], ...] = (
    re.compile(r"/library/logs/([^/]+)/", re.IGNORECASE),
    re.compile(r"/application support/([^/]+)/", re.IGNORECASE),
    re.compile(r"/\.local/state/([^/]+)/"),
    re.compile(r"/\.cache/([^/]+)/"),
)


def clamp_age_threshold(threshold_days: int) -> int:
    """Clamp an age threshold into the supported [30, 1095] day range."""
    return min(max(threshold_days, MIN_AGE_THRESHOLD_DAYS), MAX_AGE_THRESHOLD_DAYS)


def log_application(path: str) -> str:
    """Derive the application that wrote a log file from its path."""
    lower = path.lower()
    if lower.startswith(("/var/log/", "/private/var/log/")):
        stem = os.path.basename(path).split(".", 1)[0]
        return f"System ({stem})" if stem else "System"
    for pattern in _APP_DIR_MARKERS:
        match = pattern.search(path)
        if match:
            return match.group(1)
    return "Unknown"


def downloads_type(path: str) -> DownloadsFileType:
    """Classify a download by its extension."""
    ext = os.path.splitext(path)[1].lower().lstrip(".")
    for kind, extensions in _DOWNLOAD_TYPES:
        if ext in extensions:
            return kind
    return DownloadsFileType.OTHER


class StorageAnalyzer:
    """Analyzes scan results and filters file collections.

    Args:
        safe_list: Safe list used for the old-file exclusion.
        categorizer: Shared categorizer. Built from safe_list if omitted.
        clock: Source of the current time for age-based rules.
        hash_workers: Threads used for duplicate hashing (1 = sequential).
    """

    def __init__(
        self,
        safe_list: SafeList,
        categorizer: Categorizer | None = None,
        clock: Clock = utc_now,
        hash_workers: int = 4,
    ) -> None:
        self._categorizer = categorizer or Categorizer(safe_list, clock=clock)
        self._clock = clock
        self._hash_workers = max(1, hash_workers)

    def categorize(self, file: FileRecord) -> set[CleanupCategory]:
        """Return the cleanup categories of a file."""
        return self._categorizer.categorize(file)

    def analyze(self, scan_result: ScanResult) -> AnalysisResult:
        """Bucket files by category and detect duplicates.

        Args:
            scan_result: Result of a scan.

        Returns:
            AnalysisResult with every category present.
        """
        buckets: dict[CleanupCategory, list[FileRecord]] = {c: [] for c in CleanupCategory}
        reclaimable: dict[str, int] = {}
        for file in scan_result.files:
            categories = self.categorize(file)
            for category in categories:
                buckets[category].append(file)
            if categories:
                reclaimable[file.path] = file.size

        duplicate_groups = self.find_duplicates(scan_result.files)
        for group in duplicate_groups:
            buckets[CleanupCategory.DUPLICATES].extend(group.files)
            # One copy of every group is always kept
            for extra in group.files[1:]:
                reclaimable.setdefault(extra.path, extra.size)

        return AnalysisResult(
            categorized_files={c: tuple(files) for c, files in buckets.items()},
            total_size=self.calculate_savings(scan_result.files),
            potential_savings=sum(reclaimable.values()),
            duplicate_groups=tuple(duplicate_groups),
        )

    def find_duplicates(self, files: Iterable[FileRecord]) -> list[DuplicateGroup]:
        """Group files of at least 1 MiB by identical content.

        Files are first grouped by size so only same-size candidates are
        hashed. Unreadable files are skipped.
        """
        by_size: dict[int, list[FileRecord]] = defaultdict(list)
        for file in files:
            if file.size >= DUPLICATE_MIN_SIZE:
                by_size[file.size].append(file)
        candidates = [f for group in by_size.values() if len(group) > 1 for f in group]
        if not candidates:
            return []

        if self._hash_workers > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=self._hash_workers) as executor:
                digests = list(executor.map(_safe_hash, (f.path for f in candidates)))
        else:
            digests = [_safe_hash(f.path) for f in candidates]

        by_hash: dict[tuple[int, str], list[FileRecord]] = defaultdict(list)
        for file, digest in zip(candidates, digests, strict=True):
            if digest is not None:
                by_hash[(file.size, digest)].append(file)

        groups = [
            DuplicateGroup(hash=digest, files=tuple(members))
            for (_, digest), members in by_hash.items()
            if len(members) >= 2
        ]
        groups.sort(key=lambda g: g.wasted_space, reverse=True)
        return groups

    @staticmethod
    def calculate_savings(files: Iterable[FileRecord]) -> int:
        """Return the combined size of files."""
        return sum(f.size for f in files)

    @staticmethod
    def clamp_age_threshold(threshold_days: int) -> int:
        return clamp_age_threshold(threshold_days)

    def filter_by_age(self, files: Iterable[FileRecord], threshold_days: int) -> list[FileRecord]:
        """Keep files accessed strictly more than the clamped threshold ago."""
        threshold = clamp_age_threshold(threshold_days)
        now = self._clock()
        return [f for f in files if age_days(f.accessed, now) > threshold]

    @staticmethod
    def filter_by_size(files: Iterable[FileRecord], threshold_bytes: int) -> list[FileRecord]:
        """Keep files of at least threshold_bytes."""
        return [f for f in files if f.size >= threshold_bytes]

    @staticmethod
    def filter_by_type(files: Iterable[FileRecord], file_type: FileType) -> list[FileRecord]:
        """Keep files whose type tag equals file_type exactly."""
        return [f for f in files if f.file_type == file_type]

    @staticmethod
    def sort_by_size(files: Iterable[FileRecord]) -> list[FileRecord]:
        """Sort largest first; equal sizes keep their input order."""
        return sorted(files, key=lambda f: f.size, reverse=True)

    @staticmethod
    def apply_filters(
        files: Iterable[FileRecord], predicates: Iterable[FilePredicate]
    ) -> list[FileRecord]:
        """Keep files satisfying every predicate."""
        checks = list(predicates)
        return [f for f in files if all(check(f) for check in checks)]

    def log_file_info(self, files: Iterable[FileRecord]) -> list[LogFileInfo]:
        """Annotate log files with their application and age."""
        now = self._clock()
        return [
            LogFileInfo(record=f, application=log_application(f.path), age_days=age_days(f.modified, now))
            for f in files
        ]

    def categorize_logs_by_application(
        self, files: Iterable[FileRecord]
    ) -> dict[str, list[LogFileInfo]]:
        """Group log files by the application that wrote them."""
        grouped: dict[str, list[LogFileInfo]] = defaultdict(list)
        for info in self.log_file_info(files):
            grouped[info.application].append(info)
        return dict(grouped)

    def downloads_file_info(self, files: Iterable[FileRecord]) -> list[DownloadsFileInfo]:
        """Annotate downloads with their kind and staleness."""
        now = self._clock()
        return [
            DownloadsFileInfo(
                record=f,
                downloads_type=downloads_type(f.path),
                is_old_download=age_days(f.accessed, now) > OLD_DOWNLOAD_DAYS,
            )
            for f in files
        ]

    def categorize_downloads_by_type(
        self, files: Iterable[FileRecord]
    ) -> dict[DownloadsFileType, list[DownloadsFileInfo]]:
        """Group downloads by kind."""
        grouped: dict[DownloadsFileType, list[DownloadsFileInfo]] = defaultdict(list)
        for info in self.downloads_file_info(files):
            grouped[info.downloads_type].append(info)
        return dict(grouped)

    def filter_old_downloads(self, files: Iterable[FileRecord]) -> list[FileRecord]:
        """Keep downloads last accessed more than 90 days ago."""
        return [info.record for info in self.downloads_file_info(files) if info.is_old_download]


def _safe_hash(path: str) -> str | None:
    try:
        return sha256_file(path)
    except OSError as e:
        logger.warning("Cannot hash %s: %s", path, e)
        return None
