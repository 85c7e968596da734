"""Analysis result models.

This module defines the output of the storage analyzer: per-category
buckets, duplicate groups, and the detail records used to break down
log files and downloads.
"""

from dataclasses import dataclass, field
from enum import Enum

from reclaim.models.file_record import CleanupCategory, FileRecord


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """Set of files sharing identical content.

    Attributes:
        hash: Hex content digest shared by all members.
        files: Member records (at least two, all the same size).
    """

    hash: str
    files: tuple[FileRecord, ...]

    def __post_init__(self) -> None:
        """Validate group membership after initialization."""
        if len(self.files) < 2:
            msg = f"Duplicate group needs at least 2 files, got {len(self.files)}"
            raise ValueError(msg)
        sizes = {f.size for f in self.files}
        if len(sizes) != 1:
            msg = f"Duplicate group members must share one size, got {sorted(sizes)}"
            raise ValueError(msg)

    @property
    def file_size(self) -> int:
        """Common per-file size in bytes."""
        return self.files[0].size

    @property
    def total_size(self) -> int:
        """Combined size of all members."""
        return self.file_size * len(self.files)

    @property
    def wasted_space(self) -> int:
        """Bytes reclaimable by keeping a single copy."""
        return self.file_size * (len(self.files) - 1)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Categorized view of a scan result.

    Attributes:
        categorized_files: Every CleanupCategory mapped to its files.
        total_size: Size of all scanned files.
        potential_savings: Size of all categorized files plus the redundant
            copies of duplicate groups, each file counted once.
        duplicate_groups: Groups of identical files.
    """

    categorized_files: dict[CleanupCategory, tuple[FileRecord, ...]] = field(
        default_factory=lambda: {c: () for c in CleanupCategory}
    )
    total_size: int = 0
    potential_savings: int = 0
    duplicate_groups: tuple[DuplicateGroup, ...] = ()

    def files_in(self, category: CleanupCategory) -> tuple[FileRecord, ...]:
        """Return the files labelled with a category."""
        return self.categorized_files.get(category, ())

    def category_size(self, category: CleanupCategory) -> int:
        """Return the total size of the files labelled with a category."""
        return sum(f.size for f in self.files_in(category))

    @property
    def category_sizes(self) -> dict[CleanupCategory, int]:
        """Total size per category."""
        return {c: self.category_size(c) for c in CleanupCategory}

    @property
    def wasted_space(self) -> int:
        """Reclaimable bytes across all duplicate groups."""
        return sum(g.wasted_space for g in self.duplicate_groups)


@dataclass(frozen=True, slots=True)
class LogFileInfo:
    """Log file annotated with its owning application and age.

    Attributes:
        record: Underlying file record.
        application: Application or service that wrote the log.
        age_days: Whole days since the last modification.
    """

    record: FileRecord
    application: str
    age_days: int


class DownloadsFileType(str, Enum):
    """Coarse kind of a file in the Downloads folder."""

    DOCUMENT = "document"
    IMAGE = "image"
    ARCHIVE = "archive"
    INSTALLER = "installer"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class DownloadsFileInfo:
    """Download annotated with its kind and staleness.

    Attributes:
        record: Underlying file record.
        downloads_type: Kind derived from the extension.
        is_old_download: Whether the file was last accessed more than 90 days ago.
    """

    record: FileRecord
    downloads_type: DownloadsFileType
    is_old_download: bool
