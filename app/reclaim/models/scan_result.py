"""Scan result and progress models."""

from dataclasses import dataclass

from reclaim.models.errors import ScanError, ScanErrorKind
from reclaim.models.file_record import FileRecord


@dataclass(frozen=True, slots=True)
class ScanProgress:
    """Progress snapshot reported by the scanner.

    Attributes:
        current_path: Path being processed when the snapshot was taken.
        files_scanned: Cumulative number of files collected so far.
        percent_complete: Approximate completion in the range [0.0, 1.0].
    """

    current_path: str
    files_scanned: int
    percent_complete: float


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Outcome of one scan invocation.

    Attributes:
        files: Collected file records in traversal order.
        errors: Non-fatal errors encountered while scanning.
        duration: Wall-clock duration in seconds.
    """

    files: tuple[FileRecord, ...] = ()
    errors: tuple[ScanError, ...] = ()
    duration: float = 0.0

    @property
    def cancelled(self) -> bool:
        """Whether the scan stopped because cancellation was requested."""
        return any(e.kind == ScanErrorKind.CANCELLED for e in self.errors)

    @property
    def total_size(self) -> int:
        """Sum of the sizes of all collected files."""
        return sum(f.size for f in self.files)
