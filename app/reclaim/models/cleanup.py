"""Cleanup request, progress and result models."""

from dataclasses import dataclass
from enum import Enum

from reclaim.models.errors import CleanupError, CleanupErrorKind
from reclaim.models.file_record import FileRecord


class EngineState(str, Enum):
    """States of the cleanup engine during one invocation."""

    IDLE = "idle"
    VALIDATING = "validating"
    ARCHIVING = "archiving"
    DELETING = "deleting"
    COMPLETED = "completed"
    ROLLED_BACK = "rolled_back"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


class CleanupOutcome(str, Enum):
    """Terminal outcome of a cleanup invocation."""

    COMPLETED = "completed"
    ROLLED_BACK = "rolled_back"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class CleanupOptions:
    """Options controlling a cleanup invocation.

    Attributes:
        create_backup: Archive the working set before deleting anything.
        move_to_trash: Move files to the trash instead of removing them.
        skip_in_use_files: Leave files that are held open untouched.
        dry_run: Validate and report without backing up or deleting.
    """

    create_backup: bool = False
    move_to_trash: bool = True
    skip_in_use_files: bool = True
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class CleanupProgress:
    """Progress snapshot emitted once per processed file.

    Attributes:
        current_path: File that was just processed.
        files_processed: Cumulative number of files processed.
        total_files: Size of the working set.
        space_freed: Cumulative bytes freed.
    """

    current_path: str
    files_processed: int
    total_files: int
    space_freed: int


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating a set of files for cleanup.

    Attributes:
        is_valid: True when no file is blocked.
        blocked: Safe-listed files that must never be deleted.
        warnings: Advisory messages for in-use or non-deletable files.
    """

    is_valid: bool
    blocked: tuple[FileRecord, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CleanupResult:
    """Outcome of a cleanup invocation.

    Attributes:
        files_removed: Number of files reported as removed.
        space_freed: Bytes reported as freed.
        errors: Errors recorded during the invocation.
        backup_location: Archive created for this invocation, if any.
        outcome: Terminal state reached by the engine.
        removed_paths: Paths reported as removed, in deletion order.
    """

    files_removed: int = 0
    space_freed: int = 0
    errors: tuple[CleanupError, ...] = ()
    backup_location: str | None = None
    outcome: CleanupOutcome = CleanupOutcome.COMPLETED
    removed_paths: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        """Whether the invocation completed without any error."""
        return self.outcome == CleanupOutcome.COMPLETED and not self.errors

    def errors_of(self, kind: CleanupErrorKind) -> list[CleanupError]:
        """Return the recorded errors of one kind."""
        return [e for e in self.errors if e.kind == kind]
