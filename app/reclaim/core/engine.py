"""Cleanup engine: validate, back up, delete, roll back.

One invocation runs through the states
``idle -> validating -> [archiving] -> deleting -> completed | rolled_back | cancelled``
(or ``aborted`` when the requested backup cannot be made). Files are
deleted one at a time in input order.

Reporting rules:
- Safe-listed files are dropped during validation and never reported
  as errors.
- A deletion error (not found, permission denied, unknown) fails the
  whole invocation: files already deleted are restored from this
  invocation's backup when there is one, and the result reports zero
  files removed.
- Cancellation stops between files and reports the files actually
  removed so far, without rollback.
"""

import errno
import logging
import threading
from collections.abc import Callable, Iterable

from reclaim.core.backup import BackupManager
from reclaim.core.categorize import Clock, age_days, utc_now
from reclaim.core.filesystem import FilesystemProvider, LocalFilesystem
from reclaim.core.safelist import SafeList
from reclaim.models.analysis import DuplicateGroup
from reclaim.models.backup import Backup
from reclaim.models.cleanup import (
    CleanupOptions,
    CleanupOutcome,
    CleanupProgress,
    CleanupResult,
    EngineState,
    ValidationResult,
)
from reclaim.models.errors import BackupError, CleanupError, RestoreFailedError
from reclaim.models.file_record import FileKind, FileRecord

logger = logging.getLogger(__name__)

LOG_PRESERVE_DAYS = 7
LOG_ARCHIVE_DAYS = 30

CleanupProgressCallback = Callable[[CleanupProgress], None]


def map_os_error(error: OSError, path: str) -> CleanupError:
    """Translate an OS exception raised while deleting path."""
    if isinstance(error, FileNotFoundError) or error.errno == errno.ENOENT:
        return CleanupError.file_not_found(path)
    if isinstance(error, PermissionError) or error.errno in (errno.EACCES, errno.EPERM):
        return CleanupError.permission_denied(path)
    return CleanupError.unknown(str(error), path)


def _unique_by_path(files: list[FileRecord]) -> list[FileRecord]:
    """Drop repeated paths, keeping the first occurrence of each."""
    seen: set[str] = set()
    unique: list[FileRecord] = []
    for file in files:
        if file.path in seen:
            logger.debug("Ignoring repeated cleanup entry %s", file.path)
            continue
        seen.add(file.path)
        unique.append(file)
    return unique


class CleanupEngine:
    """Executes cleanups against the filesystem.

    An engine runs at most one cleanup at a time; callers serialize
    invocations. cancel() may be called from another thread or from a
    progress callback.

    Args:
        safe_list: Safe list used for validation.
        backup_manager: Backup manager used when a backup is requested.
        filesystem: Filesystem provider. Defaults to LocalFilesystem.
        clock: Source of the current time for log age rules.
    """

    def __init__(
        self,
        safe_list: SafeList,
        backup_manager: BackupManager,
        filesystem: FilesystemProvider | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._safe_list = safe_list
        self._backup_manager = backup_manager
        self._fs = filesystem or LocalFilesystem()
        self._clock = clock
        self._cancel_event = threading.Event()
        self._state = EngineState.IDLE

    @property
    def state(self) -> EngineState:
        """Current state of the running or last invocation."""
        return self._state

    def cancel(self) -> None:
        """Request cancellation of the running cleanup."""
        self._cancel_event.set()

    # =========================================================================
    # Validation
    # =========================================================================

    def validate_cleanup(self, files: Iterable[FileRecord]) -> ValidationResult:
        """Split files into blocked ones and advisory warnings.

        Safe-listed files are blocked. In-use and non-deletable files
        stay eligible and only produce warnings.
        """
        blocked: list[FileRecord] = []
        warnings: list[str] = []
        for file in files:
            if self._safe_list.is_protected(file.path):
                blocked.append(file)
                continue
            if file.in_use:
                warnings.append(f"File is currently in use: {file.path}")
            if not file.permissions.deletable:
                warnings.append(f"File is not deletable: {file.path}")
        return ValidationResult(
            is_valid=not blocked, blocked=tuple(blocked), warnings=tuple(warnings)
        )

    # =========================================================================
    # Public cleanup operations
    # =========================================================================

    def cleanup(
        self,
        files: Iterable[FileRecord],
        options: CleanupOptions | None = None,
        on_progress: CleanupProgressCallback | None = None,
    ) -> CleanupResult:
        """Delete files after validation and an optional backup.

        Args:
            files: Files to delete, in deletion order.
            options: Cleanup options. Defaults to CleanupOptions().
            on_progress: Called once per processed file.

        Returns:
            CleanupResult for the invocation.
        """
        self._cancel_event.clear()
        return self._run(list(files), options or CleanupOptions(), on_progress)

    def cleanup_duplicates(
        self,
        groups: Iterable[DuplicateGroup],
        files_to_keep: dict[str, str] | None = None,
        options: CleanupOptions | None = None,
        on_progress: CleanupProgressCallback | None = None,
    ) -> CleanupResult:
        """Delete all but one member of every duplicate group.

        Args:
            groups: Duplicate groups to thin out.
            files_to_keep: Maps a group hash to the path to keep. Groups
                without an entry, or whose entry is not a member, keep
                their first member.
            options: Cleanup options.
            on_progress: Called once per processed file.
        """
        self._cancel_event.clear()
        keep = files_to_keep or {}
        to_delete: list[FileRecord] = []
        for group in groups:
            members = [f.path for f in group.files]
            keeper = keep.get(group.hash)
            if keeper not in members:
                if keeper is not None:
                    logger.warning(
                        "Requested keeper %s is not in duplicate group %s; keeping %s",
                        keeper,
                        group.hash[:12],
                        members[0],
                    )
                keeper = members[0]
            to_delete.extend(f for f in group.files if f.path != keeper)
        return self._run(to_delete, options or CleanupOptions(), on_progress)

    def cleanup_logs(
        self,
        files: Iterable[FileRecord],
        options: CleanupOptions | None = None,
        on_progress: CleanupProgressCallback | None = None,
    ) -> CleanupResult:
        """Delete log files while honoring the retention rules.

        Only files tagged as logs are considered. Logs modified less than
        7 days ago are kept. Logs 30 or more days old are deleted only
        when options.create_backup is set, in which case the archive
        covers every log that is deleted.
        """
        self._cancel_event.clear()
        opts = options or CleanupOptions()
        now = self._clock()
        selected: list[FileRecord] = []
        for file in files:
            if file.file_type.kind != FileKind.LOG:
                continue
            age = age_days(file.modified, now)
            if age < LOG_PRESERVE_DAYS:
                continue
            if age >= LOG_ARCHIVE_DAYS and not opts.create_backup:
                logger.debug("Keeping unarchived old log %s", file.path)
                continue
            selected.append(file)
        return self._run(selected, opts, on_progress)

    # =========================================================================
    # Invocation pipeline
    # =========================================================================

    def _run(
        self,
        files: list[FileRecord],
        options: CleanupOptions,
        on_progress: CleanupProgressCallback | None,
    ) -> CleanupResult:
        files = _unique_by_path(files)
        self._state = EngineState.VALIDATING
        validation = self.validate_cleanup(files)
        blocked = {f.path for f in validation.blocked}
        working = [f for f in files if f.path not in blocked]
        if blocked:
            logger.info("Dropped %d protected files from cleanup", len(blocked))

        in_use_paths: set[str] = set()
        if options.skip_in_use_files and working:
            in_use_paths = self._fs.open_files()

        if options.dry_run:
            return self._simulate(working, options, in_use_paths, on_progress)

        backup: Backup | None = None
        if options.create_backup and working:
            self._state = EngineState.ARCHIVING
            try:
                backup = self._backup_manager.create_backup(
                    working, cancel_event=self._cancel_event
                ).backup
            except BackupError as e:
                if self._cancel_event.is_set():
                    self._state = EngineState.CANCELLED
                    return CleanupResult(
                        errors=(CleanupError.cancelled(),), outcome=CleanupOutcome.CANCELLED
                    )
                logger.error("Backup failed, nothing deleted: %s", e)
                self._state = EngineState.ABORTED
                return CleanupResult(
                    errors=(CleanupError.backup_failed(str(e)),),
                    outcome=CleanupOutcome.ABORTED,
                )

        self._state = EngineState.DELETING
        backup_location = backup.location if backup else None
        errors: list[CleanupError] = []
        deleted: list[FileRecord] = []
        space_freed = 0
        outcome = CleanupOutcome.COMPLETED

        for index, file in enumerate(working):
            if self._cancel_event.is_set():
                logger.info("Cleanup cancelled after %d files", len(deleted))
                errors.append(CleanupError.cancelled())
                outcome = CleanupOutcome.CANCELLED
                break

            if options.skip_in_use_files and (file.in_use or file.path in in_use_paths):
                errors.append(CleanupError.file_in_use(file.path))
            else:
                error = self._delete(file, options)
                if error is not None:
                    logger.warning("Deletion failed: %s", error)
                    errors.append(error)
                    self._rollback(deleted, backup)
                    self._state = EngineState.ROLLED_BACK
                    return CleanupResult(
                        errors=tuple(errors),
                        backup_location=backup_location,
                        outcome=CleanupOutcome.ROLLED_BACK,
                    )
                deleted.append(file)
                space_freed += file.size

            self._report(on_progress, file, index + 1, len(working), space_freed)

        self._state = (
            EngineState.CANCELLED if outcome == CleanupOutcome.CANCELLED else EngineState.COMPLETED
        )
        return CleanupResult(
            files_removed=len(deleted),
            space_freed=space_freed,
            errors=tuple(errors),
            backup_location=backup_location,
            outcome=outcome,
            removed_paths=tuple(f.path for f in deleted),
        )

    def _simulate(
        self,
        working: list[FileRecord],
        options: CleanupOptions,
        in_use_paths: set[str],
        on_progress: CleanupProgressCallback | None,
    ) -> CleanupResult:
        self._state = EngineState.DELETING
        errors: list[CleanupError] = []
        would_remove: list[FileRecord] = []
        space = 0
        outcome = CleanupOutcome.COMPLETED
        for index, file in enumerate(working):
            if self._cancel_event.is_set():
                errors.append(CleanupError.cancelled())
                outcome = CleanupOutcome.CANCELLED
                break
            if options.skip_in_use_files and (file.in_use or file.path in in_use_paths):
                errors.append(CleanupError.file_in_use(file.path))
            else:
                logger.info("Dry-run: would delete %s", file.path)
                would_remove.append(file)
                space += file.size
            self._report(on_progress, file, index + 1, len(working), space)

        self._state = (
            EngineState.CANCELLED if outcome == CleanupOutcome.CANCELLED else EngineState.COMPLETED
        )
        return CleanupResult(
            files_removed=len(would_remove),
            space_freed=space,
            errors=tuple(errors),
            outcome=outcome,
            removed_paths=tuple(f.path for f in would_remove),
        )

    def _delete(self, file: FileRecord, options: CleanupOptions) -> CleanupError | None:
        if not self._fs.exists(file.path):
            return CleanupError.file_not_found(file.path)
        try:
            if options.move_to_trash:
                self._fs.move_to_trash(file.path)
            else:
                self._fs.remove(file.path)
        except OSError as e:
            return map_os_error(e, file.path)
        logger.debug("Deleted %s", file.path)
        return None

    def _rollback(self, deleted: list[FileRecord], backup: Backup | None) -> None:
        if not deleted:
            return
        if backup is None:
            logger.warning(
                "Cannot roll back %d deleted files: no backup was requested", len(deleted)
            )
            return
        logger.warning("Rolling back %d deleted files from backup %s", len(deleted), backup.id)
        try:
            result = self._backup_manager.restore_to_original(backup, [f.path for f in deleted])
        except RestoreFailedError as e:
            logger.error("Rollback failed: %s", e)
            return
        for error in result.errors:
            logger.error("Rollback could not restore: %s", error)
        logger.info("Rollback restored %d of %d files", result.files_restored, len(deleted))

    @staticmethod
    def _report(
        on_progress: CleanupProgressCallback | None,
        file: FileRecord,
        processed: int,
        total: int,
        space_freed: int,
    ) -> None:
        if on_progress is not None:
            on_progress(
                CleanupProgress(
                    current_path=file.path,
                    files_processed=processed,
                    total_files=total,
                    space_freed=space_freed,
                )
            )
