"""Filesystem scanner collecting file metadata for cleanup analysis.

Walks the given roots depth-first, records one FileRecord per
non-directory entry and reports progress in batches. Symlinks are
recorded as themselves and never followed. Protected paths are skipped
before any metadata is collected.
"""

import logging
import os
import stat
import threading
import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from reclaim.core.categorize import Categorizer, detect_file_type
from reclaim.core.filesystem import FilesystemProvider, LocalFilesystem
from reclaim.core.safelist import SafeList, is_under, normalize_path
from reclaim.models.errors import ScanError
from reclaim.models.file_record import CleanupCategory, FileRecord
from reclaim.models.scan_result import ScanProgress, ScanResult

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000

ScanProgressCallback = Callable[[ScanProgress], None]


def collapse_roots(paths: Iterable[str]) -> list[str]:
    """Resolve scan roots to absolute paths and drop overlapping ones.

    Repeated roots and roots lying below another root are removed, so
    every file is reachable from exactly one root. First-seen order is
    kept.
    """
    roots: list[str] = []
    for path in paths:
        root = normalize_path(os.path.abspath(os.path.expanduser(path)))
        if root not in roots:
            roots.append(root)
    return [
        root
        for root in roots
        if not any(other != root and (other == "/" or is_under(root, other)) for other in roots)
    ]


class FileScanner:
    """Scans directory trees and builds FileRecords.

    One scanner runs one scan at a time. cancel() may be called from
    another thread or from the progress callback; the flag is checked
    at every directory boundary and after every batch.

    Args:
        safe_list: Safe list used to skip protected paths.
        categorizer: Categorizer used for the category filter.
        filesystem: Filesystem provider. Defaults to LocalFilesystem.
        batch_size: Number of files per progress report.
        detect_in_use: Mark files held open by a process as in use.
    """

    def __init__(
        self,
        safe_list: SafeList,
        categorizer: Categorizer | None = None,
        filesystem: FilesystemProvider | None = None,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        detect_in_use: bool = False,
    ) -> None:
        self._safe_list = safe_list
        self._categorizer = categorizer or Categorizer(safe_list)
        self._fs = filesystem or LocalFilesystem()
        self._batch_size = max(1, batch_size)
        self._detect_in_use = detect_in_use
        self._cancel_event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation of the running scan."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def categorize(self, file: FileRecord) -> set[CleanupCategory]:
        """Return the cleanup categories of a file."""
        return self._categorizer.categorize(file)

    def scan(
        self,
        paths: Iterable[str],
        categories: set[CleanupCategory] | None = None,
        on_progress: ScanProgressCallback | None = None,
    ) -> ScanResult:
        """Scan paths and collect file metadata.

        Errors on individual roots or directories are recorded and the
        scan continues. Cancellation returns the files collected so far
        together with a cancelled error.

        Args:
            paths: Files or directories to scan.
            categories: If non-empty, keep only files in at least one of these.
            on_progress: Called after every batch and at the end of each root.

        Returns:
            ScanResult with files in traversal order.
        """
        self._cancel_event.clear()
        start = time.monotonic()
        roots = collapse_roots(paths)
        in_use = self._fs.open_files() if self._detect_in_use else set()

        state = _ScanState(categories=set(categories or ()), in_use=in_use, on_progress=on_progress)

        for index, root in enumerate(roots):
            if self.cancelled:
                break
            state.root_index = index
            state.root_count = len(roots)
            self._scan_root(root, state)
            if state.stopped:
                break
            state.report(root, (index + 1) / len(roots))

        if self.cancelled:
            logger.info("Scan cancelled after %d files", len(state.files))
            state.errors.append(ScanError.cancelled())

        return ScanResult(
            files=tuple(state.files),
            errors=tuple(state.errors),
            duration=time.monotonic() - start,
        )

    def _scan_root(self, root: str, state: "_ScanState") -> None:
        if self._safe_list.is_protected(root):
            logger.debug("Skipping protected scan root: %s", root)
            return

        if not self._fs.exists(root):
            logger.warning("Scan path not found: %s", root)
            state.errors.append(ScanError.path_not_found(root))
            return

        try:
            st = self._fs.lstat(root)
        except OSError as e:
            state.errors.append(_map_scan_error(e, root))
            return

        if not stat.S_ISDIR(st.st_mode):
            self._collect(root, st, state)
            return

        stack = [root]
        while stack:
            if self.cancelled:
                state.stopped = True
                return
            directory = stack.pop()
            try:
                entries = sorted(self._fs.scandir(directory), key=lambda e: e.name)
            except PermissionError:
                logger.warning("Permission denied reading directory: %s", directory)
                state.errors.append(ScanError.permission_denied(directory))
                continue
            except FileNotFoundError:
                logger.debug("Directory vanished during scan: %s", directory)
                continue
            except OSError as e:
                state.errors.append(_map_scan_error(e, directory))
                continue

            subdirs: list[str] = []
            for entry in entries:
                path = entry.path
                if self._safe_list.is_protected(path):
                    logger.debug("Skipping protected path: %s", path)
                    continue
                try:
                    if entry.is_dir(follow_symlinks=False):
                        subdirs.append(path)
                        continue
                    st = self._fs.lstat(path)
                except FileNotFoundError:
                    continue
                except OSError as e:
                    state.errors.append(_map_scan_error(e, path))
                    continue
                self._collect(path, st, state)
                if state.pending >= self._batch_size:
                    state.report(path, state.root_index / max(state.root_count, 1))
                    if self.cancelled:
                        state.stopped = True
                        return

            stack.extend(reversed(subdirs))

    def _collect(self, path: str, st: os.stat_result, state: "_ScanState") -> None:
        if path in state.seen:
            return
        state.seen.add(path)
        record = self._make_record(path, st, in_use=path in state.in_use)
        if state.categories and not (self._categorizer.categorize(record) & state.categories):
            return
        state.files.append(record)
        state.pending += 1

    def _make_record(self, path: str, st: os.stat_result, in_use: bool = False) -> FileRecord:
        created_ts = getattr(st, "st_birthtime", None) or st.st_ctime
        return FileRecord(
            path=path,
            size=st.st_size,
            created=datetime.fromtimestamp(created_ts, tz=UTC),
            modified=datetime.fromtimestamp(st.st_mtime, tz=UTC),
            accessed=datetime.fromtimestamp(st.st_atime, tz=UTC),
            file_type=detect_file_type(path),
            in_use=in_use,
            permissions=self._fs.permissions(path),
        )


class _ScanState:
    """Mutable bookkeeping for one scan invocation."""

    def __init__(
        self,
        categories: set[CleanupCategory],
        in_use: set[str],
        on_progress: ScanProgressCallback | None,
    ) -> None:
        self.categories = categories
        self.in_use = in_use
        self.on_progress = on_progress
        self.files: list[FileRecord] = []
        self.seen: set[str] = set()
        self.errors: list[ScanError] = []
        self.pending = 0
        self.root_index = 0
        self.root_count = 1
        self.stopped = False

    def report(self, current_path: str, percent: float) -> None:
        self.pending = 0
        if self.on_progress is not None:
            self.on_progress(
                ScanProgress(
                    current_path=current_path,
                    files_scanned=len(self.files),
                    percent_complete=min(max(percent, 0.0), 1.0),
                )
            )


def _map_scan_error(error: OSError, path: str) -> ScanError:
    if isinstance(error, PermissionError):
        return ScanError.permission_denied(path)
    if isinstance(error, FileNotFoundError):
        return ScanError.path_not_found(path)
    return ScanError.unknown(str(error), path)
