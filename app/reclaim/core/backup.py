"""Compressed backups of files selected for cleanup.

Each backup is one ``.tar.gz`` archive in the storage root. The first
member is ``manifest.json`` (a BackupManifest); archived files follow
under ``files/<relative path>``. Relative paths are taken from the
common parent directory of the archived files, so restoring into a
fresh directory reproduces their layout.

Archives are written to a temporary sibling and moved into place, so a
failed or cancelled backup never leaves a partial archive behind.
"""

import errno
import hashlib
import io
import logging
import os
import tarfile
import tempfile
import threading
import time
import uuid
import zlib
from collections.abc import Callable, Iterable
from datetime import timedelta
from pathlib import Path, PurePosixPath

from pydantic import ValidationError

from reclaim.core.categorize import Clock, utc_now
from reclaim.core.filesystem import FilesystemProvider, LocalFilesystem
from reclaim.core.paths import ensure_backup_dir, get_backup_dir
from reclaim.models.backup import (
    Backup,
    BackupManifest,
    BackupResult,
    ManifestEntry,
    RestoreResult,
    RetentionSummary,
)
from reclaim.models.errors import BackupError, RestoreError, RestoreFailedError
from reclaim.models.file_record import FileRecord
from reclaim.utils.checksum import CHUNK_SIZE, sha256_file, sha256_text

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"
FILES_PREFIX = "files"
ARCHIVE_GLOB = "backup_*.tar.gz"

_ARCHIVE_ERRORS = (tarfile.TarError, EOFError, zlib.error, OSError)


def backup_file_name(created_stamp: str, backup_id: str) -> str:
    """Build the archive name from a UTC timestamp and a unique id."""
    return f"backup_{created_stamp}_{backup_id}.tar.gz"


def _relative_paths(paths: list[str]) -> list[str]:
    """Return each path relative to the common parent of all paths."""
    if not paths:
        return []
    parents = [os.path.dirname(p) for p in paths]
    root = os.path.commonpath(parents) if len(set(parents)) > 1 else parents[0]
    return [os.path.relpath(p, root) for p in paths]


def _is_safe_relative(path: str) -> bool:
    pure = PurePosixPath(path)
    return bool(path) and not pure.is_absolute() and ".." not in pure.parts


class BackupManager:
    """Creates, lists, restores and prunes backup archives.

    Args:
        root: Storage root. Defaults to ~/.local/state/reclaim/backups/.
        filesystem: Filesystem provider used for existence and space checks.
        clock: Source of the current time.
        timeout: Maximum seconds to spend writing one archive (None = no limit).
    """

    def __init__(
        self,
        root: str | Path | None = None,
        filesystem: FilesystemProvider | None = None,
        clock: Clock = utc_now,
        timeout: float | None = None,
    ) -> None:
        self.root = Path(root) if root is not None else get_backup_dir()
        self._fs = filesystem or LocalFilesystem()
        self._clock = clock
        self._timeout = timeout

    # =========================================================================
    # Create
    # =========================================================================

    def create_backup(
        self,
        files: Iterable[FileRecord],
        destination: str | Path | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BackupResult:
        """Archive files together with a manifest.

        Files that no longer exist are skipped and reported. An empty
        selection still produces a valid archive holding only the manifest.

        Args:
            files: Files to archive.
            destination: Directory receiving the archive. Defaults to the storage root.
            cancel_event: When set, archiving stops and BackupError is raised.

        Returns:
            BackupResult describing the new archive.

        Raises:
            BackupError: If the archive cannot be written, a file cannot be
                read, the timeout expires or the backup is cancelled.
        """
        try:
            target_dir = ensure_backup_dir(Path(destination) if destination else self.root)
        except RuntimeError as e:
            raise BackupError(str(e)) from e

        created = self._clock()
        backup_id = uuid.uuid4().hex
        deadline = time.monotonic() + self._timeout if self._timeout else None

        records: list[FileRecord] = []
        skipped: list[str] = []
        for record in files:
            is_dir = os.path.isdir(record.path) and not os.path.islink(record.path)
            if not self._fs.exists(record.path) or is_dir:
                logger.debug("Not archiving missing or non-file path: %s", record.path)
                skipped.append(record.path)
                continue
            records.append(record)

        entries: list[ManifestEntry] = []
        relatives = _relative_paths([r.path for r in records])
        kept: list[tuple[FileRecord, str]] = []
        for record, relative in zip(records, relatives, strict=True):
            self._check_interrupt(deadline, cancel_event)
            try:
                if os.path.islink(record.path):
                    checksum = sha256_text(os.readlink(record.path))
                else:
                    checksum = sha256_file(record.path)
            except FileNotFoundError:
                skipped.append(record.path)
                continue
            except OSError as e:
                raise BackupError(f"Cannot read {record.path}: {e}") from e
            entries.append(
                ManifestEntry(
                    original_path=record.path,
                    relative_path=relative,
                    size=record.size,
                    modified=record.modified,
                    file_type=str(record.file_type),
                    checksum=checksum,
                )
            )
            kept.append((record, relative))

        manifest = BackupManifest(backup_id=backup_id, created=created, entries=entries)
        final_path = target_dir / backup_file_name(created.strftime("%Y%m%dT%H%M%SZ"), backup_id)

        tmp = tempfile.NamedTemporaryFile(
            dir=target_dir, prefix=".backup_", suffix=".partial", delete=False
        )
        tmp_path = Path(tmp.name)
        tmp.close()
        try:
            with tarfile.open(tmp_path, "w:gz") as tar:
                payload = manifest.model_dump_json(indent=2).encode()
                info = tarfile.TarInfo(MANIFEST_NAME)
                info.size = len(payload)
                info.mtime = int(created.timestamp())
                tar.addfile(info, io.BytesIO(payload))
                for record, relative in kept:
                    self._check_interrupt(deadline, cancel_event)
                    tar.add(record.path, arcname=f"{FILES_PREFIX}/{relative}", recursive=False)
            os.replace(tmp_path, final_path)
        except BackupError:
            tmp_path.unlink(missing_ok=True)
            raise
        except (OSError, tarfile.TarError) as e:
            tmp_path.unlink(missing_ok=True)
            raise BackupError(f"Failed to write backup archive: {e}") from e

        backup = Backup(
            id=backup_id,
            created=created,
            file_count=len(entries),
            original_size=manifest.original_size,
            compressed_size=final_path.stat().st_size,
            location=str(final_path),
        )
        logger.info(
            "Created backup %s with %d files (%d bytes) at %s",
            backup_id,
            backup.file_count,
            backup.original_size,
            final_path,
        )
        return BackupResult(backup=backup, skipped=tuple(skipped))

    @staticmethod
    def _check_interrupt(deadline: float | None, cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise BackupError("Backup cancelled")
        if deadline is not None and time.monotonic() > deadline:
            raise BackupError("Backup timed out")

    # =========================================================================
    # List / lookup
    # =========================================================================

    def read_manifest(self, location: str | Path) -> BackupManifest:
        """Read the manifest of an archive without extracting any file.

        Raises:
            RestoreFailedError: backup_not_found if the archive is missing,
                backup_corrupted if it cannot be read or validated.
        """
        path = Path(location)
        if not path.is_file():
            raise RestoreFailedError(RestoreError.backup_not_found(str(path)))
        try:
            with tarfile.open(path, "r:gz") as tar:
                first = tar.next()
                if first is None or first.name != MANIFEST_NAME:
                    raise RestoreFailedError(
                        RestoreError.backup_corrupted(str(path), "manifest missing")
                    )
                handle = tar.extractfile(first)
                if handle is None:
                    raise RestoreFailedError(
                        RestoreError.backup_corrupted(str(path), "manifest unreadable")
                    )
                return BackupManifest.model_validate_json(handle.read())
        except ValidationError as e:
            raise RestoreFailedError(RestoreError.backup_corrupted(str(path), str(e))) from e
        except _ARCHIVE_ERRORS as e:
            raise RestoreFailedError(RestoreError.backup_corrupted(str(path), str(e))) from e

    def _to_backup(self, path: Path, manifest: BackupManifest) -> Backup:
        return Backup(
            id=manifest.backup_id,
            created=manifest.created,
            file_count=len(manifest.entries),
            original_size=manifest.original_size,
            compressed_size=path.stat().st_size,
            location=str(path),
        )

    def list_backups(self) -> list[Backup]:
        """List all readable backups in the storage root, newest first.

        Archives whose manifest cannot be read are skipped with a warning.
        """
        if not self.root.is_dir():
            return []
        backups: list[Backup] = []
        for path in self.root.glob(ARCHIVE_GLOB):
            try:
                manifest = self.read_manifest(path)
                backups.append(self._to_backup(path, manifest))
            except (RestoreFailedError, OSError) as e:
                logger.warning("Skipping unreadable backup %s: %s", path, e)
        backups.sort(key=lambda b: b.created, reverse=True)
        return backups

    def get_backup(self, backup_id: str) -> Backup | None:
        """Find a backup by its id or a unique id prefix."""
        matches = [b for b in self.list_backups() if b.id.startswith(backup_id)]
        exact = [b for b in matches if b.id == backup_id]
        if exact:
            return exact[0]
        return matches[0] if len(matches) == 1 else None

    def get_old_backups(self, older_than_days: int = 30) -> list[Backup]:
        """Return backups created strictly before now minus older_than_days."""
        cutoff = self._clock() - timedelta(days=older_than_days)
        return [b for b in self.list_backups() if b.created < cutoff]

    # =========================================================================
    # Delete / retention
    # =========================================================================

    def delete_backup(self, backup: Backup) -> None:
        """Delete a backup archive.

        Raises:
            BackupError: If the archive does not exist or cannot be removed.
        """
        try:
            Path(backup.location).unlink()
        except FileNotFoundError as e:
            raise BackupError(f"Backup not found: {backup.location}") from e
        except OSError as e:
            raise BackupError(f"Failed to delete backup {backup.id}: {e}") from e
        logger.info("Deleted backup %s", backup.id)

    def prune_backups(self, older_than_days: int = 30) -> RetentionSummary:
        """Delete every backup older than the retention period."""
        old_ids = {b.id for b in self.get_old_backups(older_than_days)}
        removed: list[str] = []
        kept: list[str] = []
        freed = 0
        for backup in self.list_backups():
            if backup.id not in old_ids:
                kept.append(backup.id)
                continue
            try:
                self.delete_backup(backup)
            except BackupError as e:
                logger.warning("Could not prune backup %s: %s", backup.id, e)
                kept.append(backup.id)
                continue
            removed.append(backup.id)
            freed += backup.compressed_size
        logger.info("Pruned %d backups, kept %d", len(removed), len(kept))
        return RetentionSummary(removed=tuple(removed), kept=tuple(kept), freed_bytes=freed)

    # =========================================================================
    # Restore
    # =========================================================================

    def restore_backup(
        self,
        backup: Backup,
        destination: str | Path,
        paths: Iterable[str] | None = None,
    ) -> RestoreResult:
        """Extract a backup below destination, keeping manifest-relative paths.

        Every restored file is verified against its manifest checksum; a
        mismatching copy is removed and reported as corrupted. Per-entry
        failures never stop the remaining entries.

        Args:
            backup: Backup to restore.
            destination: Directory receiving the files.
            paths: Restrict the restore to these original paths.

        Returns:
            RestoreResult with the restored count and per-entry errors.

        Raises:
            RestoreFailedError: If the backup is missing or corrupted, the
                destination is not writable, or there is not enough space.
        """
        dest = Path(destination)
        manifest = self.read_manifest(backup.location)
        selected = self._select(manifest, paths)

        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RestoreFailedError(RestoreError.destination_not_writable(str(dest))) from e
        if not os.access(dest, os.W_OK | os.X_OK):
            raise RestoreFailedError(RestoreError.destination_not_writable(str(dest)))
        self._check_space(dest, selected)

        return self._extract(backup, selected, lambda entry: dest / entry.relative_path)

    def restore_to_original(
        self, backup: Backup, paths: Iterable[str] | None = None
    ) -> RestoreResult:
        """Put archived files back at their original absolute paths.

        Used to roll back a failed cleanup. Missing parent directories
        are recreated; existing files are overwritten.
        """
        manifest = self.read_manifest(backup.location)
        selected = self._select(manifest, paths)
        return self._extract(backup, selected, lambda entry: Path(entry.original_path))

    @staticmethod
    def _select(manifest: BackupManifest, paths: Iterable[str] | None) -> list[ManifestEntry]:
        if paths is None:
            return list(manifest.entries)
        wanted = set(paths)
        return [e for e in manifest.entries if e.original_path in wanted]

    def _check_space(self, dest: Path, entries: list[ManifestEntry]) -> None:
        needed = sum(e.size for e in entries)
        free = self._fs.free_space(str(dest))
        if free < needed:
            raise RestoreFailedError(
                RestoreError.insufficient_space(f"need {needed} bytes, {free} available")
            )

    def _extract(
        self,
        backup: Backup,
        entries: list[ManifestEntry],
        target_for: Callable[[ManifestEntry], Path],
    ) -> RestoreResult:
        pending = {f"{FILES_PREFIX}/{e.relative_path}": e for e in entries}
        errors: list[RestoreError] = []
        restored: list[str] = []

        for entry in list(pending.values()):
            if not _is_safe_relative(entry.relative_path):
                errors.append(RestoreError.backup_corrupted(entry.original_path, "unsafe path"))
                del pending[f"{FILES_PREFIX}/{entry.relative_path}"]

        try:
            with tarfile.open(backup.location, "r:gz") as tar:
                for member in tar:
                    entry = pending.pop(member.name, None)
                    if entry is None:
                        continue
                    error = self._restore_member(tar, member, entry, target_for(entry))
                    if error is None:
                        restored.append(str(target_for(entry)))
                    else:
                        errors.append(error)
                    if not pending:
                        break
        except _ARCHIVE_ERRORS as e:
            logger.warning("Backup %s is damaged: %s", backup.id, e)
            errors.append(RestoreError.backup_corrupted(backup.location, str(e)))

        for entry in pending.values():
            errors.append(RestoreError.backup_corrupted(entry.original_path, "missing from archive"))

        logger.info(
            "Restored %d of %d files from backup %s", len(restored), len(entries), backup.id
        )
        return RestoreResult(
            files_restored=len(restored), errors=tuple(errors), restored_paths=tuple(restored)
        )

    def _restore_member(
        self,
        tar: tarfile.TarFile,
        member: tarfile.TarInfo,
        entry: ManifestEntry,
        target: Path,
    ) -> RestoreError | None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if os.path.lexists(target):
                os.unlink(target)
            if member.issym():
                os.symlink(member.linkname, target)
                checksum = sha256_text(member.linkname)
            elif member.isfile():
                source = tar.extractfile(member)
                if source is None:
                    return RestoreError.backup_corrupted(entry.original_path, "unreadable entry")
                digest = hashlib.sha256()
                with open(target, "wb") as out:
                    for chunk in iter(lambda: source.read(CHUNK_SIZE), b""):
                        digest.update(chunk)
                        out.write(chunk)
                checksum = digest.hexdigest()
                mtime = entry.modified.timestamp()
                os.utime(target, (mtime, mtime))
            else:
                return RestoreError.backup_corrupted(entry.original_path, "unsupported entry type")
        except PermissionError:
            return RestoreError.destination_not_writable(str(target))
        except OSError as e:
            if e.errno == errno.ENOSPC:
                return RestoreError.insufficient_space(str(e))
            return RestoreError.unknown(str(e), entry.original_path)

        if checksum != entry.checksum:
            logger.warning("Checksum mismatch restoring %s", entry.original_path)
            target.unlink(missing_ok=True)
            return RestoreError.backup_corrupted(entry.original_path, "checksum mismatch")
        return None
