"""Unit tests for the backup manager."""

import io
import tarfile
import threading
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from reclaim.core.backup import MANIFEST_NAME, BackupManager
from reclaim.models.backup import BackupManifest, ManifestEntry
from reclaim.models.errors import BackupError, RestoreErrorKind, RestoreFailedError


@pytest.fixture
def backup_root(tmp_path: Path) -> Path:
    return tmp_path / "backups"


@pytest.fixture
def manager(backup_root: Path, fake_fs, clock) -> BackupManager:
    return BackupManager(root=backup_root, filesystem=fake_fs, clock=clock)


@pytest.fixture
def source_files(tmp_path: Path, write_file, make_record) -> list:
    """Two files below a common parent, as records."""
    a = write_file(tmp_path / "src" / "a.txt", b"alpha", age_days=3)
    b = write_file(tmp_path / "src" / "sub" / "b.txt", b"bravo!", age_days=3)
    return [make_record(str(a), 5, age_days=3), make_record(str(b), 6, age_days=3)]


class TestCreateBackup:
    """Tests for creating backup archives."""

    def test_archive_starts_with_manifest(
        self, manager: BackupManager, backup_root: Path, source_files: list, now: datetime
    ) -> None:
        """The manifest is the first member and files follow under files/."""
        result = manager.create_backup(source_files)

        backup = result.backup
        assert backup.file_count == 2
        assert backup.original_size == 11
        assert backup.created == now
        assert Path(backup.location).parent == backup_root
        with tarfile.open(backup.location, "r:gz") as tar:
            names = tar.getnames()
        assert names == [MANIFEST_NAME, "files/a.txt", "files/sub/b.txt"]

    def test_missing_files_are_skipped(
        self, manager: BackupManager, source_files: list, make_record
    ) -> None:
        """Vanished files are reported instead of failing the backup."""
        ghost = make_record("/nonexistent/ghost.txt")
        result = manager.create_backup([*source_files, ghost])
        assert result.skipped == (ghost.path,)
        assert result.backup.file_count == 2

    def test_empty_selection(self, manager: BackupManager) -> None:
        """An empty backup holds only the manifest and is listed."""
        result = manager.create_backup([])
        assert result.backup.file_count == 0
        assert [b.id for b in manager.list_backups()] == [result.backup.id]

    def test_cancel_leaves_no_archive(
        self, manager: BackupManager, backup_root: Path, source_files: list
    ) -> None:
        """A cancelled backup raises and leaves nothing behind."""
        event = threading.Event()
        event.set()
        with pytest.raises(BackupError, match="cancelled"):
            manager.create_backup(source_files, cancel_event=event)
        assert list(backup_root.iterdir()) == []


class TestListAndRetention:
    """Tests for listing, lookup, deletion and pruning."""

    @pytest.fixture
    def dated(self, backup_root: Path, fake_fs, now: datetime) -> BackupManager:
        """Manager holding backups created 31, 30 and 0 days before the fixed clock."""
        current = [now]
        writer = BackupManager(root=backup_root, filesystem=fake_fs, clock=lambda: current[0])
        for days in (31, 30, 0):
            current[0] = now - timedelta(days=days)
            writer.create_backup([])
        return BackupManager(root=backup_root, filesystem=fake_fs, clock=lambda: now)

    def test_newest_first(self, dated: BackupManager) -> None:
        """Backups are listed newest first."""
        created = [b.created for b in dated.list_backups()]
        assert created == sorted(created, reverse=True)

    def test_old_backups_strict_cutoff(self, dated: BackupManager, now: datetime) -> None:
        """A backup exactly at the cutoff is not old."""
        old = dated.get_old_backups(30)
        assert [b.created for b in old] == [now - timedelta(days=31)]

    def test_prune(self, dated: BackupManager) -> None:
        """Pruning deletes only the old backups."""
        summary = dated.prune_backups(30)
        assert len(summary.removed) == 1
        assert len(summary.kept) == 2
        assert summary.freed_bytes > 0
        assert len(dated.list_backups()) == 2

    def test_get_backup_by_prefix(self, manager: BackupManager) -> None:
        """A unique id prefix finds the backup."""
        backup = manager.create_backup([]).backup
        assert manager.get_backup(backup.id[:8]) == backup
        assert manager.get_backup("not-an-id") is None

    def test_delete_twice(self, manager: BackupManager) -> None:
        """Deleting a missing archive raises BackupError."""
        backup = manager.create_backup([]).backup
        manager.delete_backup(backup)
        assert manager.list_backups() == []
        with pytest.raises(BackupError):
            manager.delete_backup(backup)

    def test_unreadable_archive_skipped(self, manager: BackupManager, backup_root: Path) -> None:
        """Garbage archives are skipped when listing and rejected when read."""
        manager.create_backup([])
        junk = backup_root / "backup_20240101T000000Z_junk.tar.gz"
        junk.write_bytes(b"not a tarball")

        assert len(manager.list_backups()) == 1
        with pytest.raises(RestoreFailedError) as exc_info:
            manager.read_manifest(junk)
        assert exc_info.value.error.kind == RestoreErrorKind.BACKUP_CORRUPTED


class TestRestore:
    """Tests for restoring backups."""

    def test_round_trip(self, manager: BackupManager, source_files: list, tmp_path: Path) -> None:
        """Restoring reproduces the relative layout and content."""
        backup = manager.create_backup(source_files).backup
        out = tmp_path / "out"

        result = manager.restore_backup(backup, out)

        assert result.files_restored == 2
        assert result.errors == ()
        assert (out / "a.txt").read_bytes() == b"alpha"
        assert (out / "sub" / "b.txt").read_bytes() == b"bravo!"

    def test_subset(self, manager: BackupManager, source_files: list, tmp_path: Path) -> None:
        """Only the requested original paths are restored."""
        backup = manager.create_backup(source_files).backup
        out = tmp_path / "out"

        result = manager.restore_backup(backup, out, [source_files[1].path])

        assert result.files_restored == 1
        assert not (out / "a.txt").exists()

    def test_restore_to_original(self, manager: BackupManager, source_files: list) -> None:
        """Deleted files come back at their original paths."""
        backup = manager.create_backup(source_files).backup
        for record in source_files:
            Path(record.path).unlink()

        result = manager.restore_to_original(backup)

        assert result.files_restored == 2
        assert Path(source_files[0].path).read_bytes() == b"alpha"

    def test_insufficient_space(
        self, manager: BackupManager, fake_fs, source_files: list, tmp_path: Path
    ) -> None:
        """Restore fails up front when the destination lacks space."""
        backup = manager.create_backup(source_files).backup
        fake_fs.free = 1
        with pytest.raises(RestoreFailedError) as exc_info:
            manager.restore_backup(backup, tmp_path / "out")
        assert exc_info.value.error.kind == RestoreErrorKind.INSUFFICIENT_SPACE

    def test_checksum_mismatch(
        self, manager: BackupManager, backup_root: Path, tmp_path: Path, now: datetime
    ) -> None:
        """A file whose content does not match its checksum is not left behind."""
        manifest = BackupManifest(
            backup_id="forged",
            created=now,
            entries=[
                ManifestEntry(
                    original_path="/data/x.txt",
                    relative_path="x.txt",
                    size=1,
                    modified=now,
                    checksum="0" * 64,
                )
            ],
        )
        backup_root.mkdir()
        archive = backup_root / "backup_20240601T120000Z_forged.tar.gz"
        with tarfile.open(archive, "w:gz") as tar:
            for name, payload in (
                (MANIFEST_NAME, manifest.model_dump_json().encode()),
                ("files/x.txt", b"x"),
            ):
                info = tarfile.TarInfo(name)
                info.size = len(payload)
                tar.addfile(info, io.BytesIO(payload))
        backup = manager.get_backup("forged")
        assert backup is not None
        out = tmp_path / "out"

        result = manager.restore_backup(backup, out)

        assert result.files_restored == 0
        assert [e.kind for e in result.errors] == [RestoreErrorKind.BACKUP_CORRUPTED]
        assert not (out / "x.txt").exists()

    def test_missing_archive(self, manager: BackupManager, tmp_path: Path) -> None:
        """A deleted archive cannot be restored."""
        backup = manager.create_backup([]).backup
        manager.delete_backup(backup)
        with pytest.raises(RestoreFailedError) as exc_info:
            manager.restore_backup(backup, tmp_path / "out")
        assert exc_info.value.error.kind == RestoreErrorKind.BACKUP_NOT_FOUND
