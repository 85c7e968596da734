"""Backup archive models.

The manifest embedded in every archive is a Pydantic model so it can be
validated when an archive is read back. The remaining types describe
backups, restore outcomes and retention runs as immutable dataclasses.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from reclaim.models.errors import RestoreError

MANIFEST_VERSION = 1


class ManifestEntry(BaseModel):
    """One archived file.

    Attributes:
        original_path: Absolute path the file was archived from.
        relative_path: Path below the archive's common root, used on restore.
        size: Size in bytes at archive time.
        modified: Modification time at archive time.
        file_type: String form of the file-type tag.
        checksum: SHA-256 hex digest of the archived content.
    """

    model_config = ConfigDict(extra="forbid")

    original_path: Annotated[str, Field(min_length=1, description="Original absolute path")]
    relative_path: Annotated[str, Field(min_length=1, description="Path relative to archive root")]
    size: Annotated[int, Field(ge=0, description="Size in bytes")]
    modified: Annotated[datetime, Field(description="Modification time at archive time")]
    file_type: Annotated[str, Field(description="File-type tag")] = "other()"
    checksum: Annotated[str, Field(description="SHA-256 hex digest")]


class BackupManifest(BaseModel):
    """Manifest stored as ``manifest.json`` inside every archive.

    Attributes:
        version: Manifest schema version.
        backup_id: Unique identifier of the backup.
        created: Creation time (UTC); retention decisions use this value.
        entries: Archived files.
    """

    model_config = ConfigDict(extra="forbid")

    version: Annotated[int, Field(ge=1, description="Manifest schema version")] = MANIFEST_VERSION
    backup_id: Annotated[str, Field(min_length=1, description="Backup identifier")]
    created: Annotated[datetime, Field(description="Creation time")]
    entries: Annotated[list[ManifestEntry], Field(description="Archived files")] = []

    @property
    def original_size(self) -> int:
        """Combined size of all archived files."""
        return sum(e.size for e in self.entries)


@dataclass(frozen=True, slots=True)
class Backup:
    """Backup archive discoverable at the storage root.

    Attributes:
        id: Backup identifier from the manifest.
        created: Creation time from the manifest.
        file_count: Number of archived files.
        original_size: Combined size of the archived files.
        compressed_size: Size of the archive on disk.
        location: Absolute path of the archive.
    """

    id: str
    created: datetime
    file_count: int
    original_size: int
    compressed_size: int
    location: str


@dataclass(frozen=True, slots=True)
class BackupResult:
    """Outcome of creating a backup.

    Attributes:
        backup: The created backup.
        skipped: Paths that vanished before they could be archived.
    """

    backup: Backup
    skipped: tuple[str, ...] = ()

    @property
    def location(self) -> str:
        return self.backup.location


@dataclass(frozen=True, slots=True)
class RestoreResult:
    """Outcome of restoring a backup.

    Attributes:
        files_restored: Number of files written and verified.
        errors: Per-entry restore errors.
        restored_paths: Destination paths of the restored files.
    """

    files_restored: int = 0
    errors: tuple[RestoreError, ...] = ()
    restored_paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RetentionSummary:
    """Outcome of pruning old backups.

    Attributes:
        removed: Identifiers of the deleted backups.
        kept: Identifiers of the backups left in place.
        freed_bytes: Archive bytes reclaimed.
    """

    removed: tuple[str, ...] = ()
    kept: tuple[str, ...] = ()
    freed_bytes: int = 0
