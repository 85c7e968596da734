"""Wiring of the core components for one CLI invocation."""

from dataclasses import dataclass

from reclaim.core.analyzer import StorageAnalyzer
from reclaim.core.backup import BackupManager
from reclaim.core.caches import CacheManager
from reclaim.core.categorize import Categorizer, Clock, utc_now
from reclaim.core.config import ReclaimConfig
from reclaim.core.engine import CleanupEngine
from reclaim.core.filesystem import FilesystemProvider, LocalFilesystem
from reclaim.core.safelist import DefaultSafeList, SafeList
from reclaim.core.scanner import FileScanner


@dataclass
class AppContext:
    """Core components sharing one safe list, filesystem and clock.

    Attributes:
        config: Configuration the components were built from.
        safe_list: Safe list shared by every component.
        categorizer: Categorizer shared by scanner and analyzer.
        scanner: File scanner.
        analyzer: Storage analyzer.
        backup_manager: Backup manager rooted at the configured backup dir.
        engine: Cleanup engine.
        caches: Cache finder sharing the scanner and engine.
    """

    config: ReclaimConfig
    safe_list: SafeList
    categorizer: Categorizer
    scanner: FileScanner
    analyzer: StorageAnalyzer
    backup_manager: BackupManager
    engine: CleanupEngine
    caches: CacheManager

    @classmethod
    def create(
        cls,
        config: ReclaimConfig | None = None,
        *,
        backup_root: str | None = None,
        filesystem: FilesystemProvider | None = None,
        clock: Clock = utc_now,
    ) -> "AppContext":
        """Build a fully wired context.

        The backup root is added to the safe list so no cleanup can
        delete its own backups.

        Args:
            config: Configuration. Defaults to ReclaimConfig().
            backup_root: Backup storage root. Defaults to the state dir.
            filesystem: Filesystem provider. Defaults to LocalFilesystem.
            clock: Source of the current time.
        """
        config = config or ReclaimConfig()
        fs = filesystem or LocalFilesystem()
        backup_manager = BackupManager(
            root=backup_root, filesystem=fs, clock=clock, timeout=config.backup_timeout_seconds
        )
        safe_list = DefaultSafeList(extra_paths=[str(backup_manager.root)])
        categorizer = Categorizer(
            safe_list, large_file_threshold=config.large_file_threshold_bytes, clock=clock
        )
        scanner = FileScanner(safe_list, categorizer, fs)
        engine = CleanupEngine(safe_list, backup_manager, fs, clock=clock)
        return cls(
            config=config,
            safe_list=safe_list,
            categorizer=categorizer,
            scanner=scanner,
            analyzer=StorageAnalyzer(safe_list, categorizer, clock=clock),
            backup_manager=backup_manager,
            engine=engine,
            caches=CacheManager(scanner, engine, fs),
        )
