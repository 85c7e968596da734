"""Discovery and clearing of cache directories.

Known browser, developer tool and AI agent caches are looked up from the
tables in cache_locations. Every other directory directly below a cache
root is reported on its own as a system or application cache. Contents
are collected with the file scanner, so protected paths never appear,
and clearing goes through the cleanup engine with its usual validation,
backup and rollback rules.
"""

import fnmatch
import logging
import os
import stat
from collections.abc import Iterable
from pathlib import Path

from reclaim.core.cache_locations import (
    AI_AGENT_CACHES,
    APPLICATION_CACHE_ROOTS,
    BROWSER_CACHES,
    DEVELOPER_CACHES,
    KNOWN_CACHES,
    SYSTEM_CACHE_ROOTS,
)
from reclaim.core.engine import CleanupEngine, CleanupProgressCallback
from reclaim.core.filesystem import FilesystemProvider, LocalFilesystem
from reclaim.core.paths import get_user_cache_root
from reclaim.core.safelist import is_under, normalize_path
from reclaim.core.scanner import FileScanner
from reclaim.models.cache import CacheLocation, CacheSource, KnownCache
from reclaim.models.cleanup import CleanupOptions, CleanupResult

logger = logging.getLogger(__name__)


class CacheManager:
    """Finds cache directories and clears them through the cleanup engine.

    Args:
        scanner: Scanner used to collect the files of each location.
        engine: Engine that performs deletions.
        filesystem: Filesystem provider. Defaults to LocalFilesystem.
        home: Home directory. Defaults to Path.home().
        cache_root: User cache root. Defaults to get_user_cache_root().
        system_roots: Roots of system-wide caches.
    """

    def __init__(
        self,
        scanner: FileScanner,
        engine: CleanupEngine,
        filesystem: FilesystemProvider | None = None,
        *,
        home: str | Path | None = None,
        cache_root: str | Path | None = None,
        system_roots: tuple[str, ...] = SYSTEM_CACHE_ROOTS,
    ) -> None:
        self._scanner = scanner
        self._engine = engine
        self._fs = filesystem or LocalFilesystem()
        self.home = str(home) if home is not None else str(Path.home())
        self.cache_root = str(cache_root) if cache_root is not None else str(get_user_cache_root())
        self._system_roots = system_roots

    # =========================================================================
    # Discovery
    # =========================================================================

    def find_system_caches(self) -> list[CacheLocation]:
        """Report each directory below the system cache roots."""
        return self._find_top_level(CacheSource.SYSTEM, self._system_roots, claimed=[])

    def find_application_caches(self) -> list[CacheLocation]:
        """Report each directory below the user cache roots.

        Directories overlapping a known browser, developer or agent cache
        are left to the dedicated finders.
        """
        claimed = [path for known in KNOWN_CACHES for path in self._known_paths(known)]
        return self._find_top_level(CacheSource.APPLICATION, APPLICATION_CACHE_ROOTS, claimed)

    def find_browser_caches(self) -> list[CacheLocation]:
        return self._find_known(BROWSER_CACHES)

    def find_developer_caches(self) -> list[CacheLocation]:
        return self._find_known(DEVELOPER_CACHES)

    def find_ai_agent_caches(self) -> list[CacheLocation]:
        return self._find_known(AI_AGENT_CACHES)

    def find_caches(self, sources: Iterable[CacheSource] | None = None) -> list[CacheLocation]:
        """Find caches of the given sources (all when empty or None).

        Results follow the CacheSource order and never repeat a path.
        """
        wanted = set(sources or CacheSource)
        finders = {
            CacheSource.SYSTEM: self.find_system_caches,
            CacheSource.APPLICATION: self.find_application_caches,
            CacheSource.BROWSER: self.find_browser_caches,
            CacheSource.DEVELOPER: self.find_developer_caches,
            CacheSource.AI_AGENT: self.find_ai_agent_caches,
        }
        locations: list[CacheLocation] = []
        seen: set[str] = set()
        for source in CacheSource:
            if source not in wanted:
                continue
            for location in finders[source]():
                if location.path not in seen:
                    seen.add(location.path)
                    locations.append(location)
        logger.info("Found %d cache locations", len(locations))
        return locations

    # =========================================================================
    # Clearing
    # =========================================================================

    def clear_caches(
        self,
        locations: Iterable[CacheLocation],
        options: CleanupOptions | None = None,
        on_progress: CleanupProgressCallback | None = None,
    ) -> CleanupResult:
        """Delete the files of the given cache locations.

        The cache directories themselves stay in place.
        """
        files = [file for location in locations for file in location.files]
        return self._engine.cleanup(files, options, on_progress)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _find_known(self, known: tuple[KnownCache, ...]) -> list[CacheLocation]:
        locations: list[CacheLocation] = []
        seen: set[str] = set()
        for entry in known:
            for path in self._known_paths(entry):
                if path in seen:
                    continue
                seen.add(path)
                location = self._collect(entry.source, entry.owner, path)
                if location is not None:
                    locations.append(location)
        return locations

    def _find_top_level(
        self, source: CacheSource, roots: Iterable[str], claimed: list[str]
    ) -> list[CacheLocation]:
        locations: list[CacheLocation] = []
        for pattern in roots:
            root = self._expand(pattern)
            if not self._is_dir(root):
                continue
            try:
                entries = sorted(self._fs.scandir(root), key=lambda e: e.name)
            except OSError as e:
                logger.warning("Cannot list cache root %s: %s", root, e)
                continue
            for entry in entries:
                if not entry.is_dir(follow_symlinks=False):
                    continue
                path = entry.path
                if any(is_under(path, c) or is_under(c, path) for c in claimed):
                    continue
                location = self._collect(source, entry.name, path)
                if location is not None:
                    locations.append(location)
        return locations

    def _collect(self, source: CacheSource, owner: str, path: str) -> CacheLocation | None:
        result = self._scanner.scan([path])
        if not result.files:
            if result.errors:
                logger.warning("Cannot read cache location %s: %s", path, result.errors[0])
            else:
                logger.debug("Skipping empty cache location %s", path)
            return None
        return CacheLocation(
            source=source, owner=owner, path=path, files=result.files, errors=result.errors
        )

    def _expand(self, pattern: str) -> str:
        return normalize_path(pattern.format(home=self.home, cache=self.cache_root))

    def _known_paths(self, entry: KnownCache) -> list[str]:
        """Existing directories matching the patterns of a known cache."""
        paths: list[str] = []
        for pattern in entry.patterns:
            for path in self._glob(self._expand(pattern)):
                if path not in paths:
                    paths.append(path)
        return paths

    def _glob(self, path: str) -> list[str]:
        parts = path.split("/")
        wildcard = next((i for i, part in enumerate(parts) if "*" in part), None)
        if wildcard is None:
            return [path] if self._is_dir(path) else []

        base = "/".join(parts[:wildcard]) or "/"
        try:
            entries = sorted(self._fs.scandir(base), key=lambda e: e.name)
        except OSError:
            return []
        matches: list[str] = []
        for entry in entries:
            if fnmatch.fnmatchcase(entry.name, parts[wildcard]):
                candidate = os.path.join(base, entry.name, *parts[wildcard + 1 :])
                if self._is_dir(candidate):
                    matches.append(candidate)
        return matches

    def _is_dir(self, path: str) -> bool:
        try:
            return stat.S_ISDIR(self._fs.lstat(path).st_mode)
        except OSError:
            return False
