"""Protected paths that must never be deleted.

This module defines the safe list consulted before any file is
categorized as old or handed to the cleanup engine. A path is protected
when it equals or lies below a protected prefix, matches a protected
regex pattern, or belongs to a system application bundle.

Checks are pure string operations; the filesystem is never touched.
"""

import logging
import os
import platform
import re
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

# macOS system trees.
SYSTEM_PATHS: tuple[str, ...] = (
    "/System",
    "/Library/Apple",
    "/usr/bin",
    "/usr/sbin",
    "/usr/lib",
    "/usr/libexec",
    "/private/var/db",
    "/private/var/root",
    "/bin",
    "/sbin",
    "/private/etc",
    "/private/var/vm",
)

# Linux system trees.
LINUX_SYSTEM_PATHS: tuple[str, ...] = (
    "/boot",
    "/dev",
    "/proc",
    "/sys",
    "/etc",
    "/lib",
    "/lib32",
    "/lib64",
    "/usr/lib32",
    "/usr/lib64",
    "/usr/libx32",
    "/var/lib",
)

# User data that is never a cleanup candidate. ~ is expanded to the home directory.
USER_PATHS: tuple[str, ...] = (
    "~/Library/Keychains",
    "~/Library/Mail",
    "~/Library/Messages",
    "~/Library/Photos",
    "~/Library/Safari",
    "~/Library/Calendars",
    "~/Library/Contacts",
    "~/.ssh",
    "~/.gnupg",
    "~/.local/share/keyrings",
    "~/.config/reclaim",
)

# Key material, wherever it lives.
PROTECTED_PATTERNS: tuple[str, ...] = (
    r"(^|/)id_(rsa|dsa|ecdsa|ed25519)(\.pub)?$",
    r"\.keychain(-db)?$",
    r"\.kdbx$",
)

# Bundles shipped with the OS, protected under /Applications and /System/Applications.
SYSTEM_APPLICATIONS: frozenset[str] = frozenset(
    {
        "Safari.app",
        "Mail.app",
        "Messages.app",
        "Photos.app",
        "Calendar.app",
        "Contacts.app",
        "FaceTime.app",
        "Music.app",
        "TV.app",
        "Podcasts.app",
        "Books.app",
        "App Store.app",
        "System Preferences.app",
        "System Settings.app",
        "Finder.app",
        "TextEdit.app",
        "Preview.app",
        "QuickTime Player.app",
        "Notes.app",
        "Reminders.app",
        "Maps.app",
        "News.app",
        "Stocks.app",
        "Home.app",
        "Voice Memos.app",
        "Calculator.app",
        "Dictionary.app",
        "Font Book.app",
        "Time Machine.app",
    }
)

APPLICATION_ROOTS: tuple[str, ...] = ("/Applications/", "/System/Applications/")

# Entries added per macOS major version; each applies to that version and later.
VERSION_PATHS: tuple[tuple[int, tuple[str, ...]], ...] = (
    (11, ("/System/Volumes/Data", "/System/Volumes/Preboot")),
    (12, ("/System/Library/CoreServices",)),
    (13, ("/Library/Apple/System",)),
)


def normalize_path(path: str) -> str:
    """Collapse redundant separators, "." and ".." components.

    POSIX keeps a leading "//" as implementation defined; it is folded
    to a single "/" so it cannot slip past a prefix check.
    """
    if not path:
        return ""
    normalized = os.path.normpath(path)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def is_under(path: str, prefix: str) -> bool:
    """Check whether path equals prefix or lies below it, component-wise."""
    if prefix in ("", "/"):
        return False
    return path == prefix or path.startswith(prefix + "/")


def parse_os_version(version: str | int | tuple[int, ...] | None) -> int | None:
    """Extract the major version number from a version value.

    Args:
        version: "14.2.1", 14, (14, 2) or None.

    Returns:
        The major version, or None if it cannot be determined.
    """
    if version is None:
        return None
    if isinstance(version, int):
        return version
    if isinstance(version, tuple):
        return version[0] if version else None
    head = version.strip().split(".", 1)[0]
    return int(head) if head.isdigit() else None


def current_os_version() -> str | None:
    """Return the running macOS version, or None on other systems."""
    version = platform.mac_ver()[0]
    return version or None


class SafeList(ABC):
    """Oracle deciding whether a path may ever be deleted."""

    @abstractmethod
    def is_protected(self, path: str) -> bool:
        """Check if a path is protected.

        Args:
            path: Absolute filesystem path (a leading ~ is expanded).

        Returns:
            True if the path must never be deleted.
        """

    @abstractmethod
    def update_safe_list(self, os_version: str | int | tuple[int, ...] | None) -> None:
        """Add the entries required by an OS version.

        Updates are additive and idempotent: prior protections are never
        removed and applying the same version twice changes nothing.
        """


class DefaultSafeList(SafeList):
    """Safe list built from the default system, user and bundle entries.

    Attributes:
        home: Home directory used to expand ~ entries.
    """

    def __init__(
        self,
        home: str | Path | None = None,
        extra_paths: list[str] | None = None,
        extra_patterns: list[str] | None = None,
        os_version: str | int | tuple[int, ...] | None = None,
        include_linux_paths: bool = True,
    ) -> None:
        """Initialize the safe list.

        Args:
            home: Home directory for ~ expansion. Defaults to Path.home().
            extra_paths: Additional protected prefixes (for example the backup root).
            extra_patterns: Additional protected regex patterns.
            os_version: macOS version to apply. Defaults to the running version.
            include_linux_paths: Protect the Linux system trees as well.
        """
        self.home = str(home) if home is not None else str(Path.home())
        self._prefixes: set[str] = set()
        self._patterns: dict[str, re.Pattern[str]] = {}
        self._applications: set[str] = set(SYSTEM_APPLICATIONS)

        self.add_paths(SYSTEM_PATHS)
        if include_linux_paths:
            self.add_paths(LINUX_SYSTEM_PATHS)
        self.add_paths(USER_PATHS)
        self.add_paths(extra_paths or [])
        for pattern in (*PROTECTED_PATTERNS, *(extra_patterns or [])):
            self.add_pattern(pattern)

        self.update_safe_list(os_version if os_version is not None else current_os_version())

    @property
    def protected_paths(self) -> frozenset[str]:
        """Snapshot of the protected prefixes."""
        return frozenset(self._prefixes)

    @property
    def protected_patterns(self) -> frozenset[str]:
        """Snapshot of the protected regex patterns."""
        return frozenset(self._patterns)

    @property
    def system_applications(self) -> frozenset[str]:
        """Snapshot of the protected application bundle names."""
        return frozenset(self._applications)

    def _expand(self, path: str) -> str:
        if path == "~" or path.startswith("~/"):
            path = self.home + path[1:]
        return normalize_path(path)

    def add_paths(self, paths: list[str] | tuple[str, ...]) -> None:
        """Add protected prefixes. Root and empty entries are ignored."""
        for path in paths:
            expanded = self._expand(path)
            if expanded in ("", "/"):
                logger.debug("Ignoring non-specific safe list entry %r", path)
                continue
            self._prefixes.add(expanded)

    def add_pattern(self, pattern: str) -> None:
        """Add a protected regex pattern."""
        if pattern not in self._patterns:
            self._patterns[pattern] = re.compile(pattern)

    def is_protected(self, path: str) -> bool:
        if not path:
            return False
        expanded = self._expand(os.fspath(path))
        if expanded in ("", "/"):
            return False

        for prefix in self._prefixes:
            if is_under(expanded, prefix):
                return True

        for compiled in self._patterns.values():
            if compiled.search(expanded):
                return True

        return self._is_system_application(expanded)

    def _is_system_application(self, path: str) -> bool:
        for root in APPLICATION_ROOTS:
            if path.startswith(root):
                for component in path[len(root) :].split("/"):
                    if component.endswith(".app"):
                        return component in self._applications
        return False

    def update_safe_list(self, os_version: str | int | tuple[int, ...] | None) -> None:
        major = parse_os_version(os_version)
        if major is None:
            return
        for threshold, paths in VERSION_PATHS:
            if major >= threshold:
                self.add_paths(paths)
        logger.debug("Safe list updated for OS version %s", major)
