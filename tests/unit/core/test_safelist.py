"""Unit tests for the safe list."""

from pathlib import Path

import pytest
from reclaim.core.safelist import (
    DefaultSafeList,
    SafeList,
    is_under,
    normalize_path,
    parse_os_version,
)


class TestHelpers:
    """Tests for path and version helpers."""

    def test_normalize_strips_trailing_slash(self) -> None:
        """Trailing slashes are removed but the root stays."""
        assert normalize_path("/usr/lib/") == "/usr/lib"
        assert normalize_path("/") == "/"
        assert normalize_path("") == ""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("//etc/passwd", "/etc/passwd"),
            ("///etc", "/etc"),
            ("/tmp/../etc/passwd", "/etc/passwd"),
            ("/usr/./lib//x.so", "/usr/lib/x.so"),
            ("//", "/"),
        ],
    )
    def test_normalize_collapses_path(self, path: str, expected: str) -> None:
        """Doubled slashes, "." and ".." are resolved lexically."""
        assert normalize_path(path) == expected

    def test_is_under_is_component_wise(self) -> None:
        """A prefix only matches whole path components."""
        assert is_under("/usr/lib/x.so", "/usr/lib")
        assert is_under("/usr/lib", "/usr/lib")
        assert not is_under("/usr/library/x", "/usr/lib")

    def test_root_prefix_never_matches(self) -> None:
        """The filesystem root is never a protected prefix."""
        assert not is_under("/anything", "/")
        assert not is_under("/anything", "")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("14.2.1", 14), (13, 13), ((12, 6), 12), (None, None), ("", None), ("beta", None)],
    )
    def test_parse_os_version(self, value: object, expected: int | None) -> None:
        """Major versions are extracted from several representations."""
        assert parse_os_version(value) == expected  # type: ignore[arg-type]


class TestDefaultSafeList:
    """Tests for DefaultSafeList."""

    def test_is_a_safe_list(self, safe_list: DefaultSafeList) -> None:
        """DefaultSafeList implements the SafeList interface."""
        assert isinstance(safe_list, SafeList)

    @pytest.mark.parametrize(
        "path",
        [
            "/System/Library/Kernels/kernel",
            "/usr/bin/ls",
            "/private/var/db/receipts",
            "/etc/passwd",
            "/proc/1/status",
            "/var/lib/dpkg/status",
        ],
    )
    def test_system_paths_protected(self, safe_list: DefaultSafeList, path: str) -> None:
        """System trees are protected."""
        assert safe_list.is_protected(path)

    @pytest.mark.parametrize(
        "path",
        [
            "//etc/passwd",
            "/tmp/../etc/passwd",
            "/tmp/../System/Library/CoreServices/x",
            "/usr/./bin//ls",
        ],
    )
    def test_unnormalized_paths_protected(self, safe_list: DefaultSafeList, path: str) -> None:
        """Path spellings that resolve into a protected tree stay protected."""
        assert safe_list.is_protected(path)

    def test_unnormalized_home_paths_protected(
        self, safe_list: DefaultSafeList, home: Path
    ) -> None:
        """Up-level references into the home key directory are caught."""
        assert safe_list.is_protected(f"{home}/Documents/../.ssh/config")
        assert safe_list.is_protected(f"/{home}/.ssh/config")

    def test_unnormalized_extra_path_entries(self, home: Path) -> None:
        """Entries added with redundant components match their clean form."""
        safe_list = DefaultSafeList(
            home=home, extra_paths=["//srv//keep/./"], os_version=None
        )
        assert safe_list.is_protected("/srv/keep/file")
        assert not safe_list.is_protected("/srv/other")

    def test_user_paths_expand_home(self, safe_list: DefaultSafeList, home: Path) -> None:
        """~ entries are expanded against the configured home."""
        assert safe_list.is_protected(str(home / ".ssh" / "config"))
        assert safe_list.is_protected(str(home / "Library" / "Keychains" / "login.db"))
        assert safe_list.is_protected("~/.gnupg/pubring.kbx")
        assert not safe_list.is_protected(str(home / "Documents" / "notes.md"))

    def test_key_material_patterns(self, safe_list: DefaultSafeList) -> None:
        """Key files are protected wherever they live."""
        assert safe_list.is_protected("/backup/old/id_rsa")
        assert safe_list.is_protected("/backup/old/id_ed25519.pub")
        assert safe_list.is_protected("/data/login.keychain-db")
        assert not safe_list.is_protected("/backup/old/id_rsa_notes.txt")

    def test_system_applications(self, safe_list: DefaultSafeList) -> None:
        """Bundled system applications are protected, third-party ones are not."""
        assert safe_list.is_protected("/Applications/Safari.app")
        assert safe_list.is_protected("/Applications/Safari.app/Contents/Info.plist")
        assert safe_list.is_protected("/System/Applications/Mail.app/Contents/MacOS/Mail")
        assert not safe_list.is_protected("/Applications/Slack.app/Contents/Info.plist")

    def test_root_and_empty_never_protected(self, safe_list: DefaultSafeList) -> None:
        """The root and the empty path are never protected."""
        assert not safe_list.is_protected("/")
        assert not safe_list.is_protected("")

    def test_ordinary_files_not_protected(self, safe_list: DefaultSafeList) -> None:
        """Regular user files are not protected."""
        assert not safe_list.is_protected("/tmp/scratch.tmp")
        assert not safe_list.is_protected("/usr/library/thing")

    def test_extra_paths_and_patterns(self, home: Path) -> None:
        """Extra entries are protected as well."""
        safe_list = DefaultSafeList(
            home=home,
            extra_paths=["/srv/backups"],
            extra_patterns=[r"\.precious$"],
            os_version=None,
        )
        assert safe_list.is_protected("/srv/backups/a.tar.gz")
        assert safe_list.is_protected("/data/file.precious")

    def test_add_paths_ignores_root(self, safe_list: DefaultSafeList) -> None:
        """Adding the root would protect everything and is ignored."""
        safe_list.add_paths(["/", ""])
        assert "/" not in safe_list.protected_paths
        assert not safe_list.is_protected("/data/file.bin")

    def test_linux_paths_optional(self, home: Path) -> None:
        """Linux trees can be left out."""
        safe_list = DefaultSafeList(home=home, os_version=None, include_linux_paths=False)
        assert not safe_list.is_protected("/etc/hosts")
        assert safe_list.is_protected("/private/etc/hosts")


class TestUpdateSafeList:
    """Tests for version-specific entries."""

    def test_version_entries_are_cumulative(self, home: Path) -> None:
        """A newer version includes the entries of all older thresholds."""
        safe_list = DefaultSafeList(home=home, os_version="13.1")
        assert "/System/Volumes/Data" in safe_list.protected_paths
        assert "/System/Library/CoreServices" in safe_list.protected_paths
        assert "/Library/Apple/System" in safe_list.protected_paths

    def test_old_version_adds_nothing(self, home: Path) -> None:
        """Versions below every threshold add no entries."""
        safe_list = DefaultSafeList(home=home, os_version=None)
        before = safe_list.protected_paths
        safe_list.update_safe_list("10.15")
        assert safe_list.protected_paths == before

    def test_update_is_additive(self, safe_list: DefaultSafeList) -> None:
        """Updating never removes existing entries."""
        before = safe_list.protected_paths
        safe_list.update_safe_list(12)
        assert before <= safe_list.protected_paths
        assert "/System/Library/CoreServices" in safe_list.protected_paths

    def test_unknown_version_is_ignored(self, safe_list: DefaultSafeList) -> None:
        """An unparseable version leaves the list unchanged."""
        before = safe_list.protected_paths
        safe_list.update_safe_list("unknown")
        assert safe_list.protected_paths == before
