"""Unit tests for classification rules."""

from datetime import UTC, datetime, timedelta

import pytest
from reclaim.core.categorize import (
    Categorizer,
    age_days,
    detect_file_type,
    is_in_app_bundle,
    is_temporary_path,
)
from reclaim.core.safelist import DefaultSafeList
from reclaim.models.file_record import CleanupCategory, FileKind, FileType

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)
MB = 1024 * 1024


class TestAgeDays:
    """Tests for the whole-days age rule."""

    def test_whole_days(self) -> None:
        """Partial days are truncated."""
        assert age_days(NOW - timedelta(days=365), NOW) == 365
        assert age_days(NOW - timedelta(days=365) + timedelta(seconds=1), NOW) == 364
        assert age_days(NOW - timedelta(hours=23), NOW) == 0

    def test_future_timestamp_is_zero(self) -> None:
        """A timestamp after now is zero days old."""
        assert age_days(NOW + timedelta(days=3), NOW) == 0

    def test_naive_timestamp_taken_as_utc(self) -> None:
        """Naive timestamps are interpreted as UTC."""
        naive = (NOW - timedelta(days=2)).replace(tzinfo=None)
        assert age_days(naive, NOW) == 2


class TestDetectFileType:
    """Tests for detect_file_type."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/home/u/.cache/app/data.bin", FileType.of(FileKind.CACHE)),
            ("/Users/u/Library/Caches/com.app/db.sqlite", FileType.of(FileKind.CACHE)),
            ("/var/log/syslog", FileType.of(FileKind.LOG)),
            ("/srv/app/logs/out.txt", FileType.of(FileKind.LOG)),
            ("/home/u/project/tmp/build.o", FileType.of(FileKind.TEMPORARY)),
            ("/home/u/session.tmp", FileType.of(FileKind.TEMPORARY)),
            ("/home/u/server.log", FileType.of(FileKind.LOG)),
            ("/home/u/notes.txt", FileType.of(FileKind.DOCUMENT)),
            ("/home/u/report.PDF", FileType.of(FileKind.DOCUMENT)),
            ("/Applications/Slack.app", FileType.of(FileKind.APPLICATION)),
            ("/home/u/backup.zip", FileType.of(FileKind.ARCHIVE)),
            ("/home/u/clip.mp4", FileType.of(FileKind.MEDIA)),
            ("/home/u/firmware.bin", FileType.other("bin")),
            ("/home/u/Makefile", FileType.other("")),
        ],
    )
    def test_detection(self, path: str, expected: FileType) -> None:
        """Location wins over extension, then extension decides."""
        assert detect_file_type(path) == expected


class TestPathPredicates:
    """Tests for temp and bundle predicates."""

    def test_temp_roots_and_extensions(self) -> None:
        """Temp roots, temp dir names and temp extensions are temporary."""
        assert is_temporary_path("/tmp/x")
        assert is_temporary_path("/var/tmp/x")
        assert is_temporary_path("/home/u/app/temp/x.dat")
        assert is_temporary_path("/home/u/docs/thumb.cache")
        assert not is_temporary_path("/home/u/docs/template.docx")

    def test_app_bundle(self) -> None:
        """Paths inside a .app component are in a bundle."""
        assert is_in_app_bundle("/Applications/Foo.app/Contents/MacOS/foo")
        assert not is_in_app_bundle("/home/u/apps/foo")


class TestCategorizer:
    """Tests for Categorizer.categorize."""

    @pytest.fixture
    def categorizer(self, safe_list: DefaultSafeList) -> Categorizer:
        return Categorizer(safe_list, clock=lambda: NOW)

    @pytest.mark.parametrize(
        ("path", "category"),
        [
            ("/System/Library/Caches/com.apple.x/db", CleanupCategory.SYSTEM_CACHES),
            ("/var/cache/apt/pkgcache.bin", CleanupCategory.SYSTEM_CACHES),
            ("/Users/u/Library/Caches/Google/Chrome/Default/x", CleanupCategory.BROWSER_CACHES),
            ("/home/u/.cache/mozilla/firefox/abc/cache2/x", CleanupCategory.BROWSER_CACHES),
            ("/Users/u/Library/Caches/com.spotify.client/data", CleanupCategory.APPLICATION_CACHES),
            ("/home/u/.cache/pip/wheels/x.whl", CleanupCategory.APPLICATION_CACHES),
            ("/Library/Caches/com.apple.x/db", CleanupCategory.SYSTEM_CACHES),
            ("/home/u/.npm/_cacache/index/x", CleanupCategory.APPLICATION_CACHES),
            ("/home/u/.gradle/caches/modules-2/x.jar", CleanupCategory.APPLICATION_CACHES),
            (
                "/Users/u/Library/Developer/Xcode/DerivedData/App/x.o",
                CleanupCategory.APPLICATION_CACHES,
            ),
            ("/home/u/.config/Cursor/CachedData/x", CleanupCategory.APPLICATION_CACHES),
            ("/var/tmp/session-1", CleanupCategory.TEMPORARY_FILES),
            ("/var/log/syslog.1", CleanupCategory.LOG_FILES),
            ("/Users/u/Library/Logs/Zoom/zoom.log", CleanupCategory.LOG_FILES),
            ("/home/u/Downloads/setup.exe", CleanupCategory.DOWNLOADS),
        ],
    )
    def test_location_rules(
        self, categorizer: Categorizer, make_record, path: str, category: CleanupCategory
    ) -> None:
        """Location rules assign the expected category."""
        assert category in categorizer.categorize(make_record(path))

    def test_cache_kinds_are_exclusive(self, categorizer: Categorizer, make_record) -> None:
        """A browser cache is not also an application cache."""
        categories = categorizer.categorize(make_record("/home/u/.cache/chromium/Default/x"))
        assert CleanupCategory.BROWSER_CACHES in categories
        assert CleanupCategory.APPLICATION_CACHES not in categories

    def test_build_archives_are_not_caches(self, categorizer: Categorizer, make_record) -> None:
        """Xcode archives cannot be rebuilt and are never tagged as caches."""
        record = make_record("/Users/u/Library/Developer/Xcode/Archives/2024/App.xcarchive/x")
        categories = categorizer.categorize(record)

        assert CleanupCategory.APPLICATION_CACHES not in categories
        assert CleanupCategory.SYSTEM_CACHES not in categories

    def test_large_file_threshold_inclusive(self, categorizer: Categorizer, make_record) -> None:
        """Files of exactly 100 MiB are large, one byte less is not."""
        assert CleanupCategory.LARGE_FILES in categorizer.categorize(
            make_record("/data/a.bin", 100 * MB)
        )
        assert CleanupCategory.LARGE_FILES not in categorizer.categorize(
            make_record("/data/a.bin", 100 * MB - 1)
        )

    def test_old_file_boundary(self, categorizer: Categorizer, make_record) -> None:
        """Files accessed exactly 365 days ago are old, 364 days are not."""
        assert CleanupCategory.OLD_FILES in categorizer.categorize(
            make_record("/data/a.bin", accessed_days=365)
        )
        assert CleanupCategory.OLD_FILES not in categorizer.categorize(
            make_record("/data/a.bin", accessed_days=364.9)
        )

    def test_protected_files_never_old(self, categorizer: Categorizer, make_record) -> None:
        """Age alone never makes a protected file old, but it can still be large."""
        record = make_record("/usr/lib/big.so", 200 * MB, accessed_days=900)
        categories = categorizer.categorize(record)
        assert CleanupCategory.OLD_FILES not in categories
        assert CleanupCategory.LARGE_FILES in categories

    def test_bundles_never_old(self, categorizer: Categorizer, make_record) -> None:
        """Applications and files inside bundles are never old."""
        assert CleanupCategory.OLD_FILES not in categorizer.categorize(
            make_record("/Applications/Slack.app", accessed_days=900)
        )
        assert CleanupCategory.OLD_FILES not in categorizer.categorize(
            make_record("/Applications/Slack.app/Contents/Info.plist", accessed_days=900)
        )

    def test_multiple_categories(self, categorizer: Categorizer, make_record) -> None:
        """A file can satisfy several rules at once."""
        categories = categorizer.categorize(
            make_record("/home/u/Downloads/movie.mkv", 2048 * MB, accessed_days=500)
        )
        assert categories == {
            CleanupCategory.DOWNLOADS,
            CleanupCategory.LARGE_FILES,
            CleanupCategory.OLD_FILES,
        }

    def test_uncategorized_file(self, categorizer: Categorizer, make_record) -> None:
        """An ordinary recent small file has no category."""
        assert categorizer.categorize(make_record("/home/u/Documents/cv.pdf")) == set()
