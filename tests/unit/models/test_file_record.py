"""Unit tests for file metadata models."""

from datetime import UTC, datetime

import pytest
from reclaim.models.file_record import (
    SAFE_AUTOMATED_CATEGORIES,
    CleanupCategory,
    FileKind,
    FileRecord,
    FileType,
)

TS = datetime(2024, 1, 1, tzinfo=UTC)


def _record(path: str = "/home/u/a.txt", size: int = 10) -> FileRecord:
    return FileRecord(
        path=path,
        size=size,
        created=TS,
        modified=TS,
        accessed=TS,
        file_type=FileType.of(FileKind.DOCUMENT),
    )


class TestFileType:
    """Tests for the FileType tag."""

    def test_other_normalizes_extension(self) -> None:
        """other() lowercases the extension and strips the dot."""
        assert FileType.other(".ISO") == FileType(kind=FileKind.OTHER, extension="iso")

    def test_other_tags_compare_by_extension(self) -> None:
        """Two other tags are equal only with the same extension."""
        assert FileType.other("iso") == FileType.other("iso")
        assert FileType.other("iso") != FileType.other("img")

    def test_fixed_kind_rejects_extension(self) -> None:
        """Only the other kind may carry an extension."""
        with pytest.raises(ValueError, match="Only the 'other'"):
            FileType(kind=FileKind.LOG, extension="log")

    def test_str_forms(self) -> None:
        """str() renders kinds by value and other with its extension."""
        assert str(FileType.of(FileKind.CACHE)) == "cache"
        assert str(FileType.other("bin")) == "other(bin)"

    @pytest.mark.parametrize(
        "tag", [FileType.of(FileKind.MEDIA), FileType.other("bin"), FileType.other("")]
    )
    def test_parse_reads_str_form(self, tag: FileType) -> None:
        """parse() accepts the output of str()."""
        assert FileType.parse(str(tag)) == tag

    def test_parse_unknown_name(self) -> None:
        """Unknown names become other tags."""
        assert FileType.parse("weird") == FileType.other("weird")


class TestFileRecord:
    """Tests for FileRecord."""

    def test_name_and_extension(self) -> None:
        """name and extension derive from the path."""
        record = _record("/data/Report.PDF")
        assert record.name == "Report.PDF"
        assert record.extension == "pdf"

    def test_rejects_empty_path(self) -> None:
        """An empty path is invalid."""
        with pytest.raises(ValueError, match="Path cannot be empty"):
            _record(path="")

    def test_rejects_negative_size(self) -> None:
        """A negative size is invalid."""
        with pytest.raises(ValueError, match="negative"):
            _record(size=-1)

    def test_defaults(self) -> None:
        """Records default to not in use and fully permitted."""
        record = _record()
        assert record.in_use is False
        assert record.permissions.deletable is True


class TestCleanupCategory:
    """Tests for the category set."""

    def test_nine_categories(self) -> None:
        """There are exactly nine categories."""
        assert len(CleanupCategory) == 9

    def test_safe_automated_subset(self) -> None:
        """Automated runs may only touch caches and temporary files."""
        assert SAFE_AUTOMATED_CATEGORIES == {
            CleanupCategory.SYSTEM_CACHES,
            CleanupCategory.APPLICATION_CACHES,
            CleanupCategory.BROWSER_CACHES,
            CleanupCategory.TEMPORARY_FILES,
        }
