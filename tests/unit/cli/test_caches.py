"""Unit tests for the caches command."""

import json
from pathlib import Path

import pytest
from reclaim.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Home directory for the invoked CLI."""
    path = tmp_path / "home"
    path.mkdir()
    monkeypatch.setenv("HOME", str(path))
    return path


@pytest.fixture
def cache_root(isolated_xdg: Path) -> Path:
    path = isolated_xdg / "cache"
    path.mkdir(parents=True)
    return path


def write(path: Path, content: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.mark.usefixtures("home")
class TestCachesCommand:
    """Tests for reclaim caches."""

    def test_lists_application_caches(self, cache_root: Path) -> None:
        """Directories below the user cache root are listed with a total."""
        write(cache_root / "thumbnails/large/a.png", b"p" * 100)
        write(cache_root / "fontconfig/x.cache-8", b"f" * 50)

        result = runner.invoke(app, ["caches", "-s", "application"])

        assert result.exit_code == 0
        assert "Caches" in result.stdout
        assert "2 cache locations, 2 files" in result.stdout

    def test_json(self, home: Path, cache_root: Path) -> None:
        """JSON output lists every location with its size."""
        write(cache_root / "pip/http/a", b"a" * 10)
        write(home / ".npm/_cacache/b", b"b" * 5)

        result = runner.invoke(app, ["caches", "-s", "developer", "-f", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [(d["owner"], d["files"], d["size"]) for d in data] == [
            ("npm", 1, 5),
            ("pip", 1, 10),
        ]
        assert {d["category"] for d in data} == {"application_caches"}

    def test_nothing_found(self, cache_root: Path) -> None:
        """An empty cache root reports nothing to do."""
        result = runner.invoke(app, ["caches", "-s", "application", "-s", "browser"])

        assert result.exit_code == 0
        assert "No caches found." in result.stdout

    def test_clean(self, cache_root: Path) -> None:
        """--clean empties the caches and keeps their directories."""
        data = write(cache_root / "google-chrome/Default/Cache/data_0", b"c" * 64)

        result = runner.invoke(
            app, ["caches", "-s", "browser", "--clean", "--no-backup", "--permanent", "--yes"]
        )

        assert result.exit_code == 0
        assert "Removed 1 file(s)" in result.stdout
        assert not data.exists()
        assert data.parent.is_dir()

    def test_clean_dry_run(self, cache_root: Path) -> None:
        """A dry run keeps the files."""
        data = write(cache_root / "thumbnails/a.png", b"t")

        result = runner.invoke(app, ["caches", "-s", "application", "--clean", "--dry-run"])

        assert result.exit_code == 0
        assert "Dry-run: 1 file(s) would be removed" in result.stdout
        assert data.exists()

    def test_clean_declined(self, cache_root: Path) -> None:
        """Declining the prompt leaves everything in place."""
        data = write(cache_root / "thumbnails/a.png", b"t")

        result = runner.invoke(
            app, ["caches", "-s", "application", "--clean", "--permanent"], input="n\n"
        )

        assert result.exit_code == 0
        assert "Aborted." in result.stdout
        assert data.exists()

    def test_clean_rejects_json(self) -> None:
        """Cleaning cannot be combined with JSON output."""
        result = runner.invoke(app, ["caches", "--clean", "-f", "json"])

        assert result.exit_code == 1
        assert "cannot be combined" in result.output
