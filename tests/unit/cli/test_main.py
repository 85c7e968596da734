"""Unit tests for the main CLI entry point."""

import logging

from reclaim import __version__
from reclaim.cli.main import app, setup_logging
from typer.testing import CliRunner

runner = CliRunner()


class TestMainApp:
    """Tests for the top-level app."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"reclaim version {__version__}" in result.stdout

    def test_help_lists_commands(self) -> None:
        """--help lists every sub-command."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("scan", "clean", "duplicates", "caches", "logs", "backup", "config"):
            assert command in result.stdout


class TestSetupLogging:
    """Tests for logging setup."""

    def test_levels(self) -> None:
        """Verbose logs debug, quiet only errors, default warnings."""
        setup_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG
        setup_logging(quiet=True)
        assert logging.getLogger().level == logging.ERROR
        setup_logging()
        assert logging.getLogger().level == logging.WARNING
