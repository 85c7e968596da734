"""Shared types and helpers for CLI commands.

This module provides the enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum

import typer

from reclaim.core.config import ConfigError, load_config
from reclaim.core.context import AppContext
from reclaim.models.cleanup import CleanupResult
from reclaim.models.file_record import CleanupCategory
from reclaim.models.scan_result import ScanResult
from reclaim.utils.formatting import console, print_error, print_info


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_context() -> AppContext:
    """Load the user configuration and wire the core components.

    Raises:
        typer.Exit: With code 1 if the configuration is invalid.
    """
    try:
        config = load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    return AppContext.create(config)


def run_scan(
    app_ctx: AppContext,
    paths: list[str] | None,
    categories: set[CleanupCategory] | None = None,
) -> ScanResult:
    """Scan the given paths, or the configured ones, behind a spinner."""
    roots = paths or app_ctx.config.scan_paths
    with console.status("Scanning...", spinner="dots"):
        return app_ctx.scanner.scan(roots, categories=categories)


def confirm_or_abort(prompt: str, yes: bool, dry_run: bool) -> None:
    """Ask for confirmation unless --yes or --dry-run was given.

    Raises:
        typer.Exit: With code 0 when the user declines.
    """
    if yes or dry_run:
        return
    if not typer.confirm(prompt, default=False):
        print_info("Aborted.")
        raise typer.Exit(code=0)


def exit_on_errors(result: CleanupResult) -> None:
    """Exit with code 1 when a cleanup reported any error."""
    if result.errors:
        raise typer.Exit(code=1)
