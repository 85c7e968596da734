"""Shared Rich display functions for scan and cleanup results.

Provides reusable table builders and summary printers used across the
scan, clean, duplicates, logs and backup commands.
"""

from collections.abc import Sequence

from rich.table import Table

from reclaim.core.theme import category_style
from reclaim.models.analysis import AnalysisResult, DuplicateGroup, LogFileInfo
from reclaim.models.backup import Backup
from reclaim.models.cache import CacheLocation
from reclaim.models.cleanup import CleanupOutcome, CleanupResult
from reclaim.models.errors import ScanError
from reclaim.models.file_record import CleanupCategory, FileRecord
from reclaim.utils.formatting import (
    console,
    create_file_table,
    format_size,
    print_info,
    print_success,
    print_warning,
)


def create_category_table(analysis: AnalysisResult) -> Table:
    """Create a table with file count and size per cleanup category.

    Args:
        analysis: Analysis result to summarize.

    Returns:
        Rich Table with one row per category.
    """
    table = Table(
        title="Cleanup Candidates",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Category", no_wrap=True)
    table.add_column("Files", justify="right")
    table.add_column("Size", style="size", justify="right")

    for category in CleanupCategory:
        files = analysis.files_in(category)
        table.add_row(
            f"[{category_style(category)}]{category.value}[/]",
            str(len(files)),
            format_size(analysis.category_size(category)),
        )
    return table


def create_files_table(files: Sequence[FileRecord], title: str) -> Table:
    """Create a table listing files with their size, type and mtime."""
    table = create_file_table(title)
    for file in files:
        table.add_row(
            file.path,
            format_size(file.size),
            str(file.file_type),
            file.modified.strftime("%Y-%m-%d"),
        )
    return table


def create_duplicates_table(groups: Sequence[DuplicateGroup]) -> Table:
    """Create a table of duplicate groups showing the copy that is kept.

    Args:
        groups: Duplicate groups, largest waste first.

    Returns:
        Rich Table with one row per group.
    """
    table = Table(
        title="Duplicate Files",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Hash", style="muted", no_wrap=True)
    table.add_column("Copies", justify="right")
    table.add_column("Size", style="size", justify="right")
    table.add_column("Wasted", style="size", justify="right")
    table.add_column("Keep", overflow="fold")

    for group in groups:
        table.add_row(
            group.hash[:12],
            str(len(group.files)),
            format_size(group.file_size),
            format_size(group.wasted_space),
            f"[kept]{group.files[0].path}[/]",
        )
    return table


def create_caches_table(locations: Sequence[CacheLocation]) -> Table:
    """Create a table of cache locations grouped by source.

    Args:
        locations: Discovered cache locations.

    Returns:
        Rich Table with one row per location.
    """
    table = Table(
        title="Caches",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Source", no_wrap=True)
    table.add_column("Owner", no_wrap=True)
    table.add_column("Files", justify="right")
    table.add_column("Size", style="size", justify="right")
    table.add_column("Location", style="muted", overflow="fold")

    for location in locations:
        category = location.source.category
        table.add_row(
            f"[{category_style(category)}]{location.source.value}[/]",
            location.owner,
            str(location.file_count),
            format_size(location.size),
            location.path,
        )
    return table


def create_logs_table(by_application: dict[str, list[LogFileInfo]]) -> Table:
    """Create a table summarizing log files per application."""
    table = Table(
        title="Log Files",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Application", no_wrap=True)
    table.add_column("Files", justify="right")
    table.add_column("Size", style="size", justify="right")
    table.add_column("Oldest", justify="right")

    for application in sorted(by_application):
        infos = by_application[application]
        table.add_row(
            application,
            str(len(infos)),
            format_size(sum(i.record.size for i in infos)),
            f"{max(i.age_days for i in infos)} days",
        )
    return table


def create_backups_table(backups: Sequence[Backup]) -> Table:
    """Create a table listing backups, newest first."""
    table = Table(
        title="Backups",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", no_wrap=True)
    table.add_column("Created", no_wrap=True)
    table.add_column("Files", justify="right")
    table.add_column("Original", style="size", justify="right")
    table.add_column("Archive", style="size", justify="right")

    for backup in backups:
        table.add_row(
            backup.id[:12],
            backup.created.strftime("%Y-%m-%d %H:%M:%S"),
            str(backup.file_count),
            format_size(backup.original_size),
            format_size(backup.compressed_size),
        )
    return table


def print_scan_errors(errors: Sequence[ScanError]) -> None:
    """Print scan errors as warnings."""
    for error in errors:
        print_warning(str(error))


def print_cleanup_result(result: CleanupResult, dry_run: bool = False) -> None:
    """Print the outcome of a cleanup with its errors.

    Args:
        result: Cleanup result to report.
        dry_run: Whether nothing was actually deleted.
    """
    for error in result.errors:
        print_warning(str(error))

    size = format_size(result.space_freed)
    if dry_run:
        print_info(f"Dry-run: {result.files_removed} file(s) would be removed ({size}).")
    elif result.outcome == CleanupOutcome.ROLLED_BACK:
        console.print("\n[error]Cleanup failed and was rolled back.[/]")
    elif result.outcome == CleanupOutcome.ABORTED:
        console.print("\n[error]Cleanup aborted: backup could not be created.[/]")
    elif result.outcome == CleanupOutcome.CANCELLED:
        console.print(f"\n[warning]Cleanup cancelled after {result.files_removed} file(s).[/]")
    elif result.errors:
        console.print(
            f"\n[success]{result.files_removed} removed[/] ({size}), "
            f"[error]{len(result.errors)} skipped[/]"
        )
    else:
        print_success(f"Removed {result.files_removed} file(s), freed {size}.")

    if result.backup_location:
        print_info(f"Backup: {result.backup_location}")
