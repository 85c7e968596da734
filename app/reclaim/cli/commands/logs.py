"""Logs command implementation.

Cleans log files while keeping recent logs and archiving old ones.
"""

from typing import Annotated

import typer

from reclaim.cli.display import create_logs_table, print_cleanup_result, print_scan_errors
from reclaim.cli.types import confirm_or_abort, exit_on_errors, get_context, run_scan
from reclaim.core.engine import LOG_ARCHIVE_DAYS, LOG_PRESERVE_DAYS
from reclaim.models.file_record import CleanupCategory
from reclaim.utils.formatting import console, print_info

app = typer.Typer(
    help="Clean log files.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def clean_logs(
    ctx: typer.Context,
    paths: Annotated[
        list[str] | None,
        typer.Option(
            "--path",
            "-p",
            help="Directory to scan (repeatable). Defaults to the configured scan paths.",
        ),
    ] = None,
    backup: Annotated[
        bool | None,
        typer.Option(
            "--backup/--no-backup",
            help=f"Archive logs first. Required to delete logs {LOG_ARCHIVE_DAYS}+ days old.",
        ),
    ] = None,
    trash: Annotated[
        bool | None,
        typer.Option("--trash/--permanent", help="Move to trash or delete permanently."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete log files older than a week.

    Logs modified in the last 7 days are always kept. Logs 30 or more
    days old are only deleted together with a backup.
    """
    if ctx.invoked_subcommand is not None:
        return

    app_ctx = get_context()
    result = run_scan(app_ctx, paths, categories={CleanupCategory.LOG_FILES})
    print_scan_errors(result.errors)

    if not result.files:
        print_info("No log files found.")
        return

    console.print(create_logs_table(app_ctx.analyzer.categorize_logs_by_application(result.files)))
    console.print(
        f"\n[dim]Logs newer than {LOG_PRESERVE_DAYS} days are kept; "
        f"logs {LOG_ARCHIVE_DAYS}+ days old need --backup.[/dim]"
    )

    confirm_or_abort("\nProceed with log cleanup?", yes, dry_run)

    options = app_ctx.config.cleanup.to_options(
        create_backup=backup, move_to_trash=trash, dry_run=dry_run
    )
    cleanup = app_ctx.engine.cleanup_logs(result.files, options)
    print_cleanup_result(cleanup, dry_run=dry_run)
    exit_on_errors(cleanup)
