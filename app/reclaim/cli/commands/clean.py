"""Clean command implementation.

Scans for files in the requested categories, applies the optional age
and size filters, and hands the selection to the cleanup engine.
"""

from typing import Annotated

import typer

from reclaim.cli.display import create_files_table, print_cleanup_result, print_scan_errors
from reclaim.cli.types import confirm_or_abort, exit_on_errors, get_context, run_scan
from reclaim.models.file_record import CleanupCategory
from reclaim.utils.formatting import console, format_size, print_info, print_warning

app = typer.Typer(
    help="Delete cleanup candidates.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def clean_files(
    ctx: typer.Context,
    paths: Annotated[
        list[str] | None,
        typer.Option(
            "--path",
            "-p",
            help="Directory to scan (repeatable). Defaults to the configured scan paths.",
        ),
    ] = None,
    category: Annotated[
        list[CleanupCategory] | None,
        typer.Option(
            "--category",
            "-c",
            help="Category to clean (repeatable). Defaults to the configured automated categories.",
            case_sensitive=False,
        ),
    ] = None,
    older_than: Annotated[
        int | None,
        typer.Option(
            "--older-than",
            help="Only files not accessed for more than DAYS (clamped to 30-1095).",
        ),
    ] = None,
    min_size: Annotated[
        int | None,
        typer.Option("--min-size", help="Only files of at least BYTES."),
    ] = None,
    backup: Annotated[
        bool | None,
        typer.Option("--backup/--no-backup", help="Archive files before deleting them."),
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
    """Scan, filter and delete cleanup candidates.

    Without --category only the categories configured for automated
    cleanup are considered, and those are always restricted to caches
    and temporary files.

    Examples:
        reclaim clean --dry-run                         # Preview cache/temp cleanup
        reclaim clean -c large_files --min-size 500000000
        reclaim clean -c old_files --older-than 730 --backup
    """
    if ctx.invoked_subcommand is not None:
        return

    app_ctx = get_context()
    if category:
        categories = set(category)
    else:
        categories = app_ctx.config.validated_automated_categories()
    if not categories:
        print_info("No categories selected for cleanup.")
        return

    result = run_scan(app_ctx, paths, categories=categories)
    print_scan_errors(result.errors)

    files = list(result.files)
    if older_than is not None:
        files = app_ctx.analyzer.filter_by_age(files, older_than)
    if min_size is not None:
        files = app_ctx.analyzer.filter_by_size(files, min_size)

    if not files:
        print_info("Nothing to clean.")
        return

    blocked = app_ctx.engine.validate_cleanup(files).blocked
    if blocked:
        print_warning(f"{len(blocked)} protected file(s) will be skipped.")

    title = "Planned Deletions (dry-run)" if dry_run else "Planned Deletions"
    console.print(create_files_table(app_ctx.analyzer.sort_by_size(files), title=title))
    total = app_ctx.analyzer.calculate_savings(files)
    console.print(f"\n[dim]{len(files)} file(s), {format_size(total)} total[/dim]")

    confirm_or_abort(f"\nProceed with deleting {len(files)} file(s)?", yes, dry_run)

    options = app_ctx.config.cleanup.to_options(
        create_backup=backup, move_to_trash=trash, dry_run=dry_run
    )
    cleanup = app_ctx.engine.cleanup(files, options)
    print_cleanup_result(cleanup, dry_run=dry_run)
    exit_on_errors(cleanup)
