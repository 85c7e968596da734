"""Duplicates command implementation.

Finds files with identical content and removes every copy but the first
of each group.
"""

from typing import Annotated

import typer

from reclaim.cli.display import create_duplicates_table, print_cleanup_result, print_scan_errors
from reclaim.cli.types import confirm_or_abort, exit_on_errors, get_context, run_scan
from reclaim.utils.formatting import console, format_size, print_success

app = typer.Typer(
    help="Find and remove duplicate files.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def clean_duplicates(
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
        typer.Option("--backup/--no-backup", help="Archive copies before deleting them."),
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
    """Remove duplicate copies, keeping the first file of every group."""
    if ctx.invoked_subcommand is not None:
        return

    app_ctx = get_context()
    result = run_scan(app_ctx, paths)
    print_scan_errors(result.errors)

    with console.status("Hashing candidates...", spinner="dots"):
        groups = app_ctx.analyzer.find_duplicates(result.files)
    if not groups:
        print_success("No duplicate files found.")
        return

    console.print(create_duplicates_table(groups))
    wasted = sum(g.wasted_space for g in groups)
    copies = sum(len(g.files) - 1 for g in groups)
    console.print(f"\n[dim]{copies} redundant copies, {format_size(wasted)} reclaimable[/dim]")

    confirm_or_abort(f"\nProceed with deleting {copies} copies?", yes, dry_run)

    options = app_ctx.config.cleanup.to_options(
        create_backup=backup, move_to_trash=trash, dry_run=dry_run
    )
    cleanup = app_ctx.engine.cleanup_duplicates(groups, options=options)
    print_cleanup_result(cleanup, dry_run=dry_run)
    exit_on_errors(cleanup)
