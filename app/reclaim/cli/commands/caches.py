"""Caches command implementation.

Lists system, application, browser, developer tool and AI agent caches,
and optionally clears them.
"""

import json
from typing import Annotated, Any

import typer

from reclaim.cli.display import create_caches_table, print_cleanup_result
from reclaim.cli.types import OutputFormat, confirm_or_abort, exit_on_errors, get_context
from reclaim.models.cache import CacheLocation, CacheSource
from reclaim.utils.formatting import console, format_size, print_error, print_success

app = typer.Typer(
    help="Find and clear cache directories.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_caches(
    ctx: typer.Context,
    source: Annotated[
        list[CacheSource] | None,
        typer.Option(
            "--source",
            "-s",
            help="Only look at caches of this kind (repeatable).",
            case_sensitive=False,
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    clean: Annotated[
        bool,
        typer.Option("--clean", help="Delete the contents of the listed caches."),
    ] = False,
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
    """List cache directories and their sizes.

    Examples:
        reclaim caches                        # List every cache
        reclaim caches -s browser -s developer
        reclaim caches -s developer --clean   # Clear developer tool caches
        reclaim caches --format json
    """
    if ctx.invoked_subcommand is not None:
        return

    if clean and output_format == OutputFormat.JSON:
        print_error("--clean cannot be combined with --format json.")
        raise typer.Exit(code=1)

    app_ctx = get_context()
    with console.status("Looking for caches...", spinner="dots"):
        locations = app_ctx.caches.find_caches(source)

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(_to_json(locations)))
        return

    if not locations:
        print_success("No caches found.")
        return

    console.print(create_caches_table(locations))
    total = sum(loc.size for loc in locations)
    files = sum(loc.file_count for loc in locations)
    console.print(
        f"\n[dim]{len(locations)} cache locations, {files} files, {format_size(total)}[/dim]"
    )

    if not clean:
        return

    confirm_or_abort(f"\nProceed with clearing {len(locations)} caches?", yes, dry_run)

    options = app_ctx.config.cleanup.to_options(
        create_backup=backup, move_to_trash=trash, dry_run=dry_run
    )
    result = app_ctx.caches.clear_caches(locations, options=options)
    print_cleanup_result(result, dry_run=dry_run)
    exit_on_errors(result)


def _to_json(locations: list[CacheLocation]) -> list[dict[str, Any]]:
    return [
        {
            "source": loc.source.value,
            "category": loc.source.category.value,
            "owner": loc.owner,
            "path": loc.path,
            "files": loc.file_count,
            "size": loc.size,
        }
        for loc in locations
    ]
