"""Backup management commands.

List, restore, delete and prune the archives written before cleanups.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from reclaim.cli.display import create_backups_table
from reclaim.cli.types import OutputFormat, get_context
from reclaim.core.backup import BackupManager
from reclaim.models.backup import Backup
from reclaim.models.errors import BackupError, RestoreFailedError
from reclaim.utils.formatting import (
    console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Manage cleanup backups.",
    invoke_without_command=True,
    no_args_is_help=True,
)


def _require_backup(manager: BackupManager, backup_id: str) -> Backup:
    """Look up a backup by id or prefix, exiting with code 1 if absent."""
    backup = manager.get_backup(backup_id)
    if backup is None:
        print_error(f"No unique backup matches '{backup_id}'.")
        raise typer.Exit(code=1)
    return backup


@app.command("list")
def list_backups(
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """List backups, newest first."""
    backups = get_context().backup_manager.list_backups()

    if output_format == OutputFormat.JSON:
        data = [
            {
                "id": b.id,
                "created": b.created.isoformat(),
                "file_count": b.file_count,
                "original_size": b.original_size,
                "compressed_size": b.compressed_size,
                "location": b.location,
            }
            for b in backups
        ]
        console.print_json(json.dumps(data))
        return

    if not backups:
        print_info("No backups found.")
        return
    console.print(create_backups_table(backups))


@app.command()
def restore(
    backup_id: Annotated[str, typer.Argument(help="Backup id or unique id prefix.")],
    destination: Annotated[Path, typer.Argument(help="Directory to restore into.")],
    paths: Annotated[
        list[str] | None,
        typer.Option("--path", "-p", help="Restore only this original path (repeatable)."),
    ] = None,
) -> None:
    """Restore a backup below DESTINATION, keeping the archived layout."""
    manager = get_context().backup_manager
    backup = _require_backup(manager, backup_id)

    try:
        result = manager.restore_backup(backup, destination, paths)
    except RestoreFailedError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    for error in result.errors:
        print_warning(str(error))
    if result.errors:
        console.print(
            f"\n[success]{result.files_restored} restored[/], [error]{len(result.errors)} failed[/]"
        )
        raise typer.Exit(code=1)
    print_success(f"Restored {result.files_restored} file(s) to {destination}.")


@app.command()
def delete(
    backup_id: Annotated[str, typer.Argument(help="Backup id or unique id prefix.")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete one backup."""
    manager = get_context().backup_manager
    backup = _require_backup(manager, backup_id)

    if not yes and not typer.confirm(f"Delete backup {backup.id[:12]}?", default=False):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    try:
        manager.delete_backup(backup)
    except BackupError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Deleted backup {backup.id[:12]}.")


@app.command()
def prune(
    older_than: Annotated[
        int | None,
        typer.Option(
            "--older-than",
            help="Delete backups older than DAYS. Defaults to the configured retention.",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete backups past the retention period."""
    app_ctx = get_context()
    days = older_than if older_than is not None else app_ctx.config.backup_retention_days
    old = app_ctx.backup_manager.get_old_backups(days)
    if not old:
        print_info(f"No backups older than {days} days.")
        return

    console.print(create_backups_table(old))
    if not yes and not typer.confirm(f"\nDelete {len(old)} backup(s)?", default=False):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    summary = app_ctx.backup_manager.prune_backups(days)
    print_success(
        f"Pruned {len(summary.removed)} backup(s), freed {format_size(summary.freed_bytes)}."
    )
    if len(summary.removed) < len(old):
        print_warning(f"{len(old) - len(summary.removed)} backup(s) could not be deleted.")
        raise typer.Exit(code=1)
