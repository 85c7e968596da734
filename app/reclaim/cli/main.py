"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from reclaim import __version__
from reclaim.cli.commands import backup, caches, clean, config, duplicates, logs, scan
from reclaim.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="reclaim",
    help="Find and safely remove files that waste disk space.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"reclaim version {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route library logging to stderr through Rich.

    Args:
        verbose: Log everything down to DEBUG.
        quiet: Only log errors.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=verbose, rich_tracebacks=verbose)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """reclaim - Find and safely remove files that waste disk space.

    Scan for caches, temporary files, logs, large, old and duplicate
    files, and clean them up with optional backups.
    """
    setup_logging(verbose=verbose, quiet=quiet)


# Register commands
app.add_typer(scan.app, name="scan")
app.add_typer(clean.app, name="clean")
app.add_typer(duplicates.app, name="duplicates")
app.add_typer(caches.app, name="caches")
app.add_typer(logs.app, name="logs")
app.add_typer(backup.app, name="backup")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
