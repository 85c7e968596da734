"""Configuration commands.

Show the effective configuration and write a default config file.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from reclaim.cli.types import OutputFormat
from reclaim.core.config import ConfigError, ReclaimConfig, load_config, save_config
from reclaim.core.paths import get_config_path
from reclaim.utils.formatting import console, print_error, print_success, print_warning

app = typer.Typer(
    help="Show and initialize configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(
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
    """Show the effective configuration."""
    try:
        config = load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    data = config.model_dump(mode="json")
    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(data))
        return

    table = Table(
        title=f"Configuration ({get_config_path()})",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", no_wrap=True)
    table.add_column("Value", style="info")
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                table.add_row(f"{key}.{sub_key}", str(sub_value))
        elif isinstance(value, list):
            table.add_row(key, ", ".join(str(v) for v in value))
        else:
            table.add_row(key, "-" if value is None else str(value))
    console.print(table)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the default settings."""
    path = get_config_path()
    if path.exists() and not force:
        print_warning(f"Config already exists at {path} (use --force to overwrite).")
        raise typer.Exit(code=1)

    try:
        written = save_config(ReclaimConfig())
    except (ConfigError, RuntimeError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Config written to {written}")
