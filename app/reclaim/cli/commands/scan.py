"""Scan command implementation.

Scans directories and summarizes cleanup candidates per category.
"""

import json
from typing import Annotated, Any

import typer

from reclaim.cli.display import (
    create_category_table,
    create_files_table,
    print_scan_errors,
)
from reclaim.cli.types import OutputFormat, get_context, run_scan
from reclaim.models.analysis import AnalysisResult
from reclaim.models.file_record import CleanupCategory
from reclaim.models.scan_result import ScanResult
from reclaim.utils.formatting import console, format_size

app = typer.Typer(
    help="Scan directories for cleanup candidates.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def scan_paths(
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
            help="List the files of this category (repeatable).",
            case_sensitive=False,
        ),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", help="Maximum files listed per category."),
    ] = 20,
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
    """Scan and summarize cleanup candidates.

    Examples:
        reclaim scan                          # Scan the configured paths
        reclaim scan -p ~/Downloads           # Scan one directory
        reclaim scan -c large_files -l 10     # Show the 10 largest large files
        reclaim scan --format json            # Output as JSON
    """
    if ctx.invoked_subcommand is not None:
        return

    app_ctx = get_context()
    result = run_scan(app_ctx, paths)
    analysis = app_ctx.analyzer.analyze(result)
    selected = list(category or [])

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(_to_json(result, analysis, selected, limit)))
        return

    print_scan_errors(result.errors)
    console.print(create_category_table(analysis))

    for cat in selected:
        files = app_ctx.analyzer.sort_by_size(analysis.files_in(cat))
        if not files:
            continue
        console.print(create_files_table(files[:limit], title=f"{cat.value} ({len(files)} files)"))

    console.print(
        f"\n[dim]Scanned {len(result.files)} files ({format_size(result.total_size)}) "
        f"in {result.duration:.1f}s. "
        f"Potential savings: {format_size(analysis.potential_savings)}[/dim]"
    )


def _to_json(
    result: ScanResult,
    analysis: AnalysisResult,
    selected: list[CleanupCategory],
    limit: int,
) -> dict[str, Any]:
    """Build the JSON document for a scan."""
    data: dict[str, Any] = {
        "files_scanned": len(result.files),
        "total_size": analysis.total_size,
        "potential_savings": analysis.potential_savings,
        "duration": round(result.duration, 3),
        "categories": {
            cat.value: {
                "files": len(analysis.files_in(cat)),
                "size": analysis.category_size(cat),
            }
            for cat in CleanupCategory
        },
        "duplicate_groups": len(analysis.duplicate_groups),
        "errors": [str(e) for e in result.errors],
    }
    if selected:
        data["files"] = {
            cat.value: [
                {"path": f.path, "size": f.size, "file_type": str(f.file_type)}
                for f in sorted(analysis.files_in(cat), key=lambda f: f.size, reverse=True)[:limit]
            ]
            for cat in selected
        }
    return data
