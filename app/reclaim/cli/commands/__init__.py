"""CLI commands for reclaim.

This package contains all subcommand implementations.
"""

from reclaim.cli.commands import backup, caches, clean, config, duplicates, logs, scan

__all__ = ["backup", "caches", "clean", "config", "duplicates", "logs", "scan"]
