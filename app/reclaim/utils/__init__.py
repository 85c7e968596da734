"""Utility modules for reclaim.

This module exports commonly used utility functions.
"""

from reclaim.utils.checksum import sha256_file, sha256_text
from reclaim.utils.formatting import (
    console,
    create_file_table,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_file_table",
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "sha256_file",
    "sha256_text",
]
