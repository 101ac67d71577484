"""Utility modules for isosync.

This module exports commonly used utility functions.
"""

from isosync.utils.formatting import (
    console,
    create_volume_table,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_volume_table",
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
