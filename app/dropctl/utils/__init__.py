"""Utility modules for dropctl.

This module exports commonly used utility functions.
"""

from dropctl.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_plain,
    print_success,
)

__all__ = [
    "console",
    "err_console",
    "print_error",
    "print_info",
    "print_plain",
    "print_success",
]
