"""
Utility helpers for bundlekeeper.

This package provides reusable utilities used across bundlekeeper, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Synchronous HTTP client utilities
- OSGi version helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from bundlekeeper.utils.filesystem import (
    copy_file,
    iter_files,
    remove_path,
    safe_read_file,
    safe_write_file,
    validate_path,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from bundlekeeper.utils.logger import (
    TRACE,
    disable_logging,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from bundlekeeper.utils.console import (
    colorize_status,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from bundlekeeper.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from bundlekeeper.utils.version_utils import VersionRange, parse_version

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_error",
    "print_info",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    "colorize_status",
    # Logging
    "TRACE",
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "level_for_verbosity",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "copy_file",
    "remove_path",
    "iter_files",
    "validate_path",
    # HTTP
    "HTTPClient",
    # Version utilities
    "VersionRange",
    "parse_version",
]
