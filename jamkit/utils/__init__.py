"""
Utility helpers for jamkit.

This package provides reusable utilities used across jamkit, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- HTTP client utilities
- Version parsing helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from jamkit.utils.filesystem import (
    copy_tree,
    safe_read_file,
    safe_write_file,
    temporary_directory,
    validate_path,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from jamkit.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from jamkit.utils.console import (
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from jamkit.utils.http import HTTPClient, ResponseStream

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from jamkit.utils.version_utils import (
    parse_version,
    strip_version_prefix,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "level_for_verbosity",
    "is_logging_configured",
    # Filesystem
    "copy_tree",
    "safe_read_file",
    "safe_write_file",
    "temporary_directory",
    "validate_path",
    # HTTP
    "HTTPClient",
    "ResponseStream",
    # Version utilities
    "parse_version",
    "strip_version_prefix",
]
