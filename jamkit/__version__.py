"""
jamkit version information.

Single source of truth for the package version, following Semantic
Versioning (https://semver.org/). The ``jam`` CLI reports this value via
``--version``.
"""

from __future__ import annotations

__version__ = "0.1.0.dev0"
