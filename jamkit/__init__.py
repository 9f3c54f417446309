"""
jamkit: buildpack dependency resolution and packaging.

jamkit resolves buildpack dependencies against version constraints,
refreshes ``buildpack.toml`` dependency lists from a dependency catalog,
and packages a buildpack into a reproducible ``.tgz``, optionally with
every dependency downloaded and checksum-verified for offline use.

Command-line usage::

    jam pack --buildpack buildpack.toml --version 1.0.0 --output bp.tgz
    jam update-dependencies --buildpack-file buildpack.toml
"""

from __future__ import annotations

from jamkit.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "jamkit Contributors"
__license__ = "Apache-2.0"
__description__ = "Buildpack dependency resolution and packaging."

__all__ = [
    "__version__",
]
