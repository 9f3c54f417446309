"""
Unified data model exports for jamkit.

This module re-exports the manifest data models so callers can import
them from ``jamkit.models`` instead of individual submodules.

Example:
    >>> from jamkit.models import Checksum, DependencyEntry, ManifestConfig
"""

from __future__ import annotations

from jamkit.models.checksum import Checksum
from jamkit.models.member import CachedMember
from jamkit.models.dependency import DependencyConstraint, DependencyEntry
from jamkit.models.manifest import (
    BuildpackInfo,
    ManifestConfig,
    ManifestMetadata,
    decode_manifest,
    encode_manifest,
)

__all__ = [
    "BuildpackInfo",
    "CachedMember",
    "Checksum",
    "DependencyConstraint",
    "DependencyEntry",
    "ManifestConfig",
    "ManifestMetadata",
    "decode_manifest",
    "encode_manifest",
]
