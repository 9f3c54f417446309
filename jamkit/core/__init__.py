"""
Core functionality exports for jamkit.

This module provides convenient access to the resolution and packaging
subsystems of jamkit:

    from jamkit.core import Packer, resolve_dependency

New pipeline components should be re-exported here to keep imports
stable.
"""

from __future__ import annotations

from jamkit.core.catalog import CatalogClient, CatalogRecord
from jamkit.core.constraint import (
    DefaultExpression,
    ExplicitExpression,
    PessimisticExpression,
    VersionConstraint,
    parse_version_expression,
)
from jamkit.core.dependency_cacher import DependencyCacher
from jamkit.core.directory_duplicator import DirectoryDuplicator
from jamkit.core.file_bundler import FileBundler
from jamkit.core.packer import Packer
from jamkit.core.parser import BuildpackParser
from jamkit.core.pre_packager import PrePackager
from jamkit.core.resolver import resolve_dependency
from jamkit.core.tar_builder import TarBuilder
from jamkit.core.transport import Transport
from jamkit.core.updater import DependencyUpdater
from jamkit.core.validated_reader import ValidatedReader

__all__ = [
    "BuildpackParser",
    "CatalogClient",
    "CatalogRecord",
    "DefaultExpression",
    "DependencyCacher",
    "DependencyUpdater",
    "DirectoryDuplicator",
    "ExplicitExpression",
    "FileBundler",
    "Packer",
    "PessimisticExpression",
    "PrePackager",
    "TarBuilder",
    "Transport",
    "ValidatedReader",
    "VersionConstraint",
    "parse_version_expression",
    "resolve_dependency",
]
