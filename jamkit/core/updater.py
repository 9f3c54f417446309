"""The ``update-dependencies`` pipeline.

Rewrites the ``[[metadata.dependencies]]`` of a ``buildpack.toml`` from
the catalog, keeping for every ``[[metadata.dependency-constraints]]``
entry the newest ``patches`` versions within its range.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from jamkit.core.catalog import CatalogClient
from jamkit.core.parser import BuildpackParser
from jamkit.exceptions import JamError
from jamkit.models.dependency import DependencyEntry
from jamkit.utils.logger import get_logger

logger = get_logger("updater")

__all__ = ["DependencyUpdater"]


class DependencyUpdater:
    """Refreshes a manifest's dependency list from the catalog.

    Args:
        catalog: Catalog client; each dependency id is fetched once.
        parser: Reads and writes the manifest.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        parser: Optional[BuildpackParser] = None,
    ) -> None:
        self.catalog = catalog
        self.parser = parser or BuildpackParser()

    def execute(self, buildpack_file: Union[str, Path]) -> List[DependencyEntry]:
        """Update ``buildpack_file`` in place.

        When no constraint matches anything, the existing dependencies are
        kept. The file is rewritten in either case.

        Returns:
            The dependency list now in the manifest.

        Raises:
            JamError: The manifest could not be read or written, the
                catalog query failed, or a constraint or catalog version
                is malformed.
        """
        try:
            config = self.parser.parse(buildpack_file)
        except JamError as exc:
            exc.add_context("failed to parse buildpack.toml")
            raise

        matches: List[DependencyEntry] = []
        for constraint in config.metadata.dependency_constraints:
            logger.info(
                "Reaching out to %s for %s (%s, %d patches)",
                self.catalog.api,
                constraint.id,
                constraint.constraint,
                constraint.patches,
            )
            records = self.catalog.fetch_all(constraint.id)
            name = self.catalog.find_dependency_name(constraint.id, config)
            found = self.catalog.get_dependencies_within_constraint(records, constraint, name)
            logger.debug(
                "%d of %d %s versions match %s",
                len(found),
                len(records),
                constraint.id,
                constraint.constraint,
            )
            matches.extend(found)

        if matches:
            config.metadata.dependencies = matches
        elif config.metadata.dependency_constraints:
            logger.warning("No catalog versions matched; keeping existing dependencies")

        try:
            self.parser.write(buildpack_file, config)
        except JamError as exc:
            exc.add_context("failed to write buildpack config")
            raise

        return config.metadata.dependencies
