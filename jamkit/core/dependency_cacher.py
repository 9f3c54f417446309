"""Download dependencies into the buildpack for offline packaging."""

from __future__ import annotations

import os
import shutil
from dataclasses import replace
from typing import List, Optional

from jamkit.core.transport import Transport
from jamkit.core.validated_reader import ValidatedReader
from jamkit.exceptions import FilesystemError, JamError
from jamkit.models.dependency import DependencyEntry
from jamkit.utils.logger import get_logger
from jamkit.constants import DEPENDENCIES_DIR, FILE_URI_PREFIX, STREAM_CHUNK_SIZE

logger = get_logger("dependency_cacher")

__all__ = ["DependencyCacher", "cached_file_name"]


def cached_file_name(entry: DependencyEntry) -> str:
    """File name a dependency is stored under: its checksum's hex digest."""
    return entry.resolved_checksum.hash


class DependencyCacher:
    """Fetches, validates and stores each dependency under ``dependencies/``.

    Args:
        transport: Used to open dependency URIs.
    """

    def __init__(self, transport: Optional[Transport] = None) -> None:
        self.transport = transport or Transport()

    def cache(self, root: str, dependencies: List[DependencyEntry]) -> List[DependencyEntry]:
        """Cache every dependency below ``root`` and rewrite its URI.

        Dependencies are processed in order and the first failure aborts
        the run. Files cached before the failure stay on disk.

        Args:
            root: Buildpack directory.
            dependencies: Entries to cache; left unmodified.

        Returns:
            Copies of the entries with ``uri`` set to
            ``file:///dependencies/<hash>``.

        Raises:
            FilesystemError: The cache directory or a cached file could not
                be written.
            TransportError: A dependency could not be fetched.
            ChecksumMismatchError: Downloaded content did not match its
                checksum.
        """
        logger.info("Downloading dependencies...")
        directory = os.path.join(root, DEPENDENCIES_DIR)
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(
                f"failed to create dependencies directory: {exc}",
                file_path=directory,
                operation="mkdir",
                original_error=exc,
            ) from exc

        cached: List[DependencyEntry] = []
        for entry in dependencies:
            file_name = cached_file_name(entry)
            logger.info("  %s (%s) [%s]", entry.id, entry.version, ", ".join(entry.stacks))
            logger.info("    ↳  %s/%s", DEPENDENCIES_DIR, file_name)

            self._store(entry, os.path.join(directory, file_name))
            cached.append(
                replace(entry, uri=f"{FILE_URI_PREFIX}/{DEPENDENCIES_DIR}/{file_name}")
            )

        return cached

    def _store(self, entry: DependencyEntry, destination_path: str) -> None:
        try:
            source = self.transport.drop("", entry.uri)
        except JamError as exc:
            exc.add_context("failed to download dependency")
            raise

        with ValidatedReader(source, entry.resolved_checksum) as reader:
            try:
                destination = open(destination_path, "wb")
            except OSError as exc:
                raise FilesystemError(
                    f"failed to create destination file: {exc}",
                    file_path=destination_path,
                    operation="create",
                    original_error=exc,
                ) from exc

            with destination:
                try:
                    shutil.copyfileobj(reader, destination, STREAM_CHUNK_SIZE)
                except JamError as exc:
                    exc.add_context("failed to copy dependency")
                    raise
                except OSError as exc:
                    raise FilesystemError(
                        f"failed to copy dependency: {exc}",
                        file_path=destination_path,
                        operation="write",
                        original_error=exc,
                    ) from exc
