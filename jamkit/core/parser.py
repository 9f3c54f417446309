"""Buildpack manifest parser.

Reads a ``buildpack.toml`` from disk and decodes it into a
:class:`ManifestConfig`, and writes a manifest back after it was
modified.

Typical usage::

    from jamkit.core.parser import BuildpackParser

    parser = BuildpackParser()
    config = parser.parse("buildpack.toml")
    print(config.buildpack.name, len(config.metadata.dependencies))

    config.buildpack.version = "1.2.3"
    parser.write("buildpack.toml", config)
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from jamkit.exceptions import ManifestParseError
from jamkit.models.manifest import ManifestConfig, decode_manifest, encode_manifest
from jamkit.utils.filesystem import safe_read_file, safe_write_file
from jamkit.utils.logger import get_logger

logger = get_logger("parser")

__all__ = ["BuildpackParser"]


class BuildpackParser:
    """Reads and writes ``buildpack.toml`` files."""

    def parse(self, file_path: Union[str, Path]) -> ManifestConfig:
        """Parse the manifest at ``file_path``.

        Raises:
            FilesystemError: The file does not exist or cannot be read.
            ManifestParseError: The file is not a valid manifest.
        """
        content = safe_read_file(file_path)
        logger.debug("Parsing manifest: %s", file_path)

        try:
            config = decode_manifest(content)
        except ManifestParseError as exc:
            exc.file_path = str(file_path)
            exc.details["file"] = str(file_path)
            raise

        logger.debug(
            "Parsed %s with %d dependencies and %d constraints",
            file_path,
            len(config.metadata.dependencies),
            len(config.metadata.dependency_constraints),
        )
        return config

    def write(self, file_path: Union[str, Path], config: ManifestConfig) -> None:
        """Encode ``config`` and atomically replace ``file_path`` with it."""
        safe_write_file(file_path, encode_manifest(config))
        logger.debug("Wrote manifest: %s", file_path)
