"""The ``pack`` pipeline: turn a buildpack directory into a ``.tgz``.

Steps, in order, each aborting the run on failure:

1. Copy the buildpack directory to a scratch directory.
2. Parse the copied ``buildpack.toml`` and stamp the requested version.
3. Optionally drop dependencies that do not list the requested stack.
4. Run the ``pre-package`` script inside the copy.
5. In offline mode, download every dependency into ``dependencies/``,
   point its URI at the cached file and add the file to ``include-files``.
6. Bundle ``include-files`` and write the tarball.

The scratch directory is removed however the run ends; the source
directory is never modified.
"""

from __future__ import annotations

import os
from typing import Optional

from jamkit.core.dependency_cacher import DependencyCacher
from jamkit.core.directory_duplicator import DirectoryDuplicator
from jamkit.core.file_bundler import FileBundler
from jamkit.core.parser import BuildpackParser
from jamkit.core.pre_packager import PrePackager
from jamkit.core.tar_builder import TarBuilder
from jamkit.exceptions import JamError
from jamkit.utils.filesystem import temporary_directory
from jamkit.utils.logger import get_logger
from jamkit.constants import FILE_URI_PREFIX

logger = get_logger("packer")

__all__ = ["Packer"]


class Packer:
    """Runs the packaging pipeline with swappable collaborators.

    Args:
        duplicator: Copies the buildpack directory.
        parser: Reads ``buildpack.toml``.
        pre_packager: Runs the ``pre-package`` script.
        cacher: Downloads dependencies in offline mode.
        bundler: Collects archive members.
        tar_builder: Writes the archive.
    """

    def __init__(
        self,
        *,
        duplicator: Optional[DirectoryDuplicator] = None,
        parser: Optional[BuildpackParser] = None,
        pre_packager: Optional[PrePackager] = None,
        cacher: Optional[DependencyCacher] = None,
        bundler: Optional[FileBundler] = None,
        tar_builder: Optional[TarBuilder] = None,
    ) -> None:
        self.duplicator = duplicator or DirectoryDuplicator()
        self.parser = parser or BuildpackParser()
        self.pre_packager = pre_packager or PrePackager()
        self.cacher = cacher or DependencyCacher()
        self.bundler = bundler or FileBundler()
        self.tar_builder = tar_builder or TarBuilder()

    def execute(
        self,
        buildpack_toml_path: str,
        output: str,
        version: str,
        *,
        offline: bool = False,
        stack: str = "",
    ) -> None:
        """Package the buildpack whose manifest is ``buildpack_toml_path``.

        Args:
            buildpack_toml_path: Path to ``buildpack.toml``; its directory is
                the buildpack root.
            output: Path of the ``.tgz`` to write.
            version: Version stamped into the packaged manifest.
            offline: Cache dependencies inside the package.
            stack: When set, keep only dependencies listing this stack.

        Raises:
            JamError: Any step failed. The message names the step.
        """
        with temporary_directory(prefix="jamkit-pack-") as build_dir:
            try:
                source_dir = os.path.dirname(os.path.abspath(buildpack_toml_path))
                self.duplicator.duplicate(source_dir, build_dir)
            except JamError as exc:
                exc.add_context("failed to duplicate directory")
                raise

            manifest_path = os.path.join(build_dir, os.path.basename(buildpack_toml_path))
            try:
                config = self.parser.parse(manifest_path)
            except JamError as exc:
                exc.add_context("failed to parse buildpack.toml")
                raise

            config.buildpack.version = version
            logger.info("Packing %s %s...", config.buildpack.name, version)

            if stack:
                config.metadata.dependencies = [
                    entry for entry in config.metadata.dependencies if entry.has_stack(stack)
                ]

            script = config.metadata.pre_package
            try:
                self.pre_packager.execute(script, build_dir)
            except JamError as exc:
                exc.add_context(f'failed to execute pre-packaging script "{script}"')
                raise

            if offline:
                try:
                    config.metadata.dependencies = self.cacher.cache(
                        build_dir, config.metadata.dependencies
                    )
                except JamError as exc:
                    exc.add_context("failed to cache dependencies")
                    raise

                local_prefix = FILE_URI_PREFIX + "/"
                for entry in config.metadata.dependencies:
                    path = entry.uri
                    if path.startswith(local_prefix):
                        path = path[len(local_prefix):]
                    config.metadata.include_files.append(path)

            try:
                members = self.bundler.bundle(build_dir, config.metadata.include_files, config)
            except JamError as exc:
                exc.add_context("failed to bundle files")
                raise

            try:
                self.tar_builder.build(output, members)
            except JamError as exc:
                exc.add_context("failed to create output")
                raise
