"""Collect the files that make up a buildpack package."""

from __future__ import annotations

import io
import os
import stat
from typing import List, Sequence

from jamkit.exceptions import FilesystemError
from jamkit.models.manifest import ManifestConfig, encode_manifest
from jamkit.models.member import CachedMember
from jamkit.utils.logger import get_logger
from jamkit.constants import MANIFEST_FILE_MODE, MANIFEST_FILE_NAME

logger = get_logger("file_bundler")

__all__ = ["FileBundler"]


class FileBundler:
    """Turns ``include-files`` names into archive members.

    ``buildpack.toml`` is never read from disk: the in-memory manifest is
    encoded in its place so version stamping and dependency rewrites end
    up in the package.
    """

    def bundle(
        self,
        root: str,
        names: Sequence[str],
        config: ManifestConfig,
    ) -> List[CachedMember]:
        """Build one member per name, in the order given.

        Args:
            root: Buildpack directory the names are relative to.
            names: Archive-relative paths to include.
            config: Manifest written as ``buildpack.toml``.

        Returns:
            Members with open streams for regular files. The caller owns
            the streams.

        Raises:
            FilesystemError: A file could not be read, or a symlink points
                outside ``root``. Streams opened so far are closed first.
        """
        members: List[CachedMember] = []
        try:
            for name in names:
                members.append(self._member(root, name, config))
        except FilesystemError:
            for member in members:
                member.close()
            raise
        return members

    def _member(self, root: str, name: str, config: ManifestConfig) -> CachedMember:
        if name == MANIFEST_FILE_NAME:
            content = encode_manifest(config).encode("utf-8")
            return CachedMember(
                name=name,
                stream=io.BytesIO(content),
                size=len(content),
                mode=MANIFEST_FILE_MODE,
            )

        path = os.path.join(root, name)
        try:
            info = os.lstat(path)
            if stat.S_ISLNK(info.st_mode):
                return CachedMember(
                    name=name,
                    mode=stat.S_IMODE(info.st_mode),
                    link=self._relative_link(root, name, os.readlink(path)),
                )
            stream = open(path, "rb")
        except OSError as exc:
            raise FilesystemError(
                f"error opening included file: {name}: {exc}",
                file_path=path,
                operation="open",
                original_error=exc,
            ) from exc

        return CachedMember(
            name=name,
            stream=stream,
            size=info.st_size,
            mode=stat.S_IMODE(info.st_mode),
        )

    @staticmethod
    def _relative_link(root: str, name: str, target: str) -> str:
        """Express a symlink target relative to the link's own directory.

        Relative targets are resolved against the directory holding the
        link, absolute ones are used as they are. The resolved target must
        stay inside ``root`` so the link still works once extracted.
        """
        link_dir = os.path.dirname(os.path.join(root, name))
        resolved = os.path.normpath(os.path.join(link_dir, target))

        inside = os.path.relpath(resolved, root)
        if inside == os.pardir or inside.startswith(os.pardir + os.sep):
            raise FilesystemError(
                f"error opening included file: {name}: symlink target {target} "
                f"is outside {root}",
                file_path=os.path.join(root, name),
                operation="readlink",
            )
        return os.path.relpath(resolved, link_dir)
