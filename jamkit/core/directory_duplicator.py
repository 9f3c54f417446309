"""Copy a buildpack directory to a scratch location before packaging."""

from __future__ import annotations

from jamkit.utils.filesystem import PathLike, copy_tree
from jamkit.utils.logger import get_logger

logger = get_logger("directory_duplicator")

__all__ = ["DirectoryDuplicator"]


class DirectoryDuplicator:
    """Recursive copy keeping symlinks and permission bits."""

    def duplicate(self, source: PathLike, destination: PathLike) -> None:
        logger.debug("Duplicating %s into %s", source, destination)
        copy_tree(source, destination)
