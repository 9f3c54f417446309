"""Deterministic ``.tgz`` writer for buildpack packages.

Identical members always produce byte-identical archives: members are
written in name order, and timestamps and owner fields are zeroed in both
the tar headers and the gzip header.
"""

from __future__ import annotations

import gzip
import os
import posixpath
import tarfile
from contextlib import ExitStack
from typing import Dict, List, Sequence

from jamkit.exceptions import FilesystemError
from jamkit.models.member import CachedMember
from jamkit.utils.logger import get_logger
from jamkit.constants import DIRECTORY_MODE

logger = get_logger("tar_builder")

__all__ = ["TarBuilder"]


def _with_directories(members: Sequence[CachedMember]) -> List[CachedMember]:
    """Add an entry for every parent directory, sorted by name."""
    entries: Dict[str, CachedMember] = {member.name: member for member in members}
    for member in members:
        parent = posixpath.dirname(member.name)
        while parent and parent not in entries:
            entries[parent] = CachedMember(name=parent, mode=DIRECTORY_MODE, is_dir=True)
            parent = posixpath.dirname(parent)
    return [entries[name] for name in sorted(entries)]


def _header(member: CachedMember) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name=member.name)
    info.mode = member.mode
    info.mtime = 0
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""

    if member.is_dir:
        info.type = tarfile.DIRTYPE
    elif member.is_symlink:
        info.type = tarfile.SYMTYPE
        info.linkname = member.link or ""
    else:
        info.size = member.size
    return info


class TarBuilder:
    """Writes members into a gzip-compressed tarball."""

    def build(self, output: str, members: Sequence[CachedMember]) -> None:
        """Write ``members`` to ``output``, replacing any existing file.

        Every member stream is closed once written. A failed build leaves
        a truncated archive at ``output``.

        Raises:
            FilesystemError: ``output`` could not be created or a member
                could not be written.
        """
        logger.info("Building tarball: %s", output)

        with ExitStack() as stack:
            for member in members:
                stack.callback(member.close)

            try:
                raw = stack.enter_context(open(output, "wb"))
            except OSError as exc:
                raise FilesystemError(
                    f"failed to create tarball: {exc}",
                    file_path=output,
                    operation="create",
                    original_error=exc,
                ) from exc

            compressed = stack.enter_context(
                gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0)
            )
            archive = stack.enter_context(
                tarfile.open(fileobj=compressed, mode="w", format=tarfile.PAX_FORMAT)
            )

            for member in _with_directories(members):
                logger.info("  %s", member.name)
                try:
                    archive.addfile(_header(member), member.stream)
                except (OSError, tarfile.TarError) as exc:
                    raise FilesystemError(
                        f"failed to write file to tarball: {member.name}: {exc}",
                        file_path=os.path.abspath(output),
                        operation="write",
                        original_error=exc,
                    ) from exc
                member.close()
