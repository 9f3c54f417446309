"""Archive member model shared by the file bundler and the tar builder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass
class CachedMember:
    """One entry of the package tarball.

    Attributes:
        name: Archive-relative path (``bin/build``).
        stream: Open binary stream with the content; ``None`` for
            directories and symlinks.
        size: Content length in bytes.
        mode: POSIX permission bits.
        link: Symlink target relative to the buildpack root, if any.
        is_dir: True for directory entries.
    """

    name: str
    stream: Optional[BinaryIO] = None
    size: int = 0
    mode: int = 0o644
    link: Optional[str] = None
    is_dir: bool = False

    @property
    def is_symlink(self) -> bool:
        return self.link is not None

    def close(self) -> None:
        """Close the content stream, if any."""
        if self.stream is not None:
            self.stream.close()
