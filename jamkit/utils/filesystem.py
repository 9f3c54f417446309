"""
Filesystem utilities for jamkit.

This module provides helpers for reading and atomically rewriting
manifests, copying buildpack trees, and managing scratch directories.
All filesystem errors are normalized to ``FilesystemError``.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from contextlib import contextmanager
from typing import Iterator, Optional, Union

from jamkit.utils.logger import get_logger
from jamkit.exceptions import FilesystemError


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Check that ``path`` is an existing regular file and resolve it."""
    if not path.exists():
        raise FilesystemError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FilesystemError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Atomically write text to a file using a temporary file + replace."""
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
            temp_path = Path(tmp.name)

        if target.exists():
            os.chmod(temp_path, target.stat().st_mode & 0o7777)
        temp_path.replace(target)

    except OSError as exc:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
                logger.debug("Cleaned up temporary file: %s", temp_path)
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FilesystemError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(file_path: PathLike, *, encoding: str = "utf-8") -> str:
    """Read a text file.

    Args:
        file_path: Path to the file.
        encoding: Text encoding.

    Returns:
        File contents as a string.

    Raises:
        FilesystemError: The path is missing, not a file, or unreadable.
    """
    path = _validated_file(Path(file_path))

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FilesystemError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(file_path: PathLike, content: str) -> None:
    """Replace the contents of ``file_path`` atomically.

    The file's permission bits are kept when it already exists.
    """
    _atomic_write(Path(file_path), content)


def copy_tree(source: PathLike, destination: PathLike) -> None:
    """Recursively copy ``source`` into ``destination``.

    Symlinks are copied as links and permission bits are preserved.
    ``destination`` may already exist.
    """
    try:
        shutil.copytree(
            str(source),
            str(destination),
            symlinks=True,
            dirs_exist_ok=True,
        )
    except (OSError, shutil.Error) as exc:
        raise FilesystemError(
            f"Failed to copy directory: {exc}",
            file_path=str(source),
            operation="copy",
            original_error=exc,
        ) from exc


@contextmanager
def temporary_directory(prefix: str = "jamkit-") -> Iterator[str]:
    """Create a scratch directory that is removed on exit, however it is left."""
    try:
        path = tempfile.mkdtemp(prefix=prefix)
    except OSError as exc:
        raise FilesystemError(
            f"unable to create temporary directory: {exc}",
            operation="mkdtemp",
            original_error=exc,
        ) from exc

    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        logger.debug("Removed temporary directory: %s", path)


def validate_path(path: PathLike) -> Path:
    """Resolve a user supplied path against the working directory.

    ``~`` is expanded; the path need not exist yet.
    """
    return Path(path).expanduser().resolve(strict=False)
