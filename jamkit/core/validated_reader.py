"""Checksum-validating stream wrapper.

:class:`ValidatedReader` hashes every byte it passes through. When the
wrapped stream is exhausted the digest is compared with the expected
checksum, and a mismatch is raised in place of the end-of-stream signal,
so a consumer that drains the reader can never mistake corrupt data for
a complete payload.

Example::

    with open("node.tgz", "rb") as fh:
        reader = ValidatedReader(fh, "sha256:6e32ea34...")
        shutil.copyfileobj(reader, destination)   # raises on mismatch
"""

from __future__ import annotations

import io
import hashlib
from typing import Any, BinaryIO, Optional, Union

from jamkit.models.checksum import Checksum
from jamkit.exceptions import (
    ChecksumMismatchError,
    JamError,
    MalformedChecksumError,
)
from jamkit.constants import STREAM_CHUNK_SIZE, SUPPORTED_CHECKSUM_ALGORITHMS

__all__ = ["ValidatedReader"]


class ValidatedReader(io.RawIOBase):
    """Read-through hasher that fails closed at end of stream.

    Args:
        stream: Binary stream to read from. Closed with the reader.
        checksum: Expected ``algorithm:hash``; a bare digest is treated as
            sha256.
    """

    def __init__(self, stream: BinaryIO, checksum: Union[str, Checksum]) -> None:
        super().__init__()
        self._stream = stream
        self.checksum = checksum if isinstance(checksum, Checksum) else Checksum(checksum)
        self._error: Optional[JamError] = None
        self._finished = False

        algorithm = self.checksum.algorithm.lower()
        if algorithm in SUPPORTED_CHECKSUM_ALGORITHMS:
            self._digest: Any = hashlib.new(algorithm)
        else:
            self._digest = None
            self._error = MalformedChecksumError(
                f"unsupported algorithm {self.checksum.algorithm!r}: the following "
                f"algorithms are supported [{', '.join(SUPPORTED_CHECKSUM_ALGORITHMS)}]",
                checksum=str(self.checksum),
            )

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        if self._error is not None:
            raise self._error
        if self._finished:
            return 0

        data = self._stream.read(len(buffer))
        if not data:
            actual = self._digest.hexdigest()
            if actual != self.checksum.hash:
                self._error = ChecksumMismatchError(
                    expected=self.checksum.hash, actual=actual
                )
                raise self._error
            self._finished = True
            return 0

        self._digest.update(data)
        size = len(data)
        buffer[:size] = data
        return size

    def valid(self) -> bool:
        """Drain the stream and report whether the checksum matched.

        Errors other than a checksum mismatch propagate unchanged.
        """
        try:
            while self.read(STREAM_CHUNK_SIZE):
                pass
        except ChecksumMismatchError:
            return False
        return True

    def close(self) -> None:
        if not self.closed:
            self._stream.close()
        super().close()
