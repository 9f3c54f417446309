"""
Checksum value type for jamkit.

A checksum is written as ``algorithm:hash`` (``sha256:6e32ea...``). Older
manifests carry a bare hex digest in their ``sha256`` field; such an
unqualified value defaults to the ``sha256`` algorithm and is allowed to
match a qualified checksum with the same digest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from jamkit.constants import DEFAULT_CHECKSUM_ALGORITHM


def _split(value: str) -> Tuple[Optional[str], str]:
    """Split ``value`` into ``(algorithm, hash)``.

    The algorithm is ``None`` when the value carries no qualifier: either it
    has no ``:`` at all, or it has more than one and is kept as a literal.
    """
    if value.count(":") != 1:
        return None, value
    algorithm, digest = value.split(":", 1)
    return algorithm, digest


@dataclass(frozen=True)
class Checksum:
    """An ``algorithm:hash`` pair.

    Attributes:
        value: The raw checksum string as written in the manifest.

    Examples:
        >>> Checksum("sha256:c").match(Checksum("c"))
        True
        >>> Checksum("md5:c").match(Checksum("sha256:c"))
        False
        >>> Checksum("md5:c:d").algorithm
        ''
    """

    value: str
    _algorithm: Optional[str] = field(init=False, repr=False, compare=False)
    _hash: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        algorithm, digest = _split(self.value)
        object.__setattr__(self, "_algorithm", algorithm)
        object.__setattr__(self, "_hash", digest)

    def __str__(self) -> str:
        return self.value

    @property
    def qualified(self) -> bool:
        """True when the value names its algorithm explicitly."""
        return self._algorithm is not None

    @property
    def algorithm(self) -> str:
        """Algorithm portion; ``sha256`` when the value has no ``:``."""
        if self._algorithm is not None:
            return self._algorithm
        if ":" in self.value:
            return ""
        return DEFAULT_CHECKSUM_ALGORITHM

    @property
    def hash(self) -> str:
        """Hex digest portion of the checksum."""
        return self._hash

    def match(self, other: "Checksum") -> bool:
        """Return True when both checksums name the same digest.

        Digests are compared case-sensitively. Algorithms are compared
        case-insensitively, and only when both sides are qualified.
        """
        if self.hash != other.hash:
            return False
        if not (self.qualified and other.qualified):
            return True
        return self.algorithm.lower() == other.algorithm.lower()

    def match_string(self, other: Union[str, "Checksum"]) -> bool:
        """Like :meth:`match`, accepting a raw checksum string."""
        if isinstance(other, Checksum):
            return self.match(other)
        return self.match(Checksum(other))
