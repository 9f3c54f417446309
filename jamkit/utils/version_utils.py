"""
Version parsing utilities for jamkit.

Dependency versions in buildpack manifests and in the catalog are
semantic versions (``1.2.3``, ``v1.2.3``, ``1.2.3-rc.1+build.4``). They
are parsed with :mod:`semantic_version`, so pre-release identifiers order
the way SemVer 2.0.0 says (numeric identifiers numerically, ``1.2.3-1``
before ``1.2.3``), and build metadata is dropped so it never affects
ordering or equality.
"""

from __future__ import annotations

from semantic_version import Version

from jamkit.exceptions import VersionSyntaxError


def parse_version(value: str) -> Version:
    """Parse a semantic version string.

    Build metadata (``+...``) is dropped so that two versions differing only
    in metadata compare equal.

    Args:
        value: Version string, optionally prefixed with ``v``.

    Returns:
        The parsed :class:`semantic_version.Version`.

    Raises:
        VersionSyntaxError: ``value`` is not a valid version.

    Examples:
        >>> parse_version("v1.2.3")
        Version('1.2.3')
        >>> parse_version("1.2.3-1") < parse_version("1.2.3")
        True
    """
    try:
        parsed = Version(strip_version_prefix(value.strip()))
    except (ValueError, AttributeError) as exc:
        raise VersionSyntaxError(
            f"Invalid Semantic Version: {value!r}", version=value
        ) from exc

    if parsed.build:
        parsed = Version(str(parsed).split("+", 1)[0])
    return parsed


def strip_version_prefix(value: str) -> str:
    """Remove a leading ``v`` from a catalog version string.

    >>> strip_version_prefix("v1.0.0")
    '1.0.0'
    """
    if value[:1] in ("v", "V"):
        return value[1:]
    return value
