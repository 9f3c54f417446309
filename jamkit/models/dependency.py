"""
Dependency data models for jamkit.

This module defines the two manifest tables that drive resolution:
``[[metadata.dependencies]]`` entries (:class:`DependencyEntry`) and
``[[metadata.dependency-constraints]]`` entries
(:class:`DependencyConstraint`).
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from jamkit.constants import WILDCARD_STACK
from jamkit.models.checksum import Checksum

# Manifest keys understood by DependencyEntry; anything else lands in ``extra``.
_DEPENDENCY_KEYS = (
    "id",
    "name",
    "version",
    "stacks",
    "uri",
    "sha256",
    "checksum",
    "source",
    "source_sha256",
    "source-checksum",
    "deprecation_date",
    "licenses",
    "cpe",
    "purl",
)


def parse_deprecation_date(value: Any) -> Optional[datetime]:
    """Coerce a TOML or JSON deprecation date into an aware ``datetime``.

    TOML decoders hand back ``datetime``/``date`` objects, the catalog API
    sends RFC 3339 strings. Empty values and unparsable strings yield
    ``None``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=timezone.utc)

    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass
class DependencyEntry:
    """One published version of a dependency, as listed in a manifest.

    Attributes:
        id: Dependency identifier (``node``, ``python``...).
        name: Human readable name.
        version: Semantic version string.
        stacks: Stack ids this build supports; may contain ``"*"``.
        uri: Where the payload can be fetched from.
        checksum: ``algorithm:hash`` of the payload.
        sha256: Legacy bare sha256 digest of the payload.
        source: URI of the upstream source archive.
        source_checksum: ``algorithm:hash`` of the source archive.
        source_sha256: Legacy bare sha256 digest of the source archive.
        deprecation_date: Date after which the version is unsupported.
        licenses: Licence identifiers (strings or ``{type, uri}`` tables).
        cpe: CPE identifier.
        purl: Package URL.
        extra: Unrecognised keys, written back unchanged.
    """

    id: str = ""
    name: str = ""
    version: str = ""
    stacks: List[str] = field(default_factory=list)
    uri: str = ""
    checksum: str = ""
    sha256: str = ""
    source: str = ""
    source_checksum: str = ""
    source_sha256: str = ""
    deprecation_date: Optional[datetime] = None
    licenses: List[Any] = field(default_factory=list)
    cpe: str = ""
    purl: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def has_stack(self, stack: str) -> bool:
        """Return True if ``stack`` is listed verbatim in :attr:`stacks`."""
        return stack in self.stacks

    @property
    def supports_any_stack(self) -> bool:
        """True when the entry claims the wildcard stack."""
        return self.has_stack(WILDCARD_STACK)

    @property
    def resolved_checksum(self) -> Checksum:
        """The payload checksum, falling back to the legacy ``sha256`` field."""
        return Checksum(self.checksum or self.sha256)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DependencyEntry":
        """Build an entry from a decoded ``[[metadata.dependencies]]`` table."""
        extra = {k: v for k, v in data.items() if k not in _DEPENDENCY_KEYS}
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            version=str(data.get("version", "")),
            stacks=[str(s) for s in data.get("stacks", []) or []],
            uri=str(data.get("uri", "")),
            checksum=str(data.get("checksum", "")),
            sha256=str(data.get("sha256", "")),
            source=str(data.get("source", "")),
            source_checksum=str(data.get("source-checksum", "")),
            source_sha256=str(data.get("source_sha256", "")),
            deprecation_date=parse_deprecation_date(data.get("deprecation_date")),
            licenses=list(data.get("licenses", []) or []),
            cpe=str(data.get("cpe", "")),
            purl=str(data.get("purl", "")),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Encode the entry as a TOML-ready table, omitting empty fields."""
        values: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "stacks": list(self.stacks),
            "uri": self.uri,
            "sha256": self.sha256,
            "checksum": self.checksum,
            "source": self.source,
            "source_sha256": self.source_sha256,
            "source-checksum": self.source_checksum,
            "deprecation_date": (
                self.deprecation_date.astimezone(timezone.utc)
                if self.deprecation_date
                else None
            ),
            "licenses": list(self.licenses),
            "cpe": self.cpe,
            "purl": self.purl,
        }
        table = {k: v for k, v in values.items() if v not in (None, "", [])}
        table.update(self.extra)
        return table


@dataclass
class DependencyConstraint:
    """A ``[[metadata.dependency-constraints]]`` entry.

    Attributes:
        id: Dependency id the constraint applies to.
        constraint: Semver range expression.
        patches: How many of the highest matching versions to keep.
    """

    id: str = ""
    constraint: str = ""
    patches: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DependencyConstraint":
        return cls(
            id=str(data.get("id", "")),
            constraint=str(data.get("constraint", "")),
            patches=int(data.get("patches", 0) or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        table: Dict[str, Any] = {"constraint": self.constraint, "id": self.id}
        if self.patches:
            table["patches"] = int(self.patches)
        return table
