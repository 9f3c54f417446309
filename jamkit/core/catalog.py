"""Dependency catalog client for jamkit.

Talks to the dependency catalog service (``/v1/dependency?name=<id>``)
and turns its records into manifest :class:`DependencyEntry` objects. The
service is queried at most once per dependency id for the lifetime of a
:class:`CatalogClient`.

Typical usage::

    from jamkit.utils.http import HTTPClient
    from jamkit.core.catalog import CatalogClient

    with HTTPClient() as http:
        catalog = CatalogClient(http)
        records = catalog.fetch_all("node")
        entries = catalog.get_dependencies_within_constraint(
            records, DependencyConstraint("node", "18.*", patches=2), "Node Engine"
        )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from semantic_version import Version

from jamkit.core.constraint import VersionConstraint
from jamkit.exceptions import CatalogQueryError, TransportError
from jamkit.models.dependency import (
    DependencyConstraint,
    DependencyEntry,
    parse_deprecation_date,
)
from jamkit.models.manifest import ManifestConfig
from jamkit.utils.http import HTTPClient
from jamkit.utils.logger import get_logger
from jamkit.utils.version_utils import parse_version, strip_version_prefix
from jamkit.constants import CATALOG_DEPENDENCY_URL, DEFAULT_CATALOG_API

logger = get_logger("catalog")

# Public API
__all__ = ["CatalogClient", "CatalogRecord"]


# ---------------------------------------------------------------------------
# Data container
# ---------------------------------------------------------------------------


@dataclass
class CatalogRecord:
    """One entry of a catalog response.

    The catalog calls the dependency id ``name``; the human readable name
    comes from the manifest instead.
    """

    id: str
    version: str
    uri: str = ""
    sha256: str = ""
    checksum: str = ""
    source: str = ""
    source_sha256: str = ""
    source_checksum: str = ""
    stacks: List[str] = field(default_factory=list)
    deprecation_date: str = ""
    cpe: str = ""
    purl: str = ""
    licenses: List[Any] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "CatalogRecord":
        stacks = data.get("stacks") or []
        return cls(
            id=str(data.get("name", "")),
            version=str(data.get("version", "")),
            uri=str(data.get("uri", "")),
            sha256=str(data.get("sha256", "")),
            checksum=str(data.get("checksum", "")),
            source=str(data.get("source", "")),
            source_sha256=str(data.get("source_sha256", "")),
            source_checksum=str(data.get("source_checksum", "")),
            stacks=[str(s.get("id", "")) for s in stacks],
            deprecation_date=str(data.get("deprecation_date", "") or ""),
            cpe=str(data.get("cpe", "")),
            purl=str(data.get("purl", "")),
            licenses=list(data.get("licenses") or []),
        )

    def to_entry(self, name: str) -> DependencyEntry:
        """Convert to a manifest entry named ``name``."""
        return DependencyEntry(
            id=self.id,
            name=name,
            version=strip_version_prefix(self.version),
            stacks=list(self.stacks),
            uri=self.uri,
            checksum=self.checksum,
            sha256=self.sha256,
            source=self.source,
            source_checksum=self.source_checksum,
            source_sha256=self.source_sha256,
            deprecation_date=parse_deprecation_date(self.deprecation_date),
            licenses=list(self.licenses),
            cpe=self.cpe,
            purl=self.purl,
        )


# ---------------------------------------------------------------------------
# Catalog client
# ---------------------------------------------------------------------------


class CatalogClient:
    """Caching client for the dependency catalog service.

    Args:
        http_client: Shared :class:`HTTPClient`.
        api: Base URL of the catalog service.
    """

    def __init__(self, http_client: HTTPClient, api: str = DEFAULT_CATALOG_API) -> None:
        self.http_client = http_client
        self.api = api.rstrip("/")

        # dependency id → records from the last successful query
        self._records: Dict[str, List[CatalogRecord]] = {}

    def fetch_all(self, dependency_id: str) -> List[CatalogRecord]:
        """Return every catalog record for ``dependency_id``.

        Raises:
            CatalogQueryError: The request failed, the service answered
                with a status other than 200, or the body is not a JSON
                array of records.
        """
        if dependency_id in self._records:
            return self._records[dependency_id]

        url = CATALOG_DEPENDENCY_URL.format(api=self.api, name=dependency_id)
        logger.debug("Querying catalog for %s", dependency_id)

        try:
            response = self.http_client.get(url)
        except TransportError as exc:
            raise CatalogQueryError(
                f"failed to query url {url}: {exc.message}",
                dependency_id=dependency_id,
                url=url,
            ) from exc

        if response.status_code != 200:
            raise CatalogQueryError(
                f"failed to query url {url} with: status code {response.status_code}",
                dependency_id=dependency_id,
                url=url,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            if not isinstance(payload, list):
                raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
            records = [CatalogRecord.from_json(item) for item in payload]
        except (ValueError, TypeError, AttributeError) as exc:
            raise CatalogQueryError(
                f"failed to unmarshal: {exc}",
                dependency_id=dependency_id,
                url=url,
                response_body=response.text,
            ) from exc

        logger.debug("Catalog returned %d records for %s", len(records), dependency_id)
        self._records[dependency_id] = records
        return records

    def get_dependencies_within_constraint(
        self,
        records: List[CatalogRecord],
        constraint: DependencyConstraint,
        name: str,
    ) -> List[DependencyEntry]:
        """Keep the newest ``constraint.patches`` records matching ``constraint``.

        Args:
            records: Records returned by :meth:`fetch_all`.
            constraint: Id, range and patch count to apply.
            name: Manifest name given to every resulting entry.

        Returns:
            Matching entries in ascending version order. All matches are
            returned when fewer than ``patches`` exist.

        Raises:
            ConstraintSyntaxError: The constraint is not a valid range.
            VersionSyntaxError: A record of this id has a non-semver version.
        """
        version_constraint = VersionConstraint.parse(constraint.constraint)

        matches: List[Tuple[Version, CatalogRecord]] = []
        for record in records:
            if record.id != constraint.id:
                continue
            parsed = parse_version(record.version)
            if version_constraint.matches(parsed):
                matches.append((parsed, record))

        matches.sort(key=lambda pair: pair[0])
        if constraint.patches < len(matches):
            matches = matches[len(matches) - constraint.patches:]

        return [record.to_entry(name) for _, record in matches]

    @staticmethod
    def find_dependency_name(dependency_id: str, config: ManifestConfig) -> str:
        """Name of the last manifest dependency with ``dependency_id``, or ``""``."""
        name = ""
        for entry in config.metadata.dependencies:
            if entry.id == dependency_id:
                name = entry.name
        return name
