from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generator, List

import httpx
import pytest

from jamkit.core.catalog import CatalogClient, CatalogRecord
from jamkit.exceptions import (
    CatalogQueryError,
    ConstraintSyntaxError,
    VersionSyntaxError,
)
from jamkit.models.dependency import DependencyConstraint, DependencyEntry
from jamkit.models.manifest import ManifestConfig, ManifestMetadata
from jamkit.utils.http import HTTPClient

API = "https://deps.example.org"


def _record(name: str, version: str, **extra: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": name,
        "version": version,
        "uri": f"https://example.org/{name}-{version}.tgz",
        "sha256": f"{name}-{version}-sha",
        "stacks": [{"id": "io.buildpacks.stacks.jammy"}],
    }
    data.update(extra)
    return data


RECORDS = [
    _record("some-dep", "v1.0.0"),
    _record("some-dep", "1.1.0"),
    _record("some-dep", "1.1.1"),
    _record("some-dep", "1.2.0"),
    _record("some-dep", "2.2.1"),
    _record("some-dep", "2.3.0"),
]


@pytest.fixture
def requests_seen() -> List[httpx.Request]:
    return []


def _client_for(
    handler: Callable[[httpx.Request], httpx.Response],
) -> HTTPClient:
    return HTTPClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def catalog(requests_seen: List[httpx.Request]) -> Generator[CatalogClient, None, None]:
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return httpx.Response(200, json=RECORDS)

    with _client_for(handler) as http:
        yield CatalogClient(http, API)


@pytest.mark.unit
class TestCatalogRecord:
    """Tests for CatalogRecord conversions."""

    def test_from_json_and_to_entry(self) -> None:
        """Test a catalog record converts into a manifest entry."""
        record = CatalogRecord.from_json(
            _record(
                "node",
                "v18.12.1",
                checksum="sha256:abc",
                source="https://example.org/node-src.tgz",
                source_sha256="def",
                cpe="cpe:2.3:a:nodejs:node.js:18.12.1",
                purl="pkg:generic/node@18.12.1",
                licenses=["MIT"],
                deprecation_date="2024-04-30T00:00:00Z",
            )
        )

        entry = record.to_entry("Node Engine")

        assert entry == DependencyEntry(
            id="node",
            name="Node Engine",
            version="18.12.1",
            stacks=["io.buildpacks.stacks.jammy"],
            uri="https://example.org/node-v18.12.1.tgz",
            checksum="sha256:abc",
            sha256="node-v18.12.1-sha",
            source="https://example.org/node-src.tgz",
            source_sha256="def",
            deprecation_date=datetime(2024, 4, 30, tzinfo=timezone.utc),
            licenses=["MIT"],
            cpe="cpe:2.3:a:nodejs:node.js:18.12.1",
            purl="pkg:generic/node@18.12.1",
        )

    def test_missing_fields_default(self) -> None:
        """Test absent optional fields fall back to empty values."""
        record = CatalogRecord.from_json({"name": "node", "version": "1.0.0"})

        assert record.stacks == []
        assert record.to_entry("").deprecation_date is None


@pytest.mark.unit
class TestFetchAll:
    """Tests for CatalogClient.fetch_all."""

    def test_queries_dependency_endpoint(
        self, catalog: CatalogClient, requests_seen: List[httpx.Request]
    ) -> None:
        """Test records are fetched from the dependency endpoint."""
        records = catalog.fetch_all("some-dep")

        assert len(records) == len(RECORDS)
        assert str(requests_seen[0].url) == f"{API}/v1/dependency?name=some-dep"

    def test_results_are_cached_per_id(
        self, catalog: CatalogClient, requests_seen: List[httpx.Request]
    ) -> None:
        """Test each dependency id is requested only once."""
        catalog.fetch_all("some-dep")
        catalog.fetch_all("some-dep")
        catalog.fetch_all("other-dep")

        assert len(requests_seen) == 2

    def test_trailing_slash_in_api_is_ignored(self) -> None:
        """Test a trailing slash on the API URL is not doubled."""
        seen: List[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=[])

        with _client_for(handler) as http:
            CatalogClient(http, API + "/").fetch_all("node")

        assert seen == [f"{API}/v1/dependency?name=node"]

    def test_non_200_status_raises(self) -> None:
        """Test a non-200 response raises CatalogQueryError."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(418, text="teapot")

        with _client_for(handler) as http:
            with pytest.raises(CatalogQueryError) as exc_info:
                CatalogClient(http, API).fetch_all("node")

        url = f"{API}/v1/dependency?name=node"
        assert str(exc_info.value) == f"failed to query url {url} with: status code 418"
        assert exc_info.value.status_code == 418
        assert exc_info.value.dependency_id == "node"

    def test_transport_failure_raises(self) -> None:
        """Test a connection failure raises CatalogQueryError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _client_for(handler) as http:
            with pytest.raises(CatalogQueryError) as exc_info:
                CatalogClient(http, API).fetch_all("node")

        assert str(exc_info.value).startswith(
            f"failed to query url {API}/v1/dependency?name=node: "
        )
        assert "connection refused" in str(exc_info.value)

    @pytest.mark.parametrize(
        "body",
        [b"%%%not json", json.dumps({"name": "node"}).encode(), b"[1, 2]"],
        ids=["malformed", "object", "array-of-scalars"],
    )
    def test_unexpected_payload_raises(self, body: bytes) -> None:
        """Test a body that is not a JSON list raises CatalogQueryError."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        with _client_for(handler) as http:
            with pytest.raises(CatalogQueryError) as exc_info:
                CatalogClient(http, API).fetch_all("node")

        assert str(exc_info.value).startswith("failed to unmarshal: ")


@pytest.mark.unit
class TestGetDependenciesWithinConstraint:
    """Tests for the patch-count policy."""

    def _versions(self, catalog: CatalogClient, constraint: DependencyConstraint) -> List[str]:
        records = catalog.fetch_all("some-dep")
        entries = catalog.get_dependencies_within_constraint(records, constraint, "Some Dep")
        return [entry.version for entry in entries]

    def test_keeps_highest_patches_ascending(self, catalog: CatalogClient) -> None:
        """Test only the newest matching patches are kept, oldest first."""
        versions = self._versions(catalog, DependencyConstraint("some-dep", "1.*", 3))

        assert versions == ["1.1.0", "1.1.1", "1.2.0"]

    def test_returns_all_when_fewer_than_patches(self, catalog: CatalogClient) -> None:
        """Test every match is kept when fewer than patches exist."""
        versions = self._versions(catalog, DependencyConstraint("some-dep", "2.2.*", 3))

        assert versions == ["2.2.1"]

    def test_zero_patches_returns_nothing(self, catalog: CatalogClient) -> None:
        """Test a patch count of zero keeps nothing."""
        versions = self._versions(catalog, DependencyConstraint("some-dep", "*", 0))

        assert versions == []

    def test_strips_v_prefix_and_sets_name(self, catalog: CatalogClient) -> None:
        """Test entries drop the v prefix and take the manifest name."""
        records = catalog.fetch_all("some-dep")

        entries = catalog.get_dependencies_within_constraint(
            records, DependencyConstraint("some-dep", "1.0.*", 1), "Some Dep"
        )

        assert [(e.version, e.name) for e in entries] == [("1.0.0", "Some Dep")]

    def test_ignores_other_ids(self, catalog: CatalogClient) -> None:
        """Test records for other ids are skipped without parsing."""
        records = [CatalogRecord(id="other", version="not-semver")] + catalog.fetch_all(
            "some-dep"
        )

        entries = catalog.get_dependencies_within_constraint(
            records, DependencyConstraint("some-dep", "2.*", 5), ""
        )

        assert [e.version for e in entries] == ["2.2.1", "2.3.0"]

    def test_bad_constraint_raises(self, catalog: CatalogClient) -> None:
        """Test a malformed constraint raises ConstraintSyntaxError."""
        with pytest.raises(ConstraintSyntaxError):
            catalog.get_dependencies_within_constraint(
                [], DependencyConstraint("some-dep", "bogus", 1), ""
            )

    def test_bad_version_raises(self, catalog: CatalogClient) -> None:
        """Test a non-semver record version raises VersionSyntaxError."""
        records = [CatalogRecord(id="some-dep", version="latest")]

        with pytest.raises(VersionSyntaxError):
            catalog.get_dependencies_within_constraint(
                records, DependencyConstraint("some-dep", "*", 1), ""
            )


@pytest.mark.unit
class TestFindDependencyName:
    """Tests for CatalogClient.find_dependency_name."""

    def test_last_matching_name_wins(self) -> None:
        """Test the last manifest entry with the id supplies the name."""
        config = ManifestConfig(
            metadata=ManifestMetadata(
                dependencies=[
                    DependencyEntry(id="node", name="Node"),
                    DependencyEntry(id="python", name="Python"),
                    DependencyEntry(id="node", name="Node Engine"),
                ]
            )
        )

        assert CatalogClient.find_dependency_name("node", config) == "Node Engine"
        assert CatalogClient.find_dependency_name("ruby", config) == ""
