"""
Buildpack manifest (``buildpack.toml``) model for jamkit.

The manifest is decoded once at the start of a pipeline run, mutated in
memory (dependencies filtered or rewritten, version stamped) and encoded
again at the end. Keys jamkit does not model are carried through
unchanged so that re-encoding never loses author data.

Example::

    api = "0.7"

    [buildpack]
      id = "paketo-buildpacks/node-engine"
      name = "Node Engine"

    [metadata]
      include-files = ["bin/build", "bin/detect", "buildpack.toml"]
      pre-package = "./scripts/build.sh"

      [metadata.default-versions]
        node = "18.*"

      [[metadata.dependencies]]
        id = "node"
        version = "18.12.1"
        stacks = ["io.buildpacks.stacks.bionic"]
        uri = "https://example.org/node-18.12.1.tgz"
        checksum = "sha256:..."

      [[metadata.dependency-constraints]]
        id = "node"
        constraint = "18.*"
        patches = 2

    [[stacks]]
      id = "io.buildpacks.stacks.bionic"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

import tomli as tomllib
import tomli_w

from jamkit.exceptions import ManifestParseError
from jamkit.models.dependency import DependencyConstraint, DependencyEntry

_BUILDPACK_KEYS = (
    "id",
    "name",
    "version",
    "homepage",
    "description",
    "keywords",
    "licenses",
    "sbom-formats",
    "clear-env",
)
_METADATA_KEYS = (
    "include-files",
    "pre-package",
    "default-versions",
    "dependencies",
    "dependency-constraints",
)
_DEPRECATED_METADATA_KEYS = ("include_files", "pre_package")


@dataclass
class BuildpackInfo:
    """The ``[buildpack]`` table.

    Keys jamkit does not model are kept in :attr:`extra`.
    """

    id: str = ""
    name: str = ""
    version: str = ""
    homepage: str = ""
    description: str = ""
    keywords: List[str] = field(default_factory=list)
    licenses: List[Dict[str, Any]] = field(default_factory=list)
    sbom_formats: List[str] = field(default_factory=list)
    clear_env: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildpackInfo":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            version=str(data.get("version", "")),
            homepage=str(data.get("homepage", "")),
            description=str(data.get("description", "")),
            keywords=[str(k) for k in data.get("keywords", []) or []],
            licenses=[dict(lic) for lic in data.get("licenses", []) or []],
            sbom_formats=[str(f) for f in data.get("sbom-formats", []) or []],
            clear_env=bool(data.get("clear-env", False)),
            extra={k: v for k, v in data.items() if k not in _BUILDPACK_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "homepage": self.homepage,
            "description": self.description,
            "keywords": list(self.keywords),
            "licenses": [dict(lic) for lic in self.licenses],
            "sbom-formats": list(self.sbom_formats),
            "clear-env": self.clear_env,
        }
        table: Dict[str, Any] = {k: v for k, v in values.items() if v}
        table.update(self.extra)
        return table


@dataclass
class ManifestMetadata:
    """The ``[metadata]`` table."""

    include_files: List[str] = field(default_factory=list)
    pre_package: str = ""
    default_versions: Dict[str, str] = field(default_factory=dict)
    dependencies: List[DependencyEntry] = field(default_factory=list)
    dependency_constraints: List[DependencyConstraint] = field(default_factory=list)
    unstructured: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ManifestMetadata":
        return cls(
            include_files=[str(f) for f in data.get("include-files", []) or []],
            pre_package=str(data.get("pre-package", "")),
            default_versions={
                str(k): str(v) for k, v in (data.get("default-versions") or {}).items()
            },
            dependencies=[
                DependencyEntry.from_dict(d) for d in data.get("dependencies", []) or []
            ],
            dependency_constraints=[
                DependencyConstraint.from_dict(c)
                for c in data.get("dependency-constraints", []) or []
            ],
            unstructured={k: v for k, v in data.items() if k not in _METADATA_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        table: Dict[str, Any] = dict(self.unstructured)
        if self.include_files:
            table["include-files"] = list(self.include_files)
        if self.pre_package:
            table["pre-package"] = self.pre_package
        if self.default_versions:
            table["default-versions"] = dict(self.default_versions)
        if self.dependencies:
            table["dependencies"] = [d.to_dict() for d in self.dependencies]
        if self.dependency_constraints:
            table["dependency-constraints"] = [
                c.to_dict() for c in self.dependency_constraints
            ]
        return table


@dataclass
class ManifestConfig:
    """A decoded ``buildpack.toml``.

    Attributes:
        api: Buildpack API version.
        buildpack: The ``[buildpack]`` table.
        stacks: ``[[stacks]]`` tables, each with an ``id`` and optional
            ``mixins``.
        metadata: The ``[metadata]`` table.
        order: ``[[order]]`` tables of meta-buildpacks, kept verbatim.
        extra: Other top-level tables, kept verbatim.
    """

    api: str = ""
    buildpack: BuildpackInfo = field(default_factory=BuildpackInfo)
    stacks: List[Dict[str, Any]] = field(default_factory=list)
    metadata: ManifestMetadata = field(default_factory=ManifestMetadata)
    order: List[Dict[str, Any]] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def stack_ids(self) -> List[str]:
        return [str(stack.get("id", "")) for stack in self.stacks]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ManifestConfig":
        known = ("api", "buildpack", "stacks", "metadata", "order")
        return cls(
            api=str(data.get("api", "")),
            buildpack=BuildpackInfo.from_dict(data.get("buildpack") or {}),
            stacks=[dict(s) for s in data.get("stacks", []) or []],
            metadata=ManifestMetadata.from_dict(data.get("metadata") or {}),
            order=[dict(o) for o in data.get("order", []) or []],
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {}
        if self.api:
            document["api"] = self.api
        document["buildpack"] = self.buildpack.to_dict()
        metadata = self.metadata.to_dict()
        if metadata:
            document["metadata"] = metadata
        if self.stacks:
            document["stacks"] = [dict(s) for s in self.stacks]
        if self.order:
            document["order"] = [dict(o) for o in self.order]
        document.update(self.extra)
        return document


def _check_deprecated_fields(data: Mapping[str, Any]) -> None:
    metadata = data.get("metadata") or {}
    if any(key in metadata for key in _DEPRECATED_METADATA_KEYS):
        raise ManifestParseError(
            "the include_files and pre_package fields in the metadata section of "
            "the buildpack.toml have been changed to include-files and pre-package "
            "respectively: please update the buildpack.toml to reflect this change"
        )


def decode_manifest(content: str) -> ManifestConfig:
    """Decode ``buildpack.toml`` text into a :class:`ManifestConfig`.

    Raises:
        ManifestParseError: The text is not valid TOML, uses the
            deprecated ``include_files``/``pre_package`` spelling, or has
            values of the wrong shape.
    """
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestParseError(f"invalid TOML: {exc}") from exc

    _check_deprecated_fields(data)

    try:
        config = ManifestConfig.from_dict(data)
    except (TypeError, ValueError, AttributeError) as exc:
        raise ManifestParseError(f"unexpected manifest structure: {exc}") from exc

    for constraint in config.metadata.dependency_constraints:
        if constraint.patches < 0:
            raise ManifestParseError(
                f"dependency constraint for {constraint.id!r} has negative patches: "
                f"{constraint.patches}"
            )

    return config


def encode_manifest(config: ManifestConfig) -> str:
    """Encode a :class:`ManifestConfig` back into TOML text."""
    return tomli_w.dumps(config.to_dict())
