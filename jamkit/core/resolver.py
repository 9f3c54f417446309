"""Pick the single best dependency entry for an id, version and stack."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Tuple

from semantic_version import Version

from jamkit.models.dependency import DependencyEntry
from jamkit.models.manifest import ManifestConfig
from jamkit.utils.logger import get_logger
from jamkit.utils.version_utils import parse_version
from jamkit.core.constraint import (
    DefaultExpression,
    VersionConstraint,
    parse_version_expression,
)
from jamkit.exceptions import (
    AmbiguousWildcardStackError,
    UnsatisfiableConstraintError,
)
from jamkit.constants import WILDCARD_STACK

logger = get_logger("resolver")

__all__ = ["resolve_dependency", "sort_candidates"]


def sort_candidates(
    candidates: List[Tuple[Version, DependencyEntry]],
) -> List[DependencyEntry]:
    """Order candidates best first.

    Higher versions come first; at equal versions an entry claiming the
    wildcard stack sorts after one naming concrete stacks only.
    """
    ordered = sorted(
        candidates,
        key=lambda pair: (pair[0], not pair[1].supports_any_stack),
        reverse=True,
    )
    return [entry for _, entry in ordered]


def resolve_dependency(
    config: ManifestConfig,
    dependency_id: str,
    version: str,
    stack: str,
) -> DependencyEntry:
    """Resolve ``version`` for ``dependency_id`` on ``stack``.

    Args:
        config: Manifest holding the dependency catalog and default versions.
        dependency_id: Dependency to resolve.
        version: Requested version expression: a semver range, ``~> x.y``,
            ``"default"`` or ``""``.
        stack: Target stack id.

    Returns:
        The highest matching entry. Entries listing the requested stack win
        ties against entries that only claim ``"*"``.

    Raises:
        ConstraintSyntaxError: ``version`` is not a valid range.
        VersionSyntaxError: A candidate entry's version is not semver.
        UnsatisfiableConstraintError: Nothing matches on ``stack``.
        AmbiguousWildcardStackError: Two matching entries of one version
            both claim ``"*"``.

    Example::

        >>> resolve_dependency(config, "node", "~> 18.12", "io.buildpacks.stacks.jammy")
        DependencyEntry(id='node', version='18.16.0', ...)
    """
    expression = parse_version_expression(
        version, config.metadata.default_versions, dependency_id
    )
    constraint = VersionConstraint.parse(expression.range_expression())
    logger.debug(
        "Resolving %s %r as %s on %s", dependency_id, version, constraint, stack
    )

    candidates: List[Tuple[Version, DependencyEntry]] = []
    supported_versions: List[str] = []

    for entry in config.metadata.dependencies:
        if entry.id != dependency_id:
            continue
        supported_versions.append(entry.version)

        if not (entry.has_stack(stack) or entry.supports_any_stack):
            continue

        parsed = parse_version(entry.version)
        if constraint.matches(parsed):
            candidates.append((parsed, entry))

    if not candidates:
        shown = version
        if isinstance(expression, DefaultExpression):
            shown = expression.range_expression()
        raise UnsatisfiableConstraintError(
            dependency_id, shown, stack, supported_versions
        )

    wildcard_claims: Dict[Version, int] = defaultdict(int)
    for parsed, entry in candidates:
        if entry.supports_any_stack:
            wildcard_claims[parsed] += 1
            if wildcard_claims[parsed] > 1:
                raise AmbiguousWildcardStackError(entry.version)

    best = sort_candidates(candidates)[0]
    logger.debug("Resolved %s to %s", dependency_id, best.version)
    return best
