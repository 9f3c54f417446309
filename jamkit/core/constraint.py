"""Version constraint expressions for jamkit.

Two layers live here:

1. **Expression pre-processing.** The version a caller asks for is one of
   three kinds, modelled as separate value types so each rewrite rule can
   be tested on its own:

   * :class:`ExplicitExpression`: a semver range used as written
     (``1.2.*``, ``>= 1.0, < 2``).
   * :class:`DefaultExpression`: ``""`` or ``"default"``, replaced by the
     manifest's ``default-versions`` entry for the dependency, or ``*``.
   * :class:`PessimisticExpression`: the ``~>`` operator. ``~> 1.2.3``
     becomes the tilde range ``~1.2.3`` (patch updates only); ``~> 1.2`` and
     ``~> 1`` become the caret ranges ``^1.2`` and ``^1``.

2. **Range evaluation.** :class:`VersionConstraint` adapts the range
   language used by the dependency catalogs to
   :class:`semantic_version.NpmSpec`:

   * ``||`` separates alternatives; commas and/or spaces join comparators
     that must all hold.
   * Operators ``=``, ``>``, ``<``, ``>=``, ``<=``, ``~`` and ``^`` as npm
     understands them, plus ``=>`` / ``=<`` spellings, a space between an
     operator and its version, and ``!=`` exclusions (evaluated with
     :class:`semantic_version.SimpleSpec`).
   * ``x``, ``X``, ``*`` or a missing component are wildcards, so ``1``,
     ``1.x`` and ``1.*`` all mean ``>=1.0.0 <2.0.0``.
   * ``1.2 - 1.4.5`` is the inclusive range ``>=1.2.0 <=1.4.5``.
   * A pre-release version only satisfies comparators on its own
     ``major.minor.patch``, so ``1.2.*`` never picks ``1.2.3-rc.1``.

Typical usage::

    expression = parse_version_expression("~> 1.2.0")
    constraint = VersionConstraint.parse(expression.range_expression())
    constraint.check("1.2.9")   # True
    constraint.check("1.3.0")   # False
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple, Union

from semantic_version import NpmSpec, SimpleSpec, Version

from jamkit.exceptions import ConstraintSyntaxError
from jamkit.utils.version_utils import parse_version
from jamkit.constants import (
    DEFAULT_VERSION_KEYWORD,
    PESSIMISTIC_OPERATOR,
)

__all__ = [
    "DefaultExpression",
    "ExplicitExpression",
    "PessimisticExpression",
    "VersionConstraint",
    "VersionExpression",
    "parse_version_expression",
]


ANY_VERSION = "*"


# ---------------------------------------------------------------------------
# Expression pre-processing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExplicitExpression:
    """A range expression passed through unchanged."""

    raw: str

    def range_expression(self) -> str:
        return self.raw


@dataclass(frozen=True)
class PessimisticExpression:
    """An expression using the ``~>`` operator."""

    raw: str

    @property
    def base_version(self) -> str:
        return self.raw.replace(PESSIMISTIC_OPERATOR, "").strip()

    def range_expression(self) -> str:
        base = self.base_version
        if len(base.split(".")) == 3:
            return f"~{base}"
        return f"^{base}"


@dataclass(frozen=True)
class DefaultExpression:
    """``""`` or ``"default"``, standing in for the configured default.

    Attributes:
        raw: The expression as requested.
        resolved: The expression the default version stands for.
    """

    raw: str
    resolved: Union[ExplicitExpression, PessimisticExpression]

    def range_expression(self) -> str:
        return self.resolved.range_expression()


VersionExpression = Union[ExplicitExpression, DefaultExpression, PessimisticExpression]


def _classify(text: str) -> Union[ExplicitExpression, PessimisticExpression]:
    if PESSIMISTIC_OPERATOR in text:
        return PessimisticExpression(text)
    return ExplicitExpression(text)


def parse_version_expression(
    raw: str,
    default_versions: Optional[Mapping[str, str]] = None,
    dependency_id: str = "",
) -> VersionExpression:
    """Classify a requested version expression.

    Args:
        raw: Requested version (``""``, ``"default"``, ``"~> 1.2"``, ``"1.*"``).
        default_versions: The manifest's ``default-versions`` table.
        dependency_id: Dependency the expression is for; used to look up
            the default version.

    Returns:
        The tagged expression; call ``range_expression()`` on it to get the
        string handed to :meth:`VersionConstraint.parse`.

    Examples:
        >>> parse_version_expression("default", {"node": "18.*"}, "node").range_expression()
        '18.*'
        >>> parse_version_expression("", {}, "node").range_expression()
        '*'
        >>> parse_version_expression("~> 1.2").range_expression()
        '^1.2'
    """
    if raw in ("", DEFAULT_VERSION_KEYWORD):
        default = (default_versions or {}).get(dependency_id, "")
        return DefaultExpression(raw, _classify(default or ANY_VERSION))
    return _classify(raw)


# ---------------------------------------------------------------------------
# Range evaluation
# ---------------------------------------------------------------------------

_ALTERNATIVE = "||"
_EXCLUSION = "!="
_MATCH_ALL = ">=0.0.0"
_LEGACY_SPELLINGS = (("=>", ">="), ("=<", "<="))

_OPERATOR_GAP = re.compile(r"(!=|>=|<=|>|<|=|~|\^)\s+(?=[vV]?[0-9xX*])")
_OPERATOR_PREFIX = re.compile(r"(!=|>=|<=|>|<|=|~|\^)[vV](?=[0-9xX*])")


@dataclass(frozen=True)
class _Alternative:
    """One ``||`` group: an npm range plus any ``!=`` exclusions."""

    spec: NpmSpec
    exclusions: Tuple[SimpleSpec, ...] = ()

    def matches(self, version: Version) -> bool:
        return self.spec.match(version) and all(
            exclusion.match(version) for exclusion in self.exclusions
        )


def _parse_group(group: str, expression: str) -> _Alternative:
    for legacy, operator in _LEGACY_SPELLINGS:
        group = group.replace(legacy, operator)
    group = _OPERATOR_GAP.sub(r"\1", group)
    group = _OPERATOR_PREFIX.sub(r"\1", group)

    terms = group.replace(",", " ").split()
    if not terms:
        raise ConstraintSyntaxError(
            f"improper constraint: {expression}", constraint=expression
        )

    exclusions = [term for term in terms if term.startswith(_EXCLUSION)]
    remaining = " ".join(term for term in terms if not term.startswith(_EXCLUSION))

    try:
        return _Alternative(
            spec=NpmSpec(remaining or _MATCH_ALL),
            exclusions=tuple(SimpleSpec(term) for term in exclusions),
        )
    except ValueError as exc:
        raise ConstraintSyntaxError(
            f"improper constraint: {expression}", constraint=expression
        ) from exc


@dataclass(frozen=True)
class VersionConstraint:
    """A parsed semver range.

    Attributes:
        expression: The range as written.
        groups: Alternatives; a version satisfies the constraint when at
            least one of them matches it.
    """

    expression: str
    groups: Tuple[_Alternative, ...]

    @classmethod
    def parse(cls, expression: str) -> "VersionConstraint":
        """Parse ``expression``.

        Raises:
            ConstraintSyntaxError: The expression is empty or malformed.
        """
        groups = tuple(
            _parse_group(group, expression) for group in expression.split(_ALTERNATIVE)
        )
        return cls(expression=expression, groups=groups)

    def matches(self, version: Version) -> bool:
        """Check an already parsed version."""
        return any(group.matches(version) for group in self.groups)

    def check(self, version: Union[str, Version]) -> bool:
        """Check a version string (or parsed version) against the range.

        Raises:
            VersionSyntaxError: ``version`` is not a semantic version.
        """
        if not isinstance(version, Version):
            version = parse_version(version)
        return self.matches(version)

    def __str__(self) -> str:
        return self.expression
