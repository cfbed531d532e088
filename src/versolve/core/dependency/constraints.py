"""Version constraints, dependency edges, and top-level demands.

This module provides the foundational predicate types used to decide which
versions of an artifact are acceptable.

Grammar::

    constraint := [operator] version
    operator   := "=" | ">" | "<" | ">=" | "<=" | "~>" | "~"
    version    := MAJOR [ "." MINOR [ "." PATCH [ "-" PRE ] [ "+" BUILD ] ] ]

Whitespace between operator and version is optional; the operator defaults
to ``=``. ``~>`` and ``~`` are the same "approximately greater than"
operator: the rightmost component written in the constraint may move up,
everything to its left is pinned.

=====================  ======================================================
Constraint             Accepts
=====================  ======================================================
``~> 1``               ``1.0.0 <= v < 2.0.0-0``
``~> 1.2``             ``1.2.0 <= v < 1.3.0-0``
``~> 1.2.3``           ``1.2.3 <= v < 1.3.0-0``
``~> 1.2.3-4``         ``1.2.3-N`` pre-releases with numeric ``N >= 4``
``~> 1.2.3-alpha``     ``1.2.3-X`` pre-releases with ``X >= alpha``
``~> 1.2.3-alpha+5``   ``1.2.3-alpha+N`` with numeric ``N >= 5``
``~> 1.2.3+build``     ``1.2.3+X`` with ``X >= build``
=====================  ======================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from versolve.core.dependency.version import (
    Identifier,
    Version,
    _IDENTIFIERS,
)
from versolve.exceptions import InvalidConstraintFormat

if TYPE_CHECKING:
    from versolve.core.dependency.resolver import Solver

DEFAULT_CONSTRAINT = ">= 0.0.0"

OPERATORS = ("~>", "~", ">=", "<=", "=", ">", "<")

_CONSTRAINT_RE = re.compile(
    r"^\s*(?P<op>~>|~|>=|<=|=|>|<)?\s*"
    r"(?P<ver>(?P<major>\d+)(?:\.(?P<minor>\d+)(?:\.(?P<patch>\d+)"
    rf"(?:-(?P<pre>{_IDENTIFIERS}))?(?:\+(?P<build>{_IDENTIFIERS}))?)?)?)\s*$"
)


class Constraint:
    """An operator paired with a version, used as a predicate over versions.

    Attributes:
        operator: One of ``=``, ``>``, ``<``, ``>=``, ``<=``, ``~>``, ``~``.
        version: The constraint's version, with omitted components as zero.
        major: Major component as written.
        minor: Minor component, or ``None`` when the text omitted it.
        patch: Patch component, or ``None`` when the text omitted it.
    """

    __slots__ = ("_operator", "_version", "_minor", "_patch")

    def __init__(self, constraint: str | None = DEFAULT_CONSTRAINT) -> None:
        if not isinstance(constraint, str):
            raise InvalidConstraintFormat(constraint)
        m = _CONSTRAINT_RE.match(constraint)
        if not m:
            raise InvalidConstraintFormat(constraint)

        minor = m.group("minor")
        patch = m.group("patch")
        self._operator = m.group("op") or "="
        self._minor = int(minor) if minor is not None else None
        self._patch = int(patch) if patch is not None else None
        self._version = Version.from_parts(
            int(m.group("major")),
            self._minor or 0,
            self._patch or 0,
            m.group("pre") or (),
            m.group("build") or (),
        )

    @staticmethod
    def split(constraint: str | None) -> tuple[str, str] | None:
        """Split a constraint string into ``(operator, version_text)``.

        Returns ``None`` when the string does not match the grammar.
        """
        if not isinstance(constraint, str):
            return None
        m = _CONSTRAINT_RE.match(constraint)
        if not m:
            return None
        return m.group("op") or "=", m.group("ver")

    @classmethod
    def coerce(cls, value: Constraint | str | None) -> Constraint:
        if isinstance(value, Constraint):
            return value
        return cls(value)

    @property
    def operator(self) -> str:
        return self._operator

    @property
    def version(self) -> Version:
        return self._version

    @property
    def major(self) -> int:
        return self._version.major

    @property
    def minor(self) -> int | None:
        return self._minor

    @property
    def patch(self) -> int | None:
        return self._patch

    def satisfies(self, candidate: Version | str) -> bool:
        """Return True if *candidate* is accepted by this constraint.

        Raises:
            InvalidVersionFormat: If *candidate* is a malformed version string.
        """
        target = Version.coerce(candidate)
        op = self._operator
        if op == "=":
            return target == self._version
        if op == ">":
            return target > self._version
        if op == "<":
            return target < self._version
        if op == ">=":
            return target >= self._version
        if op == "<=":
            return target <= self._version
        return self._approximately(target)

    def bounds(self) -> tuple[Version, Version | None]:
        """Inclusive lower and exclusive upper bound of an approximate range.

        The upper bound is ``None`` when the range is a pre-release or build
        series rather than an interval; :meth:`satisfies` then checks the
        pinned identifiers directly.
        """
        lower = self._version
        if self._minor is None:
            return lower, Version(lower.major + 1, 0, 0, (0,))
        if self._patch is None or not (lower.pre_release or lower.build):
            return lower, Version(lower.major, lower.minor + 1, 0, (0,))
        return lower, None

    def _approximately(self, target: Version) -> bool:
        lower, upper = self.bounds()
        if target < lower:
            return False
        if upper is not None:
            return target < upper

        if (target.major, target.minor, target.patch) != (
            lower.major, lower.minor, lower.patch
        ):
            return False
        if lower.build:
            if target.pre_release != lower.pre_release:
                return False
            return _within_series(lower.build, target.build)
        return _within_series(lower.pre_release, target.pre_release)

    def _identity(self) -> tuple[str, Version, bool, bool]:
        # "~> 1" and "~> 1.0" share a version but not a range.
        return self._operator, self._version, self._minor is None, self._patch is None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Constraint):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __str__(self) -> str:
        if self._minor is None:
            version = str(self.major)
        elif self._patch is None:
            version = f"{self.major}.{self._minor}"
        else:
            version = str(self._version)
        return f"{self._operator} {version}"

    def __repr__(self) -> str:
        return f"Constraint({str(self)!r})"


def _within_series(
    pinned: tuple[Identifier, ...], candidate: tuple[Identifier, ...]
) -> bool:
    """Check that *candidate* stays in the identifier series started by *pinned*.

    All identifiers but the last of *pinned* must match exactly. A numeric
    last identifier is a counter: the candidate may only continue with
    numeric identifiers from that position on.
    """
    head, last = pinned[:-1], pinned[-1]
    if len(candidate) < len(pinned) or candidate[: len(head)] != head:
        return False
    if isinstance(last, int):
        return all(isinstance(ident, int) for ident in candidate[len(head):])
    return True


ConstraintLike = Union[Constraint, str]


# ---------------------------------------------------------------------------
# Dependency & Demand: named constraints
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Dependency:
    """A directed dependency edge from an artifact to another artifact name.

    Represents: "selecting this artifact *requires* that ``name`` is also
    selected at some version satisfying ``constraint``."

    Attributes:
        name: The name of the required artifact.
        constraint: Version constraint the selected version must satisfy.
    """

    name: str
    constraint: Constraint = field(default_factory=Constraint)

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraint", Constraint.coerce(self.constraint))

    def __str__(self) -> str:
        return f"{self.name} ({self.constraint})"


@dataclass(frozen=True, eq=False)
class Demand:
    """A top-level requirement handed to the solver.

    Two demands are equal when their names and constraint *strings* match;
    the owning solver is not part of the identity.

    Attributes:
        name: The demanded artifact name.
        constraint: Acceptable versions, match-all by default.
        solver: The solver this demand was registered with, if any.
    """

    name: str
    constraint: Constraint = field(default_factory=Constraint)
    solver: Solver | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "constraint", Constraint.coerce(self.constraint))

    def _identity(self) -> tuple[str, str]:
        return self.name, str(self.constraint)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Demand):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __str__(self) -> str:
        return f"{self.name} ({self.constraint})"
