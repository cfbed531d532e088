"""Semantic versions with a total ordering over pre-release and build metadata.

Precedence follows SemVer 2.0.0 section 11 for the release triple and the
pre-release identifiers. Unlike vanilla SemVer, build metadata is *not*
ignored: when everything else is equal the build identifiers decide, with an
absent build ranking below any present one. Two versions that differ only in
build metadata are therefore distinct and ordered, which the approximate
constraint operator relies on.

Examples of the resulting order::

    1.0.0-alpha < 1.0.0-alpha.1 < 1.0.0-beta < 1.0.0 < 1.0.0+build < 1.0.0+build.1

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Union

from versolve.exceptions import InvalidVersionFormat

Identifier = Union[int, str]

_IDENTIFIER = r"[0-9A-Za-z-]+"
_IDENTIFIERS = rf"{_IDENTIFIER}(?:\.{_IDENTIFIER})*"

_VERSION_RE = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    rf"(?:-(?P<pre>{_IDENTIFIERS}))?"
    rf"(?:\+(?P<build>{_IDENTIFIERS}))?$"
)

_NUMERIC_RE = re.compile(r"^(?:0|[1-9]\d*)$")


def parse_identifiers(text: str | None) -> tuple[Identifier, ...]:
    """Split a dotted identifier list, turning canonical integers into ``int``.

    ``"alpha.1"`` becomes ``("alpha", 1)``. Zero-padded numbers such as
    ``"01"`` are not canonical and stay strings.
    """
    if not text:
        return ()
    return tuple(
        int(part) if _NUMERIC_RE.match(part) else part
        for part in text.split(".")
    )


def format_identifiers(identifiers: tuple[Identifier, ...]) -> str:
    """Inverse of :func:`parse_identifiers`."""
    return ".".join(str(ident) for ident in identifiers)


def _normalise(identifiers) -> tuple[Identifier, ...]:
    # "7" and 7 must compare and hash identically.
    return tuple(
        int(ident) if isinstance(ident, str) and _NUMERIC_RE.match(ident) else ident
        for ident in identifiers
    )


def _identifiers_key(identifiers: tuple[Identifier, ...]) -> tuple:
    # Numeric identifiers sort below alphanumeric ones: encode as (0, int)
    # and (1, str). A proper prefix is then shorter and compares lower.
    return tuple(
        (0, ident) if isinstance(ident, int) else (1, ident)
        for ident in identifiers
    )


@total_ordering
@dataclass(frozen=True)
class Version:
    """An immutable semantic version.

    Attributes:
        major: Major release number.
        minor: Minor release number.
        patch: Patch release number.
        pre_release: Pre-release identifiers, empty for a stable release.
        build: Build identifiers, empty when no build metadata was given.
    """

    major: int
    minor: int
    patch: int
    pre_release: tuple[Identifier, ...] = ()
    build: tuple[Identifier, ...] = ()

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if isinstance(part, bool) or not isinstance(part, int) or part < 0:
                raise InvalidVersionFormat(
                    f"{self.major}.{self.minor}.{self.patch}"
                )
        object.__setattr__(self, "pre_release", _normalise(self.pre_release))
        object.__setattr__(self, "build", _normalise(self.build))

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``MAJOR.MINOR.PATCH[-PRE][+BUILD]``.

        Raises:
            InvalidVersionFormat: If *text* is not a string of that form.
        """
        if not isinstance(text, str):
            raise InvalidVersionFormat(text)
        m = _VERSION_RE.match(text.strip())
        if not m:
            raise InvalidVersionFormat(text)
        return cls(
            int(m.group("major")),
            int(m.group("minor")),
            int(m.group("patch")),
            parse_identifiers(m.group("pre")),
            parse_identifiers(m.group("build")),
        )

    @classmethod
    def from_parts(
        cls,
        major: int,
        minor: int = 0,
        patch: int = 0,
        pre_release: str | tuple[Identifier, ...] = (),
        build: str | tuple[Identifier, ...] = (),
    ) -> Version:
        """Build a version from numbers and (string or tuple) identifier lists."""
        if isinstance(pre_release, str):
            pre_release = parse_identifiers(pre_release)
        if isinstance(build, str):
            build = parse_identifiers(build)
        return cls(major, minor, patch, pre_release, build)

    @classmethod
    def coerce(cls, value: Version | str) -> Version:
        """Return *value* unchanged if it is a ``Version``, else parse it."""
        if isinstance(value, Version):
            return value
        return cls.parse(value)

    @property
    def is_pre_release(self) -> bool:
        return bool(self.pre_release)

    @property
    def pre_release_string(self) -> str | None:
        return format_identifiers(self.pre_release) if self.pre_release else None

    @property
    def build_string(self) -> str | None:
        return format_identifiers(self.build) if self.build else None

    def sort_key(self) -> tuple:
        """Key implementing the total order described in the module docstring."""
        return (
            self.major,
            self.minor,
            self.patch,
            0 if self.pre_release else 1,
            _identifiers_key(self.pre_release),
            _identifiers_key(self.build),
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            text += f"-{format_identifiers(self.pre_release)}"
        if self.build:
            text += f"+{format_identifiers(self.build)}"
        return text

    def __repr__(self) -> str:
        return f"Version({str(self)!r})"
