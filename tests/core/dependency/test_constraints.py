"""Tests for Constraint parsing and satisfaction.

Validates operator parsing (with and without whitespace, defaulting to
``=``), the comparison operators against pre-release and build versions,
and every shape of the approximate operator (``~>`` / ``~``).
"""

from __future__ import annotations

import pytest

from versolve.core.dependency import Constraint, Demand, Dependency, Version
from versolve.exceptions import InvalidConstraintFormat


class TestConstruction:
    """Tests for parsing constraint strings."""

    def test_operator_and_version(self) -> None:
        c = Constraint(">= 0.0.0")
        assert c.operator == ">="
        assert isinstance(c.version, Version)
        assert str(c.version) == "0.0.0"

    def test_no_space_between_operator_and_version(self) -> None:
        assert Constraint(">=0.0.0").operator == ">="
        assert str(Constraint("~>1.2")) == "~> 1.2"

    def test_operator_defaults_to_equal(self) -> None:
        c = Constraint("1.0.0")
        assert c.operator == "="
        assert str(c) == "= 1.0.0"

    def test_default_constraint_matches_all(self) -> None:
        assert str(Constraint()) == ">= 0.0.0"

    def test_partial_versions_record_missing_components(self) -> None:
        c = Constraint("~> 1.2")
        assert c.major == 1
        assert c.minor == 2
        assert c.patch is None
        assert str(c.version) == "1.2.0"

        major_only = Constraint("~> 3")
        assert major_only.minor is None
        assert major_only.patch is None
        assert str(major_only) == "~> 3"

    def test_full_version_round_trips_through_str(self) -> None:
        assert str(Constraint("< 1.0.0+build.20")) == "< 1.0.0+build.20"
        assert str(Constraint("~> 0.101.5")) == "~> 0.101.5"

    @pytest.mark.parametrize(
        "text",
        ["x23u7089213.*", "", ">>= 1.0.0", "!= 1.0.0", "~> 1.2-alpha", "= 1.0.0 junk", "^1.0.0"],
    )
    def test_malformed_strings_raise(self, text: str) -> None:
        with pytest.raises(InvalidConstraintFormat):
            Constraint(text)

    def test_none_raises(self) -> None:
        with pytest.raises(InvalidConstraintFormat) as info:
            Constraint(None)
        assert info.value.constraint is None

    def test_split(self) -> None:
        assert Constraint.split(">= 0.0.0") == (">=", "0.0.0")
        assert Constraint.split("1.0.0") == ("=", "1.0.0")
        assert Constraint.split("~> 1.2") == ("~>", "1.2")
        assert Constraint.split("x23u7089213.*") is None
        assert Constraint.split(None) is None


class TestEquality:
    """Tests for ``==`` and hashing."""

    def test_same_operator_and_version(self) -> None:
        assert Constraint("= 1.0.0") == Constraint("= 1.0.0")
        assert Constraint("=1.0.0") == Constraint("1.0.0")

    def test_different_version(self) -> None:
        assert Constraint("= 1.0.0") != Constraint("= 9.9.9")

    def test_different_operator(self) -> None:
        assert Constraint("= 1.0.0") != Constraint("> 1.0.0")

    def test_other_types_are_unequal(self) -> None:
        assert Constraint("= 1.0.0") != "chicken"
        assert Constraint("= 1.0.0") != "= 1.0.0"

    def test_hash_matches_equality(self) -> None:
        assert len({Constraint(">= 1.0.0"), Constraint(">=1.0.0"), Constraint("> 1.0.0")}) == 2

    def test_written_components_are_part_of_identity(self) -> None:
        """``~> 1`` and ``~> 1.0`` share a version but accept different ranges."""
        assert Constraint("~> 1") != Constraint("~> 1.0")
        assert Constraint("~> 1.0") != Constraint("~> 1.0.0")
        assert Constraint("~> 1.0") == Constraint("~>1.0")
        assert len({Constraint("~> 1"), Constraint("~> 1.0"), Constraint("~> 1.0.0")}) == 3
        assert Dependency("x", "~> 1") != Dependency("x", "~> 1.0")


class TestComparisonOperators:
    """Tests for =, >, <, >= and <= against pre-release and build versions."""

    def test_accepts_version_objects(self) -> None:
        assert Constraint("= 1.0.0").satisfies(Version.parse("1.0.0"))

    @pytest.mark.parametrize(
        ("constraint", "version", "expected"),
        [
            ("> 1.0.0-alpha", "2.0.0", True),
            ("> 1.0.0-alpha", "1.0.0", True),
            ("> 1.0.0-alpha", "1.0.0-alpha", False),
            ("< 1.0.0+build.20", "0.1.0", True),
            ("< 1.0.0+build.20", "1.0.0", True),
            ("< 1.0.0+build.20", "1.0.0+build.21", False),
            ("= 1.0.0", "0.9.9+build", False),
            ("= 1.0.0", "1.0.0", True),
            ("= 1.0.0", "1.0.1", False),
            ("= 1.0.0", "1.0.0-alpha", False),
            ("= 1.0.0", "1.0.0+build", False),
            (">= 1.0.0", "0.9.9+build", False),
            (">= 1.0.0", "1.0.0-alpha", False),
            (">= 1.0.0", "1.0.0", True),
            (">= 1.0.0", "1.0.1", True),
            (">= 1.0.0", "2.0.0", True),
            ("<= 1.0.0", "0.9.9+build", True),
            ("<= 1.0.0", "1.0.0-alpha", True),
            ("<= 1.0.0", "1.0.0", True),
            ("<= 1.0.0", "1.0.0+build", False),
            ("<= 1.0.0", "1.0.1", False),
            ("<= 1.0.0", "2.0.0", False),
        ],
    )
    def test_satisfies(self, constraint: str, version: str, expected: bool) -> None:
        assert Constraint(constraint).satisfies(version) is expected

    def test_match_all(self) -> None:
        c = Constraint(">= 0.0.0")
        for text in ["0.0.0", "0.0.1-alpha", "1.0.0+b", "999.999.999"]:
            assert c.satisfies(text)

    def test_malformed_candidate_raises(self) -> None:
        from versolve.exceptions import InvalidVersionFormat

        with pytest.raises(InvalidVersionFormat):
            Constraint(">= 1.0.0").satisfies("1.0")


# (constraint suffix, accepted, rejected) for each approximate shape
_APPROXIMATE_CASES = [
    (
        "1.2",
        ["1.2.0", "1.2.3", "1.2.3+build"],
        ["1.1.0", "1.2.0-alpha", "1.3.0-0", "1.3.0", "2.0.0-0", "2.0.0"],
    ),
    (
        "1.2.3",
        ["1.2.3", "1.2.5+build"],
        ["1.1.0", "1.2.3-alpha", "1.2.2", "1.3.0-0", "1.3.0"],
    ),
    (
        "1.2.3-4",
        ["1.2.3-4", "1.2.3-10", "1.2.3-10.5+build.33"],
        ["1.2.3--", "1.2.3-alpha", "1.2.3", "1.2.4", "1.3.0", "1.2.3-3"],
    ),
    (
        "1.2.3-alpha",
        ["1.2.3-alpha", "1.2.3-alpha.0", "1.2.3-beta", "1.2.3-omega", "1.2.3-omega.4"],
        ["1.2.3-4", "1.2.3--", "1.2.3", "1.3.0"],
    ),
    (
        "1.2.3-alpha+5",
        ["1.2.3-alpha+5", "1.2.3-alpha+5.5", "1.2.3-alpha+10"],
        [
            "1.2.3-alpha", "1.2.3-alpha.4", "1.2.3-alpha.4+4", "1.2.3-alpha+-",
            "1.2.3-alpha+build", "1.2.3-beta", "1.2.3", "1.3.0",
        ],
    ),
    (
        "1.2.3-alpha+build",
        ["1.2.3-alpha+build", "1.2.3-alpha+build.5", "1.2.3-alpha+preview", "1.2.3-alpha+zzz"],
        ["1.2.3-alpha", "1.2.3-alpha.4", "1.2.3-alpha.4+4", "1.2.3-alphb", "1.2.3-beta", "1.2.3", "1.3.0"],
    ),
    (
        "1.2.3+5",
        ["1.2.3+5", "1.2.3+99"],
        ["1.2.3", "1.2.3-alpha", "1.2.3+4", "1.2.3+5.build", "1.2.3+-", "1.2.3+build", "1.2.4", "1.3.0"],
    ),
    (
        "1.2.3+build",
        ["1.2.3+build", "1.2.3+build.5", "1.2.3+preview", "1.2.3+zzz"],
        ["1.2.3-alpha", "1.2.3", "1.2.3+5", "1.2.4-0", "1.2.4", "1.2.5", "1.3.0"],
    ),
]


@pytest.mark.parametrize("operator", ["~>", "~"])
class TestApproximateOperator:
    """Tests for the approximate operator in every constraint shape."""

    @pytest.mark.parametrize(("suffix", "accepted", "rejected"), _APPROXIMATE_CASES)
    def test_series(
        self, operator: str, suffix: str, accepted: list[str], rejected: list[str]
    ) -> None:
        c = Constraint(f"{operator} {suffix}")
        for version in accepted:
            assert c.satisfies(version), f"{c} should accept {version}"
        for version in rejected:
            assert not c.satisfies(version), f"{c} should reject {version}"

    def test_major_only(self, operator: str) -> None:
        c = Constraint(f"{operator} 1")
        assert c.satisfies("1.0.0")
        assert c.satisfies("1.9.9")
        assert not c.satisfies("2.0.0-0")
        assert not c.satisfies("0.9.0")

    def test_pinned_pre_release_prefix(self, operator: str) -> None:
        """Only the last pre-release identifier may move."""
        c = Constraint(f"{operator} 1.0.0-rc.1")
        assert c.satisfies("1.0.0-rc.2")
        assert c.satisfies("1.0.0-rc.1.1")
        assert not c.satisfies("1.0.0-rd.1")
        assert not c.satisfies("1.0.0-rc.x")

    def test_bounds(self, operator: str) -> None:
        lower, upper = Constraint(f"{operator} 1.2.3").bounds()
        assert str(lower) == "1.2.3"
        assert str(upper) == "1.3.0-0"
        lower, upper = Constraint(f"{operator} 1").bounds()
        assert str(upper) == "2.0.0-0"
        assert Constraint(f"{operator} 1.2.3-alpha").bounds()[1] is None


class TestNamedConstraints:
    """Tests for Dependency and Demand."""

    def test_dependency_coerces_strings(self) -> None:
        dep = Dependency("b", ">= 2.0.0")
        assert dep.constraint == Constraint(">= 2.0.0")
        assert str(dep) == "b (>= 2.0.0)"

    def test_dependency_default_constraint(self) -> None:
        assert str(Dependency("b").constraint) == ">= 0.0.0"

    def test_dependency_rejects_bad_constraint(self) -> None:
        with pytest.raises(InvalidConstraintFormat):
            Dependency("b", "nope")

    def test_demand_equality_uses_name_and_constraint_string(self) -> None:
        assert Demand("nginx", "= 1.0.0") == Demand("nginx", "=1.0.0", solver=object())  # type: ignore[arg-type]
        assert Demand("nginx", "~> 1.2") != Demand("nginx", "~> 1.2.0")
        assert Demand("nginx") != Demand("ntp")

    def test_demand_hash(self) -> None:
        assert len({Demand("ntp"), Demand("ntp", ">= 0.0.0")}) == 1
