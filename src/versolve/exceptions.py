"""versolve exception hierarchy.

All public exceptions inherit from VersolveError, giving callers a single
base class to catch when they want to handle any versolve-specific failure
without swallowing unrelated errors.

Parse failures also derive from ``ValueError`` so that code written against
plain Python conventions keeps working.
"""

from __future__ import annotations

from typing import Any


class VersolveError(Exception):
    """Base exception for all versolve errors."""


class InvalidVersionFormat(VersolveError, ValueError):
    """Raised when a version string cannot be parsed.

    Attributes:
        version: The offending input, exactly as supplied.
    """

    def __init__(self, version: Any) -> None:
        self.version = version
        super().__init__(f"'{version}' did not contain a valid version string")


class InvalidConstraintFormat(VersolveError, ValueError):
    """Raised when a constraint string is absent or malformed.

    Attributes:
        constraint: The offending input, exactly as supplied.
    """

    def __init__(self, constraint: Any) -> None:
        self.constraint = constraint
        super().__init__(f"'{constraint}' did not contain a valid operator or a valid version string")


class ResolutionError(VersolveError):
    """Base class for outcomes of a resolution run that produced no solution."""


class NoSolutionError(ResolutionError):
    """Raised when the search space is exhausted without a consistent assignment.

    Attributes:
        name: The artifact name that was last in conflict, if known.
        constraints: String forms of the constraints that applied to ``name``.
    """

    def __init__(
        self,
        message: str | None = None,
        name: str | None = None,
        constraints: list[str] | None = None,
    ) -> None:
        self.name = name
        self.constraints = list(constraints or [])
        if message is None:
            if name is None:
                message = "No solution satisfies the given demands"
            else:
                message = (
                    f"No version of {name!r} satisfies "
                    f"{', '.join(self.constraints) or 'the given constraints'}"
                )
        super().__init__(message)


class SearchAborted(ResolutionError):
    """Raised when a step or time limit cut the search short.

    Distinct from :class:`NoSolutionError`: an aborted search has not proven
    that the demands are unsatisfiable.

    Attributes:
        steps: Number of search steps taken before giving up.
        reason: Short description of the limit that was hit.
    """

    def __init__(self, steps: int, reason: str) -> None:
        self.steps = steps
        self.reason = reason
        super().__init__(f"Search aborted after {steps} steps: {reason}")


class UnsortableSolutionError(ResolutionError):
    """Raised when a sorted solution is requested but the selection is cyclic.

    Attributes:
        solution: The unsorted ``{name: version}`` solution that was found.
        cycle: Artifact names forming the cycle, first name repeated at the end.
    """

    def __init__(self, solution: dict[str, str], cycle: list[str]) -> None:
        self.solution = solution
        self.cycle = cycle
        super().__init__(
            "The solution contains a cycle and cannot be topologically sorted: "
            + " -> ".join(cycle)
        )
