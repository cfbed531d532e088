"""versolve: Backtracking dependency resolution over semantically versioned artifacts."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

from versolve.core.dependency import (  # noqa: E402
    Constraint,
    Demand,
    Graph,
    Solver,
    Version,
    solve,
)
from versolve.exceptions import (  # noqa: E402
    InvalidConstraintFormat,
    InvalidVersionFormat,
    NoSolutionError,
    SearchAborted,
    UnsortableSolutionError,
    VersolveError,
)

__all__ = [
    "Constraint",
    "Demand",
    "Graph",
    "InvalidConstraintFormat",
    "InvalidVersionFormat",
    "NoSolutionError",
    "SearchAborted",
    "Solver",
    "UnsortableSolutionError",
    "Version",
    "VersolveError",
    "solve",
]
