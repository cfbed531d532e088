"""Dependency resolution over a universe of versioned artifacts.

All public names are re-exported here so callers can write
``from versolve.core.dependency import Graph, Solver`` without knowing the
module layout.

Formal Definition
-----------------
A universe is a triple U = (N, V, D) where:

- **N** = set of artifact names (strings)
- **V**: N -> 2^Version = available versions per name
- **D**: N x Version -> (N -> Constraint) = dependency relation, at most
  one constraint per dependency name

A solution for demands R = {(n, c)} is a partial map S: N -> Version with
S(n) in V(n) and c(S(n)) for every demand, and d(S(m)) for every
(m, S(m)) in S and every (m', d) in D(m, S(m)), with m' in dom(S).
"""

from versolve.core.dependency.constraints import (
    DEFAULT_CONSTRAINT,
    Constraint,
    Demand,
    Dependency,
)
from versolve.core.dependency.graph import (
    Artifact,
    Graph,
)
from versolve.core.dependency.resolver import (
    SolveOptions,
    Solver,
    satisfy_all,
    satisfy_best,
    solve,
)
from versolve.core.dependency.tracers import (
    HumanReadableTracer,
    LoggingTracer,
    SilentTracer,
    Tracer,
)
from versolve.core.dependency.version import Version

__all__ = [
    "DEFAULT_CONSTRAINT",
    "Artifact",
    "Constraint",
    "Demand",
    "Dependency",
    "Graph",
    "HumanReadableTracer",
    "LoggingTracer",
    "SilentTracer",
    "SolveOptions",
    "Solver",
    "Tracer",
    "Version",
    "satisfy_all",
    "satisfy_best",
    "solve",
]
