"""Backtracking resolution engine.

Given a :class:`~versolve.core.dependency.graph.Graph` and a list of demands,
find one version per reachable artifact name such that every demand and
every dependency of every selected artifact is satisfied.

Search strategy
---------------
Depth-first over names in a stable order (demand order, then the order in
which dependencies are discovered). For each name the candidates are the
graph's versions filtered by every constraint known for that name, tried
newest first, so the first solution found prefers higher versions.

Selecting a version immediately merges the artifact's dependency constraints
into the state. A dependency on an already selected name is only
re-validated against the fixed version, which is what lets dependency cycles
close without recursion. A dependency on an unselected name must still leave
at least one candidate (forward check).

Backtracking uses an explicit stack of choice points instead of recursion.
A choice point that runs out of candidates records a failure keyed by its
name, the set of selected names and the constraints on every pending name,
together with the fixed versions its subtree actually checked. A later state
with the same key that agrees on those versions fails the same way and is
skipped at once, however the earlier choices differ. Optional step and
wall-clock limits abort the search with :class:`SearchAborted`, which is
distinct from :class:`NoSolutionError` (proven unsatisfiable).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Sequence, Union

from versolve.core.dependency.constraints import (
    DEFAULT_CONSTRAINT,
    Constraint,
    ConstraintLike,
    Demand,
)
from versolve.core.dependency.graph import Graph
from versolve.core.dependency.tracers import SilentTracer, Tracer
from versolve.core.dependency.version import Version
from versolve.exceptions import (
    NoSolutionError,
    SearchAborted,
    UnsortableSolutionError,
)

logger = logging.getLogger(__name__)

DemandSpec = Union[str, Demand, Sequence[Any]]
Solution = Union[dict[str, str], list[tuple[str, str]]]


# ---------------------------------------------------------------------------
# SolveOptions: per-run configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SolveOptions:
    """Options for one resolution run.

    Attributes:
        sorted: Return ``[(name, version), ...]`` with every artifact after
            the artifacts it depends on, instead of a ``{name: version}`` dict.
        tracer: Observer for search events. Overrides the solver's tracer.
        max_steps: Abort after this many candidate selections.
        timeout: Abort after this many seconds of wall-clock time.
    """

    sorted: bool = False
    tracer: Tracer | None = None
    max_steps: int | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.max_steps is not None and self.max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {self.max_steps}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")


# ---------------------------------------------------------------------------
# Version filtering
# ---------------------------------------------------------------------------


def _as_constraints(constraints: ConstraintLike | Iterable[ConstraintLike]) -> list[Constraint]:
    if isinstance(constraints, (Constraint, str)):
        return [Constraint.coerce(constraints)]
    return [Constraint.coerce(c) for c in constraints]


def satisfy_all(
    constraints: ConstraintLike | Iterable[ConstraintLike],
    versions: Iterable[Version | str],
) -> list[Version]:
    """Return the unique versions that satisfy every constraint.

    Args:
        constraints: One constraint or a list of them (objects or strings).
        versions: Candidate versions (objects or strings), duplicates allowed.

    Returns:
        Satisfying versions without duplicates, in first-seen order.
    """
    checks = _as_constraints(constraints)
    unique = dict.fromkeys(Version.coerce(v) for v in versions)
    return [v for v in unique if all(c.satisfies(v) for c in checks)]


def satisfy_best(
    constraints: ConstraintLike | Iterable[ConstraintLike],
    versions: Iterable[Version | str],
) -> Version:
    """Return the highest version that satisfies every constraint.

    Raises:
        NoSolutionError: If no version satisfies all constraints.
    """
    checks = _as_constraints(constraints)
    found = satisfy_all(checks, versions)
    if not found:
        raise NoSolutionError(
            f"No version satisfies {', '.join(str(c) for c in checks)}",
            constraints=[str(c) for c in checks],
        )
    return max(found)


# ---------------------------------------------------------------------------
# Search state
# ---------------------------------------------------------------------------


class _State:
    """One node of the search tree. Never mutated once built."""

    __slots__ = ("selected", "constraints", "order")

    def __init__(
        self,
        selected: dict[str, Version],
        constraints: dict[str, tuple[Constraint, ...]],
        order: tuple[str, ...],
    ) -> None:
        self.selected = selected
        self.constraints = constraints
        self.order = order

    def next_unresolved(self) -> str | None:
        for name in self.order:
            if name not in self.selected:
                return name
        return None


class _ChoicePoint:
    """A name being decided, with its untried candidates.

    ``consulted`` collects the names already selected in ``state`` whose
    fixed version was checked anywhere below this point.
    """

    __slots__ = ("name", "state", "key", "remaining", "consulted")

    def __init__(self, name: str, state: _State, key: tuple[str, int, int]) -> None:
        self.name = name
        self.state = state
        self.key = key
        self.remaining: Iterator[Version] = iter(())
        self.consulted: set[str] = set()


class _Run:
    """Bookkeeping local to one ``resolve`` call, discarded afterwards."""

    def __init__(self, graph: Graph, max_steps: int | None, timeout: float | None) -> None:
        self.graph = graph
        self.max_steps = max_steps
        self.timeout = timeout
        self.deadline = time.monotonic() + timeout if timeout is not None else None
        self.steps = 0
        self.failed: dict[tuple[str, int, int], set[frozenset[tuple[str, Version]]]] = {}
        self.conflict: tuple[str, tuple[Constraint, ...]] | None = None
        self._interned: dict[Any, int] = {}
        self._candidates: dict[tuple[str, int], list[Version]] = {}

    def intern(self, value: Any) -> int:
        """Map an equal value to the same small integer for the whole run."""
        return self._interned.setdefault(value, len(self._interned))

    def memo_key(self, name: str, state: _State) -> tuple[str, int, int]:
        # Constraints on selected names are never consulted again, only the
        # fixed versions are; those are matched separately per failure.
        pending = frozenset(
            (n, self.intern(frozenset(cs)))
            for n, cs in state.constraints.items()
            if n not in state.selected
        )
        return name, self.intern(frozenset(state.selected)), self.intern(pending)

    def known_failure(self, key: tuple[str, int, int], state: _State) -> frozenset | None:
        """Return a recorded failure that applies to *state*, if any."""
        for fixed in self.failed.get(key, ()):
            if all(state.selected.get(n) == v for n, v in fixed):
                return fixed
        return None

    def record_failure(self, point: _ChoicePoint) -> None:
        fixed = frozenset((n, point.state.selected[n]) for n in point.consulted)
        self.failed.setdefault(point.key, set()).add(fixed)

    def candidates(self, name: str, constraints: tuple[Constraint, ...]) -> list[Version]:
        """Versions of *name* satisfying *constraints*, newest first."""
        key = (name, self.intern(frozenset(constraints)))
        found = self._candidates.get(key)
        if found is None:
            found = satisfy_all(constraints, self.graph.versions(name))
            self._candidates[key] = found
        return found

    def tick(self) -> None:
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise SearchAborted(self.steps - 1, f"step limit of {self.max_steps} reached")
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise SearchAborted(self.steps - 1, f"timeout of {self.timeout}s reached")


# ---------------------------------------------------------------------------
# Solver
# ---------------------------------------------------------------------------


class Solver:
    """Collects demands against a graph and resolves them.

    Args:
        graph: The artifact universe to resolve against. Never modified.
        demands: Initial demands: names, ``[name, constraint]`` pairs,
            ``Demand`` objects, or any mix of these.
        tracer: Default observer for search events.
    """

    def __init__(
        self,
        graph: Graph,
        demands: Iterable[DemandSpec] | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        self.graph = graph
        self.tracer = tracer
        self._demands: dict[str, Demand] = {}
        for spec in demands or ():
            self._add_spec(spec)

    # -- demands -------------------------------------------------------------

    @staticmethod
    def demand_key(demand: Demand) -> str:
        """Deduplication key: the name and the constraint's string form.

        Constraints that are written differently but accept the same
        versions (``~> 1.2`` and ``~> 1.2.0``) produce distinct keys.
        """
        return f"{demand.name}-{demand.constraint}"

    def demands(self, *args: Any) -> list[Demand] | Demand:
        """List demands, or add one.

        ``demands()`` returns the current demands. ``demands(name)`` adds a
        match-all demand and ``demands(name, constraint)`` a constrained one;
        both return the stored ``Demand``.

        Raises:
            TypeError: If more than two arguments are given.
            ValueError: If the name is ``None``.
            InvalidConstraintFormat: If the constraint is malformed.
        """
        if not args:
            return list(self._demands.values())
        if len(args) > 2:
            raise TypeError(
                f"Unexpected number of arguments. You gave: {len(args)}. Expected: 2 or less."
            )
        name = args[0]
        if name is None:
            raise ValueError(f"A name must be specified. You gave: {list(args)!r}.")
        constraint = args[1] if len(args) == 2 else DEFAULT_CONSTRAINT
        return self.add_demand(Demand(name, Constraint.coerce(constraint), self))

    def add_demand(self, demand: Demand) -> Demand:
        """Add *demand* unless an equal one is present; return the stored one."""
        return self._demands.setdefault(self.demand_key(demand), demand)

    def has_demand(self, demand: Demand) -> bool:
        return self.demand_key(demand) in self._demands

    def _add_spec(self, spec: DemandSpec) -> Demand:
        if isinstance(spec, Demand):
            return self.add_demand(spec)
        if isinstance(spec, str) or spec is None:
            return self.demands(spec)
        if isinstance(spec, (list, tuple)):
            if not spec:
                raise ValueError("A name must be specified. You gave: [].")
            return self.demands(*spec)
        raise TypeError(
            f"A demand must be a name, a [name, constraint] pair or a Demand. You gave: {spec!r}."
        )

    # -- filtering -----------------------------------------------------------

    satisfy_all = staticmethod(satisfy_all)
    satisfy_best = staticmethod(satisfy_best)

    # -- resolution ----------------------------------------------------------

    def resolve(self, options: SolveOptions | None = None, **kwargs: Any) -> Solution:
        """Run the search.

        Args:
            options: A ``SolveOptions``; alternatively pass its fields as
                keyword arguments (``sorted=True``, ``max_steps=...``).

        Returns:
            ``{name: version}`` in discovery order, or with ``sorted=True`` a
            list of ``(name, version)`` pairs, dependencies first.

        Raises:
            NoSolutionError: No assignment satisfies every constraint.
            SearchAborted: A step or time limit was reached first.
            UnsortableSolutionError: ``sorted=True`` and the selected artifacts
                depend on each other cyclically.
        """
        if options is None:
            options = SolveOptions(**kwargs)
        elif kwargs:
            raise TypeError("Pass either a SolveOptions or keyword options, not both")
        tracer = options.tracer or self.tracer or SilentTracer()
        demands = list(self._demands.values())

        logger.debug("Resolving %d demand(s): %s", len(demands), ", ".join(map(str, demands)))
        tracer.start(demands)
        run = _Run(self.graph, options.max_steps, options.timeout)
        try:
            selected = self._search(demands, run, tracer)
        except (NoSolutionError, SearchAborted) as exc:
            logger.debug("Resolution failed after %d step(s): %s", run.steps, exc)
            tracer.failed(exc)
            raise

        result = {name: str(version) for name, version in selected.items()}
        logger.debug("Resolved %d artifact(s) in %d step(s)", len(result), run.steps)
        tracer.solution(result)
        if options.sorted:
            return self._sorted_solution(selected, result)
        return result

    def _search(self, demands: list[Demand], run: _Run, tracer: Tracer) -> dict[str, Version]:
        constraints: dict[str, tuple[Constraint, ...]] = {}
        for demand in demands:
            known = constraints.get(demand.name, ())
            if demand.constraint not in known:
                constraints[demand.name] = known + (demand.constraint,)
        state = _State({}, constraints, tuple(constraints))

        stack: list[_ChoicePoint] = []
        while True:
            name = state.next_unresolved()
            if name is None:
                return {n: state.selected[n] for n in state.order}

            point = _ChoicePoint(name, state, run.memo_key(name, state))
            fixed = run.known_failure(point.key, state)
            if fixed is not None:
                logger.debug("Skipping %s: this state already failed", name)
                point.consulted.update(n for n, _ in fixed)
            else:
                name_constraints = state.constraints.get(name, ())
                candidates = run.candidates(name, name_constraints)
                if not candidates:
                    run.conflict = (name, name_constraints)
                point.remaining = iter(candidates)
            stack.append(point)
            state = self._advance(stack, run, tracer)

    def _advance(self, stack: list[_ChoicePoint], run: _Run, tracer: Tracer) -> _State:
        """Take the next viable candidate, backtracking as far as needed."""
        while stack:
            point = stack[-1]
            for version in point.remaining:
                run.tick()
                tracer.trying(point.name, version)
                state, reason = self._select(point, version, run)
                if state is not None:
                    tracer.accepted(point.name, version)
                    return state
                tracer.rejected(point.name, version, reason)
            stack.pop()
            run.record_failure(point)
            if stack:
                parent = stack[-1]
                parent.consulted.update(n for n in point.consulted if n in parent.state.selected)
            tracer.backtrack(point.name, len(stack))

        if run.conflict is None:
            raise NoSolutionError()
        name, constraints = run.conflict
        raise NoSolutionError(name=name, constraints=[str(c) for c in constraints])

    def _select(
        self, point: _ChoicePoint, version: Version, run: _Run
    ) -> tuple[_State | None, str]:
        """Extend the point's state with its name at *version*, or explain why not."""
        state, name = point.state, point.name
        artifact = self.graph.get_artifact(name, version)
        selected = dict(state.selected)
        selected[name] = version
        constraints = dict(state.constraints)
        order = list(state.order)

        for dep in artifact.dependencies if artifact else ():
            known = constraints.get(dep.name, ())
            if dep.constraint not in known:
                known = known + (dep.constraint,)
                constraints[dep.name] = known
            if dep.name not in order:
                order.append(dep.name)

            fixed = selected.get(dep.name)
            if fixed is not None:
                if dep.name in state.selected:
                    point.consulted.add(dep.name)
                if not dep.constraint.satisfies(fixed):
                    run.conflict = (dep.name, known)
                    return None, f"requires {dep.name} ({dep.constraint}) but {fixed} is selected"
            elif not run.candidates(dep.name, known):
                run.conflict = (dep.name, known)
                return None, (
                    f"no version of {dep.name} satisfies "
                    f"{', '.join(str(c) for c in known)}"
                )

        return _State(selected, constraints, tuple(order)), ""

    def _sorted_solution(
        self, selected: dict[str, Version], result: dict[str, str]
    ) -> list[tuple[str, str]]:
        """Order the solution so each artifact follows its dependencies."""
        order, cycles = self.graph.dependency_order(selected)
        if cycles:
            raise UnsortableSolutionError(result, cycles[0])
        return [(name, result[name]) for name in order]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def solve(
    graph: Graph,
    demands: Iterable[DemandSpec],
    options: SolveOptions | None = None,
    **kwargs: Any,
) -> Solution:
    """Resolve *demands* against *graph* in one call.

    Args:
        graph: The artifact universe.
        demands: Names (match-all), ``[name, constraint]`` pairs, ``Demand``
            objects, or a mix.
        options: Run options; or pass ``sorted``, ``tracer``, ``max_steps``,
            ``timeout`` as keyword arguments.

    Returns:
        ``{name: version}``, or ``[(name, version), ...]`` when sorted.

    Example::

        >>> graph = Graph()
        >>> graph.artifact("nginx", "1.0.0")
        Artifact('nginx', '1.0.0')
        >>> solve(graph, [["nginx", "= 1.0.0"]])
        {'nginx': '1.0.0'}
    """
    return Solver(graph, demands).resolve(options, **kwargs)
