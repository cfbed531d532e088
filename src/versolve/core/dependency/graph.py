"""Artifact universe: artifacts, their dependency edges, and the graph index.

An artifact is a named package at one specific version. Many artifacts share
a name; the pair (name, version) identifies exactly one of them. The graph
owns every artifact and answers the two questions the solver asks: which
versions of a name exist, and what does a given (name, version) depend on.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Iterable, Iterator, Mapping, Union

from versolve.core.dependency.constraints import (
    DEFAULT_CONSTRAINT,
    Constraint,
    ConstraintLike,
    Dependency,
)
from versolve.core.dependency.version import Version

DependencySpec = Union[
    Mapping[str, ConstraintLike],
    Iterable[Union[str, tuple[str, ConstraintLike], Dependency]],
]


# ---------------------------------------------------------------------------
# Artifact: A vertex in the graph
# ---------------------------------------------------------------------------


class Artifact:
    """A specific artifact version and its outgoing dependency edges.

    Dependencies are keyed by name: declaring a dependency on a name that is
    already present replaces the earlier constraint.
    """

    def __init__(self, graph: Graph | None, name: str, version: Version | str) -> None:
        self.graph = graph
        self.name = name
        self.version = Version.coerce(version)
        self._dependencies: dict[str, Dependency] = {}

    @property
    def dependencies(self) -> list[Dependency]:
        """Dependency edges in declaration order."""
        return list(self._dependencies.values())

    def depends(self, name: str, constraint: ConstraintLike = DEFAULT_CONSTRAINT) -> Artifact:
        """Declare (or replace) a dependency on *name*. Returns ``self``."""
        if name is None:
            raise ValueError("A dependency name must be specified.")
        self._dependencies[name] = Dependency(name, Constraint.coerce(constraint))
        return self

    declare_dependency = depends

    def get_dependency(self, name: str) -> Dependency | None:
        return self._dependencies.get(name)

    def has_dependency(self, name: str) -> bool:
        return name in self._dependencies

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Artifact):
            return NotImplemented
        return self.name == other.name and self.version == other.version

    def __hash__(self) -> int:
        return hash((self.name, self.version))

    def __lt__(self, other: Artifact) -> bool:
        if not isinstance(other, Artifact):
            return NotImplemented
        return self.version < other.version

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"

    def __repr__(self) -> str:
        return f"Artifact({self.name!r}, {str(self.version)!r})"


# ---------------------------------------------------------------------------
# Graph: The artifact universe
# ---------------------------------------------------------------------------


class Graph:
    """Registry of all known artifacts, indexed by name.

    The graph supports:
    - Registering artifacts (multiple versions per name) and their dependencies
    - Querying available versions of a name, optionally under a constraint
    - Looking up a single (name, version) artifact
    - Name-level cycle detection via DFS colouring

    The solver only reads from the graph, so one graph may be shared by many
    resolutions. Building the graph is NOT thread-safe.
    """

    def __init__(self) -> None:
        self._artifacts: dict[tuple[str, Version], Artifact] = {}
        self._versions: dict[str, list[Version]] = defaultdict(list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> Graph:
        """Build a graph from ``{name: {version: {dependency: constraint}}}``.

        A version may map to ``None`` (no dependencies), a mapping of
        dependency names to constraints, or a list of names and
        ``[name, constraint]`` pairs.

        Raises:
            InvalidVersionFormat: For a malformed version key.
            InvalidConstraintFormat: For a malformed dependency constraint.
            ValueError: If the document does not have the expected shape.
        """
        if not isinstance(data, Mapping):
            raise ValueError("Artifact document must be a mapping of names to versions")
        graph = cls()
        for name, versions in data.items():
            if not isinstance(versions, Mapping):
                raise ValueError(f"Versions of {name!r} must be a mapping")
            for version, deps in versions.items():
                graph.artifact(str(name), str(version), deps or None)
        return graph

    @property
    def artifacts(self) -> list[Artifact]:
        """All artifacts in registration order."""
        return list(self._artifacts.values())

    @property
    def names(self) -> list[str]:
        """All artifact names in first-registration order."""
        return list(self._versions)

    def artifact(
        self,
        name: str,
        version: Version | str,
        dependencies: DependencySpec | None = None,
    ) -> Artifact:
        """Register an artifact, or return the one already registered.

        Dependencies given here are added to (or replace same-named entries
        of) the artifact's existing dependencies.

        Args:
            name: Artifact name.
            version: Version string or ``Version``.
            dependencies: Optional mapping ``{name: constraint}`` or iterable
                of names, ``(name, constraint)`` pairs, or ``Dependency``.

        Returns:
            The registered ``Artifact``.
        """
        if name is None:
            raise ValueError("An artifact name must be specified.")
        ver = Version.coerce(version)
        key = (name, ver)
        found = self._artifacts.get(key)
        if found is None:
            found = Artifact(self, name, ver)
            self._artifacts[key] = found
            self._versions[name].append(ver)
        for dep_name, constraint in _iter_dependency_spec(dependencies):
            found.depends(dep_name, constraint)
        return found

    def declare_artifact(self, name: str, version: Version | str) -> Artifact:
        """Builder-style alias for :meth:`artifact` without dependencies."""
        return self.artifact(name, version)

    def get_artifact(self, name: str, version: Version | str) -> Artifact | None:
        """Return the artifact for (name, version), or None if not registered."""
        return self._artifacts.get((name, Version.coerce(version)))

    def has_artifact(self, name: str, version: Version | str) -> bool:
        return self.get_artifact(name, version) is not None

    def versions(
        self, name: str, constraint: ConstraintLike | None = None
    ) -> list[Version]:
        """Return the known versions of *name*, sorted descending (newest first).

        Args:
            name: Artifact name to look up.
            constraint: If given, only versions satisfying it are returned.

        Returns:
            List of ``Version`` objects. Empty if the name is unknown.
        """
        if name not in self._versions:
            return []
        found = sorted(self._versions[name], reverse=True)
        if constraint is None:
            return found
        predicate = Constraint.coerce(constraint)
        return [v for v in found if predicate.satisfies(v)]

    def dependencies(self, name: str, version: Version | str) -> list[Dependency]:
        """Dependency edges of (name, version). Empty if not registered."""
        found = self.get_artifact(name, version)
        return found.dependencies if found else []

    def detect_cycles(self, names: Iterable[str] | None = None) -> list[list[str]]:
        """Detect circular dependencies between artifact names using DFS.

        Versions are collapsed to their names. When *names* is given only
        edges whose both ends are in that set are considered.

        Returns:
            A list of cycles, where each cycle is a list of names forming the
            cycle path (e.g., ["a", "b", "a"]). Empty if no cycles.
        """
        allowed = set(names) if names is not None else None
        adj: dict[str, list[str]] = defaultdict(list)
        all_names: list[str] = []

        for (name, _), found in self._artifacts.items():
            if allowed is not None and name not in allowed:
                continue
            if name not in all_names:
                all_names.append(name)
            for dep in found.dependencies:
                if allowed is not None and dep.name not in allowed:
                    continue
                if dep.name not in adj[name]:
                    adj[name].append(dep.name)
                if dep.name not in all_names:
                    all_names.append(dep.name)

        _, cycles = _colour_dfs(all_names, lambda n: adj.get(n, []))
        return cycles

    def dependency_order(
        self, selection: Mapping[str, Version | str]
    ) -> tuple[list[str], list[list[str]]]:
        """Order selected names so that each follows the names it depends on.

        Only edges of the selected (name, version) artifacts that point at
        other selected names count; self-dependencies are ignored.

        Returns:
            ``(order, cycles)``. The order is only meaningful when *cycles*
            is empty.
        """
        def _edges(name: str) -> list[str]:
            return [
                d.name for d in self.dependencies(name, selection[name])
                if d.name != name and d.name in selection
            ]

        return _colour_dfs(list(selection), _edges)

    def __len__(self) -> int:
        return len(self._artifacts)

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self.artifacts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        if set(self._artifacts) != set(other._artifacts):
            return False
        return all(
            found.dependencies == other._artifacts[key].dependencies
            for key, found in self._artifacts.items()
        )

    __hash__ = None  # type: ignore[assignment]


def _iter_dependency_spec(
    spec: DependencySpec | None,
) -> Iterator[tuple[str, ConstraintLike]]:
    if spec is None:
        return
    if isinstance(spec, Mapping):
        for name, constraint in spec.items():
            yield name, constraint if constraint is not None else DEFAULT_CONSTRAINT
        return
    for item in spec:
        if isinstance(item, Dependency):
            yield item.name, item.constraint
        elif isinstance(item, str):
            yield item, DEFAULT_CONSTRAINT
        else:
            name, constraint = item
            yield name, constraint


def _colour_dfs(
    roots: Iterable[str], edges: Callable[[str], Iterable[str]]
) -> tuple[list[str], list[list[str]]]:
    """Iterative white/gray/black DFS.

    Returns the post-order of every visited node and each back edge as a
    cycle path whose first name is repeated at the end.
    """
    WHITE, GRAY, BLACK = 0, 1, 2
    color: dict[str, int] = {}
    postorder: list[str] = []
    cycles: list[list[str]] = []

    for root in roots:
        if color.get(root, WHITE) != WHITE:
            continue
        color[root] = GRAY
        path: list[tuple[str, Iterator[str]]] = [(root, iter(edges(root)))]
        while path:
            node, children = path[-1]
            for child in children:
                state = color.get(child, WHITE)
                if state == GRAY:
                    names = [n for n, _ in path]
                    cycles.append(names[names.index(child):] + [child])
                elif state == WHITE:
                    color[child] = GRAY
                    path.append((child, iter(edges(child))))
                    break
            else:
                path.pop()
                color[node] = BLACK
                postorder.append(node)
    return postorder, cycles
