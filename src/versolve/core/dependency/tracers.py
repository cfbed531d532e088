"""Observers notified of search decisions during a resolution run.

A tracer is a pure side channel: the solver calls its hooks while searching
and ignores whatever they return. Pass one explicitly to the solver; there is
no process-wide tracer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence

from rich.console import Console

from versolve.core.dependency.version import Version

if TYPE_CHECKING:
    from versolve.core.dependency.constraints import Demand


class Tracer:
    """Base tracer. Every hook is a no-op; override the ones you need."""

    def start(self, demands: Sequence[Demand]) -> None:
        """Called once before the search with the normalised demands."""

    def trying(self, name: str, version: Version) -> None:
        """Called before *version* is tentatively selected for *name*."""

    def accepted(self, name: str, version: Version) -> None:
        """Called when the tentative selection is consistent so far."""

    def rejected(self, name: str, version: Version, reason: str) -> None:
        """Called when the tentative selection conflicts and is discarded."""

    def backtrack(self, name: str, depth: int) -> None:
        """Called when every candidate of *name* failed at stack *depth*."""

    def solution(self, result: dict[str, str]) -> None:
        """Called with the final ``{name: version}`` assignment."""

    def failed(self, error: Exception) -> None:
        """Called with the error that ends an unsuccessful run."""


class SilentTracer(Tracer):
    """Tracer that does nothing. Used when no tracer is given."""


class HumanReadableTracer(Tracer):
    """Print search progress to a ``rich`` console (stderr by default)."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def start(self, demands: Sequence[Demand]) -> None:
        listed = ", ".join(str(d) for d in demands) or "nothing"
        self.console.print(f"[bold]Attempting to find a solution for[/bold] {listed}")

    def trying(self, name: str, version: Version) -> None:
        self.console.print(f"  Trying {name} {version}", style="dim")

    def accepted(self, name: str, version: Version) -> None:
        self.console.print(f"  [green]Selected[/green] {name} {version}")

    def rejected(self, name: str, version: Version, reason: str) -> None:
        self.console.print(f"  [yellow]Rejected[/yellow] {name} {version}: {reason}")

    def backtrack(self, name: str, depth: int) -> None:
        self.console.print(f"  [red]Backtracking[/red] from {name} (depth {depth})")

    def solution(self, result: dict[str, str]) -> None:
        pairs = ", ".join(f"{n} {v}" for n, v in result.items()) or "(empty)"
        self.console.print(f"[bold green]Found solution[/bold green] {pairs}")

    def failed(self, error: Exception) -> None:
        self.console.print(f"[bold red]No solution:[/bold red] {error}")


class LoggingTracer(Tracer):
    """Emit every event as a DEBUG record on a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def _log(self, msg: str, *args: Any) -> None:
        self.logger.debug(msg, *args)

    def start(self, demands: Sequence[Demand]) -> None:
        self._log("start: %s", ", ".join(str(d) for d in demands))

    def trying(self, name: str, version: Version) -> None:
        self._log("trying %s %s", name, version)

    def accepted(self, name: str, version: Version) -> None:
        self._log("accepted %s %s", name, version)

    def rejected(self, name: str, version: Version, reason: str) -> None:
        self._log("rejected %s %s: %s", name, version, reason)

    def backtrack(self, name: str, depth: int) -> None:
        self._log("backtrack %s at depth %d", name, depth)

    def solution(self, result: dict[str, str]) -> None:
        self._log("solution: %s", result)

    def failed(self, error: Exception) -> None:
        self._log("failed: %s", error)
