"""Rich output formatting helpers for the versolve CLI.

Provides consistent terminal output for resolution results, resolution
failures, and constraint checks.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from versolve.exceptions import ResolutionError, SearchAborted

console = Console()


def print_solution(solution: dict[str, str] | list[tuple[str, str]]) -> None:
    """Print a resolved solution as a table.

    Args:
        solution: ``{name: version}`` or an install-ordered list of pairs.
    """
    console.print(
        Panel("[bold green]Resolution successful[/bold green]",
              title="Dependency Resolution")
    )
    pairs = list(solution.items()) if isinstance(solution, dict) else list(solution)
    if not pairs:
        console.print("[dim]Nothing to resolve.[/dim]")
        return

    ordered = not isinstance(solution, dict)
    table = Table(show_header=True)
    if ordered:
        table.add_column("#", justify="right", style="dim")
    table.add_column("Artifact", style="bold")
    table.add_column("Version")
    for index, (name, version) in enumerate(pairs, start=1):
        if ordered:
            table.add_row(str(index), name, version)
        else:
            table.add_row(name, version)
    console.print(table)


def print_failure(error: ResolutionError) -> None:
    """Print why a resolution produced no solution.

    Args:
        error: The ``NoSolutionError``, ``SearchAborted`` or
            ``UnsortableSolutionError`` raised by the solver.
    """
    title = "Resolution aborted" if isinstance(error, SearchAborted) else "Resolution failed"
    console.print(Panel(f"[bold red]{title}[/bold red]", title="Dependency Resolution"))
    console.print(f"  [red]- {error}[/red]")


def print_constraint_check(constraint: str, results: list[tuple[str, bool]]) -> None:
    """Print which versions satisfy a constraint.

    Args:
        constraint: The constraint string as given.
        results: ``(version, satisfied)`` pairs in input order.
    """
    table = Table(title=f"Constraint {constraint}", show_header=True, header_style="bold")
    table.add_column("Version", style="bold")
    table.add_column("Satisfies", justify="center")
    for version, ok in results:
        status = Text("yes", style="bold green") if ok else Text("no", style="red")
        table.add_row(version, status)
    console.print(table)


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout.

    Args:
        data: Any JSON-serializable data structure.
    """
    console.print_json(json.dumps(data, default=str))
