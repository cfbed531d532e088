"""``versolve resolve <graph-file> <demand>...`` - Resolve demands against a universe.

Loads an artifact universe from a YAML or JSON document, resolves the given
demands, and prints the selected version of every required artifact.

Universe document::

    nginx:
      1.0.0:
        openssl: "~> 1.1"
    openssl:
      1.1.0: {}
      1.1.1: {}

Demands are written as ``NAME`` (any version) or ``"NAME CONSTRAINT"``,
e.g. ``"nginx >= 1.0.0"``.

Exit Codes:
    0 - A solution was found.
    1 - No solution exists, or the search was aborted.
    2 - The universe file or a demand could not be parsed.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
import yaml

from versolve.core.dependency import Graph, HumanReadableTracer, SolveOptions, Solver
from versolve.exceptions import ResolutionError, VersolveError

logger = logging.getLogger(__name__)


def load_graph(path: Path) -> Graph:
    """Read a universe document and build a ``Graph`` from it.

    ``.json`` files are read as JSON, everything else as YAML.

    Raises:
        ValueError: If the document cannot be parsed or has the wrong shape.
        VersolveError: If a version or constraint inside it is malformed.
    """
    raw = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data: Any = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Could not parse {path}: {exc}") from exc
    if data is None:
        data = {}
    return Graph.from_dict(data)


def parse_demand(text: str) -> list[str]:
    """Split ``"name constraint"`` into ``[name, constraint]`` (or ``[name]``)."""
    name, _, constraint = text.strip().partition(" ")
    if not name:
        raise ValueError(f"Empty demand: {text!r}")
    constraint = constraint.strip()
    return [name, constraint] if constraint else [name]


@click.command("resolve")
@click.argument("graph_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("demands", nargs=-1, required=True)
@click.option(
    "--sorted", "sort_output",
    is_flag=True,
    help="List artifacts in dependency order (dependencies first).",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Print every search decision to stderr.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--max-steps",
    type=click.IntRange(min=1),
    default=None,
    help="Give up after this many candidate selections.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Give up after this many seconds.",
)
def resolve_command(
    graph_file: str,
    demands: tuple[str, ...],
    sort_output: bool,
    trace: bool,
    output_format: str,
    max_steps: int | None,
    timeout: float | None,
) -> None:
    """Resolve DEMANDS against the artifacts declared in GRAPH_FILE.

    Exit code 0 on success, 1 if no solution exists (or the search was
    aborted), 2 if the input could not be parsed.
    """
    from versolve.cli.output import print_failure, print_json, print_solution

    try:
        graph = load_graph(Path(graph_file))
        solver = Solver(graph, [parse_demand(d) for d in demands])
    except (ValueError, TypeError, VersolveError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    logger.debug("Loaded %d artifact(s) from %s", len(graph), graph_file)
    options = SolveOptions(
        sorted=sort_output,
        tracer=HumanReadableTracer() if trace else None,
        max_steps=max_steps,
        timeout=timeout,
    )

    try:
        solution = solver.resolve(options)
    except ResolutionError as exc:
        if output_format == "json":
            print_json({"success": False, "error": str(exc), "type": type(exc).__name__})
        else:
            print_failure(exc)
        sys.exit(1)

    if output_format == "json":
        if isinstance(solution, dict):
            print_json({"success": True, "solution": solution})
        else:
            print_json({
                "success": True,
                "solution": [{"name": n, "version": v} for n, v in solution],
            })
    else:
        print_solution(solution)
    sys.exit(0)
