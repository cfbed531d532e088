"""``versolve satisfies`` and ``versolve compare`` - Inspect versions and constraints.

Exit Codes (satisfies):
    0 - Every given version satisfies the constraint.
    1 - At least one version does not.
    2 - The constraint or a version could not be parsed.

Exit Codes (compare):
    0 - Both versions parsed; the relation is printed.
    2 - A version could not be parsed.
"""

from __future__ import annotations

import sys

import click

from versolve.core.dependency import Constraint, Version
from versolve.exceptions import VersolveError


@click.command("satisfies")
@click.argument("constraint")
@click.argument("versions", nargs=-1, required=True)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def satisfies_command(constraint: str, versions: tuple[str, ...], output_format: str) -> None:
    """Check which VERSIONS satisfy CONSTRAINT (e.g. "~> 1.2")."""
    from versolve.cli.output import print_constraint_check, print_json

    try:
        predicate = Constraint(constraint)
        results = [(v, predicate.satisfies(v)) for v in versions]
    except VersolveError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if output_format == "json":
        print_json({
            "constraint": str(predicate),
            "results": [{"version": v, "satisfies": ok} for v, ok in results],
        })
    else:
        print_constraint_check(str(predicate), results)
    sys.exit(0 if all(ok for _, ok in results) else 1)


@click.command("compare")
@click.argument("left")
@click.argument("right")
def compare_command(left: str, right: str) -> None:
    """Print how version LEFT orders against version RIGHT."""
    try:
        a, b = Version.parse(left), Version.parse(right)
    except VersolveError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if a < b:
        relation = "<"
    elif a > b:
        relation = ">"
    else:
        relation = "="
    click.echo(f"{a} {relation} {b}")
