"""versolve CLI - Resolve dependency demands against a versioned artifact universe.

Entry point for the ``versolve`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    resolve    - Resolve demands against a YAML/JSON universe file.
    satisfies  - Check versions against a constraint.
    compare    - Order two versions.

Usage::

    versolve resolve universe.yaml nginx "openssl ~> 1.1"
    versolve resolve universe.yaml nginx --sorted --format json
    versolve -v resolve universe.yaml nginx --trace
    versolve satisfies "~> 1.2" 1.2.0 1.3.0
    versolve compare 1.0.0-alpha 1.0.0
"""

from __future__ import annotations

import logging

import click

from versolve import __version__
from versolve.cli.check_cmd import compare_command, satisfies_command
from versolve.cli.resolve_cmd import resolve_command


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """versolve: Dependency resolution for semantically versioned artifacts.

    Finds one version per required artifact so that every demand and every
    transitive dependency constraint holds, preferring newer versions.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


# Register all subcommands
cli.add_command(resolve_command)
cli.add_command(satisfies_command)
cli.add_command(compare_command)
