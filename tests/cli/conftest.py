"""Shared fixtures for CLI tests.

Provides universe documents in YAML and JSON, covering a resolvable
universe, one that needs backtracking, an unsatisfiable one, and a cyclic
one.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def universe_yaml(tmp_path: Path) -> Path:
    """A web stack where nginx needs openssl ~> 1.1 and pcre.

    The newest openssl (3.0.0) is outside nginx's range, so 1.1.1 is chosen.
    """
    path = tmp_path / "universe.yaml"
    path.write_text(
        "nginx:\n"
        "  1.0.0:\n"
        "    openssl: \"~> 1.1\"\n"
        "    pcre: \">= 8.0.0\"\n"
        "  0.9.0:\n"
        "    openssl: \"~> 1\"\n"
        "openssl:\n"
        "  1.1.0: {}\n"
        "  1.1.1: {}\n"
        "  3.0.0: {}\n"
        "pcre:\n"
        "  8.45.0: {}\n"
        "  7.0.0: {}\n"
    )
    return path


@pytest.fixture
def universe_json(tmp_path: Path) -> Path:
    """A JSON universe where the newest app needs a missing lib, so the search backtracks."""
    path = tmp_path / "universe.json"
    path.write_text(json.dumps({
        "app": {
            "2.0.0": {"lib": "= 2.0.0"},
            "1.0.0": {"lib": "= 1.0.0"},
        },
        "lib": {"1.0.0": {}},
    }))
    return path


@pytest.fixture
def conflicting_universe(tmp_path: Path) -> Path:
    """Two artifacts that pin incompatible versions of the same library."""
    path = tmp_path / "conflict.yaml"
    path.write_text(
        "a:\n"
        "  1.0.0:\n"
        "    lib: \"= 1.0.0\"\n"
        "b:\n"
        "  1.0.0:\n"
        "    lib: \"= 2.0.0\"\n"
        "lib:\n"
        "  1.0.0: {}\n"
        "  2.0.0: {}\n"
    )
    return path


@pytest.fixture
def cyclic_universe(tmp_path: Path) -> Path:
    """Two artifacts that depend on each other."""
    path = tmp_path / "cycle.yaml"
    path.write_text(
        "a:\n"
        "  1.0.0:\n"
        "    - b\n"
        "b:\n"
        "  1.0.0:\n"
        "    - a\n"
    )
    return path
