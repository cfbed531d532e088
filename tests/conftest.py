"""Shared fixtures for versolve tests."""

import pytest

from versolve.core.dependency import Graph


@pytest.fixture
def web_graph() -> Graph:
    """A small universe: nginx needs openssl ~> 1.1, openssl has three releases."""
    graph = Graph()
    graph.artifact("nginx", "1.0.0").depends("openssl", "~> 1.1")
    for version in ["1.1.0", "1.1.1", "3.0.0"]:
        graph.artifact("openssl", version)
    return graph
