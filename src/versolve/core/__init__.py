"""Core resolution engine: versions, constraints, graph, and solver."""
