"""Command-line interface for versolve."""
