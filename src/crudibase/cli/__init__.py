"""
Command-line interface for Crudibase.

Provides Click-based commands for searching, fetching entities, and
managing the search cache.
"""

from crudibase.cli.main import cli

__all__ = ["cli"]
