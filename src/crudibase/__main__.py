"""
CLI entry point for running crudibase as a module.

Usage: python -m crudibase [OPTIONS] COMMAND [ARGS]...
"""

from crudibase.cli.main import cli

if __name__ == "__main__":
    cli()
