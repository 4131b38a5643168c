"""CLI package for craftbrew.

This package contains the Typer application and all subcommands.
"""

from craftbrew.cli.main import app

__all__ = ["app"]
