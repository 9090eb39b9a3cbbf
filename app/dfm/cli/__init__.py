"""CLI package for dfm.

This package contains the Typer application and all subcommands.
"""

from dfm.cli.main import app

__all__ = ["app"]
