"""CLI commands for dfm.

This package contains all subcommand implementations.
"""

from dfm.cli.commands import add, eject, init, remove, sync

__all__ = ["add", "eject", "init", "remove", "sync"]
