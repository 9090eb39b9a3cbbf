"""Eject command implementation.

Stops managing files while leaving a regular copy in the target.
"""

from typing import Annotated

import typer

from dfm.cli.session import build_engine, get_options, make_error_handler, open_config, run_command
from dfm.core.sync import SyncResult


def eject(
    ctx: typer.Context,
    files: Annotated[
        list[str] | None,
        typer.Argument(
            help="Tracked files or directories to eject (default: all).",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Replace links with copies and stop tracking the files.

    Use this before deleting a dfm directory to keep your configuration
    files in place.
    """
    config = open_config(ctx)
    engine, display = build_engine(ctx, config)
    handler = make_error_handler(
        engine.fs.remove,
        force=bool(get_options(ctx).get("force")),
        dry_run=engine.dry_run,
    )

    def operation() -> SyncResult:
        paths = engine.resolve_inputs(files) if files else ["."]
        return engine.eject_files(paths, handler)

    run_command(engine, display, operation)
