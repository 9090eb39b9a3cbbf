"""Remove command implementation.

Removes tracked files from the target. The repositories are not touched,
so running ``dfm link`` afterwards restores everything.
"""

from typing import Annotated

import typer

from dfm.cli.session import build_engine, open_config, run_command


def remove(
    ctx: typer.Context,
    files: Annotated[
        list[str] | None,
        typer.Argument(
            help="Tracked files or directories to remove (default: all).",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Remove tracked files from the target.

    Empty directories left behind are removed as well, up to the target
    directory itself.
    """
    config = open_config(ctx)
    engine, display = build_engine(ctx, config)

    def operation() -> set[str]:
        if not files:
            return engine.remove_all()
        return engine.remove_files(engine.resolve_inputs(files, allow_repo_paths=True))

    run_command(engine, display, operation)
