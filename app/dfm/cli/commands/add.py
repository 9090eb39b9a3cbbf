"""Add command implementation.

Imports files from the target directory into a repository.
"""

from typing import Annotated

import typer

from dfm.cli.session import build_engine, get_options, make_error_handler, open_config, run_command
from dfm.core.sync import SyncResult


def add(
    ctx: typer.Context,
    files: Annotated[
        list[str],
        typer.Argument(help="Files or directories in the target to import."),
    ],
    repo: Annotated[
        str | None,
        typer.Option(
            "--repo",
            "-r",
            help="Repo to add the files to (default: the only active repo).",
        ),
    ] = None,
    copy: Annotated[
        bool,
        typer.Option(
            "--copy",
            "-c",
            help="Copy the files into the repo instead of moving and linking them.",
        ),
    ] = False,
) -> None:
    """Move files into a repo and link them back into the target.

    Directories are imported recursively. Files inside the dfm directory
    and symlinks cannot be added. Use --force to overwrite files that
    already exist in the repo.

    Examples:
        dfm add ~/.bashrc
        dfm add --repo work ~/.config/git
        dfm add --copy ~/.profile
    """
    config = open_config(ctx)
    engine, display = build_engine(ctx, config)
    handler = make_error_handler(
        engine.fs.remove,
        force=bool(get_options(ctx).get("force")),
        dry_run=engine.dry_run,
    )

    def operation() -> SyncResult:
        paths = engine.resolve_inputs(files)
        return engine.add_files(
            paths,
            repo if repo is not None else engine.default_repo(),
            link=not copy,
            handler=handler,
        )

    run_command(engine, display, operation)
