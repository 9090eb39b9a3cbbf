"""Link and copy commands.

Both commands place the files of the active repositories into the target
directory, either as symlinks or as independent copies. Without
arguments every file is synced and files that disappeared from the
repositories are removed from the target. With arguments only the given
files or directories are synced.
"""

from typing import Annotated

import typer

from dfm.cli.session import build_engine, get_options, make_error_handler, open_config, run_command
from dfm.core.sync import SyncResult

FilesArgument = Annotated[
    list[str] | None,
    typer.Argument(
        help="Files or directories to sync, in the target or an active repo.",
        show_default=False,
    ),
]


def _sync(ctx: typer.Context, files: list[str] | None, copy: bool) -> None:
    config = open_config(ctx)
    engine, display = build_engine(ctx, config)
    handler = make_error_handler(
        engine.fs.remove,
        force=bool(get_options(ctx).get("force")),
        dry_run=engine.dry_run,
    )

    def operation() -> SyncResult:
        if not files:
            return engine.copy_all(handler) if copy else engine.link_all(handler)
        paths = engine.resolve_inputs(files, allow_repo_paths=True)
        return engine.copy_files(paths, handler) if copy else engine.link_files(paths, handler)

    run_command(engine, display, operation)


def link(ctx: typer.Context, files: FilesArgument = None) -> None:
    """Create symlinks in the target for the files of all active repos.

    When several repos provide the same file, the repo listed last wins.
    Existing files that are not managed by dfm are left alone unless
    --force is given.

    Examples:
        dfm link                 # Link everything
        dfm link .vimrc          # Link one file
        dfm --force link         # Replace conflicting files
        dfm --dry-run link       # Preview without touching anything
    """
    _sync(ctx, files, copy=False)


def copy(ctx: typer.Context, files: FilesArgument = None) -> None:
    """Copy the files of all active repos into the target.

    Copies are independent of the repos. A copy that was modified in the
    target is only overwritten with --force.
    """
    _sync(ctx, files, copy=True)
