"""Init command implementation.

Creates or updates the ``.dfm.toml`` file of a dfm directory.
"""

import os
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from dfm.cli.session import EXIT_ABORTED, build_engine, get_options
from dfm.core.config import Config, ConfigError, load_config
from dfm.core.paths import get_dfm_dir
from dfm.utils.formatting import console, print_error, print_info, print_success, print_warning


def _parse_repos(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [repo.strip() for repo in value.split(",") if repo.strip()]


def _load_or_create(directory: Path) -> Config:
    if not directory.exists():
        return Config(directory=directory)
    try:
        return load_config(directory)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_ABORTED) from e


def init(
    ctx: typer.Context,
    repos: Annotated[
        str | None,
        typer.Option(
            "--repos",
            "-r",
            help="Comma-separated list of active repos, lowest precedence first.",
        ),
    ] = None,
    target: Annotated[
        Path | None,
        typer.Option(
            "--target",
            "-t",
            help="Directory to sync files into (default: home directory).",
        ),
    ] = None,
) -> None:
    """Initialize a dfm directory.

    Creates the directory if needed and writes its configuration. Running
    it again changes the active repos or the target and keeps the list of
    tracked files.

    Examples:
        dfm init --repos files                # Single repo
        dfm init --repos files,work           # work overrides files
        dfm -d ~/dotfiles init --target /tmp  # Explicit directory and target
    """
    directory = get_dfm_dir(get_options(ctx).get("dfm_dir"))  # type: ignore[arg-type]
    config = _load_or_create(directory)
    config.apply_overrides(repos=_parse_repos(repos), target=target)
    engine, _ = build_engine(ctx, config)

    try:
        engine.init()
    except (ConfigError, OSError) as e:
        print_error(f"Failed to initialize {escape(str(directory))}: {escape(str(e))}")
        raise typer.Exit(code=EXIT_ABORTED) from e

    for repo in config.repos:
        if not engine.is_valid_repo(repo):
            print_warning(f"repo {escape(repo)} does not exist in {escape(str(directory))}")

    console.print(f"  Directory: [muted]{escape(str(directory))}[/muted]", soft_wrap=True)
    console.print(f"  Target: [muted]{escape(str(config.target))}[/muted]", soft_wrap=True)
    console.print(f"  Repos: [repo]{escape(', '.join(config.repos) or '-')}[/repo]", soft_wrap=True)

    if engine.dry_run:
        print_info("[DRY-RUN] No files were written.")
        return
    print_success(f"Initialized {escape(os.fspath(config.path))}")
