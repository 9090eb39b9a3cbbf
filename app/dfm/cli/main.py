"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from dfm import __version__
from dfm.cli.commands import add, eject, init, remove, sync
from dfm.core.paths import DFM_DIR_ENV
from dfm.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="dfm",
    help="Manage dotfiles from layered repositories.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dfm version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    dfm_dir: Annotated[
        Path | None,
        typer.Option(
            "--dfm-dir",
            "-d",
            envvar=DFM_DIR_ENV,
            help="Directory containing the repos (default: current directory).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show every file, including up-to-date ones.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would happen without changing anything.",
        ),
    ] = False,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite files that are in the way.",
        ),
    ] = False,
) -> None:
    """dfm - a dotfile manager for lazy people and pair programmers.

    Files from the active repos are linked (or copied) into the target
    directory. Repos listed later override earlier ones.
    """
    configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["dfm_dir"] = dfm_dir
    ctx.obj["verbose"] = verbose
    ctx.obj["dry_run"] = dry_run
    ctx.obj["force"] = force


# Register commands
app.command("init")(init.init)
app.command("link")(sync.link)
app.command("copy")(sync.copy)
app.command("add")(add.add)
app.command("import", hidden=True)(add.add)
app.command("remove")(remove.remove)
app.command("rm", hidden=True)(remove.remove)
app.command("eject")(eject.eject)


if __name__ == "__main__":
    app()
