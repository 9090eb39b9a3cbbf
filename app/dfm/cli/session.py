"""Shared plumbing for CLI commands.

Builds the engine from the global options, supplies the interactive error
handler and maps command results to exit codes:

- 0: every file succeeded
- 1: the command could not run or a pass was aborted
- 2: the pass completed but some files failed
"""

import logging
from collections.abc import Callable

import typer
from rich.markup import escape

from dfm.cli.display import ConsoleLogger
from dfm.core.config import Config, ConfigError, load_config
from dfm.core.engine import Dfm, EngineOptions
from dfm.core.errors import RETRY, DfmError, FileError, RetryDirective
from dfm.core.paths import get_dfm_dir
from dfm.core.policy import ErrorHandler
from dfm.core.sync import SyncResult
from dfm.utils.formatting import print_error, print_info

logger = logging.getLogger(__name__)

EXIT_ABORTED = 1
EXIT_FILES_FAILED = 2


def get_options(ctx: typer.Context) -> dict[str, object]:
    """Return the global options stored by the main callback."""
    ctx.ensure_object(dict)
    return ctx.obj


def open_config(ctx: typer.Context) -> Config:
    """Load the configuration of the selected dfm directory.

    Raises:
        typer.Exit: If the configuration cannot be loaded.
    """
    options = get_options(ctx)
    directory = get_dfm_dir(options.get("dfm_dir"))  # type: ignore[arg-type]
    try:
        return load_config(directory)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_ABORTED) from e


def build_engine(ctx: typer.Context, config: Config) -> tuple[Dfm, ConsoleLogger]:
    """Create the engine and its console logger from the global options."""
    options = get_options(ctx)
    display = ConsoleLogger(config, verbose=bool(options.get("verbose")))
    engine = Dfm(
        config,
        options=EngineOptions(dry_run=bool(options.get("dry_run"))),
        log=display,
    )
    return engine, display


def make_error_handler(
    remove: Callable[[str], None],
    *,
    force: bool,
    dry_run: bool = False,
) -> ErrorHandler:
    """Build the error handler used by every command.

    With ``force``, a failure caused by an existing file removes the
    conflicting path and retries the operation once for that file. Every
    other failure is accepted: the file is skipped and the console logger
    reports it.

    Args:
        remove: Callable removing a path, normally ``Filesystem.remove``.
        force: Overwrite conflicting files.
        dry_run: Never remove anything.

    Returns:
        ErrorHandler for the policy engine.
    """
    retried: set[str] = set()

    def handle(error: FileError) -> RetryDirective | None:
        if not force or dry_run or error.path is None:
            return None
        if not isinstance(error.cause, FileExistsError) or error.filename in retried:
            return None

        retried.add(error.filename)
        try:
            remove(error.path)
        except OSError as e:
            print_error(f"could not overwrite {escape(error.path)}: {escape(e.strerror or str(e))}")
            return None
        logger.debug("Removed %s to overwrite it", error.path)
        return RETRY

    return handle


def run_command(engine: Dfm, display: ConsoleLogger, operation: Callable[[], object]) -> object:
    """Run an engine operation, save the manifest and set the exit code.

    Args:
        engine: Engine the operation belongs to.
        display: Console logger passed to the engine.
        operation: Zero-argument callable running the engine operation.

    Returns:
        Whatever the operation returned.

    Raises:
        typer.Exit: With a non-zero code on abort or file failures.
    """
    try:
        result = operation()
    except DfmError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_ABORTED) from e
    except OSError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_ABORTED) from e

    try:
        engine.save()
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=EXIT_ABORTED) from e

    if display.verbose:
        display.print_summary()
    if engine.dry_run:
        print_info("[DRY-RUN] No files were changed.")

    if isinstance(result, SyncResult) and result.aborted:
        print_error(escape(str(result.error)))
        raise typer.Exit(code=EXIT_ABORTED)
    if display.failed:
        raise typer.Exit(code=EXIT_FILES_FAILED)
    return result
