"""Per-file console output.

The ConsoleLogger is the logging sink the CLI hands to the engine. It
prints one line per file and remembers whether any file failed so the
command can exit with the soft-failure status.
"""

from rich.markup import escape

from dfm.core.config import Config
from dfm.core.errors import FileError
from dfm.models.operation import Operation
from dfm.utils.formatting import console, err_console


class ConsoleLogger:
    """Print per-file operations with Rich markup.

    Args:
        config: Configuration used to render target paths.
        verbose: Also print files skipped because they were up to date.

    Attributes:
        failed: True once any file failed and was skipped.
        counts: Number of log entries per operation.
    """

    def __init__(self, config: Config, verbose: bool = False) -> None:
        self.config = config
        self.verbose = verbose
        self.failed = False
        self.counts: dict[Operation, int] = {}

    def __call__(
        self,
        operation: Operation,
        relative: str,
        repo: str,
        reason: FileError | None,
    ) -> None:
        self.counts[operation] = self.counts.get(operation, 0) + 1
        target = escape(self.config.target_path(relative))

        if operation in (Operation.LINKED, Operation.COPIED):
            style = operation.value
            console.print(
                f"[repo]{escape(repo)}[/]/{escape(relative)} [{style}]->[/] {target}",
                soft_wrap=True,
            )
        elif operation == Operation.SKIPPED:
            if reason is None:
                if self.verbose:
                    console.print(
                        f"[skipped]skipping[/] {target}: already up to date",
                        soft_wrap=True,
                    )
                return
            self.failed = True
            err_console.print(
                f"[warning]skipping[/] {target}: {escape(reason.message)}",
                soft_wrap=True,
            )
        elif operation == Operation.REMOVED and reason is not None:
            self.failed = True
            err_console.print(
                f"[error]failed to remove[/] {escape(relative)}: {escape(reason.message)}",
                soft_wrap=True,
            )
        else:
            style = operation.value
            console.print(f"[{style}]{style}[/] {escape(relative)}", soft_wrap=True)

    def print_summary(self) -> None:
        """Print how many files each operation touched."""
        parts = [
            f"[{operation.value}]{count} {operation.value}[/]"
            for operation, count in sorted(self.counts.items(), key=lambda item: item[0].value)
        ]
        if parts:
            console.print(f"\nSummary: {', '.join(parts)}")
