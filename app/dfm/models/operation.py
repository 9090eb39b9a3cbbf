"""Operation models for per-file reporting.

This module defines the kinds of per-file operations the engine reports
and the signature of the logging sink that receives them.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from dfm.core.errors import FileError


class Operation(str, Enum):
    """Kind of per-file operation reported to the logger.

    Attributes:
        ADDED: A file was imported from the target into a repository.
        LINKED: A file was linked from a repository into the target.
        COPIED: A file was copied from a repository into the target.
        REMOVED: A file was removed from the target. If removal failed,
            the reason describes why.
        SKIPPED: A file was left alone. Without a reason it was already
            up to date; otherwise the reason is the suppressed failure.
        EJECTED: A file stopped being tracked but was kept in the target.
    """

    ADDED = "added"
    LINKED = "linked"
    COPIED = "copied"
    REMOVED = "removed"
    SKIPPED = "skipped"
    EJECTED = "ejected"


class FileLogger(Protocol):
    """Logging sink invoked once per file per pass."""

    def __call__(
        self,
        operation: Operation,
        relative: str,
        repo: str,
        reason: FileError | None,
    ) -> None: ...


def null_logger(
    operation: Operation,
    relative: str,
    repo: str,
    reason: FileError | None,
) -> None:
    """Discard a per-file log entry."""
