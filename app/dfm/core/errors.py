"""Error types shared by the dfm engine.

Command-level problems raise :class:`ValidationError` before any file is
touched. Per-file problems are reported as :class:`FileError` and routed
through the injected error handler. :class:`AlreadySynced` and
:data:`RETRY` are control signals, not failures.
"""

from __future__ import annotations


class DfmError(Exception):
    """Base exception for all dfm errors."""


class ValidationError(DfmError):
    """Raised when a command cannot run at all.

    Examples are an input outside the target directory, an inactive
    repository or an unsupported file type passed to ``add``.
    """


class FileError(DfmError):
    """A failure attributable to exactly one file.

    Attributes:
        filename: Path the error is reported against (usually relative
            to the target directory).
        message: Human-readable description of the failure.
        cause: Underlying exception, if any.
        path: Absolute path the failing primitive acted on, if known.
    """

    def __init__(
        self,
        filename: str,
        message: str,
        cause: BaseException | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(f"{filename}: {message}")
        self.filename = filename
        self.message = message
        self.cause = cause
        self.path = path

    @classmethod
    def wrap(cls, exc: BaseException, filename: str) -> FileError:
        """Build a FileError from an arbitrary exception.

        An existing FileError is returned unchanged. For an OSError the
        message is its ``strerror`` and the failing path is taken from the
        exception (``filename2`` for two-path calls such as symlink).

        Args:
            exc: The exception to wrap.
            filename: Path to report the error against.

        Returns:
            FileError describing ``exc``.
        """
        if isinstance(exc, FileError):
            return exc
        if isinstance(exc, OSError):
            message = exc.strerror or str(exc)
            path = exc.filename2 if exc.filename2 is not None else exc.filename
            return cls(filename, message, cause=exc, path=None if path is None else str(path))
        return cls(filename, str(exc), cause=exc)


class PathNotFoundError(FileError):
    """Raised when an explicit input exists in no active repository."""

    def __init__(self, filename: str) -> None:
        super().__init__(filename, "not found in any active repository")


class AlreadySynced(Exception):  # noqa: N818
    """Raised by a file operation when the target is already up to date."""

    def __init__(self) -> None:
        super().__init__("already up to date")


class RetryDirective:
    """Marker type for the value an error handler returns to retry."""

    _instance: RetryDirective | None = None

    def __new__(cls) -> RetryDirective:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "RETRY"


RETRY = RetryDirective()
