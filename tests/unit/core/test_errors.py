"""Unit tests for dfm error types."""

import errno
import os

from dfm.core.errors import (
    RETRY,
    AlreadySynced,
    DfmError,
    FileError,
    PathNotFoundError,
    RetryDirective,
    ValidationError,
)


class TestFileError:
    """Tests for FileError construction and wrapping."""

    def test_str_includes_filename(self) -> None:
        """The message is prefixed with the file name."""
        error = FileError(".bashrc", "permission denied")

        assert str(error) == ".bashrc: permission denied"
        assert isinstance(error, DfmError)

    def test_wrap_os_error(self) -> None:
        """Wrapping an OSError keeps strerror and the failing path."""
        cause = PermissionError(errno.EACCES, os.strerror(errno.EACCES), "/home/user/.bashrc")

        error = FileError.wrap(cause, ".bashrc")

        assert error.filename == ".bashrc"
        assert error.message == os.strerror(errno.EACCES)
        assert error.path == "/home/user/.bashrc"
        assert error.cause is cause

    def test_wrap_two_path_error_prefers_destination(self) -> None:
        """For two-path calls the second path is the one that failed."""
        cause = FileExistsError(
            errno.EEXIST,
            os.strerror(errno.EEXIST),
            "/dots/files/.bashrc",
            None,
            "/home/user/.bashrc",
        )

        assert FileError.wrap(cause, ".bashrc").path == "/home/user/.bashrc"

    def test_wrap_returns_file_error_unchanged(self) -> None:
        """An existing FileError is not wrapped twice."""
        error = PathNotFoundError(".vimrc")

        assert FileError.wrap(error, "other") is error

    def test_wrap_other_exception(self) -> None:
        """Any other exception becomes a FileError without a path."""
        error = FileError.wrap(RuntimeError("boom"), ".zshrc")

        assert error.message == "boom"
        assert error.path is None


class TestControlSignals:
    """Tests for AlreadySynced and RETRY."""

    def test_retry_is_singleton(self) -> None:
        """RetryDirective always returns the same object."""
        assert RetryDirective() is RETRY
        assert repr(RETRY) == "RETRY"

    def test_already_synced_is_not_a_failure(self) -> None:
        """AlreadySynced is not part of the DfmError hierarchy."""
        assert not isinstance(AlreadySynced(), DfmError)

    def test_validation_error_is_dfm_error(self) -> None:
        """ValidationError derives from DfmError."""
        assert issubclass(ValidationError, DfmError)
