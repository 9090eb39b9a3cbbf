"""Unit tests for the shared CLI plumbing."""

import errno
import os
from unittest.mock import MagicMock, patch

from dfm.cli.session import make_error_handler
from dfm.core.errors import RETRY, FileError


def _exists(filename: str = ".bashrc") -> FileError:
    path = f"/home/user/{filename}"
    cause = FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), path)
    return FileError.wrap(cause, filename)


def _denied() -> FileError:
    cause = PermissionError(errno.EACCES, os.strerror(errno.EACCES), "/home/user/.bashrc")
    return FileError.wrap(cause, ".bashrc")


class TestMakeErrorHandler:
    """Tests for the CLI error handler."""

    def test_without_force_accepts(self) -> None:
        """Without --force every failure is accepted."""
        remove = MagicMock()
        handler = make_error_handler(remove, force=False)

        assert handler(_exists()) is None
        remove.assert_not_called()

    def test_force_removes_and_retries(self) -> None:
        """With --force an existing file is removed and the operation retried."""
        remove = MagicMock()
        handler = make_error_handler(remove, force=True)

        assert handler(_exists()) is RETRY
        remove.assert_called_once_with("/home/user/.bashrc")

    def test_force_retries_once_per_file(self) -> None:
        """A second conflict on the same file is accepted."""
        remove = MagicMock()
        handler = make_error_handler(remove, force=True)

        assert handler(_exists()) is RETRY
        assert handler(_exists()) is None
        assert handler(_exists(".zshrc")) is RETRY
        assert remove.call_count == 2

    def test_force_ignores_other_errors(self) -> None:
        """Only existing-file conflicts are forced."""
        remove = MagicMock()
        handler = make_error_handler(remove, force=True)

        assert handler(_denied()) is None
        remove.assert_not_called()

    def test_failed_removal_is_accepted(self) -> None:
        """If the conflict cannot be removed the file is skipped."""
        remove = MagicMock(side_effect=IsADirectoryError(errno.EISDIR, "Is a directory"))
        handler = make_error_handler(remove, force=True)

        with patch("dfm.cli.session.print_error") as print_error:
            assert handler(_exists()) is None

        print_error.assert_called_once()
        assert "Is a directory" in print_error.call_args.args[0]

    def test_dry_run_never_removes(self) -> None:
        """Nothing is removed in dry-run mode."""
        remove = MagicMock()
        handler = make_error_handler(remove, force=True, dry_run=True)

        assert handler(_exists()) is None
        remove.assert_not_called()
