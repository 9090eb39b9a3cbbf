"""Abstract filesystem capability.

This module defines the Filesystem interface the engine uses for every
filesystem access. One implementation talks to the operating system,
another keeps everything in memory for tests.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from dfm.filesystem.models import PathType


class Filesystem(ABC):
    """Abstract base class for filesystem backends.

    All paths are absolute strings. Failures are raised as OSError
    subclasses (FileNotFoundError, FileExistsError, PermissionError, ...)
    carrying ``errno``, ``strerror`` and ``filename`` like the os module.

    Example:
        >>> fs = OsFilesystem()
        >>> if not fs.is_linked("/dots/files/.bashrc", "/home/me/.bashrc"):
        ...     fs.symlink("/dots/files/.bashrc", "/home/me/.bashrc")
    """

    @abstractmethod
    def stat(self, path: str) -> PathType | None:
        """Return the type of path, following symlinks.

        Args:
            path: Absolute path.

        Returns:
            PathType of the entry, or None if it does not exist or a
            parent component is not a directory.
        """

    @abstractmethod
    def lstat(self, path: str) -> PathType | None:
        """Return the type of path without following a final symlink.

        Args:
            path: Absolute path.

        Returns:
            PathType of the entry, or None if it does not exist or a
            parent component is not a directory.
        """

    @abstractmethod
    def readlink(self, path: str) -> str:
        """Return the destination of a symlink."""

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Return the contents of a file."""

    @abstractmethod
    def listdir(self, path: str) -> list[str]:
        """Return the names of the entries in a directory."""

    @abstractmethod
    def symlink(self, source: str, dest: str) -> None:
        """Create a symlink at dest pointing to source.

        Raises:
            FileExistsError: If dest already exists.
        """

    @abstractmethod
    def copy(self, source: str, dest: str) -> None:
        """Copy the file source to dest.

        Raises:
            FileExistsError: If dest already exists.
        """

    @abstractmethod
    def move(self, source: str, dest: str) -> None:
        """Move the file source to dest.

        Raises:
            FileExistsError: If dest already exists.
        """

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove a file or symlink."""

    @abstractmethod
    def rmdir(self, path: str) -> None:
        """Remove an empty directory."""

    @abstractmethod
    def makedirs(self, path: str) -> None:
        """Create a directory and all missing parents."""

    @abstractmethod
    def walk(self, root: str) -> Iterator[str]:
        """Yield paths relative to root of every non-directory entry.

        Directories are descended into but not yielded; symlinks are
        yielded and never followed. A directory's own entries come first,
        sorted by name, followed by its subdirectories in name order.
        A root that does not exist yields nothing. A symlinked root is
        followed; symlinks beneath it are not.

        Args:
            root: Absolute directory to walk.

        Yields:
            Relative paths using "/" separators.
        """

    def is_linked(self, source: str, dest: str) -> bool:
        """Check if dest is already a symlink pointing at source.

        Args:
            source: Expected link destination.
            dest: Path of the link.

        Returns:
            True if dest is a symlink whose destination is source.
        """
        if self.lstat(dest) != PathType.SYMLINK:
            return False
        return self.readlink(dest) == source

    def same_content(self, first: str, second: str) -> bool:
        """Check if two regular files hold identical bytes.

        Returns False if either path is missing or not a regular file.
        """
        if self.lstat(first) != PathType.FILE or self.lstat(second) != PathType.FILE:
            return False
        return self.read_bytes(first) == self.read_bytes(second)
