"""In-memory filesystem backend.

Implements the Filesystem interface on a flat dictionary of nodes so the
engine can be exercised without touching the disk. Errors mirror the os
module: the same OSError subclasses with errno, strerror and filename.
"""

import errno
import os
import posixpath
from collections.abc import Iterator
from dataclasses import dataclass

from dfm.filesystem.base import Filesystem
from dfm.filesystem.models import PathType

# Maximum number of symlinks followed while resolving a path
_MAX_LINK_DEPTH = 40


@dataclass(slots=True)
class _Node:
    kind: PathType
    data: bytes = b""
    target: str = ""


def _os_error(cls: type[OSError], code: int, path: str, path2: str | None = None) -> OSError:
    if path2 is None:
        return cls(code, os.strerror(code), path)
    return cls(code, os.strerror(code), path, None, path2)


class MemoryFilesystem(Filesystem):
    """Filesystem that lives entirely in memory.

    Only absolute paths are supported. Symlinks in parent components are
    always followed, as the kernel does; the final component is followed
    only where the os module would follow it (stat, read_bytes, walk).

    Example:
        >>> fs = MemoryFilesystem()
        >>> fs.write_file("/home/me/dotfiles/files/.bashrc", "export EDITOR=vim")
        >>> list(fs.walk("/home/me/dotfiles/files"))
        ['.bashrc']
    """

    def __init__(self) -> None:
        self._nodes: dict[str, _Node] = {"/": _Node(PathType.DIRECTORY)}

    # === Helpers for building fixtures ===

    def write_file(self, path: str, data: bytes | str = b"") -> None:
        """Create or overwrite a regular file, creating parent directories.

        Args:
            path: Absolute file path.
            data: File contents; strings are encoded as UTF-8.
        """
        path = self._locate(path)
        self.makedirs(posixpath.dirname(path))
        if isinstance(data, str):
            data = data.encode()
        self._nodes[path] = _Node(PathType.FILE, data=data)

    def read_text(self, path: str) -> str:
        """Return the contents of a file decoded as UTF-8."""
        return self.read_bytes(path).decode()

    # === Filesystem interface ===

    def stat(self, path: str) -> PathType | None:
        node = self._resolve(path)
        return None if node is None else node.kind

    def lstat(self, path: str) -> PathType | None:
        node = self._nodes.get(self._locate(path))
        return None if node is None else node.kind

    def readlink(self, path: str) -> str:
        node = self._nodes.get(self._locate(path))
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        if node.kind != PathType.SYMLINK:
            raise _os_error(OSError, errno.EINVAL, path)
        return node.target

    def read_bytes(self, path: str) -> bytes:
        node = self._resolve(path)
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        if node.kind == PathType.DIRECTORY:
            raise _os_error(IsADirectoryError, errno.EISDIR, path)
        return node.data

    def listdir(self, path: str) -> list[str]:
        path = self._follow(path)
        node = self._nodes.get(path)
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        if node.kind != PathType.DIRECTORY:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        return [
            posixpath.basename(p)
            for p in self._nodes
            if p != "/" and posixpath.dirname(p) == path
        ]

    def symlink(self, source: str, dest: str) -> None:
        dest = self._locate(dest)
        if dest in self._nodes:
            raise _os_error(FileExistsError, errno.EEXIST, source, dest)
        self._require_parent(dest)
        self._nodes[dest] = _Node(PathType.SYMLINK, target=source)

    def copy(self, source: str, dest: str) -> None:
        dest = self._locate(dest)
        if dest in self._nodes:
            raise _os_error(FileExistsError, errno.EEXIST, dest)
        data = self.read_bytes(source)
        self._require_parent(dest)
        self._nodes[dest] = _Node(PathType.FILE, data=data)

    def move(self, source: str, dest: str) -> None:
        source = self._locate(source)
        dest = self._locate(dest)
        if dest in self._nodes:
            raise _os_error(FileExistsError, errno.EEXIST, dest)
        if source not in self._nodes:
            raise _os_error(FileNotFoundError, errno.ENOENT, source)
        self._require_parent(dest)
        prefix = source + "/"
        for path in [p for p in self._nodes if p == source or p.startswith(prefix)]:
            self._nodes[dest + path[len(source) :]] = self._nodes.pop(path)

    def remove(self, path: str) -> None:
        path = self._locate(path)
        node = self._nodes.get(path)
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        if node.kind == PathType.DIRECTORY:
            raise _os_error(IsADirectoryError, errno.EISDIR, path)
        del self._nodes[path]

    def rmdir(self, path: str) -> None:
        path = self._locate(path)
        node = self._nodes.get(path)
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        if node.kind != PathType.DIRECTORY:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        if self.listdir(path):
            raise _os_error(OSError, errno.ENOTEMPTY, path)
        del self._nodes[path]

    def makedirs(self, path: str) -> None:
        path = posixpath.normpath(path)
        current = "/"
        for part in [p for p in path.split("/") if p]:
            current = self._follow(posixpath.join(current, part))
            node = self._nodes.get(current)
            if node is None:
                self._nodes[current] = _Node(PathType.DIRECTORY)
            elif node.kind != PathType.DIRECTORY:
                raise _os_error(FileExistsError, errno.EEXIST, current)

    def walk(self, root: str) -> Iterator[str]:
        root = self._follow(root)
        if self.lstat(root) != PathType.DIRECTORY:
            return
        yield from self._walk(root, "")

    # === Internal ===

    def _walk(self, directory: str, prefix: str) -> Iterator[str]:
        names = sorted(self.listdir(directory))
        subdirs: list[str] = []
        for name in names:
            if self._nodes[posixpath.join(directory, name)].kind == PathType.DIRECTORY:
                subdirs.append(name)
            else:
                yield prefix + name
        for name in subdirs:
            yield from self._walk(posixpath.join(directory, name), f"{prefix}{name}/")

    def _locate(self, path: str) -> str:
        """Normalize path and resolve symlinks in its parent components."""
        parts = [p for p in posixpath.normpath(path).split("/") if p]
        if not parts:
            return "/"
        current = "/"
        for part in parts[:-1]:
            current = self._follow(posixpath.join(current, part))
        return posixpath.join(current, parts[-1])

    def _follow(self, path: str) -> str:
        """Resolve every symlink in path, the final component included."""
        path = self._locate(path)
        for _ in range(_MAX_LINK_DEPTH):
            node = self._nodes.get(path)
            if node is None or node.kind != PathType.SYMLINK:
                return path
            path = self._locate(posixpath.join(posixpath.dirname(path), node.target))
        raise _os_error(OSError, errno.ELOOP, path)

    def _resolve(self, path: str) -> _Node | None:
        return self._nodes.get(self._follow(path))

    def _require_parent(self, path: str) -> None:
        parent = posixpath.dirname(path)
        node = self._nodes.get(parent)
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        if node.kind != PathType.DIRECTORY:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
