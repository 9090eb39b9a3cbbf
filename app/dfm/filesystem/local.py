"""Operating system filesystem backend."""

import errno
import os
import shutil
import stat
from collections.abc import Iterator

from dfm.filesystem.base import Filesystem
from dfm.filesystem.models import PathType


def _mode_to_type(mode: int) -> PathType:
    if stat.S_ISLNK(mode):
        return PathType.SYMLINK
    if stat.S_ISDIR(mode):
        return PathType.DIRECTORY
    if stat.S_ISREG(mode):
        return PathType.FILE
    return PathType.OTHER


def _refuse_existing(path: str) -> None:
    if os.path.lexists(path):
        raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), path)


def _raise(error: OSError) -> None:
    raise error


class OsFilesystem(Filesystem):
    """Filesystem backed by the os, os.path and shutil modules.

    Copies use shutil.copy2 so permissions and timestamps follow the
    source. Moves use shutil.move so they work across devices.
    """

    def stat(self, path: str) -> PathType | None:
        try:
            return _mode_to_type(os.stat(path).st_mode)
        except (FileNotFoundError, NotADirectoryError):
            return None

    def lstat(self, path: str) -> PathType | None:
        try:
            return _mode_to_type(os.lstat(path).st_mode)
        except (FileNotFoundError, NotADirectoryError):
            return None

    def readlink(self, path: str) -> str:
        return os.readlink(path)

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def listdir(self, path: str) -> list[str]:
        return os.listdir(path)

    def symlink(self, source: str, dest: str) -> None:
        os.symlink(source, dest)

    def copy(self, source: str, dest: str) -> None:
        _refuse_existing(dest)
        shutil.copy2(source, dest, follow_symlinks=True)

    def move(self, source: str, dest: str) -> None:
        _refuse_existing(dest)
        shutil.move(source, dest)

    def remove(self, path: str) -> None:
        os.remove(path)

    def rmdir(self, path: str) -> None:
        os.rmdir(path)

    def makedirs(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def walk(self, root: str) -> Iterator[str]:
        if self.stat(root) != PathType.DIRECTORY:
            return

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            # Symlinks to directories are entries, not subtrees.
            linked = [d for d in dirnames if os.path.islink(os.path.join(dirpath, d))]
            dirnames[:] = sorted(d for d in dirnames if d not in linked)
            rel_dir = os.path.relpath(dirpath, root)
            for name in sorted(filenames + linked):
                yield name if rel_dir == "." else f"{rel_dir}/{name}"
