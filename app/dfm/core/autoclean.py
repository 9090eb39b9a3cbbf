"""Autoclean of files that are no longer provided by any repository.

Compares the previous manifest with the next one, removes every target
file that dropped out and prunes the directories that became empty,
stopping at the target root.
"""

import logging
import os

from dfm.core.errors import FileError
from dfm.core.paths import is_within, path_join
from dfm.filesystem.base import Filesystem
from dfm.models.operation import FileLogger, Operation

logger = logging.getLogger(__name__)


def clean_directories(fs: Filesystem, directory: str, root: str) -> None:
    """Remove empty directories from ``directory`` upward.

    Stops at the first non-empty directory or when reaching ``root``,
    which is never removed.

    Args:
        fs: Filesystem to modify.
        directory: Absolute directory to start from.
        root: Absolute directory that bounds the walk.

    Raises:
        OSError: If a directory cannot be listed or removed.
    """
    while is_within(directory, root):
        try:
            if fs.listdir(directory):
                return
        except FileNotFoundError:
            directory = os.path.dirname(directory)
            continue
        fs.rmdir(directory)
        logger.debug("Removed empty directory %s", directory)
        directory = os.path.dirname(directory)


def autoclean(
    fs: Filesystem,
    target_root: str,
    previous: set[str],
    next_manifest: set[str],
    *,
    dry_run: bool,
    log: FileLogger,
) -> set[str]:
    """Remove target files tracked in ``previous`` but not in ``next_manifest``.

    Each removal is independent: a failure is logged and the remaining
    paths are still attempted. A target file that is already gone counts
    as removed. In dry-run mode nothing is touched but every removal is
    still logged and dropped from the returned manifest.

    Args:
        fs: Filesystem to modify.
        target_root: Absolute target directory.
        previous: Manifest before the pass.
        next_manifest: Paths that should remain tracked.
        dry_run: If True, do not modify the filesystem.
        log: Per-file logging sink.

    Returns:
        The resulting manifest: next_manifest plus every path whose
        removal failed, so a later pass retries it.
    """
    result = set(next_manifest)
    for relative in sorted(previous - next_manifest):
        target = path_join(target_root, relative)
        error: FileError | None = None
        if not dry_run:
            try:
                fs.remove(target)
            except FileNotFoundError:
                logger.debug("%s was already removed", target)
            except OSError as exc:
                error = FileError.wrap(exc, relative)

            if error is None:
                try:
                    clean_directories(fs, os.path.dirname(target), target_root)
                except OSError as exc:
                    logger.warning("Could not prune directories above %s: %s", relative, exc)

        log(Operation.REMOVED, relative, "", error)
        if error is not None:
            result.add(relative)
    return result
