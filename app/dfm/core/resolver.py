"""Overlay resolution of repository trees.

Merges the trees of the active repositories into one mapping of
target-relative path to owning repository. When several repositories
provide the same path, the one listed last in the active order wins.
The mapping keeps the order in which paths were first discovered so
that logging is deterministic.
"""

import logging
from collections.abc import Iterable

from dfm.core.errors import PathNotFoundError
from dfm.core.paths import is_under, path_join
from dfm.filesystem.base import Filesystem
from dfm.filesystem.models import PathType

logger = logging.getLogger(__name__)


def resolve_all(fs: Filesystem, dfm_dir: str, repos: list[str]) -> dict[str, str]:
    """Resolve the complete trees of all active repositories.

    A repository directory that does not exist is treated as empty. Any
    other error while walking propagates to the caller.

    Args:
        fs: Filesystem to read from.
        dfm_dir: Absolute dfm directory containing the repositories.
        repos: Active repositories, lowest precedence first.

    Returns:
        Ordered mapping of relative path to owning repository.
    """
    files: dict[str, str] = {}
    for repo in repos:
        for relative in fs.walk(path_join(dfm_dir, repo)):
            files[relative] = repo
    logger.debug("Resolved %d file(s) across %d repo(s)", len(files), len(repos))
    return files


def resolve_paths(
    fs: Filesystem,
    dfm_dir: str,
    repos: list[str],
    paths: Iterable[str],
    tracked: Iterable[str] = (),
) -> dict[str, str]:
    """Resolve explicitly requested paths across the active repositories.

    Each path may name a file or a directory; a directory contributes
    every file beneath it. A path found in no repository is an error,
    unless tracked entries lie at or beneath it (the file was deleted
    upstream and autoclean will take care of it).

    Args:
        fs: Filesystem to read from.
        dfm_dir: Absolute dfm directory containing the repositories.
        repos: Active repositories, lowest precedence first.
        paths: Target-relative paths to resolve ("." means everything).
        tracked: Currently tracked paths.

    Returns:
        Ordered mapping of relative path to owning repository.

    Raises:
        PathNotFoundError: If a path exists in no active repository and
            is not tracked.
    """
    tracked = list(tracked)
    files: dict[str, str] = {}
    for path in paths:
        found = False
        for repo in repos:
            repo_root = path_join(dfm_dir, repo)
            source = path_join(repo_root, path)
            # The repository root itself may be a symlink.
            kind = fs.stat(source) if source == repo_root else fs.lstat(source)
            if kind is None:
                continue
            found = True
            if kind == PathType.DIRECTORY:
                for relative in fs.walk(source):
                    files[path_join(path, relative)] = repo
            else:
                files[path_join(path)] = repo
        if not found and not any(is_under(entry, path) for entry in tracked):
            raise PathNotFoundError(path)
    return files
