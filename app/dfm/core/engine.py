"""Dotfile engine.

The Dfm class ties the configuration, the filesystem capability and the
per-file logger together and implements every operation the command line
exposes: linking and copying repositories into the target, importing
target files into a repository, removing and ejecting tracked files.

Every operation that mutates the filesystem honors dry-run mode: probes
still run so the per-file log is accurate, but nothing is written and the
configuration is never saved.
"""

import errno
import logging
import os
from dataclasses import dataclass
from functools import partial

from dfm.core.autoclean import autoclean
from dfm.core.config import Config, save_config
from dfm.core.errors import AlreadySynced, FileError, ValidationError
from dfm.core.paths import is_under, is_within, path_join, relative_to
from dfm.core.policy import ErrorHandler, attempt, raise_errors
from dfm.core.resolver import resolve_all, resolve_paths
from dfm.core.sync import FileOperation, SyncResult, run_sync
from dfm.filesystem.base import Filesystem
from dfm.filesystem.local import OsFilesystem
from dfm.filesystem.models import PathType
from dfm.models.operation import FileLogger, Operation, null_logger

logger = logging.getLogger(__name__)

# Suffix of the temporary copy written while ejecting a file
EJECT_SUFFIX = ".dfm-eject"


@dataclass(frozen=True, slots=True)
class EngineOptions:
    """Options that change how the engine touches the filesystem.

    Attributes:
        dry_run: Log what would happen without modifying anything.
    """

    dry_run: bool = False


class Dfm:
    """Dotfile manager bound to one dfm directory.

    Args:
        config: Loaded configuration. Its manifest is updated in place by
            every operation; call :meth:`save` to persist it.
        fs: Filesystem capability. Defaults to the operating system.
        options: Engine options.
        log: Per-file logging sink.
    """

    def __init__(
        self,
        config: Config,
        fs: Filesystem | None = None,
        options: EngineOptions | None = None,
        log: FileLogger = null_logger,
    ) -> None:
        self.config = config
        self.fs = fs if fs is not None else OsFilesystem()
        self.options = options if options is not None else EngineOptions()
        self.log = log

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    @property
    def directory(self) -> str:
        return str(self.config.directory)

    @property
    def target(self) -> str:
        return str(self.config.target)

    # Configuration

    def init(self) -> None:
        """Create the dfm directory and write the configuration."""
        if not self.dry_run:
            self.fs.makedirs(self.directory)
        self.save()

    def save(self) -> None:
        """Persist the configuration unless running in dry-run mode."""
        if self.dry_run:
            logger.debug("Dry run: not saving %s", self.config.path)
            return
        save_config(self.config)

    def is_valid_repo(self, repo: str) -> bool:
        """Check if repo exists as a directory inside the dfm directory."""
        return self.fs.stat(self.config.repo_path(repo)) == PathType.DIRECTORY

    def assert_active_repo(self, repo: str) -> None:
        """Raise ValidationError unless repo is active and exists.

        Raises:
            ValidationError: If repo is not in the active list or its
                directory is missing.
        """
        if not self.config.has_repo(repo):
            raise ValidationError(f"{repo} is not an active repo")
        if not self.is_valid_repo(repo):
            raise ValidationError(f"{repo} does not exist in {self.directory}")

    def default_repo(self) -> str:
        """Return the only active repository.

        Raises:
            ValidationError: If zero or several repositories are active.
        """
        if not self.config.repos:
            raise ValidationError("no repos are configured. Have you run dfm init?")
        if len(self.config.repos) > 1:
            raise ValidationError("repo must be specified when multiple are configured")
        return self.config.repos[0]

    def resolve_inputs(
        self,
        inputs: list[str],
        *,
        allow_repo_paths: bool = False,
        cwd: str | None = None,
    ) -> list[str]:
        """Turn command line paths into target-relative paths.

        Relative inputs are taken relative to ``cwd``. An input inside the
        target becomes relative to the target. With ``allow_repo_paths``,
        an input inside an active repository becomes relative to that
        repository instead, so ``dfm link .vimrc`` works from inside a
        repo. Every input is checked before the first error is reported.

        Args:
            inputs: Paths given on the command line.
            allow_repo_paths: Accept paths inside active repositories.
            cwd: Directory relative inputs are resolved against.

        Returns:
            Target-relative paths, "." for the root itself.

        Raises:
            ValidationError: If any input is outside every allowed root.
        """
        base = cwd if cwd is not None else os.getcwd()
        roots: list[str] = []
        if allow_repo_paths:
            roots.extend(self.config.repo_path(repo) for repo in self.config.repos)
        roots.append(self.target)

        results: list[str] = []
        errors: list[str] = []
        for raw in inputs:
            absolute = path_join(base, os.path.expanduser(raw))
            for root in roots:
                if absolute == root:
                    results.append(".")
                    break
                if is_within(absolute, root):
                    results.append(relative_to(absolute, root))
                    break
            else:
                errors.append(f"{raw}: not in target path ({self.target})")

        if errors:
            raise ValidationError("\n".join(errors))
        return results

    # Link and copy

    def link_all(self, handler: ErrorHandler = raise_errors) -> SyncResult:
        """Link every file of every active repository into the target."""
        return self._sync(None, self._link_file, Operation.LINKED, handler)

    def link_files(self, paths: list[str], handler: ErrorHandler = raise_errors) -> SyncResult:
        """Link the given target-relative paths only."""
        return self._sync(paths, self._link_file, Operation.LINKED, handler)

    def copy_all(self, handler: ErrorHandler = raise_errors) -> SyncResult:
        """Copy every file of every active repository into the target."""
        return self._sync(None, self._copy_file, Operation.COPIED, handler)

    def copy_files(self, paths: list[str], handler: ErrorHandler = raise_errors) -> SyncResult:
        """Copy the given target-relative paths only."""
        return self._sync(paths, self._copy_file, Operation.COPIED, handler)

    def _sync(
        self,
        paths: list[str] | None,
        handle_file: FileOperation,
        operation: Operation,
        handler: ErrorHandler,
    ) -> SyncResult:
        if paths is None:
            files = resolve_all(self.fs, self.directory, self.config.repos)
        else:
            files = resolve_paths(
                self.fs,
                self.directory,
                self.config.repos,
                paths,
                tracked=self.config.manifest,
            )
        logger.info("%s %d file(s) into %s", operation.value.capitalize(), len(files), self.target)

        result = run_sync(
            self.fs,
            self.config,
            files,
            handle_file,
            handler,
            operation,
            dry_run=self.dry_run,
            log=self.log,
            scope=paths,
        )
        self.config.manifest = result.manifest
        return result

    def _replace_tracked_link(self, target: str) -> None:
        """Remove a symlink left in the target by an earlier pass."""
        relative = relative_to(target, self.target)
        if relative in self.config.manifest and self.fs.lstat(target) == PathType.SYMLINK:
            if not self.dry_run:
                self.fs.remove(target)
            logger.debug("Replacing tracked link %s", target)

    def _link_file(self, source: str, target: str) -> None:
        if self.fs.is_linked(source, target):
            raise AlreadySynced()
        self._replace_tracked_link(target)
        if self.dry_run:
            return
        self.fs.makedirs(os.path.dirname(target))
        self.fs.symlink(source, target)

    def _copy_file(self, source: str, target: str) -> None:
        if self.fs.same_content(source, target):
            raise AlreadySynced()
        self._replace_tracked_link(target)
        if self.dry_run:
            return
        self.fs.makedirs(os.path.dirname(target))
        self.fs.copy(source, target)

    # Add

    def add_files(
        self,
        paths: list[str],
        repo: str,
        *,
        link: bool = True,
        handler: ErrorHandler = raise_errors,
    ) -> SyncResult:
        """Import target files into a repository.

        Each file is moved into the repository and, with ``link``,
        replaced by a symlink; otherwise it is copied and the original is
        left alone. Directories are expanded to the regular files beneath
        them. Imported files become tracked.

        Args:
            paths: Target-relative paths to import.
            repo: Active repository receiving the files.
            link: Link the imported files back into the target.
            handler: Error handler for per-file failures.

        Returns:
            SyncResult of the import.

        Raises:
            ValidationError: If repo is not usable or a path is inside the
                dfm directory or is not a regular file or directory.
        """
        self.assert_active_repo(repo)
        files = self._expand_add_paths(paths)

        result = SyncResult(manifest=self.config.manifest)
        for relative in files:
            outcome = attempt(partial(self._add_file, relative, repo, link), handler, relative)
            if outcome.aborted:
                result.error = outcome.error
                break
            if outcome.applied:
                self.config.manifest.add(relative)
                result.applied.append(relative)
                self.log(Operation.ADDED, relative, repo, None)
            else:
                result.skipped.append(relative)
                if outcome.reason is not None:
                    result.failed.append(relative)
                self.log(Operation.SKIPPED, relative, repo, outcome.reason)
        return result

    def _expand_add_paths(self, paths: list[str]) -> list[str]:
        files: list[str] = []
        errors: list[str] = []
        for relative in paths:
            target = self.config.target_path(relative)
            if target == self.directory or is_within(target, self.directory):
                errors.append(f"{relative}: cannot add files from inside the dfm directory")
                continue
            kind = self.fs.lstat(target)
            if kind is None or kind == PathType.FILE:
                # A missing file is reported per file by the error handler.
                files.append(relative)
            elif kind == PathType.DIRECTORY:
                for entry in self.fs.walk(target):
                    absolute = path_join(target, entry)
                    if is_within(absolute, self.directory):
                        continue
                    if self.fs.lstat(absolute) == PathType.FILE:
                        files.append(path_join(relative, entry))
            else:
                errors.append(f"{relative}: only regular files and directories can be added")

        if errors:
            raise ValidationError("\n".join(errors))
        return files

    def _add_file(self, relative: str, repo: str, link: bool) -> None:
        target = self.config.target_path(relative)
        if self.fs.lstat(target) is None:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), target)
        if self.dry_run:
            return

        destination = self.config.repo_path(repo, relative)
        self.fs.makedirs(os.path.dirname(destination))
        if link:
            self.fs.move(target, destination)
            self.fs.symlink(destination, target)
        else:
            self.fs.copy(target, destination)

    # Remove and eject

    def remove_all(self) -> set[str]:
        """Remove every tracked file from the target.

        Returns:
            The manifest left over: paths whose removal failed.
        """
        return self._remove(set())

    def remove_files(self, paths: list[str]) -> set[str]:
        """Remove tracked files at or beneath the given paths."""
        keep = {p for p in self.config.manifest if not any(is_under(p, s) for s in paths)}
        return self._remove(keep)

    def _remove(self, keep: set[str]) -> set[str]:
        self.config.manifest = autoclean(
            self.fs,
            self.target,
            set(self.config.manifest),
            keep,
            dry_run=self.dry_run,
            log=self.log,
        )
        return self.config.manifest - keep

    def eject_files(
        self,
        paths: list[str],
        handler: ErrorHandler = raise_errors,
    ) -> SyncResult:
        """Stop tracking files while keeping them in the target.

        A linked file is replaced by a copy of its repository file. A file
        that is already a regular file is simply untracked. A tracked file
        missing from the target is restored from its repository first.

        Args:
            paths: Target-relative paths; tracked files at or beneath
                them are ejected. "." ejects everything.
            handler: Error handler for per-file failures.

        Returns:
            SyncResult of the eject.
        """
        owners = resolve_all(self.fs, self.directory, self.config.repos)
        tracked = sorted(p for p in self.config.manifest if any(is_under(p, s) for s in paths))

        result = SyncResult(manifest=self.config.manifest)
        for relative in tracked:
            repo = owners.get(relative, "")
            outcome = attempt(partial(self._eject_file, relative, repo), handler, relative)
            if outcome.aborted:
                result.error = outcome.error
                break
            if outcome.reason is None:
                self.config.manifest.discard(relative)
                result.applied.append(relative)
                self.log(Operation.EJECTED, relative, repo, None)
            else:
                result.skipped.append(relative)
                result.failed.append(relative)
                self.log(Operation.SKIPPED, relative, repo, outcome.reason)
        return result

    def _eject_file(self, relative: str, repo: str) -> None:
        target = self.config.target_path(relative)
        kind = self.fs.lstat(target)
        if kind == PathType.FILE or (kind is None and not repo):
            raise AlreadySynced()
        if kind not in (None, PathType.SYMLINK):
            raise FileError(relative, "not a file or symlink", path=target)

        if repo:
            source = self.config.repo_path(repo, relative)
        else:
            source = path_join(os.path.dirname(target), self.fs.readlink(target))
        if self.fs.stat(source) != PathType.FILE:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), source)
        if self.dry_run:
            return

        if kind is None:
            self.fs.makedirs(os.path.dirname(target))
            self.fs.copy(source, target)
            return

        staging = target + EJECT_SUFFIX
        self.fs.copy(source, staging)
        self.fs.remove(target)
        self.fs.move(staging, target)
