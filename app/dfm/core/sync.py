"""Sync executor.

Drives one reconciliation pass: every resolved file is handed to the
injected per-file operation through the error policy engine, the next
manifest is collected along the way and, if the pass completes, autoclean
removes what is no longer provided.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

from dfm.core.autoclean import autoclean
from dfm.core.config import Config
from dfm.core.paths import is_under
from dfm.core.policy import ErrorHandler, attempt
from dfm.filesystem.base import Filesystem
from dfm.models.operation import FileLogger, Operation

logger = logging.getLogger(__name__)

# Per-file operation: (absolute repo path, absolute target path)
FileOperation = Callable[[str, str], None]


@dataclass(slots=True)
class SyncResult:
    """Result of a pass over a set of files.

    Attributes:
        manifest: The manifest after the pass.
        applied: Relative paths whose operation changed something.
        skipped: Relative paths left alone (up to date or accepted failure).
        failed: Relative paths skipped because a failure was accepted.
        error: The escalated error if the pass was aborted.
    """

    manifest: set[str]
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    error: BaseException | None = None

    @property
    def aborted(self) -> bool:
        """Check if the pass stopped early."""
        return self.error is not None


def run_sync(
    fs: Filesystem,
    config: Config,
    files: dict[str, str],
    handle_file: FileOperation,
    handler: ErrorHandler,
    operation: Operation,
    *,
    dry_run: bool,
    log: FileLogger,
    scope: list[str] | None = None,
) -> SyncResult:
    """Reconcile the target with the resolved files.

    Every path is recorded in the next manifest before its operation is
    attempted, so a failing file is never autocleaned. When the handler
    escalates a failure the pass stops, the remaining files are not
    attempted, autoclean is skipped and the manifest becomes the union of
    the previous manifest and every path attempted so far.

    Args:
        fs: Filesystem used by autoclean.
        config: Configuration; its manifest is the previous manifest and
            is not modified.
        files: Ordered mapping of relative path to owning repository.
        handle_file: Operation applied to each (source, target) pair.
        handler: Error handler consulted by the policy engine.
        operation: Operation kind logged for applied files.
        dry_run: If True, autoclean does not touch the filesystem.
        log: Per-file logging sink.
        scope: For a partial pass, the requested relative paths. Tracked
            paths outside the scope are kept as they are.

    Returns:
        SyncResult holding the resulting manifest.
    """
    previous = set(config.manifest)
    if scope is None:
        next_manifest: set[str] = set()
    else:
        next_manifest = {p for p in previous if not any(is_under(p, s) for s in scope)}

    result = SyncResult(manifest=previous)
    for relative, repo in files.items():
        next_manifest.add(relative)
        source = config.repo_path(repo, relative)
        target = config.target_path(relative)

        outcome = attempt(partial(handle_file, source, target), handler, relative)
        if outcome.aborted:
            logger.debug("Aborting pass at %s", relative)
            result.error = outcome.error
            break
        if outcome.applied:
            result.applied.append(relative)
            log(operation, relative, repo, None)
        else:
            result.skipped.append(relative)
            if outcome.reason is not None:
                result.failed.append(relative)
            log(Operation.SKIPPED, relative, repo, outcome.reason)

    if result.aborted:
        result.manifest = previous | next_manifest
    else:
        result.manifest = autoclean(
            fs,
            str(config.target),
            previous,
            next_manifest,
            dry_run=dry_run,
            log=log,
        )
    return result
