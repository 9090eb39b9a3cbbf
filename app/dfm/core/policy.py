"""Error policy engine.

Wraps a fallible per-file operation and lets an injected handler decide
what happens when it fails. The engine itself has no policy: forcing
overwrites, ignoring failures or giving up are all choices made by the
handler.

An operation signals its result by returning normally (applied), raising
:class:`AlreadySynced` (nothing to do) or raising :class:`FileError` /
:class:`OSError` (failure). For a failure the handler returns:

- ``None``: accept the failure, the file is skipped;
- :data:`RETRY`: run the operation again from scratch;
- anything else (normally an exception): abort the pass.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from dfm.core.errors import RETRY, AlreadySynced, FileError, RetryDirective

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[FileError], BaseException | RetryDirective | None]


class Outcome(str, Enum):
    """Terminal result of attempting one file operation.

    Attributes:
        APPLIED: The operation changed something.
        SKIPPED: Nothing changed, because the file was up to date or the
            handler accepted the failure.
        ABORTED: The handler escalated the failure; the pass must stop.
    """

    APPLIED = "applied"
    SKIPPED = "skipped"
    ABORTED = "aborted"


class Decision(Enum):
    """What an error handler asked for."""

    SKIP = "skip"
    RETRY = "retry"
    ABORT = "abort"


@dataclass(frozen=True, slots=True)
class AttemptResult:
    """Result of :func:`attempt`.

    Attributes:
        outcome: Terminal outcome.
        reason: The failure the handler accepted or escalated, if any.
        error: The value the handler escalated with, for ABORTED.
        attempts: Number of times the operation was invoked.
    """

    outcome: Outcome
    reason: FileError | None = None
    error: BaseException | None = None
    attempts: int = 1

    @property
    def applied(self) -> bool:
        """Check if the operation was applied."""
        return self.outcome == Outcome.APPLIED

    @property
    def skipped(self) -> bool:
        """Check if the operation was skipped."""
        return self.outcome == Outcome.SKIPPED

    @property
    def aborted(self) -> bool:
        """Check if the pass must stop."""
        return self.outcome == Outcome.ABORTED


def raise_errors(error: FileError) -> FileError:
    """Error handler that escalates every failure."""
    return error


def classify(decision: object) -> Decision:
    """Map an error handler's return value to a Decision.

    Args:
        decision: Value returned by the handler.

    Returns:
        Decision.SKIP for None, Decision.RETRY for RETRY, Decision.ABORT otherwise.
    """
    if decision is None:
        return Decision.SKIP
    if decision is RETRY:
        return Decision.RETRY
    return Decision.ABORT


def attempt(
    operation: Callable[[], None],
    handler: ErrorHandler,
    filename: str,
) -> AttemptResult:
    """Run operation until it reaches a terminal outcome.

    There is no retry limit: a handler that keeps returning RETRY without
    fixing the cause keeps the loop running.

    Args:
        operation: Zero-argument callable performing the file operation.
        handler: Error handler consulted for each failure.
        filename: Path failures are reported against when the operation
            raises a bare OSError.

    Returns:
        AttemptResult describing the terminal outcome.
    """
    attempts = 0
    while True:
        attempts += 1
        try:
            operation()
        except AlreadySynced:
            return AttemptResult(Outcome.SKIPPED, attempts=attempts)
        except (FileError, OSError) as exc:
            failure = FileError.wrap(exc, filename)
        else:
            return AttemptResult(Outcome.APPLIED, attempts=attempts)

        decision = handler(failure)
        step = classify(decision)
        if step is Decision.RETRY:
            logger.debug("Retrying %s after: %s", filename, failure.message)
            continue
        if step is Decision.SKIP:
            return AttemptResult(Outcome.SKIPPED, reason=failure, attempts=attempts)

        error = decision if isinstance(decision, BaseException) else failure
        return AttemptResult(Outcome.ABORTED, reason=failure, error=error, attempts=attempts)
