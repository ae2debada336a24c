"""
Per-object completion accounting.

Each pipeline run owns one PipelineTally and one CompletionReporter.
Nothing here is shared between source objects.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from ..ingestion.base import SourceObject

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """Lifecycle of one source object: PENDING -> STREAMING -> terminal."""

    PENDING = "pending"
    STREAMING = "streaming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.SUCCEEDED, PipelineState.FAILED)


@dataclass
class PipelineTally:
    """
    Line and submission counters for one source object.

    `total_lines` grows as the transformer observes lines and
    `completed_submissions` as submissions resolve (success or failure).
    Equality only means "drained" once the line source is exhausted.
    """

    total_lines: int = 0
    completed_submissions: int = 0
    failed_submissions: int = 0
    exhausted: bool = False

    @property
    def succeeded_submissions(self) -> int:
        return self.completed_submissions - self.failed_submissions

    @property
    def is_drained(self) -> bool:
        """True when no more lines will arrive and every line has resolved."""
        return self.exhausted and self.completed_submissions == self.total_lines

    def record_line(self) -> int:
        """Count one observed line; returns its 1-based line number."""
        self.total_lines += 1
        return self.total_lines

    def record_completion(self, success: bool) -> None:
        """Count one resolved submission."""
        if self.completed_submissions >= self.total_lines:
            raise RuntimeError(
                f"Submission resolved without a counted line "
                f"({self.completed_submissions} of {self.total_lines})"
            )
        self.completed_submissions += 1
        if not success:
            self.failed_submissions += 1

    def mark_exhausted(self) -> None:
        """Freeze the line total: the line source has ended."""
        self.exhausted = True


class CompletionCallback(Protocol):
    """Completion interface exposed by the invoking context."""

    def succeed(self) -> None: ...

    def fail(self, error: Exception) -> None: ...


class CompletionReporter:
    """
    Reports the outcome of one source object exactly once.

    The first call to succeed() or fail() moves the state to its terminal
    value and notifies the callback; every later call is a no-op.
    """

    def __init__(
        self,
        source: SourceObject,
        callback: Optional[CompletionCallback] = None,
    ):
        self.source = source
        self.state = PipelineState.PENDING
        self.error: Optional[Exception] = None
        self._callback = callback

    @property
    def done(self) -> bool:
        return self.state.is_terminal

    def start(self) -> None:
        if self.state is PipelineState.PENDING:
            self.state = PipelineState.STREAMING

    def succeed(self) -> bool:
        """Report success. Returns False if an outcome was already reported."""
        if self.done:
            return False
        self.state = PipelineState.SUCCEEDED
        if self._callback is not None:
            self._callback.succeed()
        return True

    def fail(self, error: Exception) -> bool:
        """Report failure. Returns False if an outcome was already reported."""
        if self.done:
            logger.debug(f"Ignoring late failure for {self.source}: {error}")
            return False
        self.state = PipelineState.FAILED
        self.error = error
        if self._callback is not None:
            self._callback.fail(error)
        return True
