"""
Unit tests for completion accounting.

Tests the PipelineTally drain condition and the exactly-once behavior of
CompletionReporter.
"""

import pytest

from access_log_indexer.ingestion.base import SourceObject
from access_log_indexer.pipeline.tally import (
    CompletionReporter,
    PipelineState,
    PipelineTally,
)


class RecordingCallback:
    """Callback that records every notification."""

    def __init__(self):
        self.calls = []

    def succeed(self):
        self.calls.append(("succeed", None))

    def fail(self, error):
        self.calls.append(("fail", error))


@pytest.fixture
def source():
    return SourceObject(bucket="logs", key="a.log.gz")


class TestPipelineTally:
    """Tests for PipelineTally."""

    def test_starts_empty(self):
        """A new tally has nothing counted and is not drained."""
        tally = PipelineTally()
        assert tally.total_lines == 0
        assert tally.completed_submissions == 0
        assert tally.is_drained is False

    def test_record_line_numbers(self):
        """record_line returns 1-based line numbers."""
        tally = PipelineTally()
        assert tally.record_line() == 1
        assert tally.record_line() == 2
        assert tally.total_lines == 2

    def test_equal_counts_not_drained_before_exhaustion(self):
        """Matching counts mid-stream are not a drain."""
        tally = PipelineTally()
        tally.record_line()
        tally.record_completion(success=True)
        assert tally.completed_submissions == tally.total_lines
        assert tally.is_drained is False

    def test_drained_after_exhaustion(self):
        """Drained once exhausted and every line resolved."""
        tally = PipelineTally()
        tally.record_line()
        tally.record_line()
        tally.record_completion(success=True)
        tally.mark_exhausted()
        assert tally.is_drained is False
        tally.record_completion(success=True)
        assert tally.is_drained is True

    def test_empty_source_drained_at_exhaustion(self):
        """A source with no lines is drained as soon as it ends."""
        tally = PipelineTally()
        tally.mark_exhausted()
        assert tally.is_drained is True

    def test_failures_counted(self):
        """Failed submissions count as completed and failed."""
        tally = PipelineTally()
        tally.record_line()
        tally.record_line()
        tally.record_completion(success=True)
        tally.record_completion(success=False)
        assert tally.completed_submissions == 2
        assert tally.failed_submissions == 1
        assert tally.succeeded_submissions == 1

    def test_completion_without_line_rejected(self):
        """Completions can never outnumber counted lines."""
        tally = PipelineTally()
        with pytest.raises(RuntimeError):
            tally.record_completion(success=True)


class TestPipelineState:
    """Tests for PipelineState."""

    def test_terminal_states(self):
        """Only SUCCEEDED and FAILED are terminal."""
        assert PipelineState.SUCCEEDED.is_terminal
        assert PipelineState.FAILED.is_terminal
        assert not PipelineState.PENDING.is_terminal
        assert not PipelineState.STREAMING.is_terminal


class TestCompletionReporter:
    """Tests for CompletionReporter."""

    def test_lifecycle(self, source):
        """PENDING -> STREAMING -> SUCCEEDED."""
        reporter = CompletionReporter(source)
        assert reporter.state is PipelineState.PENDING
        reporter.start()
        assert reporter.state is PipelineState.STREAMING
        assert reporter.succeed() is True
        assert reporter.state is PipelineState.SUCCEEDED
        assert reporter.done

    def test_succeed_once(self, source):
        """A second success is ignored."""
        callback = RecordingCallback()
        reporter = CompletionReporter(source, callback)
        assert reporter.succeed() is True
        assert reporter.succeed() is False
        assert callback.calls == [("succeed", None)]

    def test_fail_once(self, source):
        """Only the first failure is reported; its error is kept."""
        callback = RecordingCallback()
        reporter = CompletionReporter(source, callback)
        first, second = ValueError("first"), ValueError("second")
        assert reporter.fail(first) is True
        assert reporter.fail(second) is False
        assert callback.calls == [("fail", first)]
        assert reporter.error is first

    def test_success_after_failure_ignored(self, source):
        """A failed object never reports success."""
        callback = RecordingCallback()
        reporter = CompletionReporter(source, callback)
        reporter.fail(RuntimeError("boom"))
        assert reporter.succeed() is False
        assert reporter.state is PipelineState.FAILED
        assert len(callback.calls) == 1

    def test_failure_after_success_ignored(self, source):
        """A late failure does not undo success."""
        callback = RecordingCallback()
        reporter = CompletionReporter(source, callback)
        reporter.succeed()
        assert reporter.fail(RuntimeError("late")) is False
        assert reporter.state is PipelineState.SUCCEEDED
        assert reporter.error is None
        assert callback.calls == [("succeed", None)]

    def test_start_after_terminal_keeps_state(self, source):
        """start() does not reopen a finished object."""
        reporter = CompletionReporter(source)
        reporter.fail(RuntimeError("config"))
        reporter.start()
        assert reporter.state is PipelineState.FAILED

    def test_no_callback(self, source):
        """Reporting works without a callback."""
        reporter = CompletionReporter(source)
        assert reporter.fail(RuntimeError("x")) is True
