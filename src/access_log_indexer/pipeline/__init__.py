"""Streaming parse-and-index pipeline."""

import logging

from .orchestrator import LogIndexingPipeline, PipelineResult
from .signing import RequestSigner
from .sink import DeliverySink, build_client
from .tally import (
    CompletionCallback,
    CompletionReporter,
    PipelineState,
    PipelineTally,
)
from .transformer import RecordTransformer

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure root logging for scripts and the Lambda handler.

    Args:
        level: Root log level
    """
    root = logging.getLogger()
    if root.handlers:
        # Lambda installs its own handler; only adjust the level
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = [
    # Orchestration
    "LogIndexingPipeline",
    "PipelineResult",
    # Stages
    "RecordTransformer",
    "DeliverySink",
    "build_client",
    "RequestSigner",
    # Accounting
    "PipelineTally",
    "PipelineState",
    "CompletionCallback",
    "CompletionReporter",
    # Logging
    "setup_logging",
]
