"""
AWS Lambda entry point.

Triggered by S3 "object created" notifications for access log objects.
Every object named in the event is streamed into the index concurrently.
The handler raises when any object failed, so Lambda retries the event.

Configure the function with:
    ES_ENDPOINT   Elasticsearch/OpenSearch domain endpoint (required)
    AWS_REGION_NAME, LOG_FORMAT, INDEX_PREFIX, DOC_TYPE (optional)
"""

import asyncio
import json
import logging
from functools import lru_cache
from typing import Any, Callable, Iterable, Optional

from .config.settings import IndexTarget, Settings, get_settings
from .ingestion.base import SourceObject
from .ingestion.exceptions import IngestionError
from .pipeline import LogIndexingPipeline, PipelineResult, setup_logging
from .pipeline.tally import CompletionCallback, CompletionReporter, PipelineTally
from .storage import ObjectStore, StorageError, get_store

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_index_target() -> IndexTarget:
    """Resolve the index target once per process (a Lambda container)."""
    target = get_settings().index_target()
    logger.info(f"Index target: {target.path}")
    return target


class ContextCallback:
    """
    Forwards completion to an invoking context exposing succeed()/fail().

    Used when the caller (a test harness or a Node-style runtime shim)
    passes such a context; the standard Python Lambda context has neither.
    """

    def __init__(self, context: Any, source: SourceObject):
        self.context = context
        self.source = source

    def succeed(self) -> None:
        self.context.succeed()

    def fail(self, error: Exception) -> None:
        self.context.fail(error)


def parse_event(event: dict) -> list[SourceObject]:
    """
    Extract the source objects named by an S3 notification event.

    Args:
        event: Lambda event with a "Records" list

    Returns:
        SourceObject per record, in event order
    """
    return [SourceObject.from_event_record(record) for record in event.get("Records", [])]


async def process_sources(
    sources: Iterable[SourceObject],
    settings: Settings,
    target: IndexTarget,
    store: Optional[ObjectStore] = None,
    callback_factory: Optional[
        Callable[[SourceObject], Optional[CompletionCallback]]
    ] = None,
    **pipeline_kwargs: Any,
) -> list[PipelineResult]:
    """
    Run the pipeline for a batch of source objects.

    Args:
        sources: Objects to process
        settings: Pipeline settings
        target: Resolved index target
        store: Object store (default: S3)
        callback_factory: Returns the completion callback for an object
        **pipeline_kwargs: Passed to LogIndexingPipeline (client, signer)

    Returns:
        One PipelineResult per source
    """
    if store is None:
        try:
            store = get_store("s3")
        except StorageError as e:
            logger.error(f"Cannot create object store: {e}")
            return [_failed_result(source, e, callback_factory) for source in sources]

    async with LogIndexingPipeline(settings, store, target, **pipeline_kwargs) as pipeline:
        try:
            return await pipeline.run_batch(sources, callback_factory)
        finally:
            await store.close()


def _failed_result(
    source: SourceObject,
    error: Exception,
    callback_factory: Optional[Callable[[SourceObject], Optional[CompletionCallback]]],
) -> PipelineResult:
    reporter = CompletionReporter(source, callback_factory(source) if callback_factory else None)
    reporter.fail(error)
    return PipelineResult(source=source).finish(reporter, PipelineTally())


def summarize(results: list[PipelineResult]) -> dict:
    """Build the handler's return value from the batch results."""
    return {
        "objects": len(results),
        "succeeded": sum(1 for r in results if r.success),
        "failed": sum(1 for r in results if not r.success),
        "results": [r.to_dict() for r in results],
    }


def handler(event: dict, context: Any = None) -> dict:
    """
    Lambda handler: index every log object named in the event.

    Args:
        event: S3 notification event
        context: Lambda context

    Returns:
        Batch summary (see summarize())

    Raises:
        IngestionError: If any object failed, so the invoker retries
    """
    setup_logging()
    settings = get_settings()

    logger.info(f"Received event: {json.dumps(event, indent=2)}")
    logger.info(f"running in {settings.log_format} mode")

    sources = parse_event(event)

    callback_factory = None
    if hasattr(context, "succeed") and hasattr(context, "fail"):

        def callback_factory(source: SourceObject) -> ContextCallback:
            return ContextCallback(context, source)

    results = asyncio.run(
        process_sources(
            sources,
            settings,
            get_index_target(),
            callback_factory=callback_factory,
        )
    )

    summary = summarize(results)
    if summary["failed"]:
        failed = [f"{r.source}: {r.error}" for r in results if not r.success]
        raise IngestionError(
            f"{summary['failed']} of {summary['objects']} log objects failed: "
            + "; ".join(failed)
        )

    logger.info(f"All {summary['objects']} log objects indexed")
    return summary
