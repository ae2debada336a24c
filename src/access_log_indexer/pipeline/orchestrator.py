"""
Pipeline orchestrator.

Wires the stages for each source object:

    object store -> decompress -> split_lines -> RecordTransformer -> DeliverySink

Each object gets its own tally and reporter. A batch runs its objects
concurrently and one object's failure never stops another.
"""

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional

import httpx

from ..config.settings import IndexTarget, Settings
from ..ingestion.base import SourceObject
from ..ingestion.exceptions import ConfigurationError, IngestionError
from ..ingestion.registry import get_parser
from ..ingestion.streams import decompress, split_lines
from ..storage.base import ObjectStore, StorageError
from .signing import RequestSigner
from .sink import DeliverySink, build_client
from .tally import CompletionCallback, CompletionReporter, PipelineState, PipelineTally
from .transformer import RecordTransformer

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Result of processing one source object."""

    source: SourceObject
    state: PipelineState = PipelineState.PENDING
    started_at: datetime = field(default_factory=lambda: datetime.now().astimezone())
    completed_at: Optional[datetime] = None
    # Stats
    total_lines: int = 0
    completed_submissions: int = 0
    failed_submissions: int = 0
    parse_errors: int = 0
    # Errors
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state is PipelineState.SUCCEEDED

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get processing duration in seconds."""
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def finish(
        self,
        reporter: CompletionReporter,
        tally: PipelineTally,
        parse_errors: int = 0,
    ) -> "PipelineResult":
        """Copy the final reporter state and tally into this result."""
        self.state = reporter.state
        self.error = str(reporter.error) if reporter.error else None
        self.total_lines = tally.total_lines
        self.completed_submissions = tally.completed_submissions
        self.failed_submissions = tally.failed_submissions
        self.parse_errors = parse_errors
        self.completed_at = datetime.now().astimezone()
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "bucket": self.source.bucket,
            "key": self.source.key,
            "state": self.state.value,
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
            "duration_seconds": self.duration_seconds,
            "total_lines": self.total_lines,
            "completed_submissions": self.completed_submissions,
            "failed_submissions": self.failed_submissions,
            "parse_errors": self.parse_errors,
            "error": self.error,
        }


class LogIndexingPipeline:
    """
    Streams log objects from storage into the search index.

    The HTTP client and signer are shared by every object the pipeline
    processes; tallies and reporters are created per object.

    Usage:
        settings = Settings.from_env()
        async with LogIndexingPipeline(settings, store, settings.index_target()) as p:
            results = await p.run_batch(sources)
    """

    def __init__(
        self,
        settings: Settings,
        store: ObjectStore,
        target: IndexTarget,
        client: Optional[httpx.AsyncClient] = None,
        signer: Optional[RequestSigner] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            settings: Endpoint, format and streaming settings
            store: Object store the log objects are read from
            target: Index and document type documents are sent to
            client: HTTP client (default: created and owned by the pipeline)
            signer: Request signer (default: created on first use from the
                environment's credentials)
        """
        self.settings = settings
        self.store = store
        self.target = target
        self._client = client
        self._owns_client = client is None
        self._signer = signer

    async def __aenter__(self) -> "LogIndexingPipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if the pipeline created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_client(self.settings.request_timeout_seconds)
            self._owns_client = True
        return self._client

    @property
    def signer(self) -> RequestSigner:
        if self._signer is None:
            self._signer = RequestSigner(region=self.settings.region)
        return self._signer

    async def run_batch(
        self,
        sources: Iterable[SourceObject],
        callback_factory: Optional[
            Callable[[SourceObject], Optional[CompletionCallback]]
        ] = None,
    ) -> list[PipelineResult]:
        """
        Process several source objects concurrently.

        Args:
            sources: Objects to process
            callback_factory: Returns the completion callback for an object

        Returns:
            One PipelineResult per source, in input order
        """
        sources = list(sources)
        logger.info(f"Processing batch of {len(sources)} log objects")
        results = await asyncio.gather(
            *(
                self.run(source, callback_factory(source) if callback_factory else None)
                for source in sources
            )
        )
        return list(results)

    async def run(
        self,
        source: SourceObject,
        callback: Optional[CompletionCallback] = None,
    ) -> PipelineResult:
        """
        Process one source object end to end.

        The completion callback fires exactly once, possibly before this
        coroutine returns (fail-fast). The coroutine itself returns only
        after every in-flight submission has resolved.

        Args:
            source: Object to process
            callback: Completion callback of the invoking context

        Returns:
            PipelineResult for the object
        """
        tally = PipelineTally()
        reporter = CompletionReporter(source, callback)
        result = PipelineResult(source=source)

        errors = self.settings.validate()
        if errors:
            error = ConfigurationError("Invalid configuration", problems=errors)
            logger.error(f"ERROR: {error}")
            reporter.fail(error)
            return result.finish(reporter, tally)

        try:
            signer = self.signer
        except ConfigurationError as e:
            logger.error(f"ERROR: {e}")
            reporter.fail(e)
            return result.finish(reporter, tally)

        try:
            chunks = await self.store.open_stream(
                source.bucket, source.key, self.settings.read_chunk_size
            )
        except StorageError as e:
            self._log_storage_error(source, e)
            reporter.fail(e)
            return result.finish(reporter, tally)

        logger.info(f"Indexing {source} into {self.target.path}")
        reporter.start()
        transformer = RecordTransformer(get_parser(self.settings.log_format), tally)
        sink = DeliverySink(
            client=self.client,
            signer=signer,
            endpoint_url=self.settings.endpoint_url,
            target=self.target,
            tally=tally,
            reporter=reporter,
            max_in_flight=self.settings.max_in_flight,
        )

        try:
            async with aclosing(
                transformer.transform(split_lines(decompress(chunks)))
            ) as documents:
                await sink.consume(documents)
        except StorageError as e:
            self._log_storage_error(source, e)
            reporter.fail(e)
        except IngestionError as e:
            logger.error(f"Error processing {source}: {e}")
            reporter.fail(e)
        except Exception as e:
            logger.exception(f"Unexpected error processing {source}")
            reporter.fail(e)
        finally:
            try:
                await sink.drain()
            except Exception as e:
                logger.exception(f"Unexpected submission error for {source}")
                reporter.fail(e)

        if not reporter.done:
            reporter.fail(
                IngestionError(
                    f"Pipeline for {source} ended before all records resolved "
                    f"({tally.completed_submissions} of {tally.total_lines})"
                )
            )

        result.finish(reporter, tally, parse_errors=transformer.parse_errors)
        logger.info(
            f"Finished {source}: {result.state.value}, "
            f"{tally.succeeded_submissions} of {tally.total_lines} log records added"
        )
        return result

    @staticmethod
    def _log_storage_error(source: SourceObject, error: StorageError) -> None:
        logger.error(str(error))
        logger.error(
            f'Error getting object "{source.key}" from bucket "{source.bucket}".  '
            "Make sure they exist and your bucket is in the same region as this function."
        )
