"""
Delivery sink stage.

Submits each JSON document to the index as its own signed POST request.
Submissions run concurrently (bounded by a semaphore) and may resolve in
any order; every resolution updates the tally and re-checks the drain
condition. The first failed submission fails the source object at once.
"""

import asyncio
import logging
from typing import AsyncIterable, Optional

import httpx
from botocore.exceptions import BotoCoreError

from ..config.constants import DEFAULT_MAX_IN_FLIGHT, INDEX_CONTENT_TYPE
from ..config.settings import IndexTarget
from ..ingestion.exceptions import SubmissionError
from ..utils.http_utils import body_excerpt, get_status_category, is_success_status
from .signing import RequestSigner
from .tally import CompletionReporter, PipelineTally

logger = logging.getLogger(__name__)


class DeliverySink:
    """
    Sends documents to the indexing endpoint and tracks their completion.

    Usage:
        sink = DeliverySink(client, signer, endpoint_url, target, tally, reporter)
        await sink.consume(documents)
        await sink.drain()
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        signer: RequestSigner,
        endpoint_url: str,
        target: IndexTarget,
        tally: PipelineTally,
        reporter: CompletionReporter,
        max_in_flight: int = DEFAULT_MAX_IN_FLIGHT,
    ):
        self.client = client
        self.signer = signer
        self.url = f"{endpoint_url.rstrip('/')}{target.path}"
        self.tally = tally
        self.reporter = reporter
        self.submitted = 0
        self._semaphore = asyncio.Semaphore(max_in_flight)
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def consume(self, documents: AsyncIterable[str]) -> None:
        """
        Pull documents and start one submission per document.

        Waits for a free submission slot before pulling the next document.
        Stops pulling once the source object has failed; submissions
        already in flight keep running.

        Args:
            documents: Async iterable of serialized documents
        """
        async for document in documents:
            await self._semaphore.acquire()
            if self.reporter.done:
                self._semaphore.release()
                logger.info(
                    f"Stopped sending after failure: {self.submitted} documents sent"
                )
                return

            self.submitted += 1
            task = asyncio.create_task(self._submit(document))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        # Submissions that all resolved before the last line was counted
        # (or an empty file) reach the drain condition only here
        self.check_drain()

    async def drain(self) -> None:
        """
        Wait for every in-flight submission to resolve.

        Raises:
            Exception: The first unexpected error raised by a submission task
        """
        while self._tasks:
            results = await asyncio.gather(*list(self._tasks), return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    raise result

    def check_drain(self) -> None:
        """Report success if the tally is drained and nothing was reported yet."""
        if self.tally.is_drained and self.reporter.succeed():
            logger.info(
                f"All {self.tally.succeeded_submissions} log records added to index "
                f"{self.url}"
            )

    async def _submit(self, document: str) -> None:
        try:
            response_text = await self._post(document)
        except SubmissionError as e:
            self._record_failure(e)
        except Exception as e:
            # Any other error still resolves the submission as failed
            logger.exception(f"Unexpected error submitting to {self.url}")
            error = SubmissionError(f"Unexpected submission error: {e!r}")
            error.__cause__ = e
            self._record_failure(error)
        else:
            self.tally.record_completion(success=True)
            logger.info(response_text)
            self.check_drain()
        finally:
            self._semaphore.release()

    def _record_failure(self, error: SubmissionError) -> None:
        self.tally.record_completion(success=False)
        logger.error(f"Error: {error}")
        logger.error(
            f"{self.tally.succeeded_submissions} of {self.tally.total_lines} "
            f"log records added to index."
        )
        self.reporter.fail(error)

    async def _post(self, document: str) -> str:
        """
        Sign and send one document.

        Returns:
            Response body

        Raises:
            SubmissionError: If signing or transport fails, or the endpoint
                answers with a non-2xx status
        """
        body = document.encode("utf-8")
        try:
            headers = self.signer.sign(
                "POST", self.url, body, {"Content-Type": INDEX_CONTENT_TYPE}
            )
        except (BotoCoreError, ValueError) as e:
            raise SubmissionError(f"Failed to sign request: {e}") from e

        try:
            response = await self.client.post(self.url, content=body, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise SubmissionError(f"Request to {self.url} failed: {e!r}") from e

        if not is_success_status(response.status_code):
            raise SubmissionError(
                f"Index rejected document ({get_status_category(response.status_code)}): "
                f"{body_excerpt(response.text)}",
                status_code=response.status_code,
                response_body=response.text,
            )

        return response.text

    def __repr__(self) -> str:
        return (
            f"DeliverySink(url={self.url!r}, submitted={self.submitted}, "
            f"in_flight={self.in_flight})"
        )


def build_client(timeout_seconds: Optional[float] = None) -> httpx.AsyncClient:
    """Create the HTTP client shared by all submissions of a process."""
    return httpx.AsyncClient(timeout=timeout_seconds)
