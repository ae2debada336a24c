"""
S3 object store.

Streams objects with boto3. The boto3 client is blocking, so each
network call runs in a worker thread and the event loop stays free
for in-flight indexing requests.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config.constants import DEFAULT_READ_CHUNK_SIZE
from .base import ObjectAccessError, ObjectNotFoundError, ObjectStore, StorageError

logger = logging.getLogger(__name__)

# S3 error codes meaning the object cannot be found
NOT_FOUND_CODES = frozenset(["NoSuchKey", "NoSuchBucket", "404", "NotFound"])

# S3 error codes meaning the caller may not read the object from this region
ACCESS_CODES = frozenset(
    [
        "AccessDenied",
        "403",
        "Forbidden",
        "AllAccessDisabled",
        "PermanentRedirect",
        "301",
        "AuthorizationHeaderMalformed",
        "IllegalLocationConstraintException",
    ]
)


class S3ObjectStore(ObjectStore):
    """
    Object store backed by Amazon S3.

    Example:
        store = S3ObjectStore(region_name="eu-west-1")
        chunks = await store.open_stream("my-logs", "AWSLogs/.../file.log.gz")
        async for chunk in chunks:
            ...
    """

    def __init__(self, client: Any = None, region_name: Optional[str] = None):
        """
        Initialize S3 store.

        Args:
            client: Pre-built boto3 S3 client (default: created from the
                environment's credentials)
            region_name: Region for the default client
        """
        self._client = client or boto3.client("s3", region_name=region_name)

    @property
    def store_type(self) -> str:
        """Return the store type identifier."""
        return "s3"

    async def open_stream(
        self,
        bucket: str,
        key: str,
        chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
    ) -> AsyncIterator[bytes]:
        """Look up the object and return an iterator over its body."""
        try:
            response = await asyncio.to_thread(
                self._client.get_object, Bucket=bucket, Key=key
            )
        except ClientError as e:
            raise self._translate_client_error(e, bucket, key) from e
        except BotoCoreError as e:
            raise StorageError(
                f"Failed to get object: {e}", bucket=bucket, key=key
            ) from e

        logger.debug(
            f"Opened s3://{bucket}/{key} ({response.get('ContentLength', '?')} bytes)"
        )
        return self._iter_body(response["Body"], bucket, key, chunk_size)

    @staticmethod
    async def _iter_body(
        body: Any, bucket: str, key: str, chunk_size: int
    ) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await asyncio.to_thread(body.read, chunk_size)
                if not chunk:
                    break
                yield chunk
        except (BotoCoreError, ClientError) as e:
            raise StorageError(
                f"Failed reading object body: {e}", bucket=bucket, key=key
            ) from e
        finally:
            body.close()

    @staticmethod
    def _translate_client_error(
        error: ClientError, bucket: str, key: str
    ) -> StorageError:
        """Map a botocore ClientError onto the storage error taxonomy."""
        code = str(error.response.get("Error", {}).get("Code", ""))
        message = error.response.get("Error", {}).get("Message") or str(error)

        if code in NOT_FOUND_CODES:
            return ObjectNotFoundError(
                f"Object not found: {message}", bucket=bucket, key=key
            )
        if code in ACCESS_CODES:
            return ObjectAccessError(
                f"Access to object failed ({code}): {message}",
                bucket=bucket,
                key=key,
            )
        return StorageError(
            f"Failed to get object ({code}): {message}", bucket=bucket, key=key
        )
