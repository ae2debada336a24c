"""
Abstract base class for object stores.

Provides a unified interface for streaming log objects out of storage,
enabling switching between S3 (production) and a local directory
(development and tests).
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from ..config.constants import DEFAULT_READ_CHUNK_SIZE
from ..ingestion.exceptions import IngestionError


class ObjectStore(ABC):
    """
    Abstract base class for object stores.

    All store implementations must implement this interface to ensure
    consistent error behavior across backends.
    """

    @property
    @abstractmethod
    def store_type(self) -> str:
        """Return the store type identifier (e.g., 's3')."""
        pass

    @abstractmethod
    async def open_stream(
        self,
        bucket: str,
        key: str,
        chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
    ) -> AsyncIterator[bytes]:
        """
        Open an object for streaming.

        The object is looked up before this coroutine returns, so a missing
        object or denied access surfaces here rather than mid-stream.

        Args:
            bucket: Container name
            key: Object key
            chunk_size: Maximum bytes per yielded chunk

        Returns:
            Async iterator over the object's raw bytes

        Raises:
            ObjectNotFoundError: If the bucket or key does not exist
            ObjectAccessError: If access is denied or the bucket is in
                another region
            StorageError: For other storage failures (also raised by the
                returned iterator on mid-stream read errors)
        """
        pass

    async def close(self) -> None:
        """Release resources. Default implementation does nothing."""
        return None


class StorageError(IngestionError):
    """
    Base exception for object store errors.

    Attributes:
        bucket: Container the failing object belongs to
        key: Key of the failing object
        message: Detailed error message
    """

    def __init__(
        self,
        message: str,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
    ):
        self.bucket = bucket
        self.key = key
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with object context."""
        if self.bucket is not None and self.key is not None:
            return f'{self.message} (bucket="{self.bucket}", key="{self.key}")'
        return self.message


class ObjectNotFoundError(StorageError):
    """Raised when the requested bucket or key does not exist."""

    pass


class ObjectAccessError(StorageError):
    """Raised when access is denied or the bucket lives in another region."""

    pass
