"""
Local directory object store.

Maps bucket/key onto <root>/<bucket>/<key>. Used for local runs of
already-downloaded log files and in tests.
"""

import asyncio
import logging
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Union

from ..config.constants import DEFAULT_READ_CHUNK_SIZE
from .base import ObjectAccessError, ObjectNotFoundError, ObjectStore, StorageError

logger = logging.getLogger(__name__)


class LocalFileStore(ObjectStore):
    """Object store reading files below a root directory."""

    def __init__(self, root: Union[str, Path] = "."):
        self.root = Path(root)

    @property
    def store_type(self) -> str:
        """Return the store type identifier."""
        return "local"

    def resolve(self, bucket: str, key: str) -> Path:
        """Return the file path for bucket/key."""
        return self.root / bucket / key

    async def open_stream(
        self,
        bucket: str,
        key: str,
        chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
    ) -> AsyncIterator[bytes]:
        """Open the file and return an iterator over its bytes."""
        path = self.resolve(bucket, key)

        if not path.is_file():
            raise ObjectNotFoundError(
                f"File not found: {path}", bucket=bucket, key=key
            )

        try:
            handle = open(path, "rb")
        except PermissionError as e:
            raise ObjectAccessError(
                f"Permission denied: {path}", bucket=bucket, key=key
            ) from e
        except OSError as e:
            raise StorageError(
                f"Cannot open {path}: {e}", bucket=bucket, key=key
            ) from e

        return self._iter_file(handle, bucket, key, chunk_size)

    @staticmethod
    async def _iter_file(
        handle: BinaryIO, bucket: str, key: str, chunk_size: int
    ) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await asyncio.to_thread(handle.read, chunk_size)
                if not chunk:
                    break
                yield chunk
        except OSError as e:
            raise StorageError(
                f"Failed reading file: {e}", bucket=bucket, key=key
            ) from e
        finally:
            handle.close()
