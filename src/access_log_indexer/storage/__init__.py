"""
Object store layer for reading compressed log objects.

Usage:
    from access_log_indexer.storage import get_store

    store = get_store('s3', region_name='eu-west-1')
    chunks = await store.open_stream('my-bucket', 'logs/file.log.gz')
"""

from .base import (
    ObjectAccessError,
    ObjectNotFoundError,
    ObjectStore,
    StorageError,
)
from .factory import get_store, register_store
from .local_store import LocalFileStore

__all__ = [
    # Base classes and exceptions
    "ObjectStore",
    "StorageError",
    "ObjectNotFoundError",
    "ObjectAccessError",
    # Stores
    "LocalFileStore",
    # Factory functions
    "get_store",
    "register_store",
]
