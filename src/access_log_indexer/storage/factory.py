"""
Object store factory.

Provides a factory function to create the object store the pipeline
reads log objects from.
"""

import logging
from typing import Optional

from .base import ObjectStore, StorageError

logger = logging.getLogger(__name__)

# Registry of available stores
_STORE_REGISTRY: dict[str, type[ObjectStore]] = {}


def register_store(store_type: str, store_class: type[ObjectStore]) -> None:
    """
    Register an object store class.

    Args:
        store_type: Store identifier (e.g., 's3')
        store_class: Class implementing the ObjectStore interface
    """
    _STORE_REGISTRY[store_type.lower()] = store_class
    logger.debug(f"Registered object store: {store_type}")


def get_store(store_type: Optional[str] = "s3", **kwargs) -> ObjectStore:
    """
    Get an object store instance.

    Args:
        store_type: Store type ('s3' or 'local')
        **kwargs: Additional arguments passed to the store constructor.
                  For S3: client, region_name. For local: root

    Returns:
        ObjectStore instance

    Raises:
        StorageError: If the store type is not supported or creation fails

    Examples:
        store = get_store('s3', region_name='eu-west-1')
        store = get_store('local', root='data/logs')
    """
    store_type = (store_type or "s3").lower()

    # Lazy-load store implementations
    if store_type not in _STORE_REGISTRY:
        _load_store(store_type)

    if store_type not in _STORE_REGISTRY:
        available = list(_STORE_REGISTRY.keys()) if _STORE_REGISTRY else ["none"]
        raise StorageError(
            f"Unknown object store: '{store_type}'. "
            f"Available stores: {', '.join(available)}"
        )

    store_class = _STORE_REGISTRY[store_type]

    try:
        store = store_class(**kwargs)
        logger.info(f"Created {store_type} object store")
        return store
    except Exception as e:
        raise StorageError(f"Failed to create {store_type} store: {e}") from e


def _load_store(store_type: str) -> None:
    """
    Lazy-load a store implementation.

    Args:
        store_type: Store type to load
    """
    if store_type == "s3":
        try:
            from .s3_store import S3ObjectStore

            register_store("s3", S3ObjectStore)
        except ImportError as e:
            logger.warning(f"S3 object store not available: {e}")
    elif store_type == "local":
        from .local_store import LocalFileStore

        register_store("local", LocalFileStore)
