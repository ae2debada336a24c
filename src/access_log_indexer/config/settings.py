"""
Application settings and configuration management.

Supports loading from:
1. A YAML config file (path from ACCESS_LOG_INDEXER_CONFIG)
2. Environment variables (fallback)
"""

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit

import yaml

from .constants import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_MAX_IN_FLIGHT,
    DEFAULT_READ_CHUNK_SIZE,
    DEFAULT_REGION,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ENV_CONFIG_PATH,
    ENV_DOC_TYPE,
    ENV_ES_ENDPOINT,
    ENV_INDEX_PREFIX,
    ENV_LOG_FORMAT,
    ENV_MAX_IN_FLIGHT,
    ENV_READ_CHUNK_SIZE,
    ENV_REGION,
    ENV_REQUEST_TIMEOUT,
    INDEX_DATE_FORMAT,
    SUPPORTED_LOG_FORMATS,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Index Target
# =============================================================================


@dataclass(frozen=True)
class IndexTarget:
    """
    Resolved destination for indexed documents.

    Computed once per process; documents arriving near midnight are not
    moved to the next day's index mid-run.
    """

    index_name: str
    doc_type: str

    @classmethod
    def for_date(cls, prefix: str, doc_type: str, day: date) -> "IndexTarget":
        """Build the target for a prefix and UTC day, e.g. alblogs-2016.03.31."""
        return cls(
            index_name=f"{prefix}-{day.strftime(INDEX_DATE_FORMAT)}",
            doc_type=doc_type,
        )

    @property
    def path(self) -> str:
        """Request path documents are POSTed to."""
        return f"/{self.index_name}/{self.doc_type}"


# =============================================================================
# Main Settings
# =============================================================================


def _env(names: tuple[str, ...], default: str = "") -> str:
    """Return the first non-empty environment variable among names."""
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return default


def _safe_int(names: tuple[str, ...], default: int) -> int:
    """Safely parse int from env var, using default on error."""
    try:
        return int(_env(names, str(default)))
    except ValueError:
        return default


def _safe_float(names: tuple[str, ...], default: float) -> float:
    """Safely parse float from env var, using default on error."""
    try:
        return float(_env(names, str(default)))
    except ValueError:
        return default


@dataclass
class Settings:
    """Settings for streaming log objects into the search index."""

    # Indexing endpoint
    es_endpoint: str = ""
    region: str = DEFAULT_REGION

    # Log format and index naming (blank prefix/doc type derive from format)
    log_format: str = DEFAULT_LOG_FORMAT
    index_prefix: str = ""
    doc_type: str = ""

    # Streaming
    max_in_flight: int = DEFAULT_MAX_IN_FLIGHT
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE

    def __post_init__(self):
        self.log_format = (self.log_format or DEFAULT_LOG_FORMAT).lower()
        if not self.index_prefix:
            self.index_prefix = f"{self.log_format}logs"
        if not self.doc_type:
            self.doc_type = f"{self.log_format}-log"

    @property
    def endpoint_url(self) -> str:
        """Endpoint as a base URL; bare host names default to https."""
        endpoint = self.es_endpoint.strip().rstrip("/")
        if endpoint and "://" not in endpoint:
            endpoint = f"https://{endpoint}"
        return endpoint

    def validate(self) -> list[str]:
        """Validate required settings are present. Returns list of errors."""
        errors = []

        if not self.es_endpoint:
            errors.append("es_endpoint is required")
        else:
            errors.extend(self._validate_endpoint())

        if not self.region:
            errors.append("region is required")

        if self.log_format not in SUPPORTED_LOG_FORMATS:
            errors.append(
                f"log_format must be one of {', '.join(SUPPORTED_LOG_FORMATS)}, "
                f"got '{self.log_format}'"
            )

        if not self.index_prefix:
            errors.append("index_prefix is required")

        if not self.doc_type:
            errors.append("doc_type is required")

        if self.max_in_flight < 1:
            errors.append(f"max_in_flight must be >= 1, got {self.max_in_flight}")

        if self.request_timeout_seconds <= 0:
            errors.append(
                f"request_timeout_seconds must be > 0, "
                f"got {self.request_timeout_seconds}"
            )

        if self.read_chunk_size < 1:
            errors.append(f"read_chunk_size must be >= 1, got {self.read_chunk_size}")

        return errors

    def _validate_endpoint(self) -> list[str]:
        """Check the endpoint URL has a scheme, a host and a valid port."""
        parts = urlsplit(self.endpoint_url)
        if parts.scheme not in ("http", "https"):
            return [f"es_endpoint scheme must be http or https, got '{parts.scheme}'"]
        if not parts.hostname:
            return [f"es_endpoint has no host: '{self.es_endpoint}'"]
        try:
            parts.port
        except ValueError as e:
            return [f"es_endpoint has an invalid port: {e}"]
        return []

    def index_target(self, today: Optional[date] = None) -> IndexTarget:
        """
        Resolve the IndexTarget for this run.

        Args:
            today: Day to embed in the index name (default: current UTC date)

        Returns:
            IndexTarget instance
        """
        if today is None:
            today = datetime.now(timezone.utc).date()
        return IndexTarget.for_date(self.index_prefix, self.doc_type, today)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "es_endpoint": self.es_endpoint,
            "region": self.region,
            "log_format": self.log_format,
            "index_prefix": self.index_prefix,
            "doc_type": self.doc_type,
            "max_in_flight": self.max_in_flight,
            "request_timeout_seconds": self.request_timeout_seconds,
            "read_chunk_size": self.read_chunk_size,
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Settings":
        """Create Settings from configuration dictionary (e.g., from YAML)."""
        es = config.get("elasticsearch", {})
        streaming = config.get("streaming", {})

        return cls(
            es_endpoint=es.get("endpoint", ""),
            region=es.get("region", DEFAULT_REGION),
            log_format=config.get("log_format", DEFAULT_LOG_FORMAT),
            index_prefix=es.get("index_prefix", ""),
            doc_type=es.get("doc_type", ""),
            max_in_flight=streaming.get("max_in_flight", DEFAULT_MAX_IN_FLIGHT),
            request_timeout_seconds=streaming.get(
                "request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
            read_chunk_size=streaming.get("read_chunk_size", DEFAULT_READ_CHUNK_SIZE),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """
        Create Settings from a YAML config file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            yaml.YAMLError: If the file is not valid YAML
        """
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        return cls.from_dict(config)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        return cls(
            es_endpoint=_env(ENV_ES_ENDPOINT),
            region=_env(ENV_REGION, DEFAULT_REGION),
            log_format=_env(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT),
            index_prefix=_env(ENV_INDEX_PREFIX),
            doc_type=_env(ENV_DOC_TYPE),
            max_in_flight=_safe_int(ENV_MAX_IN_FLIGHT, DEFAULT_MAX_IN_FLIGHT),
            request_timeout_seconds=_safe_float(
                ENV_REQUEST_TIMEOUT, DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
            read_chunk_size=_safe_int(ENV_READ_CHUNK_SIZE, DEFAULT_READ_CHUNK_SIZE),
        )


@lru_cache
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Loads from a YAML config file if one is given (or named by
    ACCESS_LOG_INDEXER_CONFIG) and exists, otherwise from env vars.

    Args:
        config_path: Optional path to a YAML config file

    Returns:
        Settings instance
    """
    path_str = config_path or os.environ.get(ENV_CONFIG_PATH)

    if path_str:
        path = Path(path_str)
        if path.exists():
            try:
                return Settings.from_yaml(path)
            except (OSError, yaml.YAMLError) as e:
                logger.warning(
                    f"Failed to load config from {path}: {e}. "
                    "Falling back to environment variables"
                )
        else:
            logger.warning(f"Config file {path} not found, using environment variables")

    return Settings.from_env()


def clear_settings_cache() -> None:
    """Clear the cached settings (useful for testing)."""
    get_settings.cache_clear()
