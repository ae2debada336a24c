"""Configuration module."""

from .constants import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_MAX_IN_FLIGHT,
    DEFAULT_REGION,
    ES_SERVICE_NAME,
    INDEX_CONTENT_TYPE,
    SUPPORTED_LOG_FORMATS,
)
from .settings import IndexTarget, Settings, clear_settings_cache, get_settings

__all__ = [
    # Defaults
    "DEFAULT_LOG_FORMAT",
    "DEFAULT_MAX_IN_FLIGHT",
    "DEFAULT_REGION",
    "ES_SERVICE_NAME",
    "INDEX_CONTENT_TYPE",
    "SUPPORTED_LOG_FORMATS",
    # Settings
    "IndexTarget",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
