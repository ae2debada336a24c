"""Utility functions for access log indexing."""

from .http_utils import body_excerpt, get_status_category, is_success_status

__all__ = [
    # HTTP utilities
    "body_excerpt",
    "get_status_category",
    "is_success_status",
]
