"""
HTTP utility functions.

Helpers for classifying and reporting indexing endpoint responses.
"""

import json
from typing import Optional

# Longest response excerpt carried in error messages
MAX_BODY_EXCERPT = 500


def get_status_category(status_code: Optional[int]) -> Optional[str]:
    """
    Categorize an HTTP status code.

    Categories:
        - '2xx_success': Document accepted (200-299)
        - '3xx_redirect': Redirection, never expected from the index (300-399)
        - '4xx_client_error': Document or request rejected (400-499)
        - '5xx_server_error': Cluster-side failure (500-599)

    Args:
        status_code: HTTP status code (e.g., 201, 400, 503)

    Returns:
        Category string, or None if status_code is None or out of range

    Examples:
        >>> get_status_category(201)
        '2xx_success'
        >>> get_status_category(429)
        '4xx_client_error'
    """
    if status_code is None:
        return None

    if 200 <= status_code < 300:
        return "2xx_success"
    elif 300 <= status_code < 400:
        return "3xx_redirect"
    elif 400 <= status_code < 500:
        return "4xx_client_error"
    elif 500 <= status_code < 600:
        return "5xx_server_error"
    else:
        return None


def is_success_status(status_code: Optional[int]) -> bool:
    """Check if a response status means the document was indexed (2xx)."""
    return status_code is not None and 200 <= status_code < 300


def body_excerpt(body: Optional[str], limit: int = MAX_BODY_EXCERPT) -> str:
    """
    Shorten a response body for log and error messages.

    Elasticsearch error bodies are JSON; when the body parses and carries
    an "error" object, its type and reason are preferred over raw text.

    Examples:
        >>> body_excerpt('{"error": {"type": "mapper_parsing_exception", "reason": "bad"}}')
        'mapper_parsing_exception: bad'
    """
    if not body:
        return ""

    try:
        payload = json.loads(body)
    except ValueError:
        payload = None

    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        error = payload["error"]
        text = f"{error.get('type', 'error')}: {error.get('reason', '')}".rstrip(": ")
    else:
        text = body.strip()

    if len(text) > limit:
        return text[:limit] + "..."
    return text
