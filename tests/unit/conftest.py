"""
Pytest configuration and shared fixtures for unit tests.
"""

import pytest
from botocore.credentials import Credentials

from tests.helpers import ALB_LINE, CDN_LINE


@pytest.fixture
def alb_line() -> str:
    return ALB_LINE


@pytest.fixture
def cdn_line() -> str:
    return CDN_LINE


@pytest.fixture
def credentials() -> Credentials:
    """Static credentials for request signing tests."""
    return Credentials("AKIDEXAMPLE", "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY")


@pytest.fixture
def register_parsers():
    """
    Ensure the built-in parsers are registered.

    ParserRegistry.clear() in registry tests empties the class-level map,
    so tests relying on registration re-register explicitly.
    """
    from access_log_indexer.ingestion.parsers import ALBLogParser, CloudFrontLogParser
    from access_log_indexer.ingestion.registry import ParserRegistry

    if not ParserRegistry.is_format_registered("alb"):
        ParserRegistry.register_parser("alb", ALBLogParser)
    if not ParserRegistry.is_format_registered("cdn"):
        ParserRegistry.register_parser("cdn", CloudFrontLogParser)
