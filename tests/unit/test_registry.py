"""
Unit tests for the parser registry.
"""

import pytest

from access_log_indexer.ingestion.base import LogLineParser
from access_log_indexer.ingestion.exceptions import ParserNotFoundError
from access_log_indexer.ingestion.parsers import ALBLogParser, CloudFrontLogParser
from access_log_indexer.ingestion.registry import ParserRegistry, get_parser, list_formats


class StubParser(LogLineParser):
    """Minimal parser used to exercise registration."""

    @property
    def log_format(self) -> str:
        return "stub"

    def parse(self, line):
        return {"line": line}


@pytest.fixture
def clean_registry(register_parsers):
    """Remove the stub format after each test."""
    yield
    ParserRegistry._parsers.pop("stub", None)


class TestParserRegistry:
    """Tests for ParserRegistry."""

    def test_builtin_formats_registered(self, register_parsers):
        """ALB and CloudFront parsers register on import."""
        assert ParserRegistry.is_format_registered("alb")
        assert ParserRegistry.is_format_registered("cdn")
        assert {"alb", "cdn"} <= set(list_formats())

    def test_get_parser_returns_instance(self, register_parsers):
        """get_parser instantiates the registered class."""
        assert isinstance(get_parser("alb"), ALBLogParser)
        assert isinstance(get_parser("cdn"), CloudFrontLogParser)

    def test_lookup_is_case_insensitive(self, register_parsers):
        """Format names are matched case-insensitively."""
        assert isinstance(get_parser("ALB"), ALBLogParser)
        assert ParserRegistry.is_format_registered("Cdn")

    def test_unknown_format(self, register_parsers):
        """Unknown formats raise ParserNotFoundError listing the choices."""
        with pytest.raises(ParserNotFoundError) as exc_info:
            get_parser("nginx")
        assert exc_info.value.log_format == "nginx"
        assert "alb" in exc_info.value.available_formats

    def test_register_decorator(self, clean_registry):
        """The decorator registers and returns the class unchanged."""
        decorated = ParserRegistry.register("stub")(StubParser)
        assert decorated is StubParser
        assert get_parser("stub").parse("x") == {"line": "x"}

    def test_register_rejects_non_parser(self, clean_registry):
        """Only LogLineParser subclasses can be registered."""
        with pytest.raises(TypeError):
            ParserRegistry.register_parser("stub", dict)

    def test_clear(self, register_parsers):
        """clear() empties the registry."""
        ParserRegistry.clear()
        try:
            assert list_formats() == []
        finally:
            ParserRegistry.register_parser("alb", ALBLogParser)
            ParserRegistry.register_parser("cdn", CloudFrontLogParser)
