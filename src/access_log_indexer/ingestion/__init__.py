"""
Ingestion layer: log formats, streaming stages and error types.

Provides the building blocks the pipeline wires together:
- SourceObject identifying a compressed log object in storage
- decompress() / split_lines() streaming stages
- Pluggable per-format parsers behind a registry

Usage:
    from access_log_indexer.ingestion import (
        SourceObject,
        decompress,
        get_parser,
        split_lines,
    )

    parser = get_parser('alb')
    async for line in split_lines(decompress(chunks)):
        print(parser.parse(line))
"""

from .base import LogLineParser, SourceObject
from .exceptions import (
    ConfigurationError,
    DecompressionError,
    IngestionError,
    ParseError,
    ParserNotFoundError,
    SubmissionError,
)
from .registry import ParserRegistry, get_parser, list_formats
from .streams import decompress, split_lines

# Import parsers to register them
from .parsers import ALBLogParser, CloudFrontLogParser  # noqa: E402

__all__ = [
    # Base classes and data models
    "LogLineParser",
    "SourceObject",
    # Registry functions
    "ParserRegistry",
    "get_parser",
    "list_formats",
    # Parsers
    "ALBLogParser",
    "CloudFrontLogParser",
    # Streaming stages
    "decompress",
    "split_lines",
    # Exceptions
    "IngestionError",
    "ConfigurationError",
    "DecompressionError",
    "ParseError",
    "ParserNotFoundError",
    "SubmissionError",
]
