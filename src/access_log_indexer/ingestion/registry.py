"""
Parser registry for log formats.

Provides registration and discovery of log line parser implementations.
"""

import logging
from typing import Type

from .base import LogLineParser
from .exceptions import ParserNotFoundError

logger = logging.getLogger(__name__)


class ParserRegistry:
    """
    Registry for log line parsers.

    Usage:
        # Register using decorator
        @ParserRegistry.register('alb')
        class ALBLogParser(LogLineParser):
            ...

        # Or register manually
        ParserRegistry.register_parser('alb', ALBLogParser)

        # Get parser instance
        parser = ParserRegistry.get_parser('alb')
    """

    _parsers: dict[str, Type[LogLineParser]] = {}

    @classmethod
    def register(cls, log_format: str):
        """
        Decorator to register a parser class.

        Args:
            log_format: Format identifier for registry lookup

        Returns:
            Decorator function
        """

        def decorator(parser_class: Type[LogLineParser]) -> Type[LogLineParser]:
            cls.register_parser(log_format, parser_class)
            return parser_class

        return decorator

    @classmethod
    def register_parser(
        cls, log_format: str, parser_class: Type[LogLineParser]
    ) -> None:
        """
        Register a parser class for a log format.

        Args:
            log_format: Format identifier (e.g., 'alb')
            parser_class: Class implementing LogLineParser

        Raises:
            TypeError: If parser_class doesn't inherit from LogLineParser
        """
        if not issubclass(parser_class, LogLineParser):
            raise TypeError(
                f"Parser class must inherit from LogLineParser, "
                f"got {parser_class.__name__}"
            )

        log_format = log_format.lower()

        if log_format in cls._parsers:
            logger.warning(f"Overwriting existing parser for format '{log_format}'")

        cls._parsers[log_format] = parser_class
        logger.debug(f"Registered log parser: {log_format}")

    @classmethod
    def get_parser(cls, log_format: str) -> LogLineParser:
        """
        Get a parser instance by log format.

        Args:
            log_format: Format identifier

        Returns:
            Instantiated parser for the format

        Raises:
            ParserNotFoundError: If the format is not registered
        """
        log_format = log_format.lower()

        if log_format not in cls._parsers:
            raise ParserNotFoundError(
                log_format=log_format,
                available_formats=list(cls._parsers.keys()),
            )

        return cls._parsers[log_format]()

    @classmethod
    def list_formats(cls) -> list[str]:
        """Return the sorted list of registered format identifiers."""
        return sorted(cls._parsers.keys())

    @classmethod
    def is_format_registered(cls, log_format: str) -> bool:
        """Check if a log format is registered."""
        return log_format.lower() in cls._parsers

    @classmethod
    def clear(cls) -> None:
        """
        Clear all registered parsers.

        Primarily used for testing to reset registry state.
        """
        cls._parsers.clear()
        logger.debug("Cleared log parser registry")


# =============================================================================
# Convenience Functions
# =============================================================================


def get_parser(log_format: str) -> LogLineParser:
    """
    Get a parser instance by log format.

    Convenience function wrapping ParserRegistry.get_parser().

    Raises:
        ParserNotFoundError: If the format is not registered
    """
    return ParserRegistry.get_parser(log_format)


def list_formats() -> list[str]:
    """List all registered log formats."""
    return ParserRegistry.list_formats()
