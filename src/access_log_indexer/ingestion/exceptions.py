"""
Custom exceptions for the ingestion pipeline.

Provides specialized exception classes for the error conditions that can
occur while streaming a log object from storage into the search index.
"""


class IngestionError(Exception):
    """
    Base exception for all ingestion-related errors.

    All other ingestion exceptions inherit from this class,
    allowing for broad exception catching when needed.
    """

    pass


class ConfigurationError(IngestionError):
    """
    Raised when required configuration is missing or invalid.

    Fatal for a source object before any storage I/O begins.

    Attributes:
        problems: List of individual configuration problems
        message: Detailed error message
    """

    def __init__(self, message: str, problems: list[str] | None = None):
        self.problems = problems or []
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with the individual problems."""
        if self.problems:
            return f"{self.message}: {'; '.join(self.problems)}"
        return self.message


class DecompressionError(IngestionError):
    """
    Raised when a compressed stream is malformed or truncated.

    Attributes:
        bytes_consumed: Number of compressed bytes read before the failure
        message: Detailed error message
    """

    def __init__(self, message: str, bytes_consumed: int | None = None):
        self.bytes_consumed = bytes_consumed
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.bytes_consumed is not None:
            return f"{self.message} (after {self.bytes_consumed} compressed bytes)"
        return self.message


class ParseError(IngestionError):
    """
    Raised when a log line cannot be parsed.

    Non-fatal inside the pipeline: the transformer turns it into a
    marker document so every counted line still gets one submission.

    Attributes:
        line_number: The line number where parsing failed (optional)
        line_content: The content of the problematic line (optional)
        message: Detailed error message
    """

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        line_content: str | None = None,
    ):
        self.line_number = line_number
        self.line_content = line_content
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with line context."""
        if self.line_number is not None and self.line_content:
            # Truncate long lines for readability
            content = (
                self.line_content[:100] + "..."
                if len(self.line_content) > 100
                else self.line_content
            )
            return f"{self.message} (line {self.line_number}: {content!r})"
        elif self.line_number is not None:
            return f"{self.message} (line {self.line_number})"
        return self.message


class SubmissionError(IngestionError):
    """
    Raised when the indexing endpoint rejects a document or is unreachable.

    Attributes:
        status_code: HTTP status returned by the endpoint (None for transport errors)
        response_body: Response body returned by the endpoint (optional)
        message: Detailed error message
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        self.status_code = status_code
        self.response_body = response_body
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status={self.status_code})"
        return self.message


class ParserNotFoundError(IngestionError):
    """
    Raised when no parser is registered for a log format.

    Attributes:
        log_format: The requested log format
        available_formats: List of registered log formats
    """

    def __init__(
        self,
        log_format: str,
        available_formats: list[str] | None = None,
    ):
        self.log_format = log_format
        self.available_formats = available_formats or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with available formats."""
        if self.available_formats:
            available = ", ".join(sorted(self.available_formats))
            return (
                f"Unknown log format: '{self.log_format}'. "
                f"Available formats: {available}"
            )
        return f"Unknown log format: '{self.log_format}'. No parsers registered."
