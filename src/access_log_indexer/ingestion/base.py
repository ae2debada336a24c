"""
Abstract base class and data models for log ingestion.

Provides the parser interface that every log format implements and the
identifier of the compressed log objects the pipeline consumes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote_plus


@dataclass(frozen=True)
class SourceObject:
    """
    One compressed log file to process.

    Attributes:
        bucket: Storage container name
        key: Object key inside the container (already URL-decoded)
    """

    bucket: str
    key: str

    @classmethod
    def from_event_record(cls, record: dict) -> "SourceObject":
        """
        Create a SourceObject from an S3 event notification record.

        S3 notifications carry URL-encoded keys with spaces encoded as '+'.

        Args:
            record: One element of the event's "Records" list

        Returns:
            SourceObject instance

        Raises:
            KeyError: If the record lacks the bucket name or object key
        """
        s3 = record["s3"]
        return cls(
            bucket=s3["bucket"]["name"],
            key=unquote_plus(s3["object"]["key"]),
        )

    @property
    def uri(self) -> str:
        """Return the s3:// style URI of the object."""
        return f"s3://{self.bucket}/{self.key}"

    def __str__(self) -> str:
        return self.uri


class LogLineParser(ABC):
    """
    Abstract base class for all log line parsers.

    Each log format implements this interface to turn one raw line into a
    mapping of field name to value.

    Subclasses must implement:
        - log_format: Property returning the format identifier
        - parse(): Parse a single line

    Example Implementation:
        @ParserRegistry.register('alb')
        class ALBLogParser(LogLineParser):
            @property
            def log_format(self) -> str:
                return 'alb'

            def parse(self, line):
                fields = shlex.split(line)
                return {...}
    """

    @property
    @abstractmethod
    def log_format(self) -> str:
        """
        Return the log format identifier.

        This is used for registry lookup and logging.

        Returns:
            Format identifier string (e.g., 'alb', 'cdn')
        """
        pass

    @abstractmethod
    def parse(self, line: str) -> dict[str, Any]:
        """
        Parse a single log line.

        Args:
            line: Raw log line without line terminator

        Returns:
            Dictionary mapping field names to JSON-serializable values

        Raises:
            ParseError: If the line does not match the format
        """
        pass

    def is_record_line(self, line: str) -> bool:
        """
        Check whether a line carries a log record.

        Blank lines and '#' directive lines are not records. Formats with
        other non-record lines override this.

        Args:
            line: Raw log line

        Returns:
            True if the line should be parsed and indexed
        """
        stripped = line.strip()
        return bool(stripped) and not stripped.startswith("#")
