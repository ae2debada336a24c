"""
AWS CloudFront standard ("web") access log parser.

CloudFront logs use the W3C extended log format with tab-separated values:

    #Version: 1.0
    #Fields: date time x-edge-location sc-bytes c-ip cs-method cs(Host) ...
    2024-01-15	12:30:45	IAD89-C1	1045	192.0.2.100	GET	d111.cloudfront.net	...

Directive lines are not records; `is_record_line` rejects them. Documents
keep the W3C field names as keys and add a combined ISO `timestamp`.
"""

import logging
import urllib.parse
from datetime import datetime, timezone
from typing import Any

from ..base import LogLineParser
from ..exceptions import ParseError
from ..registry import ParserRegistry

logger = logging.getLogger(__name__)


@ParserRegistry.register("cdn")
class CloudFrontLogParser(LogLineParser):
    """
    Parser for CloudFront standard log lines.

    Older distributions write fewer columns; any line with at least
    MIN_FIELD_COUNT columns is accepted and missing columns are omitted.
    """

    FIELD_NAMES = [
        "date",
        "time",
        "x-edge-location",
        "sc-bytes",
        "c-ip",
        "cs-method",
        "cs(Host)",
        "cs-uri-stem",
        "sc-status",
        "cs(Referer)",
        "cs(User-Agent)",
        "cs-uri-query",
        "cs(Cookie)",
        "x-edge-result-type",
        "x-edge-request-id",
        "x-host-header",
        "cs-protocol",
        "cs-bytes",
        "time-taken",
        "x-forwarded-for",
        "ssl-protocol",
        "ssl-cipher",
        "x-edge-response-result-type",
        "cs-protocol-version",
        "fle-status",
        "fle-encrypted-fields",
        "c-port",
        "time-to-first-byte",
        "x-edge-detailed-result-type",
        "sc-content-type",
        "sc-content-len",
        "sc-range-start",
        "sc-range-end",
    ]

    # date through cs-uri-query
    MIN_FIELD_COUNT = 12

    INT_FIELDS = frozenset(
        [
            "sc-bytes",
            "sc-status",
            "cs-bytes",
            "c-port",
            "sc-content-len",
            "sc-range-start",
            "sc-range-end",
        ]
    )
    FLOAT_FIELDS = frozenset(["time-taken", "time-to-first-byte"])

    # Fields that CloudFront writes URL-encoded
    URL_DECODE_FIELDS = frozenset(
        [
            "cs(User-Agent)",
            "cs(Referer)",
            "cs-uri-query",
            "cs-uri-stem",
        ]
    )

    def __init__(self, url_decode: bool = True):
        """
        Initialize CloudFront parser.

        Args:
            url_decode: If True, URL-decode fields like User-Agent and query strings
        """
        self.url_decode = url_decode

    @property
    def log_format(self) -> str:
        """Return the log format identifier."""
        return "cdn"

    def parse(self, line: str) -> dict[str, Any]:
        """
        Parse a single CloudFront log line.

        Args:
            line: Tab-separated log line

        Returns:
            Dictionary keyed by W3C field name, plus `timestamp`

        Raises:
            ParseError: If the line is not a valid CloudFront log entry
        """
        values = line.rstrip("\n").split("\t")
        if len(values) < self.MIN_FIELD_COUNT:
            raise ParseError(
                f"CloudFront log line has {len(values)} fields, "
                f"expected at least {self.MIN_FIELD_COUNT}",
                line_content=line,
            )

        doc: dict[str, Any] = {}
        for name, value in zip(self.FIELD_NAMES, values):
            doc[name] = self._convert(name, value.strip())

        doc["timestamp"] = self._parse_timestamp(
            values[0].strip(), values[1].strip(), line
        )
        return doc

    def _convert(self, name: str, value: str) -> Any:
        """Convert a raw column value to its JSON representation."""
        if not value or value == "-":
            return None
        if name in self.INT_FIELDS:
            try:
                return int(value)
            except ValueError:
                return None
        if name in self.FLOAT_FIELDS:
            try:
                return float(value)
            except ValueError:
                return None
        if self.url_decode and name in self.URL_DECODE_FIELDS:
            return urllib.parse.unquote(value, errors="replace")
        return value

    @staticmethod
    def _parse_timestamp(date_value: str, time_value: str, line: str) -> str:
        """
        Combine the date and time columns into an ISO 8601 UTC timestamp.

        Raises:
            ParseError: If the columns do not form a valid timestamp
        """
        try:
            dt = datetime.strptime(f"{date_value} {time_value}", "%Y-%m-%d %H:%M:%S")
        except ValueError as e:
            raise ParseError(
                f"Invalid CloudFront date/time '{date_value} {time_value}'",
                line_content=line,
            ) from e
        return dt.replace(tzinfo=timezone.utc).isoformat().replace("+00:00", "Z")
