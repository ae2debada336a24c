"""
AWS Application Load Balancer (ALB) access log parser.

ALB access logs are space-separated with quoted fields:

    type time elb client:port target:port request_processing_time
    target_processing_time response_processing_time elb_status_code
    target_status_code received_bytes sent_bytes "request" "user_agent"
    ssl_cipher ssl_protocol target_group_arn "trace_id" "domain_name"
    "chosen_cert_arn" matched_rule_priority request_creation_time
    "actions_executed" "redirect_url" "error_reason" "target:port_list"
    "target_status_code_list" "classification" "classification_reason"
    conn_trace_id

The parser uses shlex for splitting so quoted fields keep their spaces.
A '-' value is emitted as null.
"""

import logging
import shlex
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlsplit

from ..base import LogLineParser
from ..exceptions import ParseError
from ..registry import ParserRegistry

logger = logging.getLogger(__name__)


@ParserRegistry.register("alb")
class ALBLogParser(LogLineParser):
    """
    Parser for AWS ALB access log lines.

    Produces one flat document per line. Besides the raw fields, the
    request line is split into method, URI and HTTP version, and the URI
    into scheme, host, port, path and query.

    Example:
        parser = ALBLogParser()
        doc = parser.parse(line)
        doc["elb_status_code"]  # 200
    """

    # Field names in log order (0-indexed)
    FIELD_NAMES = [
        "type",
        "time",
        "elb",
        "client_port",
        "target_port",
        "request_processing_time",
        "target_processing_time",
        "response_processing_time",
        "elb_status_code",
        "target_status_code",
        "received_bytes",
        "sent_bytes",
        "request",
        "user_agent",
        "ssl_cipher",
        "ssl_protocol",
        "target_group_arn",
        "trace_id",
        "domain_name",
        "chosen_cert_arn",
        "matched_rule_priority",
        "request_creation_time",
        "actions_executed",
        "redirect_url",
        "error_reason",
        "target_port_list",
        "target_status_code_list",
        "classification",
        "classification_reason",
        "conn_trace_id",
    ]

    # Fields up to and including target_group_arn are present in every ALB log
    MIN_FIELD_COUNT = 17

    FLOAT_FIELDS = frozenset(
        [
            "request_processing_time",
            "target_processing_time",
            "response_processing_time",
        ]
    )
    INT_FIELDS = frozenset(
        [
            "elb_status_code",
            "target_status_code",
            "received_bytes",
            "sent_bytes",
            "matched_rule_priority",
        ]
    )
    LIST_FIELDS = frozenset(["actions_executed"])

    @property
    def log_format(self) -> str:
        """Return the log format identifier."""
        return "alb"

    def parse(self, line: str) -> dict[str, Any]:
        """
        Parse a single ALB log line.

        Args:
            line: Raw log line from an ALB access log

        Returns:
            Dictionary of ALB fields

        Raises:
            ParseError: If the line is not a valid ALB log entry
        """
        try:
            fields = shlex.split(line)
        except ValueError as e:
            raise ParseError(
                f"Unbalanced quoting in ALB log line: {e}", line_content=line
            ) from e

        if len(fields) < self.MIN_FIELD_COUNT:
            raise ParseError(
                f"ALB log line has {len(fields)} fields, "
                f"expected at least {self.MIN_FIELD_COUNT}",
                line_content=line,
            )

        raw = dict(zip(self.FIELD_NAMES, fields))
        doc: dict[str, Any] = {}

        doc["type"] = self._none_if_dash(raw["type"])
        doc["timestamp"] = self._parse_timestamp(raw["time"], line)
        doc["elb"] = self._none_if_dash(raw["elb"])

        doc["client"], doc["client_port"] = self._split_host_port(raw["client_port"])
        doc["target"], doc["target_port"] = self._split_host_port(raw["target_port"])

        for name in self.FIELD_NAMES[5:]:
            if name not in raw or name == "request":
                continue
            value = raw[name]
            if name in self.FLOAT_FIELDS:
                doc[name] = self._to_optional_float(value)
            elif name in self.INT_FIELDS:
                doc[name] = self._to_optional_int(value)
            elif name in self.LIST_FIELDS:
                doc[name] = value.split(",") if value and value != "-" else None
            else:
                doc[name] = self._none_if_dash(value)

        doc["request"] = raw["request"]
        doc.update(self._parse_request_line(raw["request"]))

        # Newer ALB versions may append fields this parser does not know yet
        if len(fields) > len(self.FIELD_NAMES):
            logger.debug(
                f"Ignoring {len(fields) - len(self.FIELD_NAMES)} unknown trailing ALB fields"
            )

        return doc

    def _parse_timestamp(self, timestamp_str: str, line: str) -> str:
        """
        Parse an ISO 8601 timestamp and return it normalized to UTC.

        Raises:
            ParseError: If the timestamp cannot be parsed
        """
        # Handle 'Z' suffix (UTC)
        value = timestamp_str
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"

        try:
            dt = datetime.fromisoformat(value)
        except ValueError:
            # Fallback for edge cases
            from dateutil import parser

            try:
                dt = parser.isoparse(timestamp_str)
            except ValueError as e:
                raise ParseError(
                    f"Invalid ALB timestamp '{timestamp_str}'", line_content=line
                ) from e

        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)

        return dt.isoformat().replace("+00:00", "Z")

    @staticmethod
    def _split_host_port(value: str) -> tuple[Optional[str], Optional[int]]:
        """
        Split an ip:port field.

        Handles both IPv4 and IPv6 addresses:
        - IPv4: 192.0.2.100:54321 -> ("192.0.2.100", 54321)
        - IPv6: [2001:db8::1]:54321 -> ("2001:db8::1", 54321)
        - '-' -> (None, None)
        """
        if not value or value == "-":
            return (None, None)

        if value.startswith("["):
            bracket_end = value.find("]")
            if bracket_end == -1:
                return (value, None)
            host = value[1:bracket_end]
            port_str = value[bracket_end + 2 :]
        else:
            host, _, port_str = value.rpartition(":")
            if not host:
                return (value, None)

        try:
            return (host, int(port_str))
        except ValueError:
            return (host, None)

    @staticmethod
    def _parse_request_line(request_line: str) -> dict[str, Any]:
        """
        Parse the HTTP request line "METHOD URL HTTP/VERSION".

        Example: "GET https://example.com:443/api/data?key=value HTTP/1.1"
        """
        result: dict[str, Any] = {
            "request_method": None,
            "request_uri": None,
            "request_http_version": None,
            "request_uri_scheme": None,
            "request_uri_host": None,
            "request_uri_port": None,
            "request_uri_path": None,
            "request_uri_query": None,
        }

        parts = request_line.split(" ")
        if len(parts) < 2 or parts[0] == "-":
            return result

        result["request_method"] = parts[0]
        url = parts[1]
        if len(parts) >= 3 and parts[2] not in ("-", ""):
            result["request_http_version"] = parts[2]
        if url == "-":
            return result

        result["request_uri"] = url
        try:
            parsed = urlsplit(url)
            result["request_uri_scheme"] = parsed.scheme or None
            result["request_uri_host"] = parsed.hostname
            result["request_uri_port"] = parsed.port
            result["request_uri_path"] = parsed.path or "/"
            result["request_uri_query"] = parsed.query or None
        except ValueError:
            # Malformed URL (e.g. invalid port): keep it as the path
            result["request_uri_path"] = url

        return result

    @staticmethod
    def _none_if_dash(value: str) -> Optional[str]:
        if value == "-" or value == "":
            return None
        return value

    @staticmethod
    def _to_optional_int(value: Any) -> Optional[int]:
        """Convert value to integer or return None."""
        if value is None or value == "-":
            return None
        try:
            return int(value)
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _to_optional_float(value: Any) -> Optional[float]:
        """Convert value to float or return None."""
        if value is None or value == "-":
            return None
        try:
            return float(value)
        except (ValueError, TypeError):
            return None
