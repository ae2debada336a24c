"""
Record transformer stage.

Turns each log line into one serialized JSON document. Lines that fail to
parse become marker documents, so the number of documents always equals
the number of counted lines.
"""

import json
import logging
from typing import Any, AsyncIterable, AsyncIterator

from ..ingestion.base import LogLineParser
from ..ingestion.exceptions import ParseError
from .tally import PipelineTally

logger = logging.getLogger(__name__)


class RecordTransformer:
    """
    Parses and serializes log lines in arrival order.

    Usage:
        transformer = RecordTransformer(get_parser('alb'), tally)
        async for document in transformer.transform(lines):
            await submit(document)
    """

    def __init__(self, parser: LogLineParser, tally: PipelineTally):
        self.parser = parser
        self.tally = tally
        self.parse_errors = 0

    async def transform(self, lines: AsyncIterable[str]) -> AsyncIterator[str]:
        """
        Transform lines into JSON documents.

        The line is counted before its document is yielded. When the
        upstream ends, the tally is marked exhausted.

        Args:
            lines: Async iterable of raw log lines

        Yields:
            One JSON document per record line
        """
        async for line in lines:
            if not self.parser.is_record_line(line):
                continue

            line_number = self.tally.record_line()
            try:
                doc = self.parser.parse(line)
            except ParseError as e:
                self.parse_errors += 1
                logger.warning(f"Unparseable log line {line_number}: {e.message}")
                doc = self.parse_error_marker(e, line, line_number)

            yield self.serialize(doc)

        self.tally.mark_exhausted()
        logger.info(
            f"Read {self.tally.total_lines} log lines "
            f"({self.parse_errors} unparseable)"
        )

    @staticmethod
    def parse_error_marker(
        error: ParseError, line: str, line_number: int
    ) -> dict[str, Any]:
        """Build the document indexed in place of an unparseable line."""
        return {
            "parse_error": error.message,
            "raw_line": line,
            "line_number": line_number,
        }

    @staticmethod
    def serialize(doc: dict[str, Any]) -> str:
        return json.dumps(doc, default=str)
