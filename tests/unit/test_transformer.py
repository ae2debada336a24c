"""
Unit tests for the record transformer stage.
"""

import json

import pytest

from access_log_indexer.ingestion.parsers import ALBLogParser, CloudFrontLogParser
from access_log_indexer.pipeline.tally import PipelineTally
from access_log_indexer.pipeline.transformer import RecordTransformer
from tests.helpers import ALB_LINE, agen, collect


class TestRecordTransformer:
    """Tests for RecordTransformer."""

    @pytest.mark.asyncio
    async def test_one_document_per_line_in_order(self):
        """Each line becomes one JSON document, order preserved."""
        lines = [
            ALB_LINE.replace("TID_1234abcd", f"TID_{i}") for i in range(5)
        ]
        tally = PipelineTally()
        transformer = RecordTransformer(ALBLogParser(), tally)

        documents = await collect(transformer.transform(agen(lines)))

        assert len(documents) == 5
        assert [json.loads(d)["conn_trace_id"] for d in documents] == [
            f"TID_{i}" for i in range(5)
        ]
        assert tally.total_lines == 5
        assert tally.exhausted is True

    @pytest.mark.asyncio
    async def test_line_counted_before_yield(self):
        """The tally already includes a line when its document is handed out."""
        tally = PipelineTally()
        transformer = RecordTransformer(ALBLogParser(), tally)

        seen_totals = []
        async for _ in transformer.transform(agen([ALB_LINE, ALB_LINE])):
            seen_totals.append(tally.total_lines)
            assert tally.exhausted is False

        assert seen_totals == [1, 2]
        assert tally.exhausted is True

    @pytest.mark.asyncio
    async def test_unparseable_line_becomes_marker(self):
        """A bad line yields a marker document carrying the raw line."""
        tally = PipelineTally()
        transformer = RecordTransformer(ALBLogParser(), tally)
        lines = [ALB_LINE, "garbage line", ALB_LINE]

        documents = [json.loads(d) for d in await collect(transformer.transform(agen(lines)))]

        assert len(documents) == 3
        marker = documents[1]
        assert marker["raw_line"] == "garbage line"
        assert marker["line_number"] == 2
        assert "fields" in marker["parse_error"]
        assert transformer.parse_errors == 1
        assert tally.total_lines == 3

    @pytest.mark.asyncio
    async def test_directives_and_blanks_not_counted(self, cdn_line):
        """Header directives and blank lines produce no documents."""
        tally = PipelineTally()
        transformer = RecordTransformer(CloudFrontLogParser(), tally)
        lines = ["#Version: 1.0", "#Fields: date time", cdn_line, "", cdn_line]

        documents = await collect(transformer.transform(agen(lines)))

        assert len(documents) == 2
        assert tally.total_lines == 2
        assert json.loads(documents[0])["sc-status"] == 200

    @pytest.mark.asyncio
    async def test_empty_input_marks_exhausted(self):
        """No lines still ends with an exhausted tally."""
        tally = PipelineTally()
        transformer = RecordTransformer(ALBLogParser(), tally)
        assert await collect(transformer.transform(agen([]))) == []
        assert tally.exhausted is True
        assert tally.is_drained is True

    @pytest.mark.asyncio
    async def test_early_close_not_exhausted(self):
        """A consumer stopping early does not mark the source exhausted."""
        tally = PipelineTally()
        transformer = RecordTransformer(ALBLogParser(), tally)
        documents = transformer.transform(agen([ALB_LINE] * 3))

        await documents.__anext__()
        await documents.aclose()

        assert tally.total_lines == 1
        assert tally.exhausted is False

    def test_serialize_non_json_values(self):
        """Values JSON cannot encode natively are stringified."""
        from datetime import date

        assert json.loads(RecordTransformer.serialize({"d": date(2024, 1, 15)})) == {
            "d": "2024-01-15"
        }
