"""Tests for the LLM-assisted parser."""

import pytest

from event_date_agent.errors import SchemaViolationError, TextGenerationError
from event_date_agent.llm_parser import LLMDateParser, extract_json, parse_llm_response
from event_date_agent.models import Weekday

from .conftest import StubGenerator, llm_payload

RANGE = {"start": "2025-02-01", "end": "2025-02-28", "daysOfWeek": ["Saturday"], "times": ["10:00"]}


class TestParse:
    async def test_valid_response(self, context):
        generator = StubGenerator(llm_payload("Brunch", 0.8, [RANGE]))
        result = await LLMDateParser(generator).parse("Brunch on Saturdays in February", context)
        assert result is not None
        assert result.title == "Brunch"
        assert result.confidence == 0.8
        assert result.date_ranges[0].days_of_week == frozenset({Weekday.SATURDAY})
        assert generator.calls == 1

    async def test_request_carries_wrapped_text(self, context):
        generator = StubGenerator(llm_payload())
        await LLMDateParser(generator).parse("Brunch <b>soon</b>", context)
        assert "Brunch &lt;b&gt;soon&lt;/b&gt;" in generator.requests[0].prompt

    @pytest.mark.parametrize(
        "payload",
        [
            {**llm_payload(), "extra": True},
            llm_payload(ranges=[{**RANGE, "start": "2025-13-01"}]),
            llm_payload(ranges=[{**RANGE, "daysOfWeek": ["Funday"]}]),
            llm_payload(ranges=[{**RANGE, "times": ["7pm"]}]),
            llm_payload(ranges=[{**RANGE, "start": "2025-03-01"}]),
            llm_payload(confidence=1.5),
            {"title": "Brunch", "dateRanges": []},
        ],
    )
    async def test_schema_violation_rejects_whole_response(self, context, payload):
        generator = StubGenerator(payload)
        assert await LLMDateParser(generator).parse("Brunch", context) is None

    async def test_timeout(self, context):
        generator = StubGenerator(llm_payload(), delay=1.0)
        assert await LLMDateParser(generator, timeout_seconds=0.01).parse("Brunch", context) is None
        assert generator.calls == 1

    async def test_service_error(self, context):
        generator = StubGenerator(TextGenerationError("503"))
        assert await LLMDateParser(generator).parse("Brunch", context) is None

    async def test_unexpected_error(self, context):
        generator = StubGenerator(RuntimeError("boom"))
        assert await LLMDateParser(generator).parse("Brunch", context) is None

    async def test_not_json(self, context):
        generator = StubGenerator("Sure! Here are your dates.")
        assert await LLMDateParser(generator).parse("Brunch", context) is None


class TestResponseParsing:
    def test_code_fence(self):
        raw = '```json\n{"title": "Brunch", "confidence": 0.7, "dateRanges": []}\n```'
        assert parse_llm_response(raw).confidence == 0.7

    def test_string_confidence_rejected(self):
        with pytest.raises(SchemaViolationError):
            parse_llm_response('{"title": "x", "confidence": "0.9", "dateRanges": []}')

    def test_bool_confidence_rejected(self):
        with pytest.raises(SchemaViolationError):
            parse_llm_response('{"title": "x", "confidence": true, "dateRanges": []}')

    @pytest.mark.parametrize("raw", ["", "   ", "[1, 2]", "{not json"])
    def test_extract_json_errors(self, raw):
        with pytest.raises(SchemaViolationError):
            extract_json(raw)
