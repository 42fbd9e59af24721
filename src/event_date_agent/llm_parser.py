"""Fallback parser that asks a text-generation service for date ranges."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from .errors import SchemaViolationError, TextGenerationError
from .generation import TextGenerator
from .models import LLMParseResult, ParseContext
from .sanitizer import build_generation_request
from .utils import preview

LOGGER = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 8.0


class LLMDateParser:
    """Makes exactly one call to a :class:`TextGenerator` per parse."""

    def __init__(self, generator: TextGenerator, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self._generator = generator
        self._timeout_seconds = timeout_seconds

    async def parse(self, text: str, context: ParseContext) -> Optional[LLMParseResult]:
        """Return the validated response, or ``None`` on any failure.

        Timeouts, service errors and schema violations all collapse to
        ``None``; none of them propagate.
        """
        request = build_generation_request(text, context)
        generator_name = getattr(self._generator, "name", type(self._generator).__name__)
        LOGGER.info(
            "llm.request.start",
            generator=generator_name,
            input_length=len(text),
            preview=preview(text),
        )

        try:
            raw_text = await asyncio.wait_for(
                self._generator.generate(request),
                timeout=self._timeout_seconds,
            )
            result = parse_llm_response(raw_text)
        except asyncio.TimeoutError:
            LOGGER.warning("llm.request.timeout", generator=generator_name, timeout=self._timeout_seconds)
            return None
        except TextGenerationError as exc:
            LOGGER.warning("llm.request.failed", generator=generator_name, error=str(exc))
            return None
        except SchemaViolationError as exc:
            LOGGER.warning("llm.response.rejected", generator=generator_name, error=str(exc))
            return None
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("llm.request.error", generator=generator_name, error=str(exc))
            return None

        LOGGER.info(
            "llm.response.accepted",
            generator=generator_name,
            confidence=result.confidence,
            ranges=len(result.date_ranges),
        )
        return result


def parse_llm_response(raw_text: str) -> LLMParseResult:
    """Validate the model's raw text against the response contract.

    A response with any invalid field is rejected as a whole.
    """
    data = extract_json(raw_text)
    try:
        return LLMParseResult.model_validate(data)
    except ValidationError as exc:
        raise SchemaViolationError(f"Response does not match the schema: {exc.error_count()} error(s)") from exc


def extract_json(raw_text: str) -> Any:
    """Extract the JSON object from a model response, tolerating code fences."""
    candidate = (raw_text or "").strip()
    if not candidate:
        raise SchemaViolationError("Empty response")

    if "```" in candidate:
        parts = candidate.split("```")
        if len(parts) >= 3:
            candidate = parts[1]
        else:
            candidate = parts[-1]
    candidate = candidate.strip()

    if candidate.lower().startswith("json"):
        candidate = candidate[4:].strip()

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise SchemaViolationError("Response is not valid JSON") from exc
    if not isinstance(data, dict):
        raise SchemaViolationError("Response JSON is not an object")
    return data
