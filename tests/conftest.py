"""Shared fixtures for the event date agent tests."""

from __future__ import annotations

import asyncio
import json
from datetime import date
from typing import Any, Optional, Union

import pytest

from event_date_agent.config import Settings
from event_date_agent.generation import GenerationRequest
from event_date_agent.models import ParseContext

# A Monday.
REFERENCE = date(2025, 1, 6)


class StubGenerator:
    """Deterministic stand-in for a text-generation service."""

    name = "stub"

    def __init__(
        self,
        response: Union[str, dict[str, Any], BaseException] = "",
        *,
        delay: float = 0.0,
    ):
        self.response = response
        self.delay = delay
        self.calls = 0
        self.requests: list[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> str:
        self.calls += 1
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.response, BaseException):
            raise self.response
        if isinstance(self.response, dict):
            return json.dumps(self.response)
        return self.response


def llm_payload(
    title: str = "Event",
    confidence: float = 0.9,
    ranges: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    return {"title": title, "confidence": confidence, "dateRanges": ranges or []}


@pytest.fixture
def reference() -> date:
    return REFERENCE


@pytest.fixture
def context() -> ParseContext:
    return ParseContext(reference_date=REFERENCE)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        llm_provider="none",
        ollama_base_url="http://ollama.test",
        llm_retry_delay_seconds=0,
        llm_timeout_seconds=2.0,
    )
