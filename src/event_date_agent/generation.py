"""Narrow interface to the external text-generation service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_fixed

if TYPE_CHECKING:
    from .config import Settings

LOGGER = structlog.get_logger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


@dataclass(frozen=True)
class GenerationRequest:
    """A fixed system instruction plus the user prompt carrying delimited data."""

    system: str
    prompt: str


@runtime_checkable
class TextGenerator(Protocol):
    """Anything that can turn a :class:`GenerationRequest` into raw text.

    Implementations raise :class:`~event_date_agent.errors.TextGenerationError`
    on transport failures and non-success responses.
    """

    name: str

    async def generate(self, request: GenerationRequest) -> str:
        ...


def is_retryable(exc: BaseException) -> bool:
    """Transport errors and overload/5xx responses are worth one more try."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


def retrying(settings: "Settings") -> AsyncRetrying:
    """At most one retry, after a short fixed delay."""
    return AsyncRetrying(
        wait=wait_fixed(settings.llm_retry_delay_seconds),
        stop=stop_after_attempt(settings.llm_max_attempts),
        retry=retry_if_exception(is_retryable),
        reraise=True,
    )


def build_text_generator(settings: "Settings") -> Optional[TextGenerator]:
    """Return the generator selected by ``settings.llm_provider``, if any."""
    provider = settings.llm_provider
    if provider == "ollama":
        from .ollama_client import OllamaClient

        return OllamaClient(settings)
    if provider == "anthropic":
        if settings.anthropic_api_key is None:
            LOGGER.warning("llm.disabled", reason="ANTHROPIC_API_KEY is not set")
            return None
        from .anthropic_client import AnthropicClient

        return AnthropicClient(settings)
    LOGGER.info("llm.disabled", provider=provider)
    return None
