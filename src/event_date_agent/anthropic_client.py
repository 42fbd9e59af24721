"""Anthropic Messages API helper."""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from .config import Settings
from .errors import TextGenerationError
from .generation import GenerationRequest, retrying

LOGGER = structlog.get_logger(__name__)

ANTHROPIC_VERSION = "2023-06-01"
MAX_OUTPUT_TOKENS = 1024


class AnthropicClient:
    """Send a single-turn request to the Messages API."""

    name = "anthropic"

    def __init__(self, settings: Settings, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        if settings.anthropic_api_key is None:
            raise ValueError("anthropic_api_key must be configured for the Anthropic provider")
        self._settings = settings
        self._transport = transport

    async def generate(self, request: GenerationRequest) -> str:
        payload = {
            "model": self._settings.anthropic_model,
            "max_tokens": MAX_OUTPUT_TOKENS,
            "temperature": 0,
            "system": request.system,
            "messages": [{"role": "user", "content": request.prompt}],
        }

        LOGGER.info("anthropic.request.start", model=self._settings.anthropic_model)
        try:
            body = await self._post(payload)
        except httpx.HTTPError as exc:
            LOGGER.warning("anthropic.request.failed", error=str(exc))
            raise TextGenerationError(f"Anthropic request failed: {exc}") from exc

        blocks = body.get("content") if isinstance(body, dict) else None
        if not isinstance(blocks, list):
            raise TextGenerationError("Anthropic response has no content blocks")
        text = "".join(
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        ).strip()
        LOGGER.debug("anthropic.response", total_length=len(text), stop_reason=body.get("stop_reason"))
        return text

    async def _post(self, payload: dict[str, Any]) -> Any:
        headers = {
            "x-api-key": self._settings.anthropic_api_key.get_secret_value(),
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        async for attempt in retrying(self._settings):
            with attempt:
                async with httpx.AsyncClient(
                    timeout=self._settings.llm_timeout_seconds,
                    transport=self._transport,
                ) as client:
                    response = await client.post(
                        self._settings.anthropic_messages_endpoint,
                        json=payload,
                        headers=headers,
                    )
                    response.raise_for_status()
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise TextGenerationError("Anthropic response body is not JSON") from exc
        raise TextGenerationError("Anthropic request failed")  # safety net
