"""Wrapper around the Ollama HTTP API used for date extraction."""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from .config import Settings
from .errors import TextGenerationError
from .generation import GenerationRequest, retrying

LOGGER = structlog.get_logger(__name__)


class OllamaClient:
    """Helper for interacting with an Ollama model."""

    name = "ollama"

    def __init__(self, settings: Settings, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._settings = settings
        self._transport = transport

    async def generate(self, request: GenerationRequest) -> str:
        """Invoke the Ollama model and return its raw text response."""
        payload = {
            "model": self._settings.ollama_model,
            "system": request.system,
            "prompt": request.prompt,
            "stream": False,
            "format": "json",
            "options": {
                "temperature": 0,
            },
        }

        LOGGER.info(
            "ollama.request.start",
            model=self._settings.ollama_model,
            prompt_length=len(request.prompt),
        )

        try:
            response_json = await self._invoke_generate(payload)
        except httpx.HTTPError as exc:
            LOGGER.warning("ollama.request.failed", error=str(exc))
            raise TextGenerationError(f"Failed communicating with Ollama: {exc}") from exc

        if not isinstance(response_json, dict):
            raise TextGenerationError("Ollama returned an unexpected payload")

        raw_text = str(response_json.get("response", "")).strip()
        LOGGER.debug(
            "ollama.response",
            preview=raw_text[:200],
            total_length=len(raw_text),
        )
        return raw_text

    async def _invoke_generate(self, payload: dict[str, Any]) -> Any:
        """Execute the Ollama generate call with retry behaviour."""
        async for attempt in retrying(self._settings):
            with attempt:
                async with httpx.AsyncClient(
                    base_url=str(self._settings.ollama_base_url),
                    timeout=self._settings.llm_timeout_seconds,
                    transport=self._transport,
                ) as client:
                    response = await client.post("/api/generate", json=payload)
                    response.raise_for_status()
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise TextGenerationError("Ollama response body is not JSON") from exc
        raise TextGenerationError("Ollama generate invocation failed")  # safety net
