"""Configuration objects and helpers for the event date agent."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, HttpUrl, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    llm_provider: Literal["ollama", "anthropic", "none"] = Field("ollama", alias="EVENT_DATES_LLM_PROVIDER")
    ollama_base_url: HttpUrl = Field("http://localhost:11434", alias="EVENT_DATES_OLLAMA_BASE_URL")
    ollama_model: str = Field("gemma3:12b", alias="EVENT_DATES_OLLAMA_MODEL")
    anthropic_api_key: Optional[SecretStr] = Field(None, alias="ANTHROPIC_API_KEY")
    anthropic_base_url: HttpUrl = Field("https://api.anthropic.com", alias="EVENT_DATES_ANTHROPIC_BASE_URL")
    anthropic_model: str = Field("claude-3-5-haiku-latest", alias="EVENT_DATES_ANTHROPIC_MODEL")
    llm_timeout_seconds: float = Field(8.0, alias="EVENT_DATES_LLM_TIMEOUT_SECONDS", gt=0)
    llm_max_attempts: int = Field(2, alias="EVENT_DATES_LLM_MAX_ATTEMPTS", ge=1, le=2)
    llm_retry_delay_seconds: float = Field(0.5, alias="EVENT_DATES_LLM_RETRY_DELAY_SECONDS", ge=0)
    confidence_threshold: float = Field(0.5, alias="EVENT_DATES_CONFIDENCE_THRESHOLD", ge=0, le=1)
    max_input_length: int = Field(200, alias="EVENT_DATES_MAX_INPUT_LENGTH", ge=1)
    every_window_weeks: int = Field(12, alias="EVENT_DATES_EVERY_WINDOW_WEEKS", ge=1)
    timezone: str = Field("UTC", alias="EVENT_DATES_TIMEZONE")
    log_level: str = Field("INFO", alias="EVENT_DATES_LOG_LEVEL")
    environment: str = Field("production", alias="EVENT_DATES_ENVIRONMENT")

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, value: str) -> str:
        """Accept any case for the log level name."""
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level

    @property
    def anthropic_messages_endpoint(self) -> str:
        """Messages API endpoint."""
        return f"{str(self.anthropic_base_url).rstrip('/')}/v1/messages"
