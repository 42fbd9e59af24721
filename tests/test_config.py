"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from event_date_agent.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("EVENT_DATES_LLM_PROVIDER", raising=False)
    settings = Settings(_env_file=None)
    assert settings.llm_provider == "ollama"
    assert settings.confidence_threshold == 0.5
    assert settings.llm_max_attempts == 2
    assert settings.max_input_length == 200
    assert settings.every_window_weeks == 12


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("EVENT_DATES_LLM_PROVIDER", "anthropic")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
    monkeypatch.setenv("EVENT_DATES_LOG_LEVEL", "debug")
    monkeypatch.setenv("EVENT_DATES_CONFIDENCE_THRESHOLD", "0.7")
    settings = Settings(_env_file=None)
    assert settings.llm_provider == "anthropic"
    assert settings.anthropic_api_key.get_secret_value() == "sk-env"
    assert settings.log_level == "DEBUG"
    assert settings.confidence_threshold == 0.7


def test_messages_endpoint():
    settings = Settings(_env_file=None, anthropic_base_url="https://proxy.test/")
    assert settings.anthropic_messages_endpoint == "https://proxy.test/v1/messages"


@pytest.mark.parametrize(
    "overrides",
    [
        {"llm_provider": "openai"},
        {"llm_max_attempts": 3},
        {"confidence_threshold": 1.5},
        {"log_level": "verbose"},
    ],
)
def test_invalid(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
