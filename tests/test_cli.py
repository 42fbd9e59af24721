"""Tests for the command-line entry point."""

import json

import pytest

from event_date_agent.main import cli, parse_args


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    monkeypatch.setenv("EVENT_DATES_LLM_PROVIDER", "none")


def run(capsys, *argv):
    code = cli(list(argv))
    return code, capsys.readouterr()


def test_parse(capsys):
    code, out = run(capsys, "Dinner on Jan 10, 17, 24 at 7:30pm", "--reference-date", "2025-01-06")
    assert code == 0
    payload = json.loads(out.out)
    assert payload["title"] == "Dinner"
    assert payload["dates"] == ["2025-01-10", "2025-01-17", "2025-01-24"]
    assert payload["times"] == ["19:30"]
    assert payload["source"] == "deterministic"
    assert payload["problems"] == []


def test_smart_without_provider(capsys):
    code, out = run(capsys, "Catch up soon", "--smart", "--reference-date", "2025-01-06")
    assert code == 0
    payload = json.loads(out.out)
    assert payload["dates"] == []
    assert payload["source"] == "escalated"


def test_preset(capsys):
    code, out = run(capsys, "--preset", "next-weekends", "--weeks", "2", "--reference-date", "2025-01-08")
    assert code == 0
    assert json.loads(out.out)["dates"] == [
        "2025-01-10",
        "2025-01-11",
        "2025-01-12",
        "2025-01-17",
        "2025-01-18",
        "2025-01-19",
    ]


def test_missing_text(capsys):
    code, out = run(capsys)
    assert code == 1
    assert "Input text is required" in out.err


def test_bad_reference_date():
    with pytest.raises(SystemExit):
        cli(["Lunch tomorrow", "--reference-date", "tomorrow"])


def test_parse_args_defaults():
    args = parse_args(["Lunch"])
    assert args.weeks == 4
    assert not args.smart
    assert not args.include_current
