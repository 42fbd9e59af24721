"""Command-line entry point for the event date agent."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date as date_type
from typing import Any, Optional

import structlog

from . import date_window
from .config import Settings
from .models import ParseContext
from .pattern_parser import parse_event_description
from .service import build_reconciler, default_context
from .validation import validate_input_text, validate_parsed_event

PRESETS = ("this-weekend", "next-weekends", "quarterly-weekends")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structlog + stdlib logging."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


LOGGER = structlog.get_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """CLI argument parsing."""
    parser = argparse.ArgumentParser(description="Turn an event description or preset into candidate poll dates.")
    parser.add_argument("text", nargs="?", help="Event description, e.g. 'Dinner on Jan 10, 17, 24 at 7:30pm'.")
    parser.add_argument(
        "--smart",
        action="store_true",
        help="Fall back to the configured LLM when the offline grammar finds nothing.",
    )
    parser.add_argument("--preset", choices=PRESETS, help="Generate dates from a preset instead of parsing text.")
    parser.add_argument("--weeks", type=int, default=4, help="Number of weekends for the next-weekends preset.")
    parser.add_argument(
        "--include-current",
        action="store_true",
        help="Let weekend presets use the current weekend when run on a Friday, Saturday or Sunday.",
    )
    parser.add_argument(
        "--reference-date",
        type=str,
        help="ISO date (YYYY-MM-DD) to resolve relative expressions against. Defaults to today.",
    )
    return parser.parse_args(argv)


def resolve_context(reference_date: Optional[str], settings: Settings) -> ParseContext:
    """Determine the date relative expressions are anchored on."""
    if reference_date:
        try:
            return ParseContext(reference_date=date_type.fromisoformat(reference_date))
        except ValueError as exc:
            raise SystemExit(f"Invalid --reference-date: {reference_date}") from exc
    return default_context(settings)


def run_preset(args: argparse.Namespace, context: ParseContext) -> dict[str, Any]:
    reference = context.reference_date
    upcoming_only = not args.include_current
    if args.preset == "this-weekend":
        dates = date_window.this_weekend(reference, upcoming_only)
    elif args.preset == "next-weekends":
        dates = date_window.next_weekends(reference, args.weeks, upcoming_only)
    else:
        dates = date_window.quarterly_weekends(reference)
    return {"preset": args.preset, "dates": dates}


async def run_parse(args: argparse.Namespace, settings: Settings, context: ParseContext) -> dict[str, Any]:
    text = validate_input_text(args.text, max_length=settings.max_input_length)
    if args.smart:
        reconciled = await build_reconciler(settings).parse_detailed(text, context)
        result = reconciled.result
        extra: dict[str, Any] = {"source": reconciled.state.value, "confidence": reconciled.confidence}
    else:
        result = parse_event_description(text, context, every_window_weeks=settings.every_window_weeks)
        extra = {"source": "deterministic"}
    payload = result.to_dict()
    payload.update(extra)
    payload["problems"] = validate_parsed_event(result, context.reference_date)
    return payload


def cli(argv: Optional[list[str]] = None) -> int:
    """Console script entrypoint."""
    args = parse_args(argv)

    try:
        settings = Settings()
    except Exception as exc:  # pragma: no cover - startup validation
        configure_logging()
        LOGGER.exception("settings.error", error=str(exc))
        return 2

    configure_logging(getattr(logging, settings.log_level))
    context = resolve_context(args.reference_date, settings)

    try:
        if args.preset:
            payload = run_preset(args, context)
        else:
            payload = asyncio.run(run_parse(args, settings, context))
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(cli())
