"""FastAPI application exposing the date parsing and preset endpoints."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, Field

from . import __version__, date_window
from .config import Settings
from .errors import InputValidationError
from .generation import TextGenerator
from .models import ParseContext
from .pattern_parser import parse_event_description
from .reconciler import DateReconciler
from .service import build_reconciler, default_context
from .validation import validate_input_text, validate_parsed_event

LOGGER = structlog.get_logger(__name__)


class ParseRequest(BaseModel):
    """Request payload for the parse endpoints."""

    text: str = Field(min_length=1)
    reference_date: Optional[date] = Field(default=None, alias="referenceDate")

    model_config = {"populate_by_name": True}


class DatesResponse(BaseModel):
    """Plain list of ISO dates."""

    dates: List[str]


class SmartParseResponse(BaseModel):
    """Response payload for the two-tier parse endpoint."""

    title: str
    dates: List[str]
    times: List[str]
    source: str
    confidence: Optional[float] = None
    problems: List[str]


def create_app(settings: Optional[Settings] = None, generator: Optional[TextGenerator] = None) -> FastAPI:
    """Build the application; tests pass a stub ``generator``."""
    settings = settings or Settings()
    app = FastAPI(title="Event Date Agent", version=__version__)
    app.state.settings = settings
    app.state.reconciler = build_reconciler(settings, generator)

    app.add_api_route("/health", health, methods=["GET"])
    app.add_api_route("/parse", parse_dates, methods=["POST"], response_model=DatesResponse)
    app.add_api_route("/parse/smart", parse_smart, methods=["POST"], response_model=SmartParseResponse)
    app.add_api_route("/presets/this-weekend", this_weekend, methods=["GET"], response_model=DatesResponse)
    app.add_api_route("/presets/next-weekends", next_weekends, methods=["GET"], response_model=DatesResponse)
    app.add_api_route(
        "/presets/quarterly-weekends", quarterly_weekends, methods=["GET"], response_model=DatesResponse
    )
    return app


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_reconciler(request: Request) -> DateReconciler:
    return request.app.state.reconciler


def _validated_text(payload: ParseRequest, settings: Settings) -> str:
    try:
        return validate_input_text(payload.text, max_length=settings.max_input_length)
    except InputValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _context(reference_date: Optional[date], settings: Settings) -> ParseContext:
    if reference_date is not None:
        return ParseContext(reference_date=reference_date)
    return default_context(settings)


async def health() -> dict[str, str]:
    return {"status": "ok"}


async def parse_dates(payload: ParseRequest, settings: Settings = Depends(get_settings)) -> DatesResponse:
    """Offline grammar only; safe to expose without authentication."""
    text = _validated_text(payload, settings)
    context = _context(payload.reference_date, settings)
    result = parse_event_description(text, context, every_window_weeks=settings.every_window_weeks)
    LOGGER.info("api.parse", input_length=len(text), dates=len(result.dates))
    return DatesResponse(dates=result.iso_dates)


async def parse_smart(
    payload: ParseRequest,
    settings: Settings = Depends(get_settings),
    reconciler: DateReconciler = Depends(get_reconciler),
) -> SmartParseResponse:
    """Grammar first, LLM fallback behind the confidence gate."""
    text = _validated_text(payload, settings)
    context = _context(payload.reference_date, settings)
    reconciled = await reconciler.parse_detailed(text, context)
    LOGGER.info(
        "api.parse_smart",
        input_length=len(text),
        source=reconciled.state.value,
        dates=len(reconciled.result.dates),
    )
    return SmartParseResponse(
        title=reconciled.result.title,
        dates=reconciled.result.iso_dates,
        times=reconciled.result.times,
        source=reconciled.state.value,
        confidence=reconciled.confidence,
        problems=validate_parsed_event(reconciled.result, context.reference_date),
    )


async def this_weekend(
    upcoming_only: bool = Query(True, alias="upcomingOnly"),
    reference_date: Optional[date] = Query(None, alias="referenceDate"),
    settings: Settings = Depends(get_settings),
) -> DatesResponse:
    reference = _context(reference_date, settings).reference_date
    return DatesResponse(dates=date_window.this_weekend(reference, upcoming_only))


async def next_weekends(
    n: int = Query(4, ge=1, le=52),
    upcoming_only: bool = Query(True, alias="upcomingOnly"),
    reference_date: Optional[date] = Query(None, alias="referenceDate"),
    settings: Settings = Depends(get_settings),
) -> DatesResponse:
    reference = _context(reference_date, settings).reference_date
    return DatesResponse(dates=date_window.next_weekends(reference, n, upcoming_only))


async def quarterly_weekends(
    reference_date: Optional[date] = Query(None, alias="referenceDate"),
    settings: Settings = Depends(get_settings),
) -> DatesResponse:
    reference = _context(reference_date, settings).reference_date
    return DatesResponse(dates=date_window.quarterly_weekends(reference))
