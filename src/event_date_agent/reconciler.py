"""Choose between the offline grammar and the LLM-assisted parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from .expansion import to_canonical
from .llm_parser import LLMDateParser
from .models import CanonicalParseResult, ParseContext
from .pattern_parser import DEFAULT_EVERY_WINDOW_WEEKS, parse_event_description

LOGGER = structlog.get_logger(__name__)

CONFIDENCE_THRESHOLD = 0.5


class ParseState(str, Enum):
    DETERMINISTIC = "deterministic"
    ESCALATED = "escalated"


@dataclass(frozen=True)
class ReconciledParse:
    """A canonical result plus how it was reached."""

    result: CanonicalParseResult
    state: ParseState
    confidence: Optional[float] = None

    @property
    def parsed(self) -> bool:
        return bool(self.result.dates)


class DateReconciler:
    """
    Run the offline grammar first and escalate to the LLM only when it finds
    no dates.

    The confidence gate is the defence against prompt injection: text that is
    not a date description scores low and is turned into an empty result.
    """

    def __init__(
        self,
        llm_parser: Optional[LLMDateParser] = None,
        *,
        threshold: float = CONFIDENCE_THRESHOLD,
        every_window_weeks: int = DEFAULT_EVERY_WINDOW_WEEKS,
    ):
        self._llm_parser = llm_parser
        self._threshold = threshold
        self._every_window_weeks = every_window_weeks

    async def parse(self, text: str, context: ParseContext) -> CanonicalParseResult:
        return (await self.parse_detailed(text, context)).result

    async def parse_detailed(self, text: str, context: ParseContext) -> ReconciledParse:
        deterministic = parse_event_description(text, context, every_window_weeks=self._every_window_weeks)
        if deterministic.dates:
            return ReconciledParse(result=deterministic, state=ParseState.DETERMINISTIC)

        LOGGER.info("reconciler.escalated", input_length=len(text), llm_enabled=self._llm_parser is not None)
        failure = CanonicalParseResult.empty(text)
        if self._llm_parser is None:
            return ReconciledParse(result=failure, state=ParseState.ESCALATED)

        llm_result = await self._llm_parser.parse(text, context)
        if llm_result is None:
            return ReconciledParse(result=failure, state=ParseState.ESCALATED)

        if llm_result.confidence < self._threshold:
            LOGGER.info(
                "reconciler.low_confidence",
                confidence=llm_result.confidence,
                threshold=self._threshold,
            )
            return ReconciledParse(result=failure, state=ParseState.ESCALATED, confidence=llm_result.confidence)

        title = llm_result.title.strip() or text
        result = to_canonical(title, llm_result.date_ranges)
        LOGGER.info("reconciler.accepted", confidence=llm_result.confidence, dates=len(result.dates))
        return ReconciledParse(result=result, state=ParseState.ESCALATED, confidence=llm_result.confidence)
