"""Runs the chosen answer source and assembles a uniform ValidationResult.

Each strategy either returns one match per question, in question order, or
raises. There is no fallback from one source to another.
"""

from __future__ import annotations

import logging

from .ai_answers import fetch_ai_answers
from .confidence import build_validation_result
from .context import ServiceContext
from .sports import fetch_sports_event_data, search_sports_events
from .types import CATEGORIES, EVENT_SOURCES, EventSearchResult, Question, ValidationResult
from .wikipedia import fetch_wikipedia_event_data, search_wikipedia_events

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    "thesportsdb": "TheSportsDB",
    "wikipedia": "Wikipedia",
}
AI_SOURCE_LABEL = "Claude AI"


async def search_events(ctx: ServiceContext, query: str, category: str) -> list[EventSearchResult]:
    if category not in CATEGORIES:
        raise ValueError(f"Unknown event category: {category}")
    if category == "sports":
        return await search_sports_events(ctx.sports, query)
    results = await search_wikipedia_events(ctx.wikipedia, query)
    for result in results:
        result.category = category
    return results


async def validate_event(
    ctx: ServiceContext,
    event_id: str,
    questions: list[Question],
    source: str,
    metadata: dict[str, str] | None = None,
) -> ValidationResult:
    if source not in EVENT_SOURCES:
        raise ValueError(f"Unknown event source: {source}")
    metadata = metadata or {}
    if source == "thesportsdb":
        matches, event_title = await fetch_sports_event_data(
            ctx.sports, event_id, questions, ctx.policy
        )
    else:
        page_title = metadata.get("pageTitle") or event_id
        matches, event_title = await fetch_wikipedia_event_data(
            ctx.wikipedia, page_title, questions, ctx.policy
        )

    result = build_validation_result(event_title, SOURCE_LABELS[source], matches)
    _log_result(result)
    return result


async def validate_with_ai(
    ctx: ServiceContext, quiz_title: str, questions: list[Question]
) -> ValidationResult:
    matches = await fetch_ai_answers(ctx.chat, quiz_title, questions, ctx.policy)
    result = build_validation_result(quiz_title, AI_SOURCE_LABEL, matches)
    _log_result(result)
    return result


def _log_result(result: ValidationResult) -> None:
    logger.info(
        "%s validation of %r: %d matches, %d unmatched, overall confidence %.2f",
        result.source,
        result.event_title,
        len(result.matches),
        len(result.unmatched_questions),
        result.overall_confidence,
    )
