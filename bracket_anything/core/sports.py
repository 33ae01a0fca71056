from __future__ import annotations

import logging
from typing import Any, Union

from ..adapters.base import SportsSource
from .errors import UpstreamError
from .matching_config import DEFAULT_POLICY, MatchingPolicy
from .question_matcher import answer_from_fact, match_question_to_fact, unmatched_answer
from .types import EventSearchResult, MatchedAnswer, Question

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 15

# fact key -> TheSportsDB event field
BASE_FIELDS = {
    "home team": "strHomeTeam",
    "away team": "strAwayTeam",
    "home score": "intHomeScore",
    "away score": "intAwayScore",
    "venue": "strVenue",
    "season": "strSeason",
    "league": "strLeague",
    "sport": "strSport",
}


def _field(event: dict[str, Any], name: str) -> Union[str, None]:
    value = event.get(name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_int(value: str) -> Union[int, None]:
    try:
        return int(value)
    except ValueError:
        return None


def build_fact_map(event: dict[str, Any]) -> dict[str, str]:
    """Flatten one TheSportsDB event record into ``category -> value`` facts."""
    facts: dict[str, str] = {}
    for key, name in BASE_FIELDS.items():
        value = _field(event, name)
        if value is not None:
            facts[key] = value

    home_team = facts.get("home team")
    away_team = facts.get("away team")
    home_raw = facts.get("home score")
    away_raw = facts.get("away score")

    if home_raw is not None and away_raw is not None:
        facts["final score"] = f"{home_raw}-{away_raw}"
        facts["score"] = f"{home_raw}-{away_raw}"

        home_score = _as_int(home_raw)
        away_score = _as_int(away_raw)
        if home_score is not None and away_score is not None:
            if home_score > away_score:
                winner, loser = home_team, away_team
            elif away_score > home_score:
                winner, loser = away_team, home_team
            else:
                winner, loser = "Draw", None
                facts["result"] = "Draw"
            if winner:
                facts["winner"] = winner
                if winner != "Draw":
                    facts["winning team"] = winner
            if loser:
                facts["loser"] = loser
            facts["margin"] = str(abs(home_score - away_score))
            facts["total points"] = str(home_score + away_score)

    result = _field(event, "strResult")
    if result is not None:
        facts["result"] = result

    return facts


def match_event_questions(
    facts: dict[str, str], questions: list[Question], policy: MatchingPolicy = DEFAULT_POLICY
) -> list[MatchedAnswer]:
    matches: list[MatchedAnswer] = []
    for question in questions:
        fact_match = match_question_to_fact(question.text, facts, policy)
        if fact_match is None:
            matches.append(unmatched_answer(question, "in TheSportsDB"))
            continue
        value = facts[fact_match.fact_key]
        matches.append(
            answer_from_fact(
                question,
                value,
                fact_match.confidence,
                f'TheSportsDB: {fact_match.fact_key} = "{value}"',
                policy,
            )
        )
    return matches


def parse_search_results(data: dict[str, Any]) -> list[EventSearchResult]:
    events = data.get("event") or []
    results = []
    for event in events[:MAX_SEARCH_RESULTS]:
        event_id = _field(event, "idEvent")
        if event_id is None:
            continue
        results.append(
            EventSearchResult(
                id=event_id,
                title=event.get("strEvent") or event_id,
                date=_field(event, "dateEvent"),
                category="sports",
                source="thesportsdb",
                metadata={"eventId": event_id},
            )
        )
    return results


async def search_sports_events(client: SportsSource, query: str) -> list[EventSearchResult]:
    data = await client.search_events(query)
    return parse_search_results(data)


async def fetch_sports_event_data(
    client: SportsSource,
    event_id: str,
    questions: list[Question],
    policy: MatchingPolicy = DEFAULT_POLICY,
) -> tuple[list[MatchedAnswer], str]:
    data = await client.lookup_event(event_id)
    events = data.get("events") or []
    if not events:
        logger.error("TheSportsDB has no event with id %s", event_id)
        raise UpstreamError("Event not found")

    event = events[0]
    facts = build_fact_map(event)
    logger.info("TheSportsDB event %s produced %d facts", event_id, len(facts))
    matches = match_event_questions(facts, questions, policy)
    return matches, event.get("strEvent") or event_id
