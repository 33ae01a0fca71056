"""Fact extraction from rendered Wikipedia article HTML.

Three independent heuristics look for winners in the markup. Their outputs are
pooled as-is (duplicates included) and the question matcher picks the best
fact per question:

1. table rows with a bold cell, the row's first cell naming the category
2. h2-h4 sections whose first bold list item is the winner
3. rows highlighted as winners (``winner`` class or gold/yellow background)
"""

from __future__ import annotations

import logging
import re
from typing import Any, Union

from bs4 import BeautifulSoup, Tag

from ..adapters.base import EncyclopediaSource
from .errors import UpstreamError
from .matching_config import DEFAULT_POLICY, MatchingPolicy
from .question_matcher import answer_from_fact, match_question_to_entries, unmatched_answer
from .types import EventSearchResult, FactEntry, MatchedAnswer, Question

logger = logging.getLogger(__name__)

HEADINGS = ["h2", "h3", "h4"]
_WINNER_BACKGROUND = re.compile(r"background.*(#ffe|gold|yellow)", re.IGNORECASE)


def _text(element: Tag) -> str:
    return " ".join(element.get_text().split())


def _bold_text(element: Tag) -> Union[str, None]:
    bold = element.find("b")
    if bold is None:
        return None
    return _text(bold) or None


def _row_cells(row: Tag) -> list[Tag]:
    return row.find_all(["td", "th"], recursive=False)


def make_soup(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html, "html.parser")
    for noise in soup.select("span.mw-editsection, sup.reference"):
        noise.decompose()
    return soup


def extract_table_facts(soup: BeautifulSoup) -> list[FactEntry]:
    facts = []
    for row in soup.find_all("tr"):
        cells = _row_cells(row)
        if len(cells) < 2:
            continue
        category = _text(cells[0])
        if not category:
            continue
        for cell in cells:
            value = _bold_text(cell)
            if value:
                facts.append(FactEntry(category=category, value=value, is_bold=True))
    return facts


def extract_section_facts(soup: BeautifulSoup) -> list[FactEntry]:
    facts = []
    for heading in soup.find_all(HEADINGS):
        title = _text(heading)
        if not title:
            continue
        for element in heading.find_all_next(HEADINGS + ["li"]):
            if element.name in HEADINGS:
                break
            value = _bold_text(element)
            if value:
                facts.append(FactEntry(category=title, value=value, is_bold=True))
                break
    return facts


def _is_winner_row(row: Tag) -> bool:
    if any("winner" in cls for cls in row.get("class") or []):
        return True
    return bool(_WINNER_BACKGROUND.search(row.get("style") or ""))


def extract_winner_row_facts(soup: BeautifulSoup) -> list[FactEntry]:
    facts = []
    for row in soup.find_all("tr"):
        if not _is_winner_row(row):
            continue
        cells = [_text(cell) for cell in _row_cells(row)]
        if len(cells) >= 2:
            facts.append(FactEntry(category=cells[0], value=cells[1], is_bold=False))
    return facts


def parse_wikipedia_html(html: str) -> list[FactEntry]:
    soup = make_soup(html)
    return extract_table_facts(soup) + extract_section_facts(soup) + extract_winner_row_facts(soup)


def match_page_questions(
    facts: list[FactEntry], questions: list[Question], policy: MatchingPolicy = DEFAULT_POLICY
) -> list[MatchedAnswer]:
    matches = []
    for question in questions:
        best = match_question_to_entries(question.text, facts, policy)
        if best is None:
            matches.append(unmatched_answer(question, "on Wikipedia"))
            continue
        fact, confidence = best
        matches.append(
            answer_from_fact(
                question,
                fact.value,
                confidence,
                f'Wikipedia: "{fact.category}" → "{fact.value}"',
                policy,
            )
        )
    return matches


def parse_search_results(data: list[Any]) -> list[EventSearchResult]:
    # OpenSearch answers [query, titles, descriptions, urls]
    titles = data[1] if len(data) > 1 and isinstance(data[1], list) else []
    descriptions = data[2] if len(data) > 2 and isinstance(data[2], list) else []
    results = []
    for i, title in enumerate(titles):
        description = descriptions[i] if i < len(descriptions) else ""
        results.append(
            EventSearchResult(
                id=title,
                title=title,
                category="awards",
                source="wikipedia",
                metadata={"pageTitle": title, "description": description or ""},
            )
        )
    return results


async def search_wikipedia_events(client: EncyclopediaSource, query: str) -> list[EventSearchResult]:
    data = await client.opensearch(query)
    return parse_search_results(data)


async def fetch_wikipedia_event_data(
    client: EncyclopediaSource,
    page_title: str,
    questions: list[Question],
    policy: MatchingPolicy = DEFAULT_POLICY,
) -> tuple[list[MatchedAnswer], str]:
    data = await client.parse_page(page_title)
    if "error" in data:
        info = data["error"].get("info") if isinstance(data["error"], dict) else None
        logger.error("Wikipedia parse of %r failed: %s", page_title, info)
        raise UpstreamError(f"Wikipedia parse failed: {info or 'unknown error'}")

    parsed = data.get("parse") or {}
    html = (parsed.get("text") or {}).get("*", "")
    if not html:
        raise UpstreamError("No content found for this Wikipedia page")

    facts = parse_wikipedia_html(html)
    logger.info("Wikipedia page %r produced %d facts", page_title, len(facts))
    matches = match_page_questions(facts, questions, policy)
    return matches, parsed.get("title") or page_title
