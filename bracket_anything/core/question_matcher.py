"""Maps quiz questions onto extracted facts and turns facts into answers."""

from __future__ import annotations

from typing import NamedTuple, Union

from .matching import fuzzy_match, match_to_options, normalize
from .matching_config import DEFAULT_POLICY, MatchingPolicy
from .types import FactEntry, MatchedAnswer, Question

# Checked in order; the first key present in the facts wins.
QUESTION_PATTERNS: dict[str, list[str]] = {
    "winner": ["who won", "winner", "winning team", "champion", "victorious"],
    "final score": ["final score", "score", "what was the score"],
    "home team": ["home team", "host"],
    "away team": ["away team", "visitor", "visiting"],
    "venue": ["venue", "stadium", "arena", "where", "location", "played at"],
    "home score": ["home score", "home points"],
    "away score": ["away score", "away points"],
    "margin": ["margin", "by how many", "point difference", "spread"],
    "total points": ["total points", "total score", "over under", "combined"],
    "loser": ["loser", "losing team", "who lost"],
}


class FactMatch(NamedTuple):
    fact_key: str
    confidence: float


def match_keyword(question_text: str, facts: dict[str, str]) -> Union[FactMatch, None]:
    norm_question = normalize(question_text)
    for fact_key, patterns in QUESTION_PATTERNS.items():
        if fact_key not in facts:
            continue
        if any(pattern in norm_question for pattern in patterns):
            return FactMatch(fact_key, 1.0)
    return None


def match_question_to_fact(
    question_text: str, facts: dict[str, str], policy: MatchingPolicy = DEFAULT_POLICY
) -> Union[FactMatch, None]:
    keyword_match = match_keyword(question_text, facts)
    if keyword_match:
        return keyword_match

    best_key = ""
    best_score = 0.0
    for fact_key in facts:
        score = fuzzy_match(question_text, fact_key, policy)
        if score > best_score:
            best_score = score
            best_key = fact_key

    if best_key and best_score >= policy.sports_fact_threshold:
        return FactMatch(best_key, best_score * policy.sports_fuzzy_scale)
    return None


def match_question_to_entries(
    question_text: str, entries: list[FactEntry], policy: MatchingPolicy = DEFAULT_POLICY
) -> Union[tuple[FactEntry, float], None]:
    """Best fact whose category resembles the question, with its match confidence."""
    best: Union[FactEntry, None] = None
    best_score = 0.0
    for entry in entries:
        score = fuzzy_match(question_text, entry.category, policy)
        if score > best_score:
            best_score = score
            best = entry

    if best is None or best_score < policy.wikipedia_fact_threshold:
        return None
    base = policy.wikipedia_bold_confidence if best.is_bold else policy.wikipedia_plain_confidence
    return best, best_score * base


def unmatched_answer(question: Question, source_name: str) -> MatchedAnswer:
    return MatchedAnswer(
        question_id=question.id,
        question_text=question.text,
        suggested_answer="",
        confidence=0.0,
        source=f"No matching data found {source_name}",
    )


def answer_from_fact(
    question: Question,
    value: str,
    fact_confidence: float,
    provenance: str,
    policy: MatchingPolicy = DEFAULT_POLICY,
) -> MatchedAnswer:
    if question.is_multiple_choice:
        option_match = match_to_options(value, question.options, policy)
        if option_match.best_match:
            return MatchedAnswer(
                question_id=question.id,
                question_text=question.text,
                suggested_answer=option_match.best_match,
                confidence=min(fact_confidence, option_match.confidence),
                source=provenance,
                alternatives=[o for o in question.options if o != option_match.best_match],
            )
        return MatchedAnswer(
            question_id=question.id,
            question_text=question.text,
            suggested_answer=value,
            confidence=fact_confidence * policy.option_mismatch_penalty,
            source=provenance,
        )

    return MatchedAnswer(
        question_id=question.id,
        question_text=question.text,
        suggested_answer=value,
        confidence=fact_confidence,
        source=provenance,
    )
