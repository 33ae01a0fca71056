from __future__ import annotations

from collections.abc import Sequence

from .types import MatchedAnswer, ValidationResult


def overall_confidence(matches: Sequence[MatchedAnswer]) -> float:
    if not matches:
        return 0.0
    return sum(m.confidence for m in matches) / len(matches)


def unmatched_questions(matches: Sequence[MatchedAnswer]) -> list[str]:
    return [m.question_id for m in matches if m.confidence == 0]


def build_validation_result(
    event_title: str, source: str, matches: list[MatchedAnswer]
) -> ValidationResult:
    return ValidationResult(
        event_title=event_title,
        source=source,
        matches=matches,
        overall_confidence=overall_confidence(matches),
        unmatched_questions=unmatched_questions(matches),
    )
