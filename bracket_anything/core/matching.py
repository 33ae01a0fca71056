from __future__ import annotations

import re
from typing import NamedTuple

from rapidfuzz import fuzz, process

from .matching_config import DEFAULT_POLICY, MatchingPolicy

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


class OptionMatch(NamedTuple):
    best_match: str
    confidence: float


def normalize(text: str) -> str:
    """Canonical comparison key: lowercase ascii letters, digits and whitespace."""
    return _NON_ALNUM.sub("", text.lower()).strip()


def _similarity(a: str, b: str) -> float:
    return fuzz.WRatio(a, b, processor=None) / 100.0


def fuzzy_match(candidate: str, target: str, policy: MatchingPolicy = DEFAULT_POLICY) -> float:
    norm_candidate = normalize(candidate)
    norm_target = normalize(target)

    if norm_candidate == norm_target:
        return 1.0
    if not norm_candidate or not norm_target:
        return 0.0
    if norm_candidate in norm_target or norm_target in norm_candidate:
        return 0.9

    score = _similarity(norm_candidate, norm_target)
    if score < policy.min_similarity:
        return 0.0
    return score


def match_to_options(
    candidate: str, options: list[str], policy: MatchingPolicy = DEFAULT_POLICY
) -> OptionMatch:
    if not options:
        return OptionMatch("", 0.0)

    norm_candidate = normalize(candidate)
    for option in options:
        if normalize(option) == norm_candidate:
            return OptionMatch(option, 1.0)

    if not norm_candidate:
        return OptionMatch("", 0.0)

    best = process.extractOne(
        norm_candidate,
        options,
        scorer=fuzz.WRatio,
        processor=normalize,
        score_cutoff=policy.min_similarity * 100,
    )
    if best is None:
        return OptionMatch("", 0.0)
    option, score, _ = best
    return OptionMatch(option, min(score / 100.0, policy.fuzzy_option_cap))
