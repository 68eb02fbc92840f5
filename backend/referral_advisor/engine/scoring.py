"""Step 2: score human-confirmed indicators and classify triage."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .pathways import Pathway, TriageCategory
from .rules import lookup_indicator

MIN_SCORE = 0
MAX_SCORE = 100
RECOMMENDED_THRESHOLD = 70
NOT_PRIORITIZED_CEILING = 20


@dataclass(frozen=True)
class ScoreResult:
    score: int
    rationale: tuple[str, ...]
    used: tuple[str, ...]


def clamp_score(raw_score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, raw_score))


def score_confirmed(pathway: Pathway, confirmed_ids: Iterable[str]) -> ScoreResult:
    """
    Sum the weights of recognised confirmed indicators, clamped to [0, 100].

    Unknown ids are ignored and each id counts once.
    """
    total = 0
    rationale: list[str] = []
    used: list[str] = []
    for indicator_id in confirmed_ids:
        if indicator_id in used:
            continue
        indicator = lookup_indicator(pathway, indicator_id)
        if indicator is None:
            continue
        used.append(indicator_id)
        total += indicator.weight
        rationale.append(indicator.rationale)
    return ScoreResult(score=clamp_score(total), rationale=tuple(rationale), used=tuple(used))


def classify_triage(score: int) -> TriageCategory:
    if score >= RECOMMENDED_THRESHOLD:
        return TriageCategory.RECOMMENDED
    if score <= NOT_PRIORITIZED_CEILING:
        return TriageCategory.NOT_PRIORITIZED
    return TriageCategory.DISCUSS
