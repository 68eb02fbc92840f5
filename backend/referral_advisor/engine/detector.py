"""Step 1: propose red flags by literal phrase matching."""
from __future__ import annotations

from dataclasses import dataclass

from .normalizer import Intake
from .pathways import Pathway
from .rules import ExtraIndicator, Rule, extra_indicators_for, rules_for

FAMILY_HISTORY_RATIONALE = (
    "Family history summary provided; review it for hereditary patterns before confirming flags"
)


@dataclass(frozen=True)
class DetectionResult:
    """Suggested indicator ids in first-detection order, with their rationale."""

    suggested: tuple[str, ...]
    rationale: tuple[str, ...]


def rule_matches(rule: Rule, corpus: str) -> bool:
    return any(phrase in corpus for phrase in rule.phrases)


def extra_indicator_matches(indicator: ExtraIndicator, text: str) -> bool:
    return all(
        any(phrase in text for phrase in group) for group in indicator.phrase_groups
    )


def detect_flags(pathway: Pathway, corpus: str, intake: Intake) -> DetectionResult:
    """
    Scan the corpus against the pathway rules and the narrative text against the
    extra indicators. No score or triage is produced here.
    """
    suggested: list[str] = []
    rationale: list[str] = []

    for rule in rules_for(pathway):
        if rule.indicator_id not in suggested and rule_matches(rule, corpus):
            suggested.append(rule.indicator_id)
            rationale.append(rule.rationale)

    narrative = intake.narrative_text
    for indicator in extra_indicators_for(pathway):
        if indicator.indicator_id not in suggested and extra_indicator_matches(indicator, narrative):
            suggested.append(indicator.indicator_id)
            rationale.append(indicator.rationale)

    if intake.family_history_summary.strip():
        rationale.append(FAMILY_HISTORY_RATIONALE)

    return DetectionResult(suggested=tuple(suggested), rationale=tuple(rationale))
