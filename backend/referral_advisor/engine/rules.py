"""Static red-flag registry, per pathway."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

from .pathways import Pathway


@dataclass(frozen=True)
class Rule:
    """Registry rule: fires when any trigger phrase occurs in the search corpus."""

    indicator_id: str
    weight: int
    phrases: tuple[str, ...]
    rationale: str


@dataclass(frozen=True)
class ExtraIndicator:
    """
    Single-purpose detector checked against the narrative fields only.

    Fires when every phrase group has at least one phrase present.
    """

    indicator_id: str
    weight: int
    phrase_groups: tuple[tuple[str, ...], ...]
    rationale: str


Indicator = Union[Rule, ExtraIndicator]


_ONCOGENETICS_RULES: tuple[Rule, ...] = (
    Rule(
        indicator_id="early_onset_cancer",
        weight=40,
        phrases=(
            "early_onset_cancer",
            "early onset",
            "early-onset",
            "before 50",
            "diagnosed at 4",
            "diagnosed at 25",
            "diagnosed at 30",
            "diagnosed at 35",
            "diagnosed at 40",
            "diagnosed at 45",
            "young age",
        ),
        rationale="Early-onset cancer mentioned in the history",
    ),
    Rule(
        indicator_id="multiple_relatives_cancer",
        weight=30,
        phrases=(
            "multiple_relatives_cancer",
            "multiple relatives",
            "several relatives",
            "more than one",
            "two relatives",
            "three relatives",
        ),
        rationale="Multiple relatives with cancer mentioned",
    ),
    Rule(
        indicator_id="breast_and_ovarian_pattern",
        weight=30,
        phrases=("breast_and_ovarian_pattern", "breast cancer", "ovarian cancer"),
        rationale="Breast + ovarian cancer pattern mentioned (possible hereditary syndrome)",
    ),
    Rule(
        indicator_id="multiple_primaries",
        weight=25,
        phrases=(
            "multiple_primaries",
            "two primary",
            "multiple primaries",
            "second primary",
            "multiple cancers",
        ),
        rationale="Multiple primary cancers mentioned in the same person",
    ),
)

_PRENATAL_RULES: tuple[Rule, ...] = (
    Rule(
        indicator_id="abnormal_ultrasound",
        weight=50,
        phrases=(
            "abnormal_ultrasound",
            "abnormal ultrasound",
            "ultrasound anomaly",
            "malformation",
            "anomaly scan",
            "fetal anomaly",
        ),
        rationale="Abnormal ultrasound finding mentioned",
    ),
    Rule(
        indicator_id="increased_nt",
        weight=40,
        phrases=(
            "increased_nt",
            "nuchal translucency",
            "increased nt",
            "nt increased",
            "thickened nt",
        ),
        rationale="Increased nuchal translucency mentioned",
    ),
    Rule(
        indicator_id="previous_aneuploidy",
        weight=40,
        phrases=("previous_aneuploidy", "trisomy 21", "t21", "down syndrome", "aneuploidy"),
        rationale="History suggesting aneuploidy (e.g., trisomy 21) mentioned",
    ),
    Rule(
        indicator_id="positive_screening",
        weight=35,
        phrases=(
            "positive_screening",
            "positive nipt",
            "high risk nipt",
            "screening high risk",
            "positive screening",
        ),
        rationale="Positive/high-risk prenatal screening mentioned",
    ),
    Rule(
        indicator_id="previous_affected_child",
        weight=40,
        phrases=(
            "previous_affected_child",
            "previous affected child",
            "previous child affected",
            "affected pregnancy",
            "recurrent condition",
        ),
        rationale="Previous affected pregnancy/child mentioned",
    ),
)

_PEDIATRIC_RULES: tuple[Rule, ...] = (
    Rule(
        indicator_id="developmental_delay",
        weight=35,
        phrases=(
            "developmental_delay",
            "developmental delay",
            "global delay",
            "gdd",
            "delayed milestones",
        ),
        rationale="Developmental delay mentioned",
    ),
    Rule(
        indicator_id="seizures",
        weight=35,
        phrases=("seizure", "seizures", "epilepsy"),
        rationale="Seizures mentioned",
    ),
    Rule(
        indicator_id="congenital_anomalies",
        weight=25,
        phrases=(
            "congenital_anomalies",
            "congenital",
            "dysmorphic",
            "malformation",
            "anomalies",
        ),
        rationale="Congenital anomalies/dysmorphism mentioned",
    ),
)

_PANCREATIC_PHRASES: tuple[str, ...] = (
    "pancreatic cancer",
    "pancreas cancer",
    "cancer of the pancreas",
    "pancreatic adenocarcinoma",
)

_ONCOGENETICS_EXTRAS: tuple[ExtraIndicator, ...] = (
    ExtraIndicator(
        indicator_id="pancreatic_cancer",
        weight=30,
        phrase_groups=(_PANCREATIC_PHRASES,),
        rationale="Pancreatic cancer mentioned (may indicate a hereditary cancer syndrome)",
    ),
    ExtraIndicator(
        indicator_id="pancreatic_melanoma_pattern",
        weight=35,
        phrase_groups=(_PANCREATIC_PHRASES, ("melanoma",)),
        rationale="Pancreatic cancer together with melanoma mentioned (possible familial syndrome)",
    ),
)

RULES: Mapping[Pathway, tuple[Rule, ...]] = MappingProxyType(
    {
        Pathway.ONCOGENETICS: _ONCOGENETICS_RULES,
        Pathway.PRENATAL: _PRENATAL_RULES,
        Pathway.PEDIATRIC: _PEDIATRIC_RULES,
    }
)

EXTRA_INDICATORS: Mapping[Pathway, tuple[ExtraIndicator, ...]] = MappingProxyType(
    {
        Pathway.ONCOGENETICS: _ONCOGENETICS_EXTRAS,
        Pathway.PRENATAL: (),
        Pathway.PEDIATRIC: (),
    }
)


def _build_index(pathway: Pathway) -> Mapping[str, Indicator]:
    index: dict[str, Indicator] = {}
    for indicator in (*RULES[pathway], *EXTRA_INDICATORS[pathway]):
        if indicator.indicator_id in index:
            raise ValueError(
                f"Duplicate indicator id '{indicator.indicator_id}' in pathway {pathway.value}"
            )
        index[indicator.indicator_id] = indicator
    return MappingProxyType(index)


_INDEX: Mapping[Pathway, Mapping[str, Indicator]] = MappingProxyType(
    {pathway: _build_index(pathway) for pathway in Pathway}
)


def rules_for(pathway: Pathway) -> tuple[Rule, ...]:
    return RULES[pathway]


def extra_indicators_for(pathway: Pathway) -> tuple[ExtraIndicator, ...]:
    return EXTRA_INDICATORS[pathway]


def lookup_indicator(pathway: Pathway, indicator_id: str) -> Indicator | None:
    """Return the rule or extra indicator registered under this id, if any."""
    return _INDEX[pathway].get(indicator_id)


def known_indicator_ids(pathway: Pathway) -> tuple[str, ...]:
    return tuple(_INDEX[pathway])
