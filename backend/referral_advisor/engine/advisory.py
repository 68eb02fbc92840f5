"""Missing-information checks and next-step suggestions."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .normalizer import Intake
from .pathways import Pathway, TriageCategory

NEXT_STEPS: Mapping[Pathway, tuple[str, ...]] = MappingProxyType(
    {
        Pathway.ONCOGENETICS: (
            "Complete a three-generation family history",
            "Collect pathology reports if available",
            "Consider referral to genetic counseling based on confirmed findings",
        ),
        Pathway.PRENATAL: (
            "Collect ultrasound report and screening results",
            "Discuss referral to prenatal genetic counseling (time-sensitive)",
        ),
        Pathway.PEDIATRIC: (
            "Complete phenotype documentation (clinical exam + notes)",
            "Consider referral to pediatric genetic counseling",
        ),
    }
)

LOW_RISK_NEXT_STEPS: tuple[str, ...] = (
    "No genetic referral needed based on current information",
    "Reassess if new family history or clinical findings appear",
)

# Prenatal cases keep their missing items even when not prioritized.
_KEEPS_MISSING_INFO_WHEN_LOW_RISK = frozenset({Pathway.PRENATAL})


@dataclass(frozen=True)
class Advisory:
    missing_info: tuple[str, ...]
    next_steps: tuple[str, ...]


def find_missing_info(intake: Intake) -> tuple[str, ...]:
    missing: list[str] = []

    if intake.patient_age is None:
        missing.append("Patient age")
    if not intake.patient_sex or intake.patient_sex.lower() == "unknown":
        missing.append("Patient sex")
    if not intake.chief_concern.strip():
        missing.append("Chief concern")
    if not intake.family_history_summary.strip():
        missing.append("Family history summary")

    if intake.pathway is Pathway.PRENATAL:
        if intake.pregnancy_status in ("", "not_applicable"):
            missing.append("Pregnancy status (pregnant or preconception)")
        if intake.pregnancy_status == "pregnant" and not intake.gestational_weeks:
            missing.append("Gestational age (weeks)")

    if intake.pathway is Pathway.PEDIATRIC and not intake.hpo_terms:
        missing.append("HPO terms (or a more detailed phenotype description)")

    return tuple(missing)


def build_advisory(intake: Intake, triage: TriageCategory) -> Advisory:
    """Derive advisory lists, pruned when the confirmed triage is not_prioritized."""
    missing_info = find_missing_info(intake)
    next_steps = NEXT_STEPS[intake.pathway]

    if triage is TriageCategory.NOT_PRIORITIZED:
        next_steps = LOW_RISK_NEXT_STEPS
        if intake.pathway not in _KEEPS_MISSING_INFO_WHEN_LOW_RISK:
            missing_info = ()

    return Advisory(missing_info=missing_info, next_steps=next_steps)
