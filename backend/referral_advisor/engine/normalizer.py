"""Intake coercion, search-corpus construction and prenatal shorthand expansion."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping

from .pathways import Pathway

_LIST_FIELDS = (
    "prenatal_findings",
    "pediatric_red_flags",
    "hpo_terms",
    "family_history_red_flags",
)

# (canonical token, any-of synonyms, additionally required any-of)
_PRENATAL_SYNONYM_GROUPS: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("previous_aneuploidy", ("trisomy 21", "t21", "down syndrome"), ()),
    ("increased_nt", ("nuchal", "nt", "translucency"), ()),
    ("abnormal_ultrasound", ("ultrasound", "anomaly", "malformation"), ()),
    ("positive_screening", ("nipt",), ("positive", "high risk")),
)


def safe_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def to_lower_trim(value: Any) -> str:
    return safe_str(value).lower().strip()


def csv_to_list(value: Any) -> list[str]:
    """Split a comma-separated value into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in safe_str(value).split(",") if item.strip()]


def coerce_list(value: Any) -> tuple[str, ...]:
    """Accept a list/tuple or a comma-separated string; anything else is empty."""
    if isinstance(value, (list, tuple)):
        items = [safe_str(item).strip() for item in value if item is not None]
        return tuple(item for item in items if item)
    if isinstance(value, str):
        return tuple(csv_to_list(value))
    return ()


def parse_age(value: Any) -> float | int | None:
    """Return a numeric age, or None when absent or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def _unique(items: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    ordered: list[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            ordered.append(item)
    return tuple(ordered)


@dataclass(frozen=True)
class Intake:
    """Immutable, coerced view of one engine request."""

    pathway: Pathway
    patient_age: float | int | None = None
    age_text: str = ""
    patient_sex: str = ""
    patient_file_number: str = ""
    chief_concern: str = ""
    clinical_notes: str = ""
    family_history_summary: str = ""
    pregnancy_status: str = ""
    gestational_weeks: str = ""
    prenatal_findings: tuple[str, ...] = ()
    pediatric_red_flags: tuple[str, ...] = ()
    hpo_terms: tuple[str, ...] = ()
    family_history_red_flags: tuple[str, ...] = ()
    confirmed_flags: tuple[str, ...] | None = None
    unrecognized_pathway: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Intake":
        data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
        pathway, recognized = Pathway.parse(data.get("pathway"))

        raw_age = data.get("patient_age")
        raw_weeks = data.get("gestational_weeks")
        raw_confirmed = data.get("confirmed_flags")
        confirmed = (
            _unique(coerce_list(raw_confirmed))
            if isinstance(raw_confirmed, (list, tuple, str))
            else None
        )

        return cls(
            pathway=pathway,
            patient_age=parse_age(raw_age),
            age_text="" if raw_age is None else safe_str(raw_age).strip(),
            patient_sex=safe_str(data.get("patient_sex")).strip(),
            patient_file_number=safe_str(data.get("patient_file_number")).strip(),
            chief_concern=safe_str(data.get("chief_concern")),
            clinical_notes=safe_str(data.get("clinical_notes")),
            family_history_summary=safe_str(data.get("family_history_summary")),
            pregnancy_status=to_lower_trim(data.get("pregnancy_status")),
            gestational_weeks="" if raw_weeks is None else safe_str(raw_weeks).strip(),
            confirmed_flags=confirmed,
            unrecognized_pathway=None if recognized else safe_str(data.get("pathway")).strip(),
            **{name: coerce_list(data.get(name)) for name in _LIST_FIELDS},
        )

    @property
    def narrative_text(self) -> str:
        """Lower-cased chief concern, clinical notes and family history."""
        return " ".join(
            part
            for part in (
                to_lower_trim(self.chief_concern),
                to_lower_trim(self.clinical_notes),
                to_lower_trim(self.family_history_summary),
            )
            if part
        )


def normalize_prenatal_findings(
    findings: Any = (),
    clinical_notes: str = "",
    family_history: str = "",
) -> tuple[str, ...]:
    """
    Expand prenatal shorthand into canonical indicator tokens.

    Structured findings (a list or a comma-separated string) are kept, lower-cased
    and de-duplicated; a canonical token is appended for every synonym group found
    in the combined findings, notes and family history text.
    """
    structured = list(findings) if isinstance(findings, (list, tuple)) else csv_to_list(findings)
    structured = [safe_str(item) for item in structured]
    text = f"{' '.join(structured)} {safe_str(clinical_notes)} {safe_str(family_history)}".lower()

    tokens = [to_lower_trim(item) for item in structured]
    for token, synonyms, required_any in _PRENATAL_SYNONYM_GROUPS:
        if not any(synonym in text for synonym in synonyms):
            continue
        if required_any and not any(term in text for term in required_any):
            continue
        tokens.append(token)
    return _unique(tokens)


def expand_pathway_shorthand(intake: Intake) -> Intake:
    """Return the intake with pathway-specific findings replaced by canonical tokens."""
    if intake.pathway is not Pathway.PRENATAL:
        return intake
    return replace(
        intake,
        prenatal_findings=normalize_prenatal_findings(
            intake.prenatal_findings,
            intake.clinical_notes,
            intake.family_history_summary,
        ),
    )


def build_corpus(intake: Intake) -> str:
    """Concatenate every detection-relevant field into one lower-cased string."""
    parts = (
        intake.pathway.value,
        intake.patient_sex,
        f"age {intake.age_text}" if intake.age_text else "",
        f"file {intake.patient_file_number}" if intake.patient_file_number else "",
        intake.chief_concern,
        intake.clinical_notes,
        intake.family_history_summary,
        " ".join(intake.family_history_red_flags),
        intake.pregnancy_status,
        f"{intake.gestational_weeks} weeks" if intake.gestational_weeks else "",
        " ".join(intake.prenatal_findings),
        " ".join(intake.pediatric_red_flags),
        " ".join(intake.hpo_terms),
    )
    return " ".join(normalized for normalized in map(to_lower_trim, parts) if normalized)
