"""Case envelope assembly and the two-step engine entry point."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from ..core.logging_utils import log_event
from .advisory import build_advisory
from .detector import detect_flags
from .normalizer import Intake, build_corpus, expand_pathway_shorthand
from .pathways import CaseMode, Pathway, TriageCategory
from .scoring import classify_triage, score_confirmed

DISCLAIMER = (
    "This tool is for educational triage purposes only and does not replace "
    "medical decision-making."
)
NO_SIGNAL_REASON = "Not enough relevant signals identified from the provided data"


def new_case_id() -> str:
    return f"case_{uuid4().hex[:12]}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class CaseResult:
    """Engine output. Step 1 and Step 2 share this shape."""

    case_id: str
    created_at: str
    pathway: Pathway
    triage: TriageCategory
    priority_score: int | None
    reasons: tuple[str, ...]
    suggested_flags: tuple[str, ...]
    used_flags: tuple[str, ...]
    used_mode: CaseMode
    missing_info: tuple[str, ...]
    next_steps: tuple[str, ...]
    disclaimer: str = DISCLAIMER

    @property
    def is_pending(self) -> bool:
        return self.used_mode is CaseMode.PROPOSE_FLAGS

    def to_dict(self) -> dict[str, Any]:
        return {
            "case_id": self.case_id,
            "created_at": self.created_at,
            "pathway": self.pathway.value,
            "triage": self.triage.value,
            "priority_score": self.priority_score,
            "reasons": list(self.reasons),
            "suggested_flags": list(self.suggested_flags),
            "used_flags": list(self.used_flags),
            "used_mode": self.used_mode.value,
            "missing_info": list(self.missing_info),
            "next_steps": list(self.next_steps),
            "disclaimer": self.disclaimer,
        }


def build_envelope(
    *,
    pathway: Pathway,
    mode: CaseMode,
    triage: TriageCategory,
    score: int | None,
    reasons: tuple[str, ...],
    suggested: tuple[str, ...],
    used: tuple[str, ...],
    missing_info: tuple[str, ...],
    next_steps: tuple[str, ...],
) -> CaseResult:
    return CaseResult(
        case_id=new_case_id(),
        created_at=utc_timestamp(),
        pathway=pathway,
        triage=triage,
        priority_score=score,
        reasons=reasons or (NO_SIGNAL_REASON,),
        suggested_flags=suggested,
        used_flags=used,
        used_mode=mode,
        missing_info=missing_info,
        next_steps=next_steps,
    )


def assess_case(payload: Any) -> CaseResult:
    """
    Run one engine invocation over a raw intake mapping.

    Detection always runs. A present, non-empty confirmed_flags list selects
    Step 2 (score + triage); an absent or empty list returns the Step 1
    proposal with a null score and pending_confirmation triage.
    """
    intake = expand_pathway_shorthand(Intake.from_payload(payload))
    if intake.unrecognized_pathway is not None:
        log_event(
            component="engine",
            event="unknown_pathway",
            level="WARNING",
            details={
                "received": intake.unrecognized_pathway[:64],
                "resolved": intake.pathway.value,
            },
        )

    detection = detect_flags(intake.pathway, build_corpus(intake), intake)

    if not intake.confirmed_flags:
        advisory = build_advisory(intake, TriageCategory.PENDING_CONFIRMATION)
        return build_envelope(
            pathway=intake.pathway,
            mode=CaseMode.PROPOSE_FLAGS,
            triage=TriageCategory.PENDING_CONFIRMATION,
            score=None,
            reasons=detection.rationale,
            suggested=detection.suggested,
            used=(),
            missing_info=advisory.missing_info,
            next_steps=advisory.next_steps,
        )

    scored = score_confirmed(intake.pathway, intake.confirmed_flags)
    triage = classify_triage(scored.score)
    advisory = build_advisory(intake, triage)
    return build_envelope(
        pathway=intake.pathway,
        mode=CaseMode.CONFIRMED_FLAGS,
        triage=triage,
        score=scored.score,
        reasons=scored.rationale,
        suggested=detection.suggested,
        used=scored.used,
        missing_info=advisory.missing_info,
        next_steps=advisory.next_steps,
    )
