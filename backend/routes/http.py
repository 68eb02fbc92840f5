from typing import Any

from fastapi import APIRouter, Depends, Request
from referral_advisor.agents.explanation import explain_case
from referral_advisor.config import get_services
from referral_advisor.core import (
    CaseRequest,
    CaseResponse,
    ExplanationRequest,
    ExplanationResponse,
    HealthResponse,
    StatusResponse,
)
from referral_advisor.core.error_mapping import build_fallback_envelope
from referral_advisor.core.logging_utils import clear_log_context, log_event, set_case_id
from referral_advisor.engine import assess_case

router = APIRouter()


def get_ai_services(request: Request) -> dict[str, Any]:
    return get_services(getattr(request.app.state, "settings", None))


@router.get("/", response_model=StatusResponse)
def read_root():
    return {"status": "online", "system": "Referral Advisor"}


@router.get("/health", response_model=HealthResponse)
def health(services: dict = Depends(get_ai_services)):
    settings = services["settings"]
    return {
        "ok": True,
        "name": settings.name,
        "explanation_mode": settings.explanation.mode,
    }


@router.post("/cases", response_model=CaseResponse)
async def create_case(request: CaseRequest, services: dict = Depends(get_ai_services)):
    payload = request.model_dump()

    # The deterministic decision always comes first.
    try:
        result = assess_case(payload)
    except Exception as err:
        log_event(
            component="http",
            event="engine_failed",
            level="ERROR",
            details={"error": str(err)},
        )
        return build_fallback_envelope(
            str(err) or "Decision engine error",
            llm_status="skipped",
            llm_explanation="Decision engine failed. No explanation was generated.",
            payload=payload,
        )

    case = result.to_dict()
    set_case_id(result.case_id)
    try:
        log_event(
            component="http",
            event="case_assessed",
            details={
                "pathway": result.pathway.value,
                "mode": result.used_mode.value,
                "triage": result.triage.value,
                "score": result.priority_score,
                "suggested": len(result.suggested_flags),
                "used": len(result.used_flags),
                "missing": len(result.missing_info),
            },
        )
        outcome = await explain_case(case, services, age=payload.get("patient_age"))
    finally:
        clear_log_context()

    return {**case, **outcome.to_fields()}


@router.post("/cases/explanation", response_model=ExplanationResponse)
async def explain_existing_case(
    request: ExplanationRequest, services: dict = Depends(get_ai_services)
):
    set_case_id(str(request.case.get("case_id") or "") or None)
    try:
        outcome = await explain_case(request.case, services, age=request.patient_age)
    finally:
        clear_log_context()
    return outcome.to_fields()
