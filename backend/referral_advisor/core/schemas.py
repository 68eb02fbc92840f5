"""API request and response schemas for the referral advisor."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============= Request Schemas =============

class CaseRequest(BaseModel):
    """Intake payload for /cases.

    Field types are deliberately loose: the engine coerces malformed values
    and reports them as missing information instead of rejecting the request.
    A present, non-empty confirmed_flags list selects the scoring step.
    """
    pathway: Optional[Any] = Field(default=None, description="oncogenetics | prenatal | pediatric")
    patient_age: Optional[Any] = None
    patient_sex: Optional[Any] = None
    patient_file_number: Optional[Any] = None
    chief_concern: Optional[Any] = None
    clinical_notes: Optional[Any] = None
    family_history_summary: Optional[Any] = None
    family_history_red_flags: Optional[Any] = None
    pregnancy_status: Optional[Any] = None
    gestational_weeks: Optional[Any] = None
    prenatal_findings: Optional[Any] = None
    pediatric_red_flags: Optional[Any] = None
    hpo_terms: Optional[Any] = None
    confirmed_flags: Optional[Any] = Field(
        default=None,
        description="Indicator ids confirmed by the clinician",
    )
    model_config = ConfigDict(extra="allow")


class ExplanationRequest(BaseModel):
    """Request schema for /cases/explanation."""

    case: Dict[str, Any] = Field(..., description="Case envelope returned by /cases")
    patient_age: Optional[Any] = Field(default=None, description="Age to mention in the prose")


# ============= Response Schemas =============

class ExplanationResponse(BaseModel):
    """Narrative explanation fields, also merged into /cases responses."""

    llm_status: str = Field(..., description="disabled | skipped | demo | ok | timeout | error")
    llm_explanation: str
    llm_error_code: Optional[str] = None


class CaseResponse(ExplanationResponse):
    """Envelope response from /cases. Step 1 and Step 2 share this shape."""

    case_id: str
    created_at: str
    pathway: str
    triage: str
    priority_score: Optional[int] = Field(default=None, ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)
    suggested_flags: List[str] = Field(default_factory=list)
    used_flags: List[str] = Field(default_factory=list)
    used_mode: Optional[str] = None
    missing_info: List[str] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)
    disclaimer: str
    fallback: bool = False
    error: Optional[str] = None
    model_config = ConfigDict(extra="forbid")


class StatusResponse(BaseModel):
    """Generic status response for the root endpoint."""
    status: str = Field(..., description="Service status")
    system: Optional[str] = Field(None, description="System identifier")


class HealthResponse(BaseModel):
    ok: bool
    name: str
    explanation_mode: str
