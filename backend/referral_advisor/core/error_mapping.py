"""Shared error codes and fallback bodies for the HTTP boundary."""
from __future__ import annotations

import asyncio
from typing import Any, Mapping

from ..engine import DISCLAIMER, Pathway, TriageCategory
from ..engine.envelope import NO_SIGNAL_REASON, new_case_id, utc_timestamp
from ..services.llm.base import (
    LLMContextBudgetExceededError,
    LLMDecodeError,
    LLMUnavailableError,
)

EXPLANATION_ERROR_CODE_CONTEXT_BUDGET = "LLM_CONTEXT_BUDGET_EXCEEDED"
EXPLANATION_ERROR_CODE_DECODE = "LLM_DECODE_FAILED"
EXPLANATION_ERROR_CODE_UNAVAILABLE = "LLM_UNAVAILABLE"
EXPLANATION_ERROR_CODE_TIMEOUT = "LLM_TIMEOUT"
EXPLANATION_ERROR_CODE_GENERIC = "EXPLANATION_FAILED"


def classify_explanation_error(err: BaseException) -> str:
    """Classify an explanation failure into a stable error code."""
    if isinstance(err, (asyncio.TimeoutError, TimeoutError)):
        return EXPLANATION_ERROR_CODE_TIMEOUT
    if isinstance(err, LLMUnavailableError):
        return EXPLANATION_ERROR_CODE_UNAVAILABLE
    if isinstance(err, LLMContextBudgetExceededError):
        return EXPLANATION_ERROR_CODE_CONTEXT_BUDGET
    if isinstance(err, LLMDecodeError):
        return EXPLANATION_ERROR_CODE_DECODE

    lowered = str(err).lower()
    if "context window" in lowered or "context budget" in lowered:
        return EXPLANATION_ERROR_CODE_CONTEXT_BUDGET
    if "llama_decode returned -1" in lowered or "decode" in lowered:
        return EXPLANATION_ERROR_CODE_DECODE
    if "quota" in lowered or "rate limit" in lowered or "429" in lowered:
        return EXPLANATION_ERROR_CODE_UNAVAILABLE
    return EXPLANATION_ERROR_CODE_GENERIC


def _fallback_pathway(payload: Mapping[str, Any] | None) -> str:
    raw = payload.get("pathway") if isinstance(payload, Mapping) else None
    pathway, _ = Pathway.parse(raw)
    return pathway.value


def build_fallback_envelope(
    error: str,
    *,
    llm_status: str,
    llm_explanation: str,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Envelope-shaped body returned when the case could not be assessed."""
    return {
        "case_id": new_case_id(),
        "created_at": utc_timestamp(),
        "pathway": _fallback_pathway(payload),
        "triage": TriageCategory.PENDING_CONFIRMATION.value,
        "priority_score": None,
        "reasons": [NO_SIGNAL_REASON],
        "suggested_flags": [],
        "used_flags": [],
        "used_mode": None,
        "missing_info": [],
        "next_steps": [],
        "disclaimer": DISCLAIMER,
        "fallback": True,
        "error": error,
        "llm_status": llm_status,
        "llm_explanation": llm_explanation,
        "llm_error_code": None,
    }
