import asyncio

import pytest

from referral_advisor.core.error_mapping import (
    EXPLANATION_ERROR_CODE_CONTEXT_BUDGET,
    EXPLANATION_ERROR_CODE_DECODE,
    EXPLANATION_ERROR_CODE_GENERIC,
    EXPLANATION_ERROR_CODE_TIMEOUT,
    EXPLANATION_ERROR_CODE_UNAVAILABLE,
    build_fallback_envelope,
    classify_explanation_error,
)
from referral_advisor.core.schemas import CaseResponse
from referral_advisor.engine import DISCLAIMER, assess_case
from referral_advisor.services.llm.base import (
    LLMContextBudgetExceededError,
    LLMDecodeError,
    LLMGenerationError,
    LLMUnavailableError,
)


@pytest.mark.parametrize(
    ("error", "expected_code"),
    [
        (asyncio.TimeoutError(), EXPLANATION_ERROR_CODE_TIMEOUT),
        (LLMUnavailableError("no model"), EXPLANATION_ERROR_CODE_UNAVAILABLE),
        (LLMContextBudgetExceededError("too long"), EXPLANATION_ERROR_CODE_CONTEXT_BUDGET),
        (LLMDecodeError("bad"), EXPLANATION_ERROR_CODE_DECODE),
        (RuntimeError("Requested tokens exceed context window"), EXPLANATION_ERROR_CODE_CONTEXT_BUDGET),
        (RuntimeError("context budget exceeded"), EXPLANATION_ERROR_CODE_CONTEXT_BUDGET),
        (RuntimeError("llama_decode returned -1"), EXPLANATION_ERROR_CODE_DECODE),
        (RuntimeError("HTTP 429 Too Many Requests"), EXPLANATION_ERROR_CODE_UNAVAILABLE),
        (RuntimeError("Quota exceeded"), EXPLANATION_ERROR_CODE_UNAVAILABLE),
        (LLMGenerationError("Explanation model returned empty output"), EXPLANATION_ERROR_CODE_GENERIC),
        (ValueError("Unknown runtime failure"), EXPLANATION_ERROR_CODE_GENERIC),
    ],
)
def test_classify_explanation_error_matrix(error: BaseException, expected_code: str):
    assert classify_explanation_error(error) == expected_code


def test_fallback_envelope_has_case_shape():
    body = build_fallback_envelope(
        "Invalid JSON body (cannot parse).",
        llm_status="error",
        llm_explanation="fallback",
    )

    engine_keys = set(assess_case({}).to_dict())
    assert engine_keys <= set(body)
    assert body["fallback"] is True
    assert body["triage"] == "pending_confirmation"
    assert body["priority_score"] is None
    assert body["used_mode"] is None
    assert body["pathway"] == "oncogenetics"
    assert body["disclaimer"] == DISCLAIMER
    assert body["llm_error_code"] is None
    CaseResponse.model_validate(body)


def test_fallback_envelope_keeps_recognized_pathway():
    body = build_fallback_envelope(
        "boom",
        llm_status="skipped",
        llm_explanation="",
        payload={"pathway": " Prenatal "},
    )

    assert body["pathway"] == "prenatal"


def test_fallback_envelope_ignores_non_mapping_payload():
    body = build_fallback_envelope("boom", llm_status="skipped", llm_explanation="", payload=None)

    assert body["pathway"] == "oncogenetics"
    assert body["case_id"].startswith("case_")
