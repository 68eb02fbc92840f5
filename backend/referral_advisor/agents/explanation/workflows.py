"""Narrative explanation workflow for already-computed case envelopes."""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from ...core.error_mapping import EXPLANATION_ERROR_CODE_UNAVAILABLE, classify_explanation_error
from ...core.logging_utils import log_event, log_latency_event
from ...services import GenerationOptions, LLMGenerationError
from .prompts import EXPLANATION_SYSTEM_PROMPT, EXPLANATION_USER_TEMPLATE

DISABLED_MESSAGE = "GenAI explanation disabled. Returning deterministic decision only."
PENDING_MESSAGE = "Explanation is generated once the suggested red flags have been confirmed."
FALLBACK_MESSAGE = (
    "GenAI explanation unavailable right now. Showing deterministic decision output only."
)


@dataclass(frozen=True)
class ExplanationOutcome:
    status: str
    explanation: str
    error_code: str | None = None

    def to_fields(self) -> dict[str, Any]:
        return {
            "llm_status": self.status,
            "llm_explanation": self.explanation,
            "llm_error_code": self.error_code,
        }


def _bullet_lines(items: Any) -> str:
    if not isinstance(items, (list, tuple)) or not items:
        return "None"
    return "\n- ".join(str(item) for item in items)


def build_explanation_prompt(case: Mapping[str, Any], age: Any = None) -> str:
    score = case.get("priority_score")
    return EXPLANATION_USER_TEMPLATE.format(
        pathway=case.get("pathway") or "unknown",
        age=age if age not in (None, "") else "unknown",
        score=score if score is not None else "N/A",
        triage=case.get("triage") or "N/A",
        reasons=_bullet_lines(case.get("reasons")),
        missing_info=_bullet_lines(case.get("missing_info")),
    )


def run_case_explanation(
    llm,
    case: Mapping[str, Any],
    age: Any = None,
    max_new_tokens: int = 256,
) -> str:
    """
    Ask the explanation model to narrate one case envelope.

    :param llm: LLM service instance with generate() method
    :param case: Case envelope as returned by the engine
    :param age: Patient age as supplied by the caller
    :param max_new_tokens: Output token cap
    :return: Explanation text
    """
    prompt = build_explanation_prompt(case, age)
    response_text = llm.generate(
        f"{EXPLANATION_SYSTEM_PROMPT.strip()}\n{prompt}",
        options=GenerationOptions(
            stop=["</s>", "\nPathway:"],
            max_new_tokens=max_new_tokens,
            temperature=0.2,
            messages=[
                {"role": "system", "content": EXPLANATION_SYSTEM_PROMPT.strip()},
                {"role": "user", "content": prompt.strip()},
            ],
        ),
    )
    explanation = (response_text or "").strip()
    if not explanation:
        raise LLMGenerationError("Explanation model returned empty output")
    return explanation


async def _run_with_optional_lock(
    lock: Any | None,
    func: Callable[..., Any],
    *args: Any,
) -> Any:
    def _call() -> Any:
        if lock is None:
            return func(*args)
        with lock:
            return func(*args)

    return await asyncio.to_thread(_call)


async def explain_case(
    case: Mapping[str, Any],
    services: Mapping[str, Any],
    age: Any = None,
) -> ExplanationOutcome:
    """
    Produce a narrative explanation under a bounded timeout.

    Never raises: disabled, pending, unavailable, timed-out and failed
    explanations all degrade to a fixed message.
    """
    settings = services["settings"].explanation
    if not settings.enabled:
        return ExplanationOutcome(status="disabled", explanation=DISABLED_MESSAGE)
    if case.get("used_mode") != "confirmed_flags":
        return ExplanationOutcome(status="skipped", explanation=PENDING_MESSAGE)

    llm = services.get("llm")
    if llm is None:
        return ExplanationOutcome(
            status="error",
            explanation=FALLBACK_MESSAGE,
            error_code=EXPLANATION_ERROR_CODE_UNAVAILABLE,
        )

    started_at = time.perf_counter()
    try:
        explanation = await asyncio.wait_for(
            _run_with_optional_lock(
                services.get("llm_lock"),
                run_case_explanation,
                llm,
                case,
                age,
                settings.max_new_tokens,
            ),
            timeout=settings.timeout_s,
        )
    except asyncio.TimeoutError as err:
        log_event(
            component="explanation",
            event="explanation_timed_out",
            level="WARNING",
            details={"timeout_s": settings.timeout_s},
        )
        log_latency_event(
            component="explanation",
            event="explanation_latency",
            stage="explanation",
            duration_s=time.perf_counter() - started_at,
            status="timed_out",
            level="WARNING",
        )
        return ExplanationOutcome(
            status="timeout",
            explanation=FALLBACK_MESSAGE,
            error_code=classify_explanation_error(err),
        )
    except Exception as err:
        error_code = classify_explanation_error(err)
        log_event(
            component="explanation",
            event="explanation_failed",
            level="ERROR",
            details={"error": str(err), "code": error_code},
        )
        log_latency_event(
            component="explanation",
            event="explanation_latency",
            stage="explanation",
            duration_s=time.perf_counter() - started_at,
            status="failed",
            level="ERROR",
        )
        return ExplanationOutcome(
            status="error",
            explanation=FALLBACK_MESSAGE,
            error_code=error_code,
        )

    log_event(
        component="explanation",
        event="explanation_completed",
        details={"mode": settings.mode, "explanation_chars": len(explanation)},
    )
    log_latency_event(
        component="explanation",
        event="explanation_latency",
        stage="explanation",
        duration_s=time.perf_counter() - started_at,
        status="completed",
    )
    status = "demo" if settings.mode == "demo" else "ok"
    return ExplanationOutcome(status=status, explanation=explanation)
