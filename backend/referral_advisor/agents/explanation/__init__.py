"""Narrative explanation module."""
from .workflows import (
    ExplanationOutcome,
    build_explanation_prompt,
    explain_case,
    run_case_explanation,
)

__all__ = [
    "ExplanationOutcome",
    "build_explanation_prompt",
    "explain_case",
    "run_case_explanation",
]
