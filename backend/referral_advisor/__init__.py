"""
Referral Advisor package for genetic referral triage.

This package provides a two-step, human-in-the-loop triage advisor:
- Step 1 proposes red flags found by literal phrase matching over the intake
- Step 2 scores only the clinician-confirmed flags and assigns a triage category

Main entry point:
    assess_case: pure, synchronous decision engine

Components:
    - engine: rule registry, normalization, detection, scoring, advisory text
    - agents: optional narrative explanation of a computed case
    - services: LLM backends used by the explanation
    - config: environment settings and service factory
    - core: wire schemas, structured logging, error mapping
"""

from .engine import (
    CaseMode,
    CaseResult,
    Pathway,
    TriageCategory,
    assess_case,
)
from .config import AppSettings, ExplanationSettings, get_services

__all__ = [
    "assess_case",
    "CaseResult",
    "CaseMode",
    "Pathway",
    "TriageCategory",
    "AppSettings",
    "ExplanationSettings",
    "get_services",
]

__version__ = "1.0.0"
