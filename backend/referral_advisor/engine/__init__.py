"""Deterministic two-step referral triage engine."""
from .advisory import Advisory, build_advisory, find_missing_info
from .detector import DetectionResult, detect_flags
from .envelope import DISCLAIMER, CaseResult, assess_case
from .normalizer import Intake, build_corpus, normalize_prenatal_findings
from .pathways import CaseMode, Pathway, TriageCategory
from .rules import ExtraIndicator, Rule, lookup_indicator
from .scoring import ScoreResult, classify_triage, score_confirmed

__all__ = [
    "assess_case",
    "CaseResult",
    "DISCLAIMER",
    "Intake",
    "build_corpus",
    "normalize_prenatal_findings",
    "detect_flags",
    "DetectionResult",
    "score_confirmed",
    "classify_triage",
    "ScoreResult",
    "build_advisory",
    "find_missing_info",
    "Advisory",
    "Pathway",
    "TriageCategory",
    "CaseMode",
    "Rule",
    "ExtraIndicator",
    "lookup_indicator",
]
