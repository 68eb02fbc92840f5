"""Closed vocabularies shared by the decision engine."""
from __future__ import annotations

from enum import Enum
from typing import Any


class Pathway(str, Enum):
    """Referral context that selects the rule set and advisory text."""

    ONCOGENETICS = "oncogenetics"
    PRENATAL = "prenatal"
    PEDIATRIC = "pediatric"

    @classmethod
    def parse(cls, value: Any) -> tuple["Pathway", bool]:
        """
        Resolve a raw pathway value.

        Returns (pathway, recognized). Absent or unknown values resolve to
        ONCOGENETICS; recognized is False only for a non-empty unknown value.
        """
        raw = "" if value is None else str(value).strip().lower()
        if not raw:
            return cls.ONCOGENETICS, True
        for member in cls:
            if member.value == raw:
                return member, True
        return cls.ONCOGENETICS, False


class TriageCategory(str, Enum):
    RECOMMENDED = "recommended"
    DISCUSS = "discuss"
    NOT_PRIORITIZED = "not_prioritized"
    PENDING_CONFIRMATION = "pending_confirmation"


class CaseMode(str, Enum):
    PROPOSE_FLAGS = "propose_flags"
    CONFIRMED_FLAGS = "confirmed_flags"
