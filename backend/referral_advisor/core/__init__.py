"""Core schemas and logging for the referral advisor."""
from .logging_utils import clear_log_context, get_case_id, log_event, log_latency_event, set_case_id
from .schemas import (
    CaseRequest,
    CaseResponse,
    ExplanationRequest,
    ExplanationResponse,
    HealthResponse,
    StatusResponse,
)

__all__ = [
    # Logging
    "log_event",
    "log_latency_event",
    "set_case_id",
    "get_case_id",
    "clear_log_context",
    # Schemas
    "CaseRequest",
    "CaseResponse",
    "ExplanationRequest",
    "ExplanationResponse",
    "HealthResponse",
    "StatusResponse",
]
