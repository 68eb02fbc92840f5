from contextlib import contextmanager
from io import StringIO
import json
import logging

import pytest

from referral_advisor.agents.explanation import explain_case
from referral_advisor.config import AppSettings, ExplanationSettings
from referral_advisor.core.logging_utils import (
    STRUCTURED_LOGGER_NAME,
    clear_log_context,
    get_case_id,
    log_event,
    log_latency_event,
    set_case_id,
)
from referral_advisor.engine import assess_case
from referral_advisor.services.llm import DemoExplanationModel


def _parse_log_lines(raw_output: str) -> list[dict]:
    lines = [line for line in raw_output.splitlines() if line.strip()]
    return [json.loads(line) for line in lines]


@contextmanager
def _capture_structured_logs():
    logger = logging.getLogger(STRUCTURED_LOGGER_NAME)
    original_handlers = list(logger.handlers)
    original_level = logger.level
    original_propagate = logger.propagate

    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.handlers = [handler]
    logger.setLevel(logging.INFO)
    logger.propagate = False
    try:
        yield buffer
    finally:
        handler.flush()
        logger.handlers = original_handlers
        logger.setLevel(original_level)
        logger.propagate = original_propagate


def test_log_event_schema_includes_required_fields():
    set_case_id("case-schema")

    with _capture_structured_logs() as buffer:
        log_event(component="test_component", event="test_event")
    parsed = _parse_log_lines(buffer.getvalue())
    assert parsed
    record = parsed[-1]

    assert "ts" in record
    assert record["level"] == "INFO"
    assert record["component"] == "test_component"
    assert record["event"] == "test_event"
    assert record["case_id"] == "case-schema"
    assert isinstance(record["details"], dict)

    clear_log_context()
    assert get_case_id() is None


def test_explicit_case_id_overrides_context():
    set_case_id("case-context")

    with _capture_structured_logs() as buffer:
        log_event(component="test", event="explicit", case_id="case-explicit", level="WARNING")
    record = _parse_log_lines(buffer.getvalue())[-1]

    assert record["case_id"] == "case-explicit"
    assert record["level"] == "WARNING"
    clear_log_context()


def test_latency_event_schema():
    with _capture_structured_logs() as buffer:
        log_latency_event(
            component="explanation",
            event="explanation_latency",
            stage="explanation",
            duration_s=0.0123,
            status="completed",
            details={"extra": 1},
        )
    record = _parse_log_lines(buffer.getvalue())[-1]

    assert record["details"]["stage"] == "explanation"
    assert record["details"]["status"] == "completed"
    assert record["details"]["duration_ms"] == 12.3
    assert record["details"]["extra"] == 1


def test_negative_duration_is_reported_as_zero():
    with _capture_structured_logs() as buffer:
        log_latency_event(
            component="test",
            event="latency",
            stage="x",
            duration_s=-1.0,
            status="completed",
        )
    record = _parse_log_lines(buffer.getvalue())[-1]

    assert record["details"]["duration_ms"] == 0.0


def test_unknown_pathway_is_logged_as_warning():
    with _capture_structured_logs() as buffer:
        result = assess_case({"pathway": "cardiology"})
    records = [r for r in _parse_log_lines(buffer.getvalue()) if r["event"] == "unknown_pathway"]

    assert result.pathway.value == "oncogenetics"
    assert len(records) == 1
    assert records[0]["level"] == "WARNING"
    assert records[0]["component"] == "engine"
    assert records[0]["details"] == {"received": "cardiology", "resolved": "oncogenetics"}


def test_known_pathway_logs_nothing():
    with _capture_structured_logs() as buffer:
        assess_case({"pathway": "pediatric"})

    assert _parse_log_lines(buffer.getvalue()) == []


@pytest.mark.asyncio
async def test_explanation_emits_completion_and_latency_events():
    case = assess_case({"pathway": "prenatal", "confirmed_flags": ["increased_nt"]}).to_dict()
    services = {
        "settings": AppSettings(explanation=ExplanationSettings(mode="demo")),
        "llm": DemoExplanationModel(),
        "llm_lock": None,
    }

    with _capture_structured_logs() as buffer:
        await explain_case(case, services)
    events = [record["event"] for record in _parse_log_lines(buffer.getvalue())]

    assert "explanation_completed" in events
    assert "explanation_latency" in events
