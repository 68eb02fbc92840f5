import copy

import pytest

from referral_advisor.engine import (
    CaseMode,
    Pathway,
    TriageCategory,
    assess_case,
    classify_triage,
)
from referral_advisor.engine.advisory import LOW_RISK_NEXT_STEPS, NEXT_STEPS
from referral_advisor.engine.detector import FAMILY_HISTORY_RATIONALE
from referral_advisor.engine.envelope import DISCLAIMER, NO_SIGNAL_REASON


def base_payload(**overrides):
    payload = {
        "pathway": "oncogenetics",
        "patient_age": 45,
        "patient_sex": "female",
        "chief_concern": "Family history concern",
        "clinical_notes": "",
        "family_history_summary": "Mother had breast cancer.",
    }
    payload.update(overrides)
    return payload


def _stable_fields(result):
    data = result.to_dict()
    data.pop("case_id")
    data.pop("created_at")
    return data


def test_missing_confirmed_flags_returns_pending_proposal():
    result = assess_case(base_payload())

    assert result.used_mode is CaseMode.PROPOSE_FLAGS
    assert result.priority_score is None
    assert result.triage is TriageCategory.PENDING_CONFIRMATION
    assert result.used_flags == ()
    assert "breast_and_ovarian_pattern" in result.suggested_flags


def test_empty_confirmed_flags_is_still_step_one():
    result = assess_case(base_payload(confirmed_flags=[]))

    assert result.used_mode is CaseMode.PROPOSE_FLAGS
    assert result.priority_score is None
    assert result.triage is TriageCategory.PENDING_CONFIRMATION


def test_non_list_confirmed_flags_is_step_one():
    result = assess_case(base_payload(confirmed_flags={"multiple_primaries": True}))

    assert result.used_mode is CaseMode.PROPOSE_FLAGS
    assert result.priority_score is None


def test_family_history_adds_generic_reason_in_step_one():
    result = assess_case(
        {
            "pathway": "oncogenetics",
            "patient_age": 40,
            "patient_sex": "female",
            "chief_concern": "Cancer risk",
            "clinical_notes": "",
            "family_history_summary": "Two relatives with cancer.",
        }
    )

    assert result.used_mode is CaseMode.PROPOSE_FLAGS
    assert FAMILY_HISTORY_RATIONALE in result.reasons
    assert "family history" in " ".join(result.reasons).lower()


def test_single_confirmed_flag_scores_discuss():
    result = assess_case(base_payload(confirmed_flags=["multiple_primaries"]))

    assert result.used_mode is CaseMode.CONFIRMED_FLAGS
    assert result.priority_score == 25
    assert result.triage is TriageCategory.DISCUSS
    assert result.used_flags == ("multiple_primaries",)
    assert result.reasons == ("Multiple primary cancers mentioned in the same person",)


def test_score_seventy_is_recommended():
    result = assess_case(
        base_payload(confirmed_flags=["early_onset_cancer", "multiple_relatives_cancer"])
    )

    assert result.priority_score == 70
    assert result.triage is TriageCategory.RECOMMENDED


def test_score_is_clamped_at_one_hundred():
    result = assess_case(
        base_payload(
            pathway="prenatal",
            pregnancy_status="pregnant",
            gestational_weeks=12,
            prenatal_findings=[],
            clinical_notes="Abnormal ultrasound and increased nuchal translucency. History of trisomy 21.",
            family_history_summary="Down syndrome in the family.",
            confirmed_flags=["abnormal_ultrasound", "increased_nt", "previous_aneuploidy"],
        )
    )

    assert result.priority_score == 100
    assert result.triage is TriageCategory.RECOMMENDED


def test_nipt_positive_free_text_suggests_positive_screening():
    result = assess_case(
        {
            "pathway": "prenatal",
            "patient_age": 32,
            "patient_sex": "female",
            "chief_concern": "Prenatal screening",
            "clinical_notes": "NIPT positive for trisomy 21",
            "family_history_summary": "",
            "pregnancy_status": "pregnant",
            "gestational_weeks": 11,
        }
    )

    assert result.used_mode is CaseMode.PROPOSE_FLAGS
    assert "positive_screening" in result.suggested_flags
    assert "previous_aneuploidy" in result.suggested_flags


def test_pancreatic_cancer_mention_suggests_extra_indicator():
    result = assess_case(
        {
            "pathway": "oncogenetics",
            "patient_age": 55,
            "patient_sex": "male",
            "chief_concern": "Cancer in family",
            "clinical_notes": "Father had pancreatic cancer",
            "family_history_summary": "Pancreas cancer mentioned.",
        }
    )

    assert "pancreatic_cancer" in result.suggested_flags
    assert "pancreatic_melanoma_pattern" not in result.suggested_flags


def test_pancreatic_and_melanoma_pattern():
    result = assess_case(
        base_payload(
            clinical_notes="Sister with melanoma at 38.",
            family_history_summary="Paternal uncle died of pancreatic cancer.",
        )
    )

    assert "pancreatic_cancer" in result.suggested_flags
    assert "pancreatic_melanoma_pattern" in result.suggested_flags


def test_extra_indicator_is_scored_like_a_rule():
    result = assess_case(base_payload(confirmed_flags=["pancreatic_cancer", "multiple_primaries"]))

    assert result.priority_score == 55
    assert result.triage is TriageCategory.DISCUSS


def test_unknown_confirmed_ids_are_ignored():
    result = assess_case(
        base_payload(confirmed_flags=["multiple_primaries", "not_a_flag", "increased_nt"])
    )

    assert result.priority_score == 25
    assert result.used_flags == ("multiple_primaries",)


def test_duplicate_confirmed_ids_count_once():
    result = assess_case(base_payload(confirmed_flags=["multiple_primaries", "multiple_primaries"]))

    assert result.priority_score == 25


def test_only_unknown_ids_scores_zero_and_suppresses_advice():
    result = assess_case({"pathway": "oncogenetics", "confirmed_flags": ["made_up"]})

    assert result.used_mode is CaseMode.CONFIRMED_FLAGS
    assert result.priority_score == 0
    assert result.triage is TriageCategory.NOT_PRIORITIZED
    assert result.reasons == (NO_SIGNAL_REASON,)
    assert result.missing_info == ()
    assert result.next_steps == LOW_RISK_NEXT_STEPS


def test_prenatal_keeps_missing_info_when_not_prioritized():
    result = assess_case({"pathway": "prenatal", "confirmed_flags": ["made_up"]})

    assert result.triage is TriageCategory.NOT_PRIORITIZED
    assert result.next_steps == LOW_RISK_NEXT_STEPS
    assert "Pregnancy status (pregnant or preconception)" in result.missing_info
    assert "Patient age" in result.missing_info


def test_pending_result_keeps_pathway_next_steps():
    result = assess_case({"pathway": "pediatric", "clinical_notes": "Seizures since age 2"})

    assert result.next_steps == NEXT_STEPS[Pathway.PEDIATRIC]
    assert "seizures" in result.suggested_flags
    assert "HPO terms (or a more detailed phenotype description)" in result.missing_info


def test_confirmed_result_keeps_suggested_flags():
    result = assess_case(base_payload(confirmed_flags=["multiple_primaries"]))

    assert result.suggested_flags == ("breast_and_ovarian_pattern",)


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (0, TriageCategory.NOT_PRIORITIZED),
        (20, TriageCategory.NOT_PRIORITIZED),
        (21, TriageCategory.DISCUSS),
        (69, TriageCategory.DISCUSS),
        (70, TriageCategory.RECOMMENDED),
        (100, TriageCategory.RECOMMENDED),
    ],
)
def test_triage_threshold_boundaries(score, expected):
    assert classify_triage(score) is expected


@pytest.mark.parametrize("pathway", ["invalid_pathway", "ONCO", 42, None, ""])
def test_unknown_or_missing_pathway_never_raises(pathway):
    result = assess_case({"pathway": pathway})

    assert result.pathway is Pathway.ONCOGENETICS
    assert result.triage is TriageCategory.PENDING_CONFIRMATION
    assert result.reasons


def test_pathway_is_case_insensitive():
    assert assess_case({"pathway": "  Prenatal "}).pathway is Pathway.PRENATAL


@pytest.mark.parametrize("payload", [None, [], "text", 12])
def test_non_mapping_payload_is_treated_as_empty_intake(payload):
    result = assess_case(payload)

    assert result.pathway is Pathway.ONCOGENETICS
    assert result.used_mode is CaseMode.PROPOSE_FLAGS


def test_score_is_null_or_bounded_integer():
    payloads = [
        base_payload(),
        base_payload(confirmed_flags=["early_onset_cancer"]),
        base_payload(
            confirmed_flags=[
                "early_onset_cancer",
                "multiple_relatives_cancer",
                "breast_and_ovarian_pattern",
                "multiple_primaries",
                "pancreatic_cancer",
            ]
        ),
    ]
    for payload in payloads:
        score = assess_case(payload).priority_score
        assert score is None or (isinstance(score, int) and 0 <= score <= 100)


def test_same_input_gives_same_decision():
    payload = base_payload(confirmed_flags=["early_onset_cancer", "breast_and_ovarian_pattern"])

    first = assess_case(payload)
    second = assess_case(payload)

    assert _stable_fields(first) == _stable_fields(second)
    assert first.case_id != second.case_id


def test_payload_is_not_mutated():
    payload = base_payload(pathway="prenatal", prenatal_findings="nt increased", confirmed_flags=[])
    snapshot = copy.deepcopy(payload)

    assess_case(payload)

    assert payload == snapshot


def test_envelope_shape_is_shared_by_both_steps():
    step_one = assess_case(base_payload()).to_dict()
    step_two = assess_case(base_payload(confirmed_flags=["multiple_primaries"])).to_dict()

    assert set(step_one) == set(step_two)
    assert step_one["disclaimer"] == DISCLAIMER
    assert step_one["case_id"].startswith("case_")
    assert step_one["used_mode"] == "propose_flags"
    assert step_two["used_mode"] == "confirmed_flags"
    assert step_two["triage"] == "discuss"
