import pytest

from referral_advisor.engine import Pathway, lookup_indicator, score_confirmed
from referral_advisor.engine.rules import EXTRA_INDICATORS, RULES, known_indicator_ids
from referral_advisor.engine.scoring import clamp_score


@pytest.mark.parametrize("pathway", list(Pathway))
def test_every_pathway_has_rules(pathway):
    assert RULES[pathway]
    assert pathway in EXTRA_INDICATORS


@pytest.mark.parametrize("pathway", list(Pathway))
def test_indicator_ids_are_unique_and_weights_bounded(pathway):
    ids = known_indicator_ids(pathway)
    assert len(ids) == len(set(ids))
    for indicator_id in ids:
        indicator = lookup_indicator(pathway, indicator_id)
        assert 0 <= indicator.weight <= 100
        assert indicator.rationale


@pytest.mark.parametrize("pathway", list(Pathway))
def test_trigger_phrases_are_lower_case(pathway):
    for rule in RULES[pathway]:
        assert rule.phrases
        assert all(phrase == phrase.lower() for phrase in rule.phrases)
    for indicator in EXTRA_INDICATORS[pathway]:
        for group in indicator.phrase_groups:
            assert all(phrase == phrase.lower() for phrase in group)


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        RULES[Pathway.PRENATAL] = ()  # type: ignore[index]


def test_lookup_is_scoped_to_pathway():
    assert lookup_indicator(Pathway.PRENATAL, "increased_nt").weight == 40
    assert lookup_indicator(Pathway.ONCOGENETICS, "increased_nt") is None


def test_weights_sum_exactly_below_cap():
    result = score_confirmed(Pathway.PEDIATRIC, ["developmental_delay", "congenital_anomalies"])

    assert result.score == 60
    assert result.used == ("developmental_delay", "congenital_anomalies")
    assert result.rationale == (
        "Developmental delay mentioned",
        "Congenital anomalies/dysmorphism mentioned",
    )


def test_weights_above_cap_are_clamped():
    result = score_confirmed(
        Pathway.PRENATAL,
        ["abnormal_ultrasound", "increased_nt", "previous_aneuploidy"],
    )

    assert result.score == 100


def test_rationale_follows_confirmation_order():
    result = score_confirmed(Pathway.ONCOGENETICS, ["multiple_primaries", "early_onset_cancer"])

    assert result.rationale[0] == "Multiple primary cancers mentioned in the same person"


@pytest.mark.parametrize(("raw", "expected"), [(-5, 0), (0, 0), (55, 55), (100, 100), (130, 100)])
def test_clamp_score(raw, expected):
    assert clamp_score(raw) == expected
