from __future__ import annotations

import pytest

from remedy_ai_core.fallback import (
    DEFAULT_REMEDY,
    DEFAULT_SYMPTOM_ANALYSIS,
    REMEDY_RULES,
    SYMPTOM_RULES,
    fallback_remedy,
    fallback_symptom_analysis,
    select_rule,
)
from remedy_ai_core.models import GeneratedRemedy, SymptomAnalysisResult


@pytest.mark.parametrize(
    ("concern", "expected_rule"),
    [
        ("headache and tired", "headache_fatigue"),
        ("Migraine with constant fatigue", "headache_fatigue"),
        ("pounding headache", "headache"),
        ("bloating after lunch", "digestive"),
        ("stomach gas", "digestive"),
        ("work stress keeps me up", "stress"),
        ("anxiety before exams", "stress"),
        ("so tired all day", "fatigue"),
        ("no energy in the mornings", "fatigue"),
        ("dry elbows", None),
    ],
)
def test_remedy_rule_selection(concern, expected_rule):
    rule = select_rule(REMEDY_RULES, concern)
    assert (rule.name if rule else None) == expected_rule


def test_remedy_rule_order_is_fixed():
    assert [rule.name for rule in REMEDY_RULES] == [
        "headache_fatigue",
        "headache",
        "digestive",
        "stress",
        "fatigue",
    ]


def test_headache_wins_over_stress_by_order():
    assert fallback_remedy("headache from stress")["name"] == "Peppermint & Ginger Headache Relief"


def test_default_remedy_for_unmatched_concern():
    assert fallback_remedy("dry elbows") == DEFAULT_REMEDY
    assert fallback_remedy("dry elbows")["name"] == "General Wellness Support"


def test_headache_fatigue_remedy_shape():
    remedy = fallback_remedy("headache and tired")
    assert len(remedy["ingredients"]) >= 3
    assert remedy["instructions"].strip()


def test_preferences_do_not_change_selection():
    assert fallback_remedy("bloating", "vegan, no caffeine") == fallback_remedy("bloating")
    assert fallback_remedy("bloating", "please help with my headache") == fallback_remedy("bloating")


def test_every_remedy_template_satisfies_the_contract():
    for template in [rule.template for rule in REMEDY_RULES] + [DEFAULT_REMEDY]:
        GeneratedRemedy.model_validate(template)


def test_returned_remedy_is_a_copy():
    first = fallback_remedy("pounding headache")
    first["ingredients"].append("Mutated")
    first["name"] = "Mutated"
    second = fallback_remedy("pounding headache")
    assert "Mutated" not in second["ingredients"]
    assert second["name"] == "Peppermint & Ginger Headache Relief"


@pytest.mark.parametrize(
    ("concern", "expected_rule"),
    [
        ("cold sweats at night", "viral_fever"),
        ("headache and cold sweats", "viral_fever"),
        ("Migraine and tired", "headache_fatigue"),
        ("my head hurts", "headache"),
        ("fatigue after lunch", "fatigue"),
        ("bloated stomach", "digestive"),
        ("rash on my arm", None),
    ],
)
def test_symptom_rule_selection(concern, expected_rule):
    rule = select_rule(SYMPTOM_RULES, concern)
    assert (rule.name if rule else None) == expected_rule


def test_symptom_rule_order_is_fixed():
    assert [rule.name for rule in SYMPTOM_RULES] == [
        "viral_fever",
        "headache_fatigue",
        "headache",
        "digestive",
        "fatigue",
    ]


def test_tired_with_bloating_is_digestive_in_both_tables():
    concern = "so tired and my stomach is bloated"
    assert select_rule(REMEDY_RULES, concern).name == "digestive"
    assert select_rule(SYMPTOM_RULES, concern).name == "digestive"


def test_symptom_fallback_keeps_original_text_and_fixed_confidence():
    analysis = fallback_symptom_analysis("Cold Sweats and chills")
    assert analysis["primary_concern"] == "Cold Sweats and chills"
    assert analysis["confidence_level"] == 75
    assert analysis["likely_conditions"][0] == "Viral Infection with Fever Response"


def test_unspecified_symptom_fallback():
    analysis = fallback_symptom_analysis("rash on my arm")
    assert analysis["likely_conditions"] == ["Need more specific symptoms"]
    assert len(analysis["recommendations"]) == 1
    assert analysis["natural_remedies"] == []


def test_every_symptom_template_satisfies_the_contract():
    templates = [rule.template for rule in SYMPTOM_RULES] + [DEFAULT_SYMPTOM_ANALYSIS]
    for template in templates:
        result = SymptomAnalysisResult.model_validate(
            {"primary_concern": "anything", **template, "confidence_level": 75}
        )
        assert result.recommendations


def test_symptom_fallback_is_deterministic():
    assert fallback_symptom_analysis("tired and headache") == fallback_symptom_analysis("tired and headache")
