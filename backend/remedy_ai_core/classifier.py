from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .models import MAX_CONCERN_CHARS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopicRule:
    """One entry of the domain gate: substring terms, regex patterns, or both."""

    name: str
    terms: tuple[str, ...] = ()
    patterns: tuple[re.Pattern[str], ...] = field(default=())

    def matches(self, lowered: str, original: str) -> bool:
        if any(term in lowered for term in self.terms):
            return True
        return any(pattern.search(original) for pattern in self.patterns)


def _terms(*values: str) -> tuple[str, ...]:
    return tuple(values)


# Evaluated in order; vocabulary rules come before phrasing patterns.
HEALTH_TOPIC_RULES: tuple[TopicRule, ...] = (
    TopicRule(
        "general_health",
        _terms(
            "pain", "ache", "sick", "illness", "disease", "symptom", "health", "wellness", "medical",
            "tired", "fatigue", "sleep", "insomnia", "stress", "anxiety", "depression", "mood",
        ),
    ),
    TopicRule(
        "digestive",
        _terms(
            "digestion", "digestive", "stomach", "nausea", "bloating", "bloated", "gas", "constipation",
            "diarrhea", "indigestion", "heartburn", "acid", "reflux", "ibs", "cramps", "gut", "intestinal",
        ),
    ),
    TopicRule(
        "head_neuro",
        _terms("headache", "migraine", "dizziness", "vertigo", "brain", "neurological"),
    ),
    TopicRule(
        "body_systems",
        _terms("inflammation", "swelling", "joint", "arthritis", "muscle", "bone", "injury", "wound", "healing"),
    ),
    TopicRule(
        "skin_hair",
        _terms(
            "skin", "rash", "acne", "eczema", "psoriasis", "dermatitis", "wrinkles", "aging", "hair", "scalp",
            "dandruff", "bald", "thinning", "dry", "oily", "itchy", "sensitive",
        ),
    ),
    TopicRule(
        "respiratory_immune",
        _terms(
            "allergy", "allergies", "immune", "cold", "flu", "fever", "asthma", "cough", "throat",
            "sinus", "congestion", "runny", "stuffy", "breathing", "respiratory",
        ),
    ),
    TopicRule(
        "cardio_metabolic",
        _terms(
            "blood", "pressure", "diabetes", "cholesterol", "heart", "circulation", "hypertension",
            "weight", "obesity", "metabolism", "thyroid",
        ),
    ),
    TopicRule(
        "infection",
        _terms("infection", "bacteria", "virus", "fungal", "yeast", "candida", "parasites"),
    ),
    TopicRule(
        "nutrition_lifestyle",
        _terms(
            "diet", "nutrition", "vitamin", "mineral", "supplement", "exercise", "fitness",
            "detox", "cleanse", "liver", "kidney",
        ),
    ),
    TopicRule(
        "mental_cognitive",
        _terms("mental", "cognitive", "memory", "focus", "concentration", "energy", "vitality", "panic", "phobia"),
    ),
    TopicRule(
        "reproductive_hormonal",
        _terms(
            "hormonal", "hormone", "menstrual", "period", "pms", "pregnancy", "menopause",
            "testosterone", "estrogen", "adrenal", "fertility",
        ),
    ),
    TopicRule(
        "treatment_intent",
        _terms("natural", "herbal", "remedy", "treatment", "cure", "relief", "therapy"),
    ),
    TopicRule(
        "health_phrasing",
        patterns=(
            re.compile(r"feel.*(bad|sick|unwell|ill)", re.IGNORECASE),
            re.compile(r"trouble.*(sleep|digest|breath)", re.IGNORECASE),
            re.compile(r"problems?.*(with|in).*(stomach|head|back|joint)", re.IGNORECASE),
            re.compile(r"need.*(help|remedy|treatment).*(for|with)", re.IGNORECASE),
        ),
    ),
)


class HealthTopicClassifier:
    def __init__(self, rules: tuple[TopicRule, ...] = HEALTH_TOPIC_RULES) -> None:
        self.rules = rules

    def matched_rule(self, text: str) -> str | None:
        # The phrasing patterns backtrack; only a bounded prefix is inspected.
        cleaned = (text or "").strip()[:MAX_CONCERN_CHARS]
        if not cleaned:
            return None
        lowered = cleaned.lower()
        for rule in self.rules:
            if rule.matches(lowered, cleaned):
                return rule.name
        return None

    def classify(self, text: str) -> bool:
        rule_name = self.matched_rule(text)
        logger.debug("health topic gate: rule=%s", rule_name)
        return rule_name is not None
