"""Deterministic, dependency-free answers used when every provider fails.

Each table is evaluated top to bottom against the lower-cased concern and the
first matching rule wins. Rules overlap in vocabulary ("headache
and tired" matches three of them) and list order is the only tie-break.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable

Predicate = Callable[[str], bool]


@dataclass(frozen=True)
class FallbackRule:
    name: str
    predicate: Predicate
    template: dict[str, Any]


def contains_any(*terms: str) -> Predicate:
    def _check(lowered: str) -> bool:
        return any(term in lowered for term in terms)

    return _check


def all_of(*predicates: Predicate) -> Predicate:
    def _check(lowered: str) -> bool:
        return all(predicate(lowered) for predicate in predicates)

    return _check


_HEADACHE = contains_any("headache", "migraine")
_FATIGUE = contains_any("tired", "fatigue")

REMEDY_RULES: tuple[FallbackRule, ...] = (
    FallbackRule(
        "headache_fatigue",
        all_of(_HEADACHE, _FATIGUE),
        {
            "name": "Headache & Fatigue Recovery Blend",
            "description": "A restorative herbal protocol for headaches that arrive together with low energy.",
            "ingredients": [
                "Feverfew leaf",
                "Peppermint leaves",
                "Fresh ginger root",
                "Rhodiola rosea root",
                "Magnesium glycinate",
            ],
            "benefits": [
                "Eases tension and headache pain",
                "Supports steady daytime energy",
                "Replenishes magnesium for muscle relaxation",
                "Helps regulate the stress response",
            ],
            "instructions": (
                "Steep 1 tsp feverfew, 1 tsp dried peppermint and 1/2 tsp grated ginger in hot water for "
                "15 minutes and drink warm during episodes. Take rhodiola (300mg) in the morning and "
                "magnesium glycinate (400mg) before bed. Drink 3-4 liters of water through the day."
            ),
            "form": "Herbal tea with supplements",
            "dosage": "Tea 2-3 cups daily during episodes; rhodiola 300mg each morning; magnesium 400mg nightly",
            "duration": "Up to 4 weeks, then reassess",
            "safety": (
                "Avoid feverfew and rhodiola if pregnant or breastfeeding. Feverfew may interact with blood "
                "thinners. Seek medical care for a sudden severe headache, vision changes, fever or neck stiffness."
            ),
            "scientific_basis": (
                "Magnesium deficiency contributes to both headaches and fatigue. Feverfew contains parthenolide, "
                "which inhibits inflammatory pathways, and rhodiola supports cellular energy production."
            ),
        },
    ),
    FallbackRule(
        "headache",
        contains_any("headache"),
        {
            "name": "Peppermint & Ginger Headache Relief",
            "description": "A natural remedy combining cooling peppermint with warming ginger to ease headache pain.",
            "ingredients": ["Fresh peppermint leaves", "Fresh ginger root", "Lavender essential oil"],
            "benefits": [
                "Reduces headache pain",
                "Relaxes tense muscles",
                "Improves circulation",
                "Calms the nervous system",
            ],
            "instructions": (
                "Steep 1 tsp dried peppermint and 1 tsp fresh grated ginger in hot water for 10 minutes. "
                "Add 1 drop lavender oil. Drink warm."
            ),
            "form": "Herbal tea",
            "dosage": "1 cup as needed, up to 3 times daily",
            "duration": "Use when headaches occur",
            "safety": "Avoid if pregnant or breastfeeding. Consult healthcare provider if headaches persist.",
            "scientific_basis": (
                "Peppermint contains menthol which has natural analgesic properties. "
                "Ginger has anti-inflammatory compounds."
            ),
        },
    ),
    FallbackRule(
        "digestive",
        contains_any("bloat", "gas", "digest", "stomach"),
        {
            "name": "Digestive Comfort Tea Blend",
            "description": "A soothing herbal blend to reduce bloating, gas, and support healthy digestion.",
            "ingredients": ["Fennel seeds", "Peppermint leaves", "Ginger root", "Chamomile flowers"],
            "benefits": [
                "Reduces bloating and gas",
                "Supports digestive function",
                "Soothes stomach discomfort",
                "Promotes healthy gut bacteria",
            ],
            "instructions": (
                "Mix 1 tsp fennel seeds, 1 tsp dried peppermint, 1/2 tsp grated ginger, and 1 tsp chamomile. "
                "Steep in hot water for 15 minutes. Strain and drink warm after meals."
            ),
            "form": "Herbal tea",
            "dosage": "1 cup after meals, up to 3 times daily",
            "duration": "Use as needed for digestive comfort",
            "safety": "Generally safe. Avoid large amounts if pregnant. Consult healthcare provider if symptoms persist.",
            "scientific_basis": (
                "Fennel and peppermint contain compounds that relax digestive muscles and reduce gas. "
                "Ginger stimulates digestion."
            ),
        },
    ),
    FallbackRule(
        "stress",
        contains_any("stress", "anxiety"),
        {
            "name": "Chamomile Stress Relief Blend",
            "description": "A calming herbal blend to reduce stress and promote relaxation.",
            "ingredients": ["Chamomile flowers", "Lemon balm", "Passionflower"],
            "benefits": [
                "Reduces stress hormones",
                "Promotes relaxation",
                "Improves sleep quality",
                "Calms nervous tension",
            ],
            "instructions": "Mix equal parts of herbs. Steep 1 tbsp in hot water for 15 minutes. Strain and drink warm.",
            "form": "Herbal tea",
            "dosage": "1 cup 2-3 times daily",
            "duration": "Use as needed for stress relief",
            "safety": "Generally safe. May cause drowsiness. Avoid if allergic to ragweed family.",
            "scientific_basis": "Chamomile contains apigenin which binds to brain receptors to promote calmness.",
        },
    ),
    FallbackRule(
        "fatigue",
        contains_any("tired", "fatigue", "energy"),
        {
            "name": "Morning Energy Adaptogen Blend",
            "description": "An adaptogenic tincture blend to restore steady energy without stimulants.",
            "ingredients": ["Rhodiola rosea root", "American ginseng root", "Schisandra berry"],
            "benefits": [
                "Supports cellular energy production",
                "Reduces afternoon energy crashes",
                "Helps balance cortisol patterns",
                "Improves mental stamina",
            ],
            "instructions": (
                "Combine rhodiola (2 parts), American ginseng (2 parts) and schisandra berry (1 part) as a tincture. "
                "Take 30-60 drops in water twice daily between meals, the last dose before 2 PM."
            ),
            "form": "Tincture",
            "dosage": "30-60 drops twice daily",
            "duration": "6-8 weeks, then take a 1 week break",
            "safety": (
                "Avoid if pregnant, breastfeeding or taking blood pressure medication without medical advice. "
                "Seek evaluation if fatigue persists beyond 6 months or comes with fever or weight loss."
            ),
            "scientific_basis": (
                "Rhodiola increases ATP production and moderates cortisol dysregulation. "
                "Adaptogens help restore hypothalamic-pituitary-adrenal axis function."
            ),
        },
    ),
)

DEFAULT_REMEDY: dict[str, Any] = {
    "name": "General Wellness Support",
    "description": "A balanced herbal blend to support overall health and wellbeing.",
    "ingredients": ["Green tea", "Turmeric root", "Honey"],
    "benefits": [
        "Supports immune system",
        "Reduces inflammation",
        "Provides antioxidants",
        "Boosts energy naturally",
    ],
    "instructions": "Brew green tea, add 1/2 tsp turmeric powder and honey to taste. Stir well and drink warm.",
    "form": "Herbal tea",
    "dosage": "1 cup daily with meals",
    "duration": "Safe for daily use",
    "safety": "Generally safe. Consult healthcare provider before use if on medications.",
    "scientific_basis": "Green tea and turmeric contain powerful antioxidants and anti-inflammatory compounds.",
}

FALLBACK_ANALYSIS_CONFIDENCE = 75

SYMPTOM_RULES: tuple[FallbackRule, ...] = (
    FallbackRule(
        "viral_fever",
        all_of(contains_any("cold"), contains_any("sweat")),
        {
            "likely_conditions": [
                "Viral Infection with Fever Response",
                "Immune System Activation",
                "Early-stage Flu-like Illness",
            ],
            "root_causes": ["Viral pathogen exposure", "Compromised immune function", "Inflammatory response"],
            "recommendations": [
                {
                    "suggestion": "Immediate immune support with elderberry and echinacea",
                    "how_to": "Take elderberry syrup 1 tbsp every 2 hours, echinacea tincture 30 drops 3x daily",
                    "confidence": 92,
                },
                {
                    "suggestion": "Hydrate aggressively with electrolyte-rich fluids",
                    "how_to": "Drink 8-10 glasses warm water + coconut water + bone broth throughout day",
                    "confidence": 95,
                },
                {
                    "suggestion": "Rest in controlled temperature environment",
                    "how_to": "Layer clothing to adjust as body temp fluctuates, rest in 68-72°F room",
                    "confidence": 88,
                },
            ],
            "natural_remedies": [
                {
                    "remedy_name": "Elderberry Syrup",
                    "dosage": "1 tablespoon every 2 hours",
                    "preparation": "Take until fever breaks, boosts immune system naturally",
                },
                {
                    "remedy_name": "Echinacea Tincture",
                    "dosage": "30 drops 3 times daily",
                    "preparation": "Mix with water or juice, helps fight infection",
                },
                {
                    "remedy_name": "Ginger Tea",
                    "dosage": "1 cup every 4 hours",
                    "preparation": "Fresh ginger root steeped in hot water, reduces inflammation",
                },
            ],
            "warning_signs": "Fever above 103°F, difficulty breathing, confusion, or symptoms lasting more than 10 days",
        },
    ),
    FallbackRule(
        "headache_fatigue",
        all_of(_HEADACHE, _FATIGUE),
        {
            "likely_conditions": [
                "Chronic Dehydration + Electrolyte Imbalance",
                "Chronic Stress Syndrome",
                "Sleep Disorder/Disruption",
                "Magnesium Deficiency",
                "Blood Sugar Dysregulation",
            ],
            "root_causes": [
                "Dehydration and electrolyte imbalance",
                "Chronic stress and muscle tension",
                "Poor sleep quality and irregular meals",
            ],
            "recommendations": [
                {
                    "suggestion": "Rehydrate with electrolytes",
                    "how_to": "Increase water intake to 3-4 liters daily with a pinch of sea salt",
                    "confidence": 88,
                },
                {
                    "suggestion": "Replenish magnesium",
                    "how_to": "Take 400mg magnesium glycinate before bed",
                    "confidence": 85,
                },
                {
                    "suggestion": "Calm the nervous system",
                    "how_to": "Practice 4-7-8 breathing and apply diluted peppermint oil to temples and neck",
                    "confidence": 80,
                },
            ],
            "natural_remedies": [
                {
                    "remedy_name": "Headache Relief Tea",
                    "dosage": "2-3 cups daily during episodes",
                    "preparation": "Equal parts feverfew, peppermint and ginger; steep 1 tbsp in hot water for 15 minutes",
                },
                {
                    "remedy_name": "Energy Support Tincture",
                    "dosage": "30 drops in water, twice daily between meals",
                    "preparation": "Combine rhodiola (2 parts), ginseng (1 part) and schisandra (1 part)",
                },
            ],
            "warning_signs": (
                "Sudden severe headache, visual changes, fever, neck stiffness, or headache after head injury"
            ),
        },
    ),
    FallbackRule(
        "headache",
        contains_any("headache", "head"),
        {
            "likely_conditions": ["Tension headache", "Dehydration headache"],
            "root_causes": [],
            "recommendations": [
                {
                    "suggestion": "Drink water immediately and apply peppermint oil to temples",
                    "how_to": (
                        "2 glasses water now, then 1 every hour. Mix 2 drops peppermint oil with coconut oil, "
                        "massage temples"
                    ),
                    "confidence": 88,
                },
                {
                    "suggestion": "Take magnesium and use ice/heat therapy",
                    "how_to": "Magnesium 400mg with food. Ice pack 15 mins on forehead, then warm compress 15 mins on neck",
                    "confidence": 85,
                },
                {
                    "suggestion": "Rest in dark room with deep breathing",
                    "how_to": "Lie down, eyes closed. Breathe: 4 counts in, hold 4, out 4. Repeat 10 times",
                    "confidence": 80,
                },
            ],
            "natural_remedies": [
                {
                    "remedy_name": "Peppermint Oil",
                    "dosage": "2 drops mixed with 1 tsp coconut oil",
                    "preparation": "Massage into temples and forehead, avoid eyes",
                },
                {
                    "remedy_name": "Magnesium Supplement",
                    "dosage": "400mg with food",
                    "preparation": "Take with meal, helps muscle tension and stress",
                },
                {
                    "remedy_name": "Willow Bark Tea",
                    "dosage": "1 cup every 4-6 hours",
                    "preparation": "Steep 1 tsp dried willow bark in hot water for 10 minutes",
                },
            ],
        },
    ),
    FallbackRule(
        "digestive",
        contains_any("bloat", "gas", "digest", "stomach"),
        {
            "likely_conditions": [
                "Food Sensitivities (FODMAP/Gluten)",
                "Small Intestinal Bacterial Overgrowth (SIBO)",
                "Digestive Enzyme Deficiency",
                "Dysbiosis (Gut Bacteria Imbalance)",
            ],
            "root_causes": [
                "Digestive enzyme insufficiency",
                "Gut microbiome imbalance",
                "Eating speed and meal timing",
            ],
            "recommendations": [
                {
                    "suggestion": "Support digestion at meals",
                    "how_to": "Take a digestive enzyme complex with meals and drink peppermint tea afterwards",
                    "confidence": 85,
                },
                {
                    "suggestion": "Eat mindfully",
                    "how_to": "Chew each bite 20-30 times and take a 10-15 minute walk after meals",
                    "confidence": 82,
                },
                {
                    "suggestion": "Identify trigger foods",
                    "how_to": "Keep a food and symptom diary and temporarily reduce high-FODMAP foods",
                    "confidence": 80,
                },
            ],
            "natural_remedies": [
                {
                    "remedy_name": "Digestive Fire Tea",
                    "dosage": "1 cup 30 minutes before meals",
                    "preparation": "Equal parts fennel seeds, fresh ginger and peppermint; steep 1 tsp per cup for 10 minutes",
                },
                {
                    "remedy_name": "Anti-Bloating Tincture",
                    "dosage": "30 drops in warm water after meals",
                    "preparation": "Fennel (3 parts), caraway (2 parts), chamomile (2 parts), ginger (1 part)",
                },
            ],
            "warning_signs": (
                "Severe abdominal pain, blood in stool, persistent vomiting, unexplained weight loss, "
                "or symptoms lasting more than 2 weeks"
            ),
        },
    ),
    FallbackRule(
        "fatigue",
        contains_any("tired", "fatigue", "energy"),
        {
            "likely_conditions": [
                "Adrenal Fatigue/HPA Axis Dysfunction",
                "Iron Deficiency",
                "Sleep Quality Disorder",
                "Subclinical Thyroid Dysfunction",
            ],
            "root_causes": [
                "Stress hormone dysregulation",
                "Nutritional deficiencies (B-vitamins, iron, magnesium)",
                "Non-restorative sleep patterns",
            ],
            "recommendations": [
                {
                    "suggestion": "Support energy metabolism",
                    "how_to": "Take a high-potency B-complex in the morning with food",
                    "confidence": 85,
                },
                {
                    "suggestion": "Stabilize blood sugar",
                    "how_to": "Eat protein and healthy fats within 1 hour of waking, then balanced meals every 3-4 hours",
                    "confidence": 82,
                },
                {
                    "suggestion": "Improve sleep quality",
                    "how_to": "Keep a consistent 7-9 hour schedule in a cool, dark room with no screens before bed",
                    "confidence": 80,
                },
            ],
            "natural_remedies": [
                {
                    "remedy_name": "Morning Energy Blend",
                    "dosage": "30-60 drops in water, twice daily",
                    "preparation": "Rhodiola (2 parts), American ginseng (2 parts), schisandra berry (1 part) as tincture",
                },
                {
                    "remedy_name": "Evening Recovery Tea",
                    "dosage": "1 cup, 1 hour before bed",
                    "preparation": "Equal parts ashwagandha, tulsi and chamomile; steep 1 tbsp for 15 minutes",
                },
            ],
            "warning_signs": (
                "Fatigue lasting more than 6 months, or with fever, unexplained weight loss, or severe low mood"
            ),
        },
    ),
)

DEFAULT_SYMPTOM_ANALYSIS: dict[str, Any] = {
    "likely_conditions": ["Need more specific symptoms"],
    "root_causes": [],
    "recommendations": [
        {
            "suggestion": "Describe your symptoms in more detail for better help",
            "how_to": "Tell me exactly what you feel, where it hurts, and how long you've had it",
            "confidence": 90,
        }
    ],
    "natural_remedies": [],
}


def select_rule(rules: tuple[FallbackRule, ...], concern: str) -> FallbackRule | None:
    lowered = (concern or "").lower()
    for rule in rules:
        if rule.predicate(lowered):
            return rule
    return None


def fallback_remedy(concern: str, preferences: str | None = None) -> dict[str, Any]:
    # Templates are fixed literals; preferences only shape provider prompts.
    rule = select_rule(REMEDY_RULES, concern)
    template = rule.template if rule else DEFAULT_REMEDY
    return copy.deepcopy(template)


def fallback_symptom_analysis(concern: str) -> dict[str, Any]:
    rule = select_rule(SYMPTOM_RULES, concern)
    template = rule.template if rule else DEFAULT_SYMPTOM_ANALYSIS
    return {
        "primary_concern": concern,
        **copy.deepcopy(template),
        "confidence_level": FALLBACK_ANALYSIS_CONFIDENCE,
    }
