from __future__ import annotations

from typing import Any

from .models import REFUSAL_MESSAGE, Prompt

REMEDY_SYSTEM_PROMPT = f"""You are an expert natural health practitioner with decades of experience in herbal medicine, nutrition, and holistic wellness. You ONLY provide guidance on health, wellness, natural remedies, and related topics.

CRITICAL RULES:
- ONLY respond to health, wellness, nutrition, fitness, mental health, natural remedies, or medical-related questions
- If asked about anything non-health related, respond: "{REFUSAL_MESSAGE}"
- Always include safety warnings and recommend consulting healthcare providers
- Base recommendations on traditional herbal knowledge and scientific evidence
- Be specific about dosages, preparation methods, and duration
- Include contraindications and potential interactions

Your response must be a valid JSON object with these exact fields:
{{
  "name": "Descriptive remedy name",
  "description": "Brief description of what this remedy addresses",
  "ingredients": ["ingredient1", "ingredient2", "ingredient3"],
  "benefits": ["benefit1", "benefit2", "benefit3"],
  "instructions": "Detailed preparation and usage instructions",
  "form": "tea/tincture/capsule/topical/etc",
  "dosage": "Specific dosage recommendations",
  "duration": "How long to use this remedy",
  "safety": "Important safety information and contraindications",
  "scientific_basis": "Brief explanation of why this works"
}}"""

SYMPTOM_ANALYSIS_SYSTEM_PROMPT = """You are Remy, a knowledgeable natural health expert with decades of experience in herbal medicine, nutrition, and holistic wellness. You provide science-backed health guidance.

RESPONSE GUIDELINES:
- Start with understanding and empathy for what the user is experiencing
- Explain the likely root causes behind their symptoms
- Provide the scientific reasoning behind each explanation
- Give practical solutions they can implement today
- Recommend specific natural remedies with exact dosages and preparation methods
- Include when they should seek professional medical care

Your response must be a valid JSON object with these exact fields:
{
  "primary_concern": "Clear summary of what the user is asking about",
  "understanding": "Empathetic acknowledgment of their concern",
  "likely_conditions": ["Most likely condition/explanation", "Secondary possibility", "Third possibility"],
  "root_causes": ["Cause 1", "Cause 2", "Contributing factor"],
  "science_explanation": "Why these symptoms occur and what is happening in the body",
  "recommendations": [
    {"suggestion": "Specific actionable recommendation", "how_to": "Step-by-step instructions", "why_it_works": "Scientific reason this helps", "confidence": 90}
  ],
  "natural_remedies": [
    {"remedy_name": "Specific remedy name", "dosage": "Exact dosage with frequency", "preparation": "How to prepare and use", "scientific_basis": "Why this remedy works"}
  ],
  "healing_protocol": {
    "immediate_actions": [{"action": "What to do right now", "how_to": "Step by step instructions", "expected_result": "What to expect"}],
    "daily_protocol": [{"action": "Daily practice", "timing": "When to do this", "duration": "How long to continue"}],
    "lifestyle_changes": ["Long-term change 1", "Long-term change 2"]
  },
  "prevention_strategy": "How to prevent this from recurring",
  "warning_signs": "Specific symptoms that require immediate medical attention",
  "confidence_level": 85
}"""


def _string() -> dict[str, Any]:
    return {"type": "STRING"}


def _string_list() -> dict[str, Any]:
    return {"type": "ARRAY", "items": _string()}


REMEDY_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": _string(),
        "description": _string(),
        "ingredients": _string_list(),
        "benefits": _string_list(),
        "instructions": _string(),
        "form": _string(),
        "dosage": _string(),
        "duration": _string(),
        "safety": _string(),
        "scientific_basis": _string(),
    },
    "required": ["name", "ingredients", "instructions"],
}

SYMPTOM_ANALYSIS_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "primary_concern": _string(),
        "understanding": _string(),
        "likely_conditions": _string_list(),
        "root_causes": _string_list(),
        "science_explanation": _string(),
        "recommendations": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "suggestion": _string(),
                    "how_to": _string(),
                    "why_it_works": _string(),
                    "confidence": {"type": "NUMBER"},
                },
                "required": ["suggestion", "how_to"],
            },
        },
        "natural_remedies": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "remedy_name": _string(),
                    "dosage": _string(),
                    "preparation": _string(),
                    "scientific_basis": _string(),
                },
                "required": ["remedy_name", "dosage", "preparation"],
            },
        },
        "healing_protocol": {
            "type": "OBJECT",
            "properties": {
                "immediate_actions": {
                    "type": "ARRAY",
                    "items": {
                        "type": "OBJECT",
                        "properties": {
                            "action": _string(),
                            "how_to": _string(),
                            "expected_result": _string(),
                        },
                    },
                },
                "daily_protocol": {
                    "type": "ARRAY",
                    "items": {
                        "type": "OBJECT",
                        "properties": {
                            "action": _string(),
                            "timing": _string(),
                            "duration": _string(),
                        },
                    },
                },
                "lifestyle_changes": _string_list(),
            },
        },
        "prevention_strategy": _string(),
        "warning_signs": _string(),
        "confidence_level": {"type": "NUMBER"},
    },
    "required": ["primary_concern", "likely_conditions", "recommendations", "confidence_level"],
}


def remedy_prompt(concern: str, preferences: str | None, *, max_output_tokens: int) -> Prompt:
    lines = [f"Health concern: {concern}"]
    if preferences:
        lines.append(f"Preferences: {preferences}")
    lines.append("")
    lines.append("Please provide a natural remedy recommendation for this health concern.")
    return Prompt(system=REMEDY_SYSTEM_PROMPT, user="\n".join(lines), max_output_tokens=max_output_tokens)


def symptom_analysis_prompt(symptom_text: str, *, max_output_tokens: int) -> Prompt:
    user = (
        f"User health question: {symptom_text}\n\n"
        "Provide a health analysis with scientific explanations, root causes, "
        "and targeted natural remedy recommendations."
    )
    return Prompt(system=SYMPTOM_ANALYSIS_SYSTEM_PROMPT, user=user, max_output_tokens=max_output_tokens)
