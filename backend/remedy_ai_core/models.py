from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from .errors import ErrorKind

REFUSAL_MESSAGE = (
    "I can only provide guidance on health and wellness topics. "
    "Please ask me about natural remedies, nutrition, fitness, or other health concerns."
)
FALLBACK_SOURCE = "Pattern Analysis"
DEFAULT_ANALYSIS_CONFIDENCE = 80
DERIVED_RECOMMENDATION_CONFIDENCE = 90
MAX_CONCERN_CHARS = 2000


def _non_blank(value: str, field_name: str) -> str:
    if not value.strip():
        raise ValueError(f"{field_name} must not be blank")
    return value


def _non_blank_items(values: list[str], field_name: str) -> list[str]:
    if not values:
        raise ValueError(f"{field_name} must contain at least one entry")
    for item in values:
        if not item.strip():
            raise ValueError(f"{field_name} entries must not be blank")
    return values


def _percentage(value: int | float, field_name: str) -> int | float:
    if not 0 <= value <= 100:
        raise ValueError(f"{field_name} must be between 0 and 100")
    return value


class RemedyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    health_concern: str = Field(alias="healthConcern")
    preferences: str | None = None

    @field_validator("health_concern")
    @classmethod
    def _strip_concern(cls, value: str) -> str:
        return _non_blank(value, "healthConcern").strip()

    @field_validator("preferences")
    @classmethod
    def _strip_preferences(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class ChatTurn(BaseModel):
    role: str = "user"
    content: str = ""


class _Contract(BaseModel):
    # Providers may add keys beyond the contract; they pass through untouched.
    model_config = ConfigDict(extra="allow")


class GeneratedRemedy(_Contract):
    name: str
    description: str | None = None
    ingredients: list[str]
    benefits: list[str] | None = None
    instructions: str
    form: str | None = None
    dosage: str | None = None
    duration: str | None = None
    safety: str | None = None
    scientific_basis: str | None = None

    @field_validator("name", "instructions")
    @classmethod
    def _required_text(cls, value: str, info: ValidationInfo) -> str:
        return _non_blank(value, info.field_name)

    @field_validator("ingredients")
    @classmethod
    def _required_ingredients(cls, value: list[str]) -> list[str]:
        return _non_blank_items(value, "ingredients")


class Recommendation(_Contract):
    suggestion: str
    how_to: str
    why_it_works: str | None = None
    confidence: int | float = DERIVED_RECOMMENDATION_CONFIDENCE

    @field_validator("suggestion")
    @classmethod
    def _required_suggestion(cls, value: str) -> str:
        return _non_blank(value, "suggestion")

    @field_validator("confidence")
    @classmethod
    def _confidence_range(cls, value: int | float) -> int | float:
        return _percentage(value, "confidence")


class NaturalRemedy(_Contract):
    remedy_name: str
    dosage: str
    preparation: str
    scientific_basis: str | None = None

    @field_validator("remedy_name")
    @classmethod
    def _required_name(cls, value: str) -> str:
        return _non_blank(value, "remedy_name")


class SymptomAnalysisResult(_Contract):
    primary_concern: str
    understanding: str | None = None
    likely_conditions: list[str]
    root_causes: list[str] = Field(default_factory=list)
    science_explanation: str | None = None
    recommendations: list[Recommendation] = Field(default_factory=list)
    natural_remedies: list[NaturalRemedy] = Field(default_factory=list)
    healing_protocol: dict[str, Any] | None = None
    prevention_strategy: str | None = None
    warning_signs: str | None = None
    confidence_level: int | float = DEFAULT_ANALYSIS_CONFIDENCE
    ai_source: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _derive_recommendations(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("recommendations") is not None:
            return data
        protocol = data.get("healing_protocol")
        actions = protocol.get("immediate_actions") if isinstance(protocol, dict) else None
        if not isinstance(actions, list):
            return data
        derived = []
        for action in actions:
            if not isinstance(action, dict) or not action.get("action"):
                continue
            derived.append(
                {
                    "suggestion": action["action"],
                    "how_to": action.get("how_to") or "",
                    "why_it_works": action.get("expected_result") or "",
                    "confidence": DERIVED_RECOMMENDATION_CONFIDENCE,
                }
            )
        return {**data, "recommendations": derived}

    @field_validator("primary_concern")
    @classmethod
    def _required_concern(cls, value: str) -> str:
        return _non_blank(value, "primary_concern")

    @field_validator("likely_conditions")
    @classmethod
    def _required_conditions(cls, value: list[str]) -> list[str]:
        return _non_blank_items(value, "likely_conditions")

    @field_validator("confidence_level")
    @classmethod
    def _confidence_level_range(cls, value: int | float) -> int | float:
        return _percentage(value, "confidence_level")


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str
    max_output_tokens: int


@dataclass(frozen=True)
class ProviderOutcome:
    provider_id: str
    success: bool
    parsed: dict[str, Any] | None = None
    error: ErrorKind | None = None
    detail: str | None = None

    def as_log_entry(self) -> dict[str, Any]:
        return {
            "provider": self.provider_id,
            "success": self.success,
            "error": self.error.value if self.error else None,
            "detail": self.detail,
        }
