from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from .models import GeneratedRemedy, SymptomAnalysisResult

_DECODER = json.JSONDecoder()


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    payload: dict[str, Any] | None = None
    error: str | None = None


def extract_json_object(raw_text: str) -> dict[str, Any] | None:
    """Return the first JSON object in ``raw_text``.

    Providers sometimes wrap the object in prose or markdown fences, so every
    ``{`` is tried as a start position until one decodes to an object.
    """
    text = (raw_text or "").strip()
    if not text:
        return None
    for start_idx in [idx for idx, char in enumerate(text) if char == "{"]:
        try:
            payload, _ = _DECODER.raw_decode(text, start_idx)
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict):
            return payload
    return None


def _summarize_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors()[:5]:
        location = ".".join(str(item) for item in err.get("loc", ())) or "<root>"
        parts.append(f"{location}: {err.get('msg')}")
    return "; ".join(parts)


def fill_missing(provided: Any, normalized: Any) -> Any:
    """Overlay ``provided`` on ``normalized`` without dropping provided keys.

    Keys the provider omitted (or sent as null where a default or derived value
    exists) are taken from ``normalized``; everything else is kept as sent.
    """
    if isinstance(provided, dict) and isinstance(normalized, dict):
        merged = dict(provided)
        for key, value in normalized.items():
            if merged.get(key) is None:
                merged[key] = value
            else:
                merged[key] = fill_missing(merged[key], value)
        return merged
    if isinstance(provided, list) and isinstance(normalized, list) and len(provided) == len(normalized):
        return [fill_missing(item, default) for item, default in zip(provided, normalized)]
    # Values the contract coerced (e.g. "82" to 82) take the coerced form.
    return provided if type(provided) is type(normalized) else normalized


def _validate(contract: type[BaseModel], raw_text: str) -> ValidationResult:
    candidate = extract_json_object(raw_text)
    if candidate is None:
        return ValidationResult(ok=False, error="response is not a JSON object")
    try:
        model = contract.model_validate(candidate)
    except ValidationError as exc:
        return ValidationResult(ok=False, error=_summarize_errors(exc))
    return ValidationResult(ok=True, payload=fill_missing(candidate, model.model_dump(exclude_none=True)))


def validate_remedy(raw_text: str) -> ValidationResult:
    return _validate(GeneratedRemedy, raw_text)


def validate_symptom_analysis(raw_text: str) -> ValidationResult:
    return _validate(SymptomAnalysisResult, raw_text)
