from __future__ import annotations

from typing import Any

import httpx

from .config import AISettings, ProviderSettings
from .errors import ErrorKind, ProviderTransientError
from .models import Prompt

_CONNECT_TIMEOUT_SECONDS = 8.0


def _provider_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        # OpenAI and Gemini both nest the reason under "error"; some gateways flatten it.
        err = payload.get("error")
        candidates = [err.get("message") if isinstance(err, dict) else err, payload.get("message")]
        for candidate in candidates:
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
    return response.text.strip() or f"HTTP {response.status_code}"


def _join_text_parts(parts: Any, separator: str) -> str:
    if isinstance(parts, str):
        return parts
    if not isinstance(parts, list):
        return ""
    texts = [item["text"] for item in parts if isinstance(item, dict) and isinstance(item.get("text"), str)]
    return separator.join(text for text in texts if text)


def _first_item(response_json: dict[str, Any], key: str) -> dict[str, Any]:
    items = response_json.get(key)
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


def _coerce_completion_text(response_json: dict[str, Any]) -> str:
    message = _first_item(response_json, "choices").get("message")
    return _join_text_parts(message.get("content") if isinstance(message, dict) else None, "\n")


def _coerce_gemini_text(response_json: dict[str, Any]) -> str:
    content = _first_item(response_json, "candidates").get("content")
    return _join_text_parts(content.get("parts") if isinstance(content, dict) else None, "")


class ProviderAdapter:
    """Uniform wrapper around one text-generation backend.

    ``generate`` returns raw completion text; judging whether that text
    satisfies an output contract is the pipeline's job.
    """

    provider_id = "provider"
    label = "Provider"

    async def generate(self, prompt: Prompt, schema_hint: dict[str, Any] | None = None) -> str:
        raise NotImplementedError


class _HTTPProviderAdapter(ProviderAdapter):
    def __init__(
        self,
        settings: ProviderSettings,
        client: httpx.AsyncClient,
        *,
        timeout_seconds: float,
        max_response_chars: int,
    ) -> None:
        self.settings = settings
        self.client = client
        self.timeout_seconds = timeout_seconds
        self.max_response_chars = max_response_chars

    async def _post_json(self, url: str, *, headers: dict[str, str], payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self.client.post(
                url,
                headers=headers,
                json=payload,
                timeout=httpx.Timeout(self.timeout_seconds, connect=_CONNECT_TIMEOUT_SECONDS),
            )
        except httpx.TimeoutException as exc:
            raise ProviderTransientError(self.provider_id, f"request timed out: {exc}", kind=ErrorKind.TIMEOUT) from exc
        except httpx.HTTPError as exc:
            raise ProviderTransientError(self.provider_id, f"request failed: {exc}") from exc
        if response.status_code >= 400:
            raise ProviderTransientError(
                self.provider_id,
                f"HTTP {response.status_code}: {_provider_error_message(response)}",
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderTransientError(self.provider_id, "response body is not JSON") from exc
        if not isinstance(body, dict):
            raise ProviderTransientError(self.provider_id, "response body is not a JSON object")
        return body

    def _bounded_text(self, text: str) -> str:
        cleaned = (text or "").strip()
        if not cleaned:
            raise ProviderTransientError(self.provider_id, "empty completion")
        if len(cleaned) > self.max_response_chars:
            raise ProviderTransientError(
                self.provider_id,
                f"completion exceeded {self.max_response_chars} characters",
                kind=ErrorKind.OVERSIZED,
            )
        return cleaned


class OpenAIChatAdapter(_HTTPProviderAdapter):
    provider_id = "openai"
    label = "ChatGPT"

    async def generate(self, prompt: Prompt, schema_hint: dict[str, Any] | None = None) -> str:
        # Chat completions only take a JSON-object mode; the field list lives in the system prompt.
        payload = {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            "response_format": {"type": "json_object"},
            "max_completion_tokens": prompt.max_output_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }
        body = await self._post_json(f"{self.settings.base_url}/chat/completions", headers=headers, payload=payload)
        return self._bounded_text(_coerce_completion_text(body))


class GeminiAdapter(_HTTPProviderAdapter):
    provider_id = "gemini"
    label = "Gemini"

    async def generate(self, prompt: Prompt, schema_hint: dict[str, Any] | None = None) -> str:
        generation_config: dict[str, Any] = {
            "responseMimeType": "application/json",
            "maxOutputTokens": prompt.max_output_tokens,
        }
        if schema_hint:
            generation_config["responseSchema"] = schema_hint
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": f"{prompt.system}\n\nUser Request:\n{prompt.user}"}],
                }
            ],
            "generationConfig": generation_config,
        }
        headers = {
            "x-goog-api-key": self.settings.api_key,
            "Content-Type": "application/json",
        }
        url = f"{self.settings.base_url}/models/{self.settings.model}:generateContent"
        body = await self._post_json(url, headers=headers, payload=payload)
        return self._bounded_text(_coerce_gemini_text(body))


_ADAPTER_TYPES: dict[str, type[_HTTPProviderAdapter]] = {
    "openai": OpenAIChatAdapter,
    "gemini": GeminiAdapter,
}

_PREFERENCE_ALIASES = {
    "openai": "openai",
    "chatgpt": "openai",
    "gpt": "openai",
    "gemini": "gemini",
    "google": "gemini",
}


def provider_order(preference: str) -> list[str]:
    canonical = _PREFERENCE_ALIASES.get((preference or "").strip().lower())
    order = ["openai", "gemini"]
    if canonical:
        order = [canonical] + [name for name in order if name != canonical]
    return order


def build_provider_adapters(
    settings: AISettings,
    client: httpx.AsyncClient,
) -> tuple[ProviderAdapter | None, ProviderAdapter | None]:
    """Build the primary and secondary adapters; a slot is None when its credentials are absent."""
    by_name = {"openai": settings.openai, "gemini": settings.gemini}
    slots: list[ProviderAdapter | None] = []
    for name in provider_order(settings.primary_provider):
        provider_settings = by_name[name]
        if not provider_settings.configured:
            slots.append(None)
            continue
        slots.append(
            _ADAPTER_TYPES[name](
                provider_settings,
                client,
                timeout_seconds=settings.provider_timeout_seconds,
                max_response_chars=settings.max_response_chars,
            )
        )
    return slots[0], slots[1]
