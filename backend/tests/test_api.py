from __future__ import annotations

import asyncio
import importlib
import logging
from types import SimpleNamespace

import pytest
from fake_providers import VALID_ANALYSIS, VALID_REMEDY, gemini_like, openai_like
from fastapi import HTTPException

from remedy_ai_core.errors import ProviderTransientError
from remedy_ai_core.models import MAX_CONCERN_CHARS, REFUSAL_MESSAGE, RemedyRequest


def test_health_reports_no_providers_without_keys(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "providers": []}


def test_generate_remedy_requires_concern(client):
    response = client.post("/api/generate-remedy", json={"healthConcern": "   "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Health concern is required"


def test_generate_remedy_refusal_is_plain_text(client):
    response = client.post("/api/generate-remedy", json={"healthConcern": "what's the weather tomorrow"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == REFUSAL_MESSAGE


def test_generate_remedy_fallback_without_providers(client):
    response = client.post("/api/generate-remedy", json={"healthConcern": "headache and tired"})
    assert response.status_code == 200
    body = response.json()
    assert body["ai_source"] == "Pattern Analysis"
    assert len(body["ingredients"]) >= 3


def test_generate_remedy_with_primary_provider(client, backend_module, monkeypatch):
    service = backend_module.container.service
    monkeypatch.setattr(service, "primary", openai_like(reply=VALID_REMEDY))
    monkeypatch.setattr(service, "secondary", gemini_like(reply=VALID_REMEDY))
    response = client.post(
        "/api/generate-remedy",
        json={"healthConcern": "nausea after meals", "preferences": "caffeine free"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["ai_source"] == "ChatGPT + Gemini"
    assert body["name"] == VALID_REMEDY["name"]


def test_generate_remedy_includes_catalog_matches(client, catalog):
    catalog.add_remedy(name="Digestive Bitters", category="bloating", benefits=["Stimulates digestion"])
    response = client.post("/api/generate-remedy", json={"healthConcern": "bloating"})
    body = response.json()
    assert body["database_remedies"][0]["remedy_name"] == "Digestive Bitters"
    assert body["remedy_count"] == 1


def test_symptom_analysis_validates_messages(client):
    assert client.post("/api/ai/symptom-analysis", json={"messages": []}).status_code == 400
    blank = client.post("/api/ai/symptom-analysis", json={"messages": [{"role": "user", "content": " "}]})
    assert blank.status_code == 400


def test_symptom_analysis_secondary_provider(client, backend_module, monkeypatch):
    service = backend_module.container.service
    monkeypatch.setattr(service, "primary", openai_like(error=ProviderTransientError("openai", "HTTP 500")))
    monkeypatch.setattr(service, "secondary", gemini_like(reply=VALID_ANALYSIS))
    response = client.post(
        "/api/ai/symptom-analysis",
        json={"messages": [{"role": "user", "content": "headaches every afternoon"}]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["ai_source"] == "Gemini"
    assert body["primary_concern"] == VALID_ANALYSIS["primary_concern"]


def test_symptom_analysis_refusal(client):
    response = client.post(
        "/api/ai/symptom-analysis",
        json={"messages": [{"role": "user", "content": "who won the football game last night"}]},
    )
    assert response.status_code == 200
    assert response.text == REFUSAL_MESSAGE


def test_symptom_finder_joins_list_and_adds_metadata(client):
    response = client.post(
        "/api/ai/symptom-finder",
        json={"symptoms": ["cold", "sweats"], "age": 34, "duration": "2 days"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["primary_concern"] == "cold, sweats"
    assert body["likely_conditions"][0] == "Viral Infection with Fever Response"
    assert body["confidence_level"] == 75
    assert body["expert_system"] == "dual_expert_enhanced"
    assert body["disclaimer"]


def test_symptom_finder_requires_symptoms(client):
    assert client.post("/api/ai/symptom-finder", json={"symptoms": []}).status_code == 400
    assert client.post("/api/ai/symptom-finder", json={"symptoms": "  "}).status_code == 400


def test_overlong_inputs_are_rejected(client):
    too_long = "headache " * (MAX_CONCERN_CHARS // 9 + 1)
    remedy = client.post("/api/generate-remedy", json={"healthConcern": too_long})
    assert remedy.status_code == 413
    assert remedy.json()["detail"] == "Health concern is too long"
    analysis = client.post("/api/ai/symptom-analysis", json={"messages": [{"role": "user", "content": too_long}]})
    assert analysis.status_code == 413
    assert client.post("/api/ai/symptom-finder", json={"symptoms": too_long}).status_code == 413


def test_concern_at_the_length_limit_is_accepted(client):
    concern = "headache".ljust(MAX_CONCERN_CHARS, ".")
    response = client.post("/api/generate-remedy", json={"healthConcern": concern})
    assert response.status_code == 200
    assert response.json()["ai_source"] == "Pattern Analysis"


def _fake_request(*, disconnected: bool) -> SimpleNamespace:
    async def is_disconnected() -> bool:
        return disconnected

    return SimpleNamespace(is_disconnected=is_disconnected, url=SimpleNamespace(path="/api/generate-remedy"))


def test_disconnect_cancels_inflight_provider_call(backend_module, monkeypatch):
    monkeypatch.setattr(backend_module, "_DISCONNECT_POLL_SECONDS", 0.01)
    service = backend_module.container.service
    primary = openai_like(reply=VALID_REMEDY, delay=5.0)
    secondary = gemini_like(reply=VALID_REMEDY)
    monkeypatch.setattr(service, "primary", primary)
    monkeypatch.setattr(service, "secondary", secondary)

    async def _call() -> None:
        operation = service.generate_remedy(RemedyRequest(healthConcern="nausea"))
        with pytest.raises(HTTPException) as excinfo:
            await backend_module._run_until_disconnect(_fake_request(disconnected=True), operation)
        assert excinfo.value.status_code == 499
        await asyncio.sleep(0.05)

    asyncio.run(_call())
    assert primary.cancelled
    assert secondary.calls == []


def test_connected_client_gets_the_result(backend_module, monkeypatch):
    monkeypatch.setattr(backend_module, "_DISCONNECT_POLL_SECONDS", 0.01)
    service = backend_module.container.service
    monkeypatch.setattr(service, "primary", openai_like(reply=VALID_REMEDY, delay=0.05))

    async def _call():
        operation = service.generate_remedy(RemedyRequest(healthConcern="nausea"))
        return await backend_module._run_until_disconnect(_fake_request(disconnected=False), operation)

    result = asyncio.run(_call())
    assert result["name"] == VALID_REMEDY["name"]


def test_unknown_log_level_falls_back_to_info(backend_module, monkeypatch):
    assert backend_module._log_level("LOUD") == logging.INFO
    assert backend_module._log_level(" debug ") == logging.DEBUG
    assert backend_module._log_level(None) == logging.INFO
    monkeypatch.setenv("REMEDY_AI_LOG_LEVEL", "LOUD")
    reloaded = importlib.reload(backend_module)
    assert reloaded.container.service is not None
