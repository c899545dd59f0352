from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Awaitable, TypeVar

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from remedy_ai_core import (
    MAX_CONCERN_CHARS,
    ChatTurn,
    HealthTopicClassifier,
    RemedyAIService,
    RemedyRequest,
    ResponseEnricher,
    bootstrap_local_env,
    build_provider_adapters,
    load_settings,
)
from remedy_catalog import RemedyCatalog, SQLiteCatalogDB

bootstrap_local_env()


def _log_level(name: str | None) -> int:
    level = logging.getLevelName((name or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


logging.basicConfig(
    level=_log_level(os.getenv("REMEDY_AI_LOG_LEVEL")),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("remedy_ai")

T = TypeVar("T")

CLIENT_CLOSED_REQUEST = 499
_DISCONNECT_POLL_SECONDS = 0.5

EXPERT_SYSTEM_TAG = "dual_expert_enhanced"
SYMPTOM_FINDER_DISCLAIMER = (
    "This analysis is for educational purposes only and is not a substitute for professional medical advice. "
    "Consult a qualified healthcare provider for diagnosis and treatment."
)


class GenerateRemedyBody(BaseModel):
    healthConcern: str = ""
    preferences: str | None = None


class SymptomAnalysisRequest(BaseModel):
    messages: list[ChatTurn] = Field(default_factory=list)


class SymptomFinderRequest(BaseModel):
    symptoms: str | list[str]
    age: int | str | None = None
    duration: str | None = None


class RemedyAIApp:
    def __init__(self) -> None:
        self.settings = load_settings()
        db_path = os.getenv(
            "REMEDY_CATALOG_DB_PATH",
            str((Path(__file__).resolve().parent / "remedy_catalog.sqlite")),
        )
        self.db = SQLiteCatalogDB(db_path)
        self.catalog = RemedyCatalog(self.db)
        self.http_client = httpx.AsyncClient()
        primary, secondary = build_provider_adapters(self.settings, self.http_client)
        self.service = RemedyAIService(
            classifier=HealthTopicClassifier(),
            primary=primary,
            secondary=secondary,
            enricher=ResponseEnricher(
                self.catalog.search_remedies,
                timeout_seconds=self.settings.enrich_timeout_seconds,
            ),
            settings=self.settings,
        )
        logger.info("providers configured: %s", self.service.configured_providers() or "none")

    async def aclose(self) -> None:
        await self.http_client.aclose()


container = RemedyAIApp()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await container.aclose()


app = FastAPI(title="Remedy AI Backend", lifespan=lifespan)

allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in allowed_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _run_until_disconnect(request: Request, operation: Awaitable[T]) -> T:
    """Run ``operation`` as a task and cancel it if the client goes away."""
    task = asyncio.ensure_future(operation)
    while True:
        done, _ = await asyncio.wait({task}, timeout=_DISCONNECT_POLL_SECONDS)
        if task in done:
            return task.result()
        if await request.is_disconnected():
            task.cancel()
            logger.info("client disconnected; cancelled %s", request.url.path)
            raise HTTPException(status_code=CLIENT_CLOSED_REQUEST, detail="Client closed request")


def _require_bounded(text: str, detail: str) -> None:
    if len(text) > MAX_CONCERN_CHARS:
        raise HTTPException(status_code=413, detail=detail)


def _respond(result: dict[str, Any] | str) -> dict[str, Any] | PlainTextResponse:
    if isinstance(result, str):
        return PlainTextResponse(result)
    return result


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "providers": container.service.configured_providers(),
    }


@app.post("/api/generate-remedy")
async def generate_remedy(payload: GenerateRemedyBody, request: Request):
    if not payload.healthConcern.strip():
        raise HTTPException(status_code=400, detail="Health concern is required")
    _require_bounded(payload.healthConcern.strip(), "Health concern is too long")
    remedy_request = RemedyRequest(health_concern=payload.healthConcern, preferences=payload.preferences)
    result = await _run_until_disconnect(request, container.service.generate_remedy(remedy_request))
    return _respond(result)


@app.post("/api/ai/symptom-analysis")
async def symptom_analysis(payload: SymptomAnalysisRequest, request: Request):
    if not payload.messages:
        raise HTTPException(status_code=400, detail="Messages are required")
    if not payload.messages[-1].content.strip():
        raise HTTPException(status_code=400, detail="Latest message content is required")
    _require_bounded(payload.messages[-1].content.strip(), "Latest message content is too long")
    result = await _run_until_disconnect(request, container.service.analyze_symptoms(payload.messages))
    return _respond(result)


@app.post("/api/ai/symptom-finder")
async def symptom_finder(payload: SymptomFinderRequest, request: Request):
    if isinstance(payload.symptoms, list):
        symptom_text = ", ".join(item.strip() for item in payload.symptoms if item.strip())
    else:
        symptom_text = payload.symptoms.strip()
    if not symptom_text:
        raise HTTPException(status_code=400, detail="Symptoms are required")
    _require_bounded(symptom_text, "Symptoms are too long")
    result = await _run_until_disconnect(
        request,
        container.service.analyze_symptoms([ChatTurn(role="user", content=symptom_text)]),
    )
    if isinstance(result, str):
        return PlainTextResponse(result)
    return {
        **result,
        "expert_system": EXPERT_SYSTEM_TAG,
        "disclaimer": SYMPTOM_FINDER_DISCLAIMER,
    }
