from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence

from .classifier import HealthTopicClassifier
from .config import AISettings
from .enricher import ResponseEnricher
from .errors import (
    ClassificationRejected,
    ErrorKind,
    PipelineStateError,
    ProviderError,
    ProviderSchemaViolation,
    ProviderUnavailable,
)
from .fallback import fallback_remedy, fallback_symptom_analysis
from .models import FALLBACK_SOURCE, REFUSAL_MESSAGE, ChatTurn, Prompt, ProviderOutcome, RemedyRequest
from .prompts import REMEDY_RESPONSE_SCHEMA, SYMPTOM_ANALYSIS_RESPONSE_SCHEMA, remedy_prompt, symptom_analysis_prompt
from .providers import ProviderAdapter
from .validation import ValidationResult, validate_remedy, validate_symptom_analysis

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    INIT = "init"
    GATE = "gate"
    TRY_A = "try_a"
    TRY_B = "try_b"
    FALLBACK = "fallback"
    ENRICH = "enrich"
    DONE = "done"


_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.INIT: {PipelineState.GATE},
    PipelineState.GATE: {PipelineState.TRY_A, PipelineState.DONE},
    PipelineState.TRY_A: {PipelineState.ENRICH, PipelineState.TRY_B},
    PipelineState.TRY_B: {PipelineState.ENRICH, PipelineState.FALLBACK},
    PipelineState.FALLBACK: {PipelineState.ENRICH},
    PipelineState.ENRICH: {PipelineState.DONE},
    PipelineState.DONE: set(),
}


@dataclass(frozen=True)
class PipelineTask:
    """Everything one operation contributes to a pipeline run."""

    operation: str
    concern: str
    prompt: Prompt
    schema_hint: dict[str, Any] | None
    validate: Callable[[str], ValidationResult]
    fallback: Callable[[], dict[str, Any]]


@dataclass
class PipelineResult:
    payload: dict[str, Any] | str
    refused: bool = False
    ai_source: str | None = None
    lifecycle: list[str] = field(default_factory=list)
    outcomes: list[ProviderOutcome] = field(default_factory=list)


def remedy_task(request: RemedyRequest, settings: AISettings) -> PipelineTask:
    concern = request.health_concern
    return PipelineTask(
        operation="generate_remedy",
        concern=concern,
        prompt=remedy_prompt(concern, request.preferences, max_output_tokens=settings.remedy_max_tokens),
        schema_hint=REMEDY_RESPONSE_SCHEMA,
        validate=validate_remedy,
        fallback=lambda: fallback_remedy(concern, request.preferences),
    )


def symptom_analysis_task(symptom_text: str, settings: AISettings) -> PipelineTask:
    return PipelineTask(
        operation="analyze_symptoms",
        concern=symptom_text,
        prompt=symptom_analysis_prompt(symptom_text, max_output_tokens=settings.analysis_max_tokens),
        schema_hint=SYMPTOM_ANALYSIS_RESPONSE_SCHEMA,
        validate=validate_symptom_analysis,
        fallback=lambda: fallback_symptom_analysis(symptom_text),
    )


class OrchestrationPipeline:
    """Single-use state machine: gate, primary, secondary, fallback, enrichment.

    Providers are tried strictly one after another. Any failure of a provider
    stage (missing adapter, transport error, timeout, contract violation)
    moves on to the next stage, and the fallback stage cannot fail, so every
    in-domain request ends with a valid payload. Cancellation is never
    absorbed: a cancelled request abandons whatever call is in flight.
    """

    def __init__(
        self,
        *,
        classifier: HealthTopicClassifier,
        primary: ProviderAdapter | None,
        secondary: ProviderAdapter | None,
        enricher: ResponseEnricher,
        provider_timeout_seconds: float,
    ) -> None:
        self.classifier = classifier
        self.primary = primary
        self.secondary = secondary
        self.enricher = enricher
        self.provider_timeout_seconds = provider_timeout_seconds
        self.state = PipelineState.INIT
        self.lifecycle: list[str] = [PipelineState.INIT.value]
        self.outcomes: list[ProviderOutcome] = []

    def _advance(self, next_state: PipelineState) -> None:
        allowed_next = _TRANSITIONS.get(self.state, set())
        if next_state not in allowed_next:
            raise PipelineStateError(f"Invalid transition: {self.state.value} -> {next_state.value}")
        self.state = next_state
        self.lifecycle.append(next_state.value)

    def primary_tag(self) -> str | None:
        if self.primary is None:
            return None
        if self.secondary is not None:
            return f"{self.primary.label} + {self.secondary.label}"
        return self.primary.label

    def _gate(self, task: PipelineTask) -> None:
        rule_name = self.classifier.matched_rule(task.concern)
        if rule_name is None:
            raise ClassificationRejected(f"{task.operation}: input outside the health domain")
        logger.info("%s: gate passed rule=%s", task.operation, rule_name)

    async def _attempt(self, adapter: ProviderAdapter | None, slot: str, task: PipelineTask) -> ProviderOutcome:
        provider_id = adapter.provider_id if adapter is not None else slot
        try:
            if adapter is None:
                raise ProviderUnavailable(slot, "no credentials configured")
            raw_text = await asyncio.wait_for(
                adapter.generate(task.prompt, task.schema_hint),
                timeout=self.provider_timeout_seconds,
            )
            validation = task.validate(raw_text)
            if not validation.ok or validation.payload is None:
                raise ProviderSchemaViolation(provider_id, validation.error or "invalid response")
            outcome = ProviderOutcome(provider_id=provider_id, success=True, parsed=validation.payload)
        except asyncio.TimeoutError:
            outcome = ProviderOutcome(
                provider_id=provider_id,
                success=False,
                error=ErrorKind.TIMEOUT,
                detail=f"no response within {self.provider_timeout_seconds}s",
            )
        except ProviderError as exc:
            outcome = ProviderOutcome(provider_id=provider_id, success=False, error=exc.kind, detail=exc.detail)
        except Exception as exc:
            outcome = ProviderOutcome(
                provider_id=provider_id,
                success=False,
                error=ErrorKind.TRANSIENT,
                detail=f"{type(exc).__name__}: {exc}",
            )
        self.outcomes.append(outcome)
        log = logger.info if outcome.success else logger.warning
        log("%s: provider attempt %s", task.operation, outcome.as_log_entry())
        return outcome

    async def run(self, task: PipelineTask) -> PipelineResult:
        self._advance(PipelineState.GATE)
        try:
            self._gate(task)
        except ClassificationRejected as exc:
            logger.info("%s", exc)
            self._advance(PipelineState.DONE)
            return PipelineResult(
                payload=REFUSAL_MESSAGE,
                refused=True,
                lifecycle=list(self.lifecycle),
                outcomes=list(self.outcomes),
            )

        self._advance(PipelineState.TRY_A)
        outcome = await self._attempt(self.primary, "primary", task)
        ai_source = self.primary_tag()
        if not outcome.success:
            self._advance(PipelineState.TRY_B)
            outcome = await self._attempt(self.secondary, "secondary", task)
            ai_source = self.secondary.label if self.secondary is not None else None

        if outcome.success and outcome.parsed is not None:
            payload = dict(outcome.parsed)
        else:
            self._advance(PipelineState.FALLBACK)
            payload = task.fallback()
            ai_source = FALLBACK_SOURCE
        payload["ai_source"] = ai_source

        self._advance(PipelineState.ENRICH)
        payload = await self.enricher.enrich(payload, task.concern)
        self._advance(PipelineState.DONE)
        logger.info("%s: answered by %s lifecycle=%s", task.operation, ai_source, self.lifecycle)
        return PipelineResult(
            payload=payload,
            ai_source=ai_source,
            lifecycle=list(self.lifecycle),
            outcomes=list(self.outcomes),
        )


def latest_content(messages: Sequence[ChatTurn | dict[str, Any]]) -> str:
    if not messages:
        return ""
    latest = messages[-1]
    content = latest.get("content") if isinstance(latest, dict) else latest.content
    return content.strip() if isinstance(content, str) else ""


class RemedyAIService:
    """Long-lived holder of the classifier, adapters and enricher.

    Built once at process start; each call runs a fresh pipeline.
    """

    def __init__(
        self,
        *,
        classifier: HealthTopicClassifier,
        primary: ProviderAdapter | None,
        secondary: ProviderAdapter | None,
        enricher: ResponseEnricher,
        settings: AISettings,
    ) -> None:
        self.classifier = classifier
        self.primary = primary
        self.secondary = secondary
        self.enricher = enricher
        self.settings = settings

    def new_pipeline(self) -> OrchestrationPipeline:
        return OrchestrationPipeline(
            classifier=self.classifier,
            primary=self.primary,
            secondary=self.secondary,
            enricher=self.enricher,
            provider_timeout_seconds=self.settings.provider_timeout_seconds,
        )

    def configured_providers(self) -> list[str]:
        return [adapter.provider_id for adapter in (self.primary, self.secondary) if adapter is not None]

    async def run_remedy(self, request: RemedyRequest) -> PipelineResult:
        return await self.new_pipeline().run(remedy_task(request, self.settings))

    async def run_symptom_analysis(self, messages: Sequence[ChatTurn | dict[str, Any]]) -> PipelineResult:
        symptom_text = latest_content(messages)
        if not symptom_text:
            raise ValueError("latest message content is required")
        return await self.new_pipeline().run(symptom_analysis_task(symptom_text, self.settings))

    async def generate_remedy(self, request: RemedyRequest) -> dict[str, Any] | str:
        return (await self.run_remedy(request)).payload

    async def analyze_symptoms(self, messages: Sequence[ChatTurn | dict[str, Any]]) -> dict[str, Any] | str:
        return (await self.run_symptom_analysis(messages)).payload
