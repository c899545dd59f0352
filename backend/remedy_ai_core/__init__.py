from .classifier import HEALTH_TOPIC_RULES, HealthTopicClassifier, TopicRule
from .config import AISettings, ProviderSettings, bootstrap_local_env, load_settings
from .enricher import ResponseEnricher
from .errors import (
    ClassificationRejected,
    EnrichmentFailure,
    ErrorKind,
    PipelineStateError,
    ProviderError,
    ProviderSchemaViolation,
    ProviderTransientError,
    ProviderUnavailable,
    RemedyAIError,
)
from .fallback import fallback_remedy, fallback_symptom_analysis
from .models import FALLBACK_SOURCE, MAX_CONCERN_CHARS, REFUSAL_MESSAGE, ChatTurn, RemedyRequest
from .pipeline import OrchestrationPipeline, PipelineResult, PipelineState, RemedyAIService
from .providers import GeminiAdapter, OpenAIChatAdapter, ProviderAdapter, build_provider_adapters

__all__ = [
    "AISettings",
    "ChatTurn",
    "ClassificationRejected",
    "EnrichmentFailure",
    "ErrorKind",
    "FALLBACK_SOURCE",
    "GeminiAdapter",
    "HEALTH_TOPIC_RULES",
    "HealthTopicClassifier",
    "MAX_CONCERN_CHARS",
    "OpenAIChatAdapter",
    "OrchestrationPipeline",
    "PipelineResult",
    "PipelineState",
    "PipelineStateError",
    "ProviderAdapter",
    "ProviderError",
    "ProviderSchemaViolation",
    "ProviderSettings",
    "ProviderTransientError",
    "ProviderUnavailable",
    "REFUSAL_MESSAGE",
    "RemedyAIError",
    "RemedyAIService",
    "RemedyRequest",
    "ResponseEnricher",
    "TopicRule",
    "bootstrap_local_env",
    "build_provider_adapters",
    "fallback_remedy",
    "fallback_symptom_analysis",
    "load_settings",
]
