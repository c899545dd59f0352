from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    UNAVAILABLE = "unavailable"
    TRANSIENT = "transient"
    TIMEOUT = "timeout"
    OVERSIZED = "oversized"
    SCHEMA_VIOLATION = "schema_violation"


class RemedyAIError(Exception):
    pass


class ClassificationRejected(RemedyAIError):
    """Input is outside the health domain; callers answer with the refusal text."""


class ProviderError(RemedyAIError):
    kind = ErrorKind.TRANSIENT

    def __init__(self, provider_id: str, message: str, *, kind: ErrorKind | None = None) -> None:
        super().__init__(f"{provider_id}: {message}")
        self.provider_id = provider_id
        self.detail = message
        if kind is not None:
            self.kind = kind


class ProviderUnavailable(ProviderError):
    kind = ErrorKind.UNAVAILABLE


class ProviderTransientError(ProviderError):
    kind = ErrorKind.TRANSIENT


class ProviderSchemaViolation(ProviderError):
    kind = ErrorKind.SCHEMA_VIOLATION


class EnrichmentFailure(RemedyAIError):
    pass


class PipelineStateError(RemedyAIError):
    pass
