from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_OPENAI_API_BASE = "https://api.openai.com/v1"
DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


def parse_env_lines(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    """Yield ``KEY=value`` pairs from dotenv-style lines, unquoting values."""
    for raw in lines:
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if line.startswith("#") or not sep or not _ENV_KEY_RE.fullmatch(key):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        yield key, value


def load_local_env_file(path: Path) -> None:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return
    for key, value in parse_env_lines(lines):
        os.environ.setdefault(key, value)


def bootstrap_local_env() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    candidates = [
        repo_root / ".env",
        repo_root / "backend/.env",
    ]
    for candidate in candidates:
        if candidate.exists():
            load_local_env_file(candidate)


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class ProviderSettings:
    provider_id: str
    api_key: str
    base_url: str
    model: str

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class AISettings:
    openai: ProviderSettings
    gemini: ProviderSettings
    primary_provider: str = "auto"
    provider_timeout_seconds: float = 25.0
    remedy_max_tokens: int = 1500
    analysis_max_tokens: int = 2000
    max_response_chars: int = 20000
    enrich_timeout_seconds: float = 3.0


def load_settings() -> AISettings:
    openai = ProviderSettings(
        provider_id="openai",
        api_key=_env_str("OPENAI_API_KEY"),
        base_url=_env_str("OPENAI_API_BASE_URL", DEFAULT_OPENAI_API_BASE).rstrip("/"),
        model=_env_str("OPENAI_MODEL", "gpt-4o-mini"),
    )
    gemini = ProviderSettings(
        provider_id="gemini",
        api_key=_env_str("GEMINI_API_KEY") or _env_str("GOOGLE_API_KEY"),
        base_url=_env_str("GEMINI_API_BASE_URL", DEFAULT_GEMINI_API_BASE).rstrip("/"),
        model=_env_str("GEMINI_MODEL", "gemini-2.5-flash"),
    )
    return AISettings(
        openai=openai,
        gemini=gemini,
        primary_provider=_env_str("REMEDY_AI_PRIMARY_PROVIDER", "auto").lower() or "auto",
        provider_timeout_seconds=_env_float("REMEDY_AI_PROVIDER_TIMEOUT_SECONDS", 25.0),
        remedy_max_tokens=_env_int("REMEDY_AI_REMEDY_MAX_TOKENS", 1500),
        analysis_max_tokens=_env_int("REMEDY_AI_ANALYSIS_MAX_TOKENS", 2000),
        max_response_chars=_env_int("REMEDY_AI_MAX_RESPONSE_CHARS", 20000),
        enrich_timeout_seconds=_env_float("REMEDY_AI_ENRICH_TIMEOUT_SECONDS", 3.0),
    )
