from __future__ import annotations

import os

from remedy_ai_core.config import load_local_env_file, load_settings, parse_env_lines


def test_parse_env_lines_handles_export_quotes_and_comments():
    lines = [
        "# provider keys",
        "export OPENAI_API_KEY=sk-test",
        'GEMINI_MODEL="gemini-2.5-pro"',
        "REMEDY_AI_PRIMARY_PROVIDER = 'gemini'",
        "EMPTY=",
        "not a pair",
        "1BAD=value",
        "URL=https://example.test/?a=b",
        "",
    ]
    assert list(parse_env_lines(lines)) == [
        ("OPENAI_API_KEY", "sk-test"),
        ("GEMINI_MODEL", "gemini-2.5-pro"),
        ("REMEDY_AI_PRIMARY_PROVIDER", "gemini"),
        ("EMPTY", ""),
        ("URL", "https://example.test/?a=b"),
    ]


def test_env_file_never_overrides_real_environment(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("OPENAI_MODEL=from-file\nREMEDY_TEST_ONLY_KEY=loaded\n", encoding="utf-8")
    monkeypatch.setenv("OPENAI_MODEL", "from-env")
    monkeypatch.delenv("REMEDY_TEST_ONLY_KEY", raising=False)

    load_local_env_file(env_file)

    assert os.environ["OPENAI_MODEL"] == "from-env"
    assert os.environ["REMEDY_TEST_ONLY_KEY"] == "loaded"
    monkeypatch.delenv("REMEDY_TEST_ONLY_KEY")


def test_missing_env_file_is_ignored(tmp_path):
    load_local_env_file(tmp_path / "absent.env")


def test_invalid_numeric_settings_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("REMEDY_AI_PROVIDER_TIMEOUT_SECONDS", "soon")
    monkeypatch.setenv("REMEDY_AI_REMEDY_MAX_TOKENS", "-5")
    settings = load_settings()
    assert settings.provider_timeout_seconds == 25.0
    assert settings.remedy_max_tokens == 1500
