from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

_PROVIDER_ENV_KEYS = ("OPENAI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY", "REMEDY_AI_PRIMARY_PROVIDER")


@pytest.fixture
def backend_module(tmp_path, monkeypatch):
    db_path = tmp_path / "remedy-catalog-test.sqlite"
    monkeypatch.setenv("REMEDY_CATALOG_DB_PATH", str(db_path))
    # No live providers in CI; tests install fake adapters where they need them.
    for key in _PROVIDER_ENV_KEYS:
        monkeypatch.setenv(key, "")

    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def catalog(backend_module):
    return backend_module.container.catalog
