from __future__ import annotations

import asyncio
import time
from typing import Any

from remedy_ai_core.enricher import MATCH_REASON, ResponseEnricher

BASE_RESULT = {"name": "Tea", "ingredients": ["Mint"], "instructions": "Steep."}


def _rows(count: int) -> list[dict[str, Any]]:
    return [{"id": idx, "name": f"Remedy {idx}", "benefits": [f"Benefit {idx}"]} for idx in range(count)]


def test_enrich_caps_entries_and_reports_total():
    enricher = ResponseEnricher(lambda query: _rows(8))
    enriched = asyncio.run(enricher.enrich(dict(BASE_RESULT), "mint"))
    assert len(enriched["database_remedies"]) == 5
    assert enriched["remedy_count"] == 8
    assert enriched["database_remedies"][0] == {
        "remedy_name": "Remedy 0",
        "remedy_id": 0,
        "benefits": ["Benefit 0"],
        "reason": MATCH_REASON,
        "database_match": True,
    }
    assert enriched["name"] == "Tea"


def test_enrich_does_not_mutate_input():
    original = dict(BASE_RESULT)
    asyncio.run(ResponseEnricher(lambda query: _rows(1)).enrich(original, "mint"))
    assert "database_remedies" not in original


def test_no_matches_leaves_result_without_annotation():
    enriched = asyncio.run(ResponseEnricher(lambda query: []).enrich(dict(BASE_RESULT), "mint"))
    assert enriched == BASE_RESULT


def test_missing_collaborator_is_a_no_op():
    assert asyncio.run(ResponseEnricher(None).enrich(dict(BASE_RESULT), "mint")) == BASE_RESULT


def test_slow_search_times_out_quietly():
    def slow_search(query: str) -> list[dict[str, Any]]:
        time.sleep(0.3)
        return _rows(2)

    enricher = ResponseEnricher(slow_search, timeout_seconds=0.05)
    assert asyncio.run(enricher.enrich(dict(BASE_RESULT), "mint")) == BASE_RESULT


def test_malformed_rows_are_ignored():
    enricher = ResponseEnricher(lambda query: [{"id": 1}])
    assert asyncio.run(enricher.enrich(dict(BASE_RESULT), "mint")) == BASE_RESULT


def test_search_errors_are_swallowed(caplog):
    def failing_search(query: str) -> list[dict[str, Any]]:
        raise RuntimeError("database is locked")

    with caplog.at_level("WARNING"):
        result = asyncio.run(ResponseEnricher(failing_search).enrich(dict(BASE_RESULT), "mint"))
    assert result == BASE_RESULT
    assert "database is locked" in caplog.text
