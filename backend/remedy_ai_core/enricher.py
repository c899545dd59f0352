from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from .errors import EnrichmentFailure

logger = logging.getLogger(__name__)

SearchRemedies = Callable[[str], list[dict[str, Any]]]

MATCH_REASON = "Natural remedy from the remedy catalog that may help with your symptoms"


def _catalog_entry(row: dict[str, Any]) -> dict[str, Any]:
    if not isinstance(row, dict) or not row.get("name"):
        raise EnrichmentFailure(f"malformed catalog row: {row!r}")
    return {
        "remedy_name": row["name"],
        "remedy_id": row.get("id"),
        "benefits": row.get("benefits") or [],
        "reason": MATCH_REASON,
        "database_match": True,
    }


class ResponseEnricher:
    """Best-effort catalog annotation; never fails the request it decorates."""

    def __init__(
        self,
        search: SearchRemedies | None,
        *,
        limit: int = 5,
        timeout_seconds: float = 3.0,
    ) -> None:
        self.search = search
        self.limit = limit
        self.timeout_seconds = timeout_seconds

    async def _matches(self, concern: str) -> list[dict[str, Any]]:
        if self.search is None:
            return []
        try:
            rows = await asyncio.wait_for(asyncio.to_thread(self.search, concern), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise EnrichmentFailure(f"catalog search exceeded {self.timeout_seconds}s") from exc
        if not isinstance(rows, list):
            raise EnrichmentFailure("catalog search did not return a list")
        return rows

    async def enrich(self, result: dict[str, Any], concern: str) -> dict[str, Any]:
        try:
            rows = await self._matches(concern)
            entries = [_catalog_entry(row) for row in rows[: self.limit]]
        except EnrichmentFailure as exc:
            logger.warning("enrichment skipped: %s", exc)
            return result
        except Exception as exc:
            logger.warning("enrichment skipped: %s", EnrichmentFailure(str(exc)))
            return result
        if not entries:
            return result
        return {**result, "database_remedies": entries, "remedy_count": len(rows)}
