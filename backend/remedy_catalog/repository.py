from __future__ import annotations

import json
import re
import sqlite3
from datetime import datetime, timezone
from typing import Any

from .database import SQLiteCatalogDB

_WORD_RE = re.compile(r"[a-z0-9]+")
# Words shorter than this, or in the stop list, never drive a match on their own.
_MIN_WORD_LENGTH = 3
_STOP_WORDS = frozenset(
    {
        "and", "the", "for", "with", "have", "has", "had", "from", "that", "this", "what", "when",
        "feel", "feeling", "some", "very", "really", "been", "about", "after", "before", "can",
        "you", "your", "are", "was", "not", "but", "all", "any", "get", "getting",
    }
)
_SELECT_COLUMNS = "id, name, slug, category, description, ingredients_json, benefits_json"
_LIKE_CLAUSE = "LOWER({column}) LIKE ? ESCAPE '\\'"


def _like_pattern(fragment: str) -> str:
    escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _slugify(name: str) -> str:
    return "-".join(_WORD_RE.findall(name.lower()))


def significant_words(query: str) -> list[str]:
    words: list[str] = []
    for word in _WORD_RE.findall((query or "").lower()):
        if len(word) < _MIN_WORD_LENGTH or word in _STOP_WORDS or word in words:
            continue
        words.append(word)
    return words


def _row_to_remedy(row: sqlite3.Row) -> dict[str, Any]:
    return {
        "id": row["id"],
        "name": row["name"],
        "slug": row["slug"],
        "category": row["category"],
        "description": row["description"],
        "ingredients": json.loads(row["ingredients_json"]),
        "benefits": json.loads(row["benefits_json"]),
    }


class RemedyCatalog:
    """Read-mostly view over the remedy table used to annotate AI answers."""

    def __init__(self, db: SQLiteCatalogDB) -> None:
        self._db = db

    def add_remedy(
        self,
        *,
        name: str,
        category: str = "",
        description: str = "",
        ingredients: list[str] | None = None,
        benefits: list[str] | None = None,
        is_active: bool = True,
    ) -> dict[str, Any]:
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Remedy name is required.")
        with self._db.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO remedies (
                  name, slug, category, description, ingredients_json, benefits_json, is_active, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    cleaned,
                    _slugify(cleaned),
                    category.strip(),
                    description.strip(),
                    json.dumps(ingredients or []),
                    json.dumps(benefits or []),
                    1 if is_active else 0,
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            row = conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM remedies WHERE id = ?",
                (cursor.lastrowid,),
            ).fetchone()
        return _row_to_remedy(row)

    def search_remedies(self, query: str) -> list[dict[str, Any]]:
        cleaned = (query or "").strip().lower()
        if not cleaned:
            return []
        clauses = [_LIKE_CLAUSE.format(column="name")]
        params: list[str] = [_like_pattern(cleaned)]
        for word in significant_words(cleaned):
            clauses.append(_LIKE_CLAUSE.format(column="name"))
            clauses.append(_LIKE_CLAUSE.format(column="category"))
            params.extend([_like_pattern(word), _like_pattern(word)])
        with self._db.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT DISTINCT {_SELECT_COLUMNS}
                FROM remedies
                WHERE is_active = 1 AND ({" OR ".join(clauses)})
                ORDER BY name ASC, id ASC
                """,
                params,
            ).fetchall()
        return [_row_to_remedy(row) for row in rows]
