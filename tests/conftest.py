# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Tests - Fixtures shared across test modules
# PURPOSE: Sample object definitions, registry and a recording SQL executor
# CREATED: 19 OCT 2026
# ============================================================================
"""
Shared fixtures.

RecordingExecutor stands in for the SQL collaborator. It renders every
statement with as_string(None), records (text, params), and answers from
an in-memory table map:

    SELECT COUNT(*) ...   -> [{"count": len(rows)}]
    SELECT * FROM "t" ... -> rows stored for t (filters are not applied)
    DELETE ...            -> [{"id": <last param>}]
    anything else         -> []

Tests that care about filtering assert on the recorded SQL instead.
"""

import re
from typing import Any, Dict, List, Optional

import pytest

from core.config.defaults import QueryDefaults
from registry import ObjectRegistry

_TABLE = re.compile(r'(?:FROM|INTO|UPDATE)\s+"(\w+)"')


class RecordingExecutor:
    """In-memory SqlExecutor that records everything it is asked to run."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables = tables if tables is not None else {}
        self.queries: List[tuple] = []
        self.scripts: List[str] = []

    async def query(self, statement, params=()):
        text = statement.as_string(None)
        params = list(params)
        self.queries.append((text, params))

        match = _TABLE.search(text)
        rows = self.tables.get(match.group(1), []) if match else []
        if text.startswith("SELECT COUNT"):
            return [{"count": len(rows)}]
        if text.startswith("SELECT"):
            return [dict(row) for row in rows]
        if text.startswith("DELETE"):
            return [{"id": params[-1]}]
        return []

    async def sync_schema(self, schema_text: str) -> None:
        self.scripts.append(schema_text)

    def queries_for(self, table: str) -> List[tuple]:
        """Recorded (text, params) pairs that touch `table`."""
        return [q for q in self.queries if f'"{table}"' in q[0]]

    def writes(self) -> List[tuple]:
        return [q for q in self.queries if q[0].startswith(("INSERT", "UPDATE", "DELETE"))]


# ============================================================================
# OBJECT DEFINITIONS
# ============================================================================

CATEGORY = {
    "className": "Category",
    "fields": {
        "name": {"type": "text", "required": True},
        "slug": {"type": "text"},
        "articles": {"type": "oneToMany", "related": "Article"},
    },
}

ARTICLE = {
    "className": "Article",
    "fields": {
        "title": {"type": "text", "required": True, "maxLength": 200},
        "body": {"type": "text"},
        "slug": {"type": "text"},
        "price": {"type": "decimal", "min": 0},
        "category": {"type": "foreignKey", "related": "categories.id"},
        "metadata": {"type": "json"},
        "tags": {"type": "manyToMany", "related": "Tag"},
    },
    "methods": [
        {
            "name": "publish",
            "async": True,
            "description": "Publish the article",
            "parameters": [
                {"name": "channel", "type": "'web' | 'email'"},
                {"name": "notify", "type": "boolean", "optional": True, "default": False},
            ],
        },
        {"name": "summarize", "async": False, "parameters": []},
        {"name": "reindexAll", "async": True, "isStatic": True},
    ],
    "apiConfig": {"include": ["list", "get", "create", "publish"]},
    "mcpConfig": {"exclude": ["delete"]},
    "cliConfig": False,
    "aiConfig": {"callable": "public-async"},
}

TAG = {
    "className": "Tag",
    "fields": {"name": {"type": "text", "required": True}},
}


@pytest.fixture
def manifest_data():
    """Manifest document in its map form (objects keyed by class name)."""
    objects = {}
    for definition in (ARTICLE, CATEGORY, TAG):
        body = {k: v for k, v in definition.items() if k != "className"}
        objects[definition["className"]] = body
    return {"version": "1", "objects": objects}


@pytest.fixture
def registry():
    """Registry with Article registered before the Category it depends on."""
    return ObjectRegistry([ARTICLE, CATEGORY, TAG])


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def query_defaults():
    """Defaults independent of OBJECTFORGE_* environment variables."""
    return QueryDefaults(default_limit=None, max_limit=1000, auto_setup=True)
