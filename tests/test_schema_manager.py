# ============================================================================
# SCHEMA MANAGER TESTS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Tests - Table initialization
# PURPOSE: Single-flight ensure_table, dependency-ordered initialize_all
# CREATED: 19 OCT 2026
# ============================================================================
"""
Schema Manager Tests

Covers:
1. ensure_table() applies DDL once under concurrency
2. Failures wrapped in RepositoryError, retry succeeds
3. Version change re-applies the table
4. initialize_all() ordering, skipped tables, collected errors
5. Dependency cycles reported as dependency-resolution
6. Forced rebuild prepends DROP TABLE

Run with:
    pytest tests/test_schema_manager.py -v
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from core.errors import RepositoryError, SchemaGenerationError
from core.schema import SchemaManager
from registry import ObjectRegistry

from tests.conftest import RecordingExecutor


class SlowExecutor(RecordingExecutor):
    """Executor whose sync_schema yields, so concurrent callers overlap."""

    async def sync_schema(self, schema_text):
        await asyncio.sleep(0.01)
        await super().sync_schema(schema_text)


class TestEnsureTable:

    def test_concurrent_calls_apply_once(self, registry):
        executor = SlowExecutor()
        manager = SchemaManager(registry, executor)

        async def scenario():
            await asyncio.gather(*(manager.ensure_table("Article") for _ in range(5)))

        asyncio.run(scenario())

        assert len(executor.scripts) == 1
        assert manager.applied_version("articles") == registry.get_schema("Article").version

    def test_second_call_is_a_no_op(self, registry, executor):
        manager = SchemaManager(registry, executor)

        asyncio.run(manager.ensure_table("Tag"))
        asyncio.run(manager.ensure_table("Tag"))

        assert len(executor.scripts) == 1

    def test_failure_wrapped_and_retryable(self, registry, executor):
        manager = SchemaManager(registry, executor)
        executor.sync_schema = AsyncMock(side_effect=[RuntimeError("disk full"), None])

        with pytest.raises(RepositoryError) as exc:
            asyncio.run(manager.ensure_table("Tag"))
        assert exc.value.entity_id == "tags"
        assert manager.applied_version("tags") is None

        asyncio.run(manager.ensure_table("Tag"))
        assert executor.sync_schema.await_count == 2
        assert manager.applied_version("tags") is not None

    def test_version_change_reapplies(self, registry, executor):
        manager = SchemaManager(registry, executor)
        asyncio.run(manager.ensure_table("Tag"))

        registry.register({"className": "Tag", "fields": {"name": {"type": "text"}, "color": {"type": "text"}}})
        asyncio.run(manager.ensure_table("Tag"))

        assert len(executor.scripts) == 2
        assert '"color"' in executor.scripts[1]

    def test_force_prepends_drop(self, registry, executor):
        manager = SchemaManager(registry, executor)
        asyncio.run(manager.ensure_table("Tag"))
        asyncio.run(manager.ensure_table("Tag", force=True))

        assert len(executor.scripts) == 2
        assert executor.scripts[1].startswith('DROP TABLE IF EXISTS "tags";')

    def test_unregistered_class(self, registry, executor):
        manager = SchemaManager(registry, executor)
        with pytest.raises(SchemaGenerationError):
            asyncio.run(manager.ensure_table("Ghost"))


class TestInitializeAll:

    def test_dependency_order(self, registry, executor):
        manager = SchemaManager(registry, executor)
        result = asyncio.run(manager.initialize_all())

        assert result.success
        assert result.initialized == ["Category", "Article", "Tag"]
        assert executor.scripts[0].startswith('CREATE TABLE IF NOT EXISTS "categories"')

    def test_second_run_skips(self, registry, executor):
        manager = SchemaManager(registry, executor)
        asyncio.run(manager.initialize_all())
        result = asyncio.run(manager.initialize_all())

        assert result.initialized == []
        assert result.skipped == ["Category", "Article", "Tag"]

    def test_subset(self, registry, executor):
        manager = SchemaManager(registry, executor)
        result = asyncio.run(manager.initialize_all(["Article"]))
        assert result.initialized == ["Category", "Article"]

    def test_errors_collected(self):
        registry = ObjectRegistry([
            {"className": "Good", "fields": {"name": {"type": "text"}}},
            {"className": "Empty", "fields": {}},
        ])
        executor = RecordingExecutor()
        result = asyncio.run(SchemaManager(registry, executor).initialize_all())

        assert result.initialized == ["Good"]
        assert [e["schema"] for e in result.errors] == ["Empty"]
        assert not result.success

    def test_cycle_reported(self):
        registry = ObjectRegistry([
            {"className": "Author", "fields": {"latest": {"type": "foreignKey", "related": "Book"}}},
            {"className": "Book", "fields": {"author": {"type": "foreignKey", "related": "Author"}}},
        ])
        executor = RecordingExecutor()
        result = asyncio.run(SchemaManager(registry, executor).initialize_all())

        assert result.errors[0]["schema"] == "dependency-resolution"
        assert executor.scripts == []

    def test_forced_run_drops_every_table(self, registry, executor):
        manager = SchemaManager(registry, executor)
        asyncio.run(manager.initialize_all())
        result = asyncio.run(manager.initialize_all(force=True))

        assert result.initialized == ["Category", "Article", "Tag"]
        assert all(s.startswith("DROP TABLE IF EXISTS") for s in executor.scripts[3:])

    def test_result_to_dict(self, registry, executor):
        result = asyncio.run(SchemaManager(registry, executor).initialize_all())
        data = result.to_dict()
        assert data["success"] is True
        assert set(data) == {"initialized", "skipped", "errors", "execution_time", "success"}

    def test_render_all(self, registry, executor):
        script = SchemaManager(registry, executor, dialect="postgres").render_all()
        assert script.index('"categories" (') < script.index('"articles" (')
        assert "JSONB" in script
