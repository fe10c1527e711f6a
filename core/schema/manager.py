# ============================================================================
# SCHEMA MANAGER
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - Table initialization orchestrator
# PURPOSE: Apply generated DDL once per table, in dependency order
# CREATED: 19 OCT 2026
# EXPORTS: SchemaManager, SchemaInitializationResult
# DEPENDENCIES: psycopg (via SchemaToSQL)
# ============================================================================
"""
Schema Manager.

Applies generated DDL through the SqlExecutor's sync_schema primitive:

- ensure_table(): memoized per table name behind a single-flight entry.
  Concurrent callers share one in-flight creation; a failure clears the
  entry so the next call retries.
- initialize_all(): every (or the given) class in dependency order,
  collecting per-table failures instead of raising.

Applied versions are remembered so an unchanged schema is skipped and a
changed one (new content hash) is re-applied.

Usage:
    manager = SchemaManager(registry, executor)
    await manager.ensure_table("Article")

    result = await manager.initialize_all()
    result.initialized, result.skipped, result.errors
"""

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from core.errors import ObjectForgeError, RepositoryError
from core.logging import timed
from core.models.schema import SchemaDefinition
from core.schema.sql_generator import SchemaToSQL
from infrastructure.locking import SingleFlight

if TYPE_CHECKING:
    from registry.object_registry import ObjectRegistry
    from repositories.database import SqlExecutor

logger = logging.getLogger(__name__)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class SchemaInitializationResult:
    """Complete result of a multi-table initialization."""
    initialized: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)
    execution_time: float = 0.0

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "initialized": self.initialized,
            "skipped": self.skipped,
            "errors": self.errors,
            "execution_time": self.execution_time,
            "success": self.success,
        }


# ============================================================================
# SCHEMA MANAGER
# ============================================================================

class SchemaManager:
    """
    Idempotent, single-flight table setup for registered classes.
    """

    def __init__(
        self,
        registry: "ObjectRegistry",
        executor: "SqlExecutor",
        dialect: str = "sqlite",
        schema_name: Optional[str] = None,
        include_comments: bool = False,
    ):
        self.registry = registry
        self.executor = executor
        self.renderer = SchemaToSQL(
            dialect=dialect,
            schema_name=schema_name,
            include_comments=include_comments,
        )
        self._setup = SingleFlight("schema-setup")
        self._versions: Dict[str, str] = {}

    # =========================================================================
    # VERSION TRACKING
    # =========================================================================

    def is_up_to_date(self, table_name: str, version: str) -> bool:
        """Check if this table was applied at exactly this version."""
        return self._versions.get(table_name) == version

    def applied_version(self, table_name: str) -> Optional[str]:
        return self._versions.get(table_name)

    # =========================================================================
    # SINGLE TABLE
    # =========================================================================

    async def ensure_table(self, class_name: str, force: bool = False) -> SchemaDefinition:
        """
        Create the table for a class if this process has not done so yet.

        Args:
            class_name: Registered class name
            force: Drop and recreate even if already applied

        Returns:
            The SchemaDefinition that is now applied

        Raises:
            SchemaGenerationError: Unregistered or zero-field class
            RepositoryError: sync_schema failed (entry cleared, retryable)
        """
        schema = self.registry.get_schema(class_name)
        table_name = schema.table_name

        if not force and self.is_up_to_date(table_name, schema.version):
            return schema

        # Memoized entry belongs to another version (or a forced rebuild)
        if force or self._versions.get(table_name) not in (None, schema.version):
            self._setup.forget(table_name)

        await self._setup.run(table_name, lambda: self._apply(schema, force))
        return schema

    @timed("schema.apply")
    async def _apply(self, schema: SchemaDefinition, force: bool) -> str:
        statements = self.renderer.render_statements(schema)
        if force:
            statements.insert(0, self.renderer.render_drop(schema))
        script = self.renderer.to_text(statements)

        logger.info(
            f"Applying schema {schema.table_name} v{schema.version} "
            f"({len(statements)} statements{', forced' if force else ''})"
        )
        try:
            await self.executor.sync_schema(script)
        except ObjectForgeError:
            raise
        except Exception as e:
            logger.error(f"Schema setup failed for {schema.table_name}: {e}")
            raise RepositoryError(
                f"schema setup failed for {schema.table_name}: {e}",
                operation="sync_schema",
                entity_id=schema.table_name,
            ) from e

        self._versions[schema.table_name] = schema.version
        return schema.version

    # =========================================================================
    # ALL TABLES
    # =========================================================================

    async def initialize_all(
        self,
        class_names: Optional[List[str]] = None,
        force: bool = False,
    ) -> SchemaInitializationResult:
        """
        Initialize tables in dependency order.

        Per-table failures are collected in `errors`; a dependency cycle is
        reported as a single 'dependency-resolution' error.
        """
        started = time.monotonic()
        result = SchemaInitializationResult()

        try:
            order = self.registry.get_initialization_order(class_names)
        except ObjectForgeError as e:
            result.errors.append({"schema": "dependency-resolution", "error": str(e)})
            result.execution_time = time.monotonic() - started
            return result

        for class_name in order:
            try:
                schema = self.registry.get_schema(class_name)
                if not force and self.is_up_to_date(schema.table_name, schema.version):
                    result.skipped.append(class_name)
                    continue
                await self.ensure_table(class_name, force=force)
                result.initialized.append(class_name)
            except ObjectForgeError as e:
                logger.error(f"Failed to initialize {class_name}: {e}")
                result.errors.append({"schema": class_name, "error": str(e)})

        result.execution_time = time.monotonic() - started
        logger.info(
            f"Schema initialization complete: {len(result.initialized)} initialized, "
            f"{len(result.skipped)} skipped, {len(result.errors)} errors"
        )
        return result

    def render_all(self, class_names: Optional[List[str]] = None) -> str:
        """Full DDL script for the given (or all) classes, dependency-ordered."""
        order = self.registry.get_initialization_order(class_names, allow_cycles=True)
        return self.renderer.render_many(self.registry.get_schema(name) for name in order)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["SchemaManager", "SchemaInitializationResult"]
