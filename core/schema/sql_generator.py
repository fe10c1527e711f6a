# ============================================================================
# SCHEMA TO SQL GENERATOR
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - DDL rendering from SchemaDefinition
# PURPOSE: Render CREATE TABLE / INDEX / TRIGGER statements per dialect
# CREATED: 19 OCT 2026
# EXPORTS: SchemaToSQL
# DEPENDENCIES: psycopg
# ============================================================================
"""
SchemaDefinition to DDL Renderer.

Renders a SchemaDefinition into psycopg.sql statements. Two dialects:

    sqlite    generic types (DATETIME, JSON, REAL), inline BEGIN ... END
              trigger body. Default, and the canonical text form.
    postgres  TIMESTAMPTZ / JSONB / DOUBLE PRECISION, shared plpgsql
              trigger function, DROP + CREATE trigger, optional schema
              qualifier and column comments.

Rendering is deterministic: the same SchemaDefinition always yields the
same statements in the same order (table, indexes, triggers).

Usage:
    renderer = SchemaToSQL(dialect="sqlite")
    ddl_text = renderer.render(schema)

    renderer = SchemaToSQL(dialect="postgres", schema_name="app")
    for stmt in renderer.render_statements(schema):
        await conn.execute(stmt)
"""

import logging
from typing import Any, Iterable, List, Optional

from psycopg import sql

from core.errors import ConfigurationError
from core.models.schema import ColumnDefinition, SchemaDefinition
from core.schema.ddl_utils import (
    SUPPORTED_DIALECTS,
    CommentBuilder,
    IndexBuilder,
    SchemaUtils,
    TriggerBuilder,
    qualified,
    render_type,
)

logger = logging.getLogger(__name__)

# Raw default expressions allowed verbatim in DDL
_DEFAULT_EXPRESSIONS = frozenset({"CURRENT_TIMESTAMP", "CURRENT_DATE", "CURRENT_TIME", "NOW()"})


class SchemaToSQL:
    """
    Convert SchemaDefinitions to DDL statements.
    """

    def __init__(
        self,
        dialect: str = "sqlite",
        schema_name: Optional[str] = None,
        include_comments: bool = False,
    ):
        """
        Initialize the renderer.

        Args:
            dialect: "sqlite" or "postgres"
            schema_name: Optional schema qualifier (postgres only)
            include_comments: Emit COMMENT ON COLUMN for described columns (postgres only)
        """
        if dialect not in SUPPORTED_DIALECTS:
            raise ConfigurationError(
                f"Unsupported SQL dialect '{dialect}'. Supported: {list(SUPPORTED_DIALECTS)}"
            )
        self.dialect = dialect
        self.schema_name = schema_name if dialect == "postgres" else None
        self.include_comments = include_comments and dialect == "postgres"

    # =========================================================================
    # COLUMN RENDERING
    # =========================================================================

    def render_default(self, column: ColumnDefinition) -> Optional[sql.Composable]:
        """Render the DEFAULT operand, or None when the column has none."""
        if column.default_expression is not None:
            expression = column.default_expression.upper()
            if expression not in _DEFAULT_EXPRESSIONS:
                raise ConfigurationError(f"Unsupported default expression: {column.default_expression}")
            return sql.SQL(expression)

        value: Any = column.default_value
        if value is None:
            return None
        if isinstance(value, bool):
            return sql.SQL("TRUE" if value else "FALSE")
        if isinstance(value, (int, float)):
            return sql.SQL(repr(value))
        return sql.Literal(str(value))

    def generate_column(self, name: str, column: ColumnDefinition) -> sql.Composed:
        """
        Render one column: name, type, PRIMARY KEY, NOT NULL, DEFAULT.

        Uniqueness is expressed through unique indexes, not inline.
        """
        parts: List[sql.Composable] = [
            sql.Identifier(name),
            sql.SQL(" "),
            sql.SQL(render_type(column.type, self.dialect)),
        ]

        if column.primary_key:
            parts.append(sql.SQL(" PRIMARY KEY"))
        if column.not_null:
            parts.append(sql.SQL(" NOT NULL"))

        default = self.render_default(column)
        if default is not None:
            parts.extend([sql.SQL(" DEFAULT "), default])

        return sql.Composed(parts)

    # =========================================================================
    # STATEMENT GENERATION
    # =========================================================================

    def generate_table(self, schema: SchemaDefinition) -> sql.Composed:
        """
        Generate CREATE TABLE IF NOT EXISTS with table-level FOREIGN KEYs.
        """
        parts = [self.generate_column(name, column) for name, column in schema.columns.items()]

        for fk in schema.foreign_keys:
            parts.append(
                sql.SQL(
                    "FOREIGN KEY ({column}) REFERENCES {table} ({ref_column}) "
                    "ON DELETE {on_delete} ON UPDATE {on_update}"
                ).format(
                    column=sql.Identifier(fk.column),
                    table=qualified(fk.references_table, self.schema_name),
                    ref_column=sql.Identifier(fk.references_column),
                    on_delete=sql.SQL(self._referential_action(fk.on_delete)),
                    on_update=sql.SQL(self._referential_action(fk.on_update)),
                )
            )

        return sql.SQL("CREATE TABLE IF NOT EXISTS {table} ({body})").format(
            table=qualified(schema.table_name, self.schema_name),
            body=sql.SQL(", ").join(parts),
        )

    def generate_indexes(self, schema: SchemaDefinition) -> List[sql.Composed]:
        return [
            IndexBuilder.btree(
                schema.table_name,
                index.columns,
                name=index.name,
                schema=self.schema_name,
                unique=index.unique,
            )
            for index in schema.indexes
        ]

    def generate_triggers(self, schema: SchemaDefinition) -> List[sql.Composed]:
        if self.dialect == "postgres":
            statements = [TriggerBuilder.updated_at_function(self.schema_name)]
            for trigger in schema.triggers:
                statements.extend(
                    TriggerBuilder.updated_at_trigger(schema.table_name, trigger.name, self.schema_name)
                )
            return statements

        return [
            TriggerBuilder.inline(
                schema.table_name,
                trigger.name,
                trigger.when,
                trigger.event,
                trigger.body,
            )
            for trigger in schema.triggers
        ]

    def generate_comments(self, schema: SchemaDefinition) -> List[sql.Composed]:
        if not self.include_comments:
            return []
        return [
            CommentBuilder.column(schema.table_name, name, column.description, self.schema_name)
            for name, column in schema.columns.items()
            if column.description
        ]

    def render_statements(self, schema: SchemaDefinition) -> List[sql.Composed]:
        """
        Generate complete DDL for one table.

        Returns:
            List of sql.Composed statements ready for execution
        """
        statements: List[sql.Composed] = []
        if self.schema_name:
            statements.append(SchemaUtils.create_schema(self.schema_name))
        statements.append(self.generate_table(schema))
        statements.extend(self.generate_indexes(schema))
        statements.extend(self.generate_triggers(schema))
        statements.extend(self.generate_comments(schema))

        logger.debug(f"Generated {len(statements)} DDL statements for {schema.table_name}")
        return statements

    def render_drop(self, schema: SchemaDefinition) -> sql.Composed:
        return SchemaUtils.drop_table(schema.table_name, self.schema_name)

    # =========================================================================
    # TEXT RENDERING
    # =========================================================================

    @staticmethod
    def to_text(statements: Iterable[sql.Composable]) -> str:
        """Join statements into one script, one statement per line."""
        return "\n".join(f"{stmt.as_string(None)};" for stmt in statements)

    def render(self, schema: SchemaDefinition) -> str:
        """Render one schema to DDL text."""
        return self.to_text(self.render_statements(schema))

    def render_many(self, schemas: Iterable[SchemaDefinition]) -> str:
        """Render several schemas, in the given (dependency) order."""
        return "\n\n".join(self.render(schema) for schema in schemas)

    @staticmethod
    def _referential_action(action: str) -> str:
        normalized = action.upper()
        if normalized not in ("CASCADE", "RESTRICT", "SET NULL", "SET DEFAULT", "NO ACTION"):
            raise ConfigurationError(f"Unsupported referential action: {action}")
        return normalized


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ['SchemaToSQL']
