# ============================================================================
# DDL UTILITIES
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - DRY utilities for SQL DDL generation
# PURPOSE: Type mapping, index, trigger and comment builders using psycopg.sql
# CREATED: 19 OCT 2026
# EXPORTS: FIELD_TYPE_MAP, DIALECT_TYPE_MAP, get_sql_type, render_type,
#          qualified, IndexBuilder, TriggerBuilder, CommentBuilder, SchemaUtils
# DEPENDENCIES: psycopg
# ============================================================================
"""
DDL Utilities - Shared SQL Generation Patterns.

All builders return psycopg.sql.Composed objects. Identifiers always go
through sql.Identifier and values through sql.Literal; nothing is string
concatenated. Every builder takes an optional schema qualifier so the same
code serves unqualified (sqlite-style) and schema-qualified (postgres) DDL.

Usage:
    from core.schema.ddl_utils import IndexBuilder, TriggerBuilder

    idx = IndexBuilder.btree("articles", ["updated_at"])
    idx.as_string(None)
    # CREATE INDEX IF NOT EXISTS "idx_articles_updated_at" ON "articles" ("updated_at")

    TriggerBuilder.updated_at_function(schema="app")
    TriggerBuilder.updated_at_trigger("articles", schema="app")  # DROP + CREATE
"""

from typing import List, Optional, Sequence, Union

from psycopg import sql

from core.contracts import FieldType


# ============================================================================
# TYPE MAPPING
# ============================================================================

# Declared field kind -> generic SQL type stored on ColumnDefinition
FIELD_TYPE_MAP = {
    FieldType.TEXT.value: "TEXT",
    FieldType.INTEGER.value: "INTEGER",
    FieldType.DECIMAL.value: "REAL",
    FieldType.BOOLEAN.value: "BOOLEAN",
    FieldType.DATETIME.value: "DATETIME",
    FieldType.JSON.value: "JSON",
    FieldType.FOREIGN_KEY.value: "TEXT",
}

# Generic SQL type -> dialect spelling (missing entries pass through)
DIALECT_TYPE_MAP = {
    "sqlite": {},
    "postgres": {
        "DATETIME": "TIMESTAMPTZ",
        "JSON": "JSONB",
        "REAL": "DOUBLE PRECISION",
    },
}

SUPPORTED_DIALECTS = tuple(DIALECT_TYPE_MAP)


def get_sql_type(field_type: str) -> Optional[str]:
    """
    Map a declared field type to its generic SQL type.

    Returns:
        SQL type string, or None when the field type is not recognized
    """
    return FIELD_TYPE_MAP.get(field_type)


def render_type(sql_type: str, dialect: str = "sqlite") -> str:
    """Spell a generic SQL type for a dialect."""
    return DIALECT_TYPE_MAP.get(dialect, {}).get(sql_type, sql_type)


def qualified(name: str, schema: Optional[str] = None) -> sql.Identifier:
    """Identifier optionally qualified by schema."""
    if schema:
        return sql.Identifier(schema, name)
    return sql.Identifier(name)


# ============================================================================
# INDEX BUILDER
# ============================================================================

class IndexBuilder:
    """
    Builder for index DDL statements.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def _normalize_columns(columns: Union[str, Sequence[str]]) -> List[str]:
        """Convert single column or sequence to list."""
        if isinstance(columns, str):
            return [columns]
        return list(columns)

    @staticmethod
    def generate_index_name(
        table: str,
        columns: List[str],
        prefix: str = 'idx',
        suffix: str = ''
    ) -> str:
        """Generate conventional index name: idx_{table}_{cols}[_{suffix}]."""
        col_part = '_'.join(columns)
        name = f"{prefix}_{table}_{col_part}"
        if suffix:
            name = f"{name}_{suffix}"
        return name

    @staticmethod
    def btree(
        table: str,
        columns: Union[str, Sequence[str]],
        name: Optional[str] = None,
        schema: Optional[str] = None,
        unique: bool = False,
    ) -> sql.Composed:
        """
        Create a (optionally unique) B-tree index.

        Args:
            table: Table name
            columns: Column name(s) to index
            name: Optional custom index name
            schema: Optional schema qualifier
            unique: If True, create UNIQUE INDEX

        Returns:
            sql.Composed CREATE INDEX statement
        """
        cols = IndexBuilder._normalize_columns(columns)
        idx_name = name or IndexBuilder.generate_index_name(
            table, cols, suffix='unique' if unique else ''
        )

        template = (
            "CREATE UNIQUE INDEX IF NOT EXISTS {name} ON {table} ({columns})"
            if unique
            else "CREATE INDEX IF NOT EXISTS {name} ON {table} ({columns})"
        )

        return sql.SQL(template).format(
            name=sql.Identifier(idx_name),
            table=qualified(table, schema),
            columns=sql.SQL(", ").join(sql.Identifier(c) for c in cols),
        )


# ============================================================================
# TRIGGER BUILDER
# ============================================================================

class TriggerBuilder:
    """
    Builder for updated_at trigger DDL.

    sqlite-style triggers carry their body inline (BEGIN ... END).
    PostgreSQL triggers call a shared plpgsql function.
    """

    FUNCTION_NAME = "update_updated_at_column"

    @staticmethod
    def inline(
        table: str,
        trigger_name: str,
        when: str,
        event: str,
        body: str,
        schema: Optional[str] = None,
    ) -> sql.Composed:
        """
        Create a row trigger with an inline body.

        `when` and `event` are checked against fixed keyword sets; `body` is
        generated SQL built from validated identifiers only.
        """
        if when not in ("BEFORE", "AFTER", "INSTEAD OF"):
            raise ValueError(f"Invalid trigger timing: {when}")
        if event not in ("INSERT", "UPDATE", "DELETE"):
            raise ValueError(f"Invalid trigger event: {event}")

        return sql.SQL(
            "CREATE TRIGGER IF NOT EXISTS {name} {when} {event} ON {table} "
            "FOR EACH ROW BEGIN {body} END"
        ).format(
            name=sql.Identifier(trigger_name),
            when=sql.SQL(when),
            event=sql.SQL(event),
            table=qualified(table, schema),
            body=sql.SQL(body),
        )

    @staticmethod
    def updated_at_function(schema: Optional[str] = None) -> sql.Composed:
        """
        Create the update_updated_at_column() trigger function.
        """
        return sql.SQL(
            "CREATE OR REPLACE FUNCTION {function}() "
            "RETURNS TRIGGER LANGUAGE plpgsql AS $$ "
            "BEGIN NEW.updated_at = NOW(); RETURN NEW; END; $$"
        ).format(function=qualified(TriggerBuilder.FUNCTION_NAME, schema))

    @staticmethod
    def updated_at_trigger(
        table: str,
        trigger_name: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> List[sql.Composed]:
        """
        Create trigger that calls update_updated_at_column() on UPDATE.

        Returns DROP + CREATE for idempotency.
        """
        trig_name = trigger_name or f"trg_{table}_updated_at"

        drop_stmt = sql.SQL("DROP TRIGGER IF EXISTS {name} ON {table}").format(
            name=sql.Identifier(trig_name),
            table=qualified(table, schema),
        )

        create_stmt = sql.SQL(
            "CREATE TRIGGER {name} BEFORE UPDATE ON {table} "
            "FOR EACH ROW EXECUTE FUNCTION {function}()"
        ).format(
            name=sql.Identifier(trig_name),
            table=qualified(table, schema),
            function=qualified(TriggerBuilder.FUNCTION_NAME, schema),
        )

        return [drop_stmt, create_stmt]


# ============================================================================
# COMMENT BUILDER
# ============================================================================

class CommentBuilder:
    """
    Builder for PostgreSQL COMMENT statements.
    """

    @staticmethod
    def column(table: str, column: str, comment: str, schema: Optional[str] = None) -> sql.Composed:
        """Add comment to column."""
        target = (
            sql.Identifier(schema, table, column) if schema
            else sql.Identifier(table, column)
        )
        return sql.SQL("COMMENT ON COLUMN {} IS {}").format(target, sql.Literal(comment))


# ============================================================================
# SCHEMA UTILITIES
# ============================================================================

class SchemaUtils:
    """
    Utility methods for schema-level DDL operations.
    """

    @staticmethod
    def create_schema(schema: str) -> sql.Composed:
        return sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(schema))

    @staticmethod
    def drop_table(table: str, schema: Optional[str] = None) -> sql.Composed:
        """DROP TABLE IF EXISTS, used by forced re-initialization."""
        return sql.SQL("DROP TABLE IF EXISTS {}").format(qualified(table, schema))


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'FIELD_TYPE_MAP',
    'DIALECT_TYPE_MAP',
    'SUPPORTED_DIALECTS',
    'get_sql_type',
    'render_type',
    'qualified',
    'IndexBuilder',
    'TriggerBuilder',
    'CommentBuilder',
    'SchemaUtils',
]
