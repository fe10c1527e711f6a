# ============================================================================
# SCHEMA GENERATOR
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - ObjectDefinition to SchemaDefinition
# PURPOSE: Deterministic table, index, trigger and FK synthesis from metadata
# CREATED: 19 OCT 2026
# EXPORTS: SchemaGenerator, compute_version
# DEPENDENCIES: pydantic
# ============================================================================
"""
Schema Generator.

Turns one ObjectDefinition into one SchemaDefinition. The result is a pure
function of (className, fields, extends) plus the table-name override:
identical inputs give an identical version hash and byte-identical DDL.

Column rules:
    - id, created_at, updated_at are always present exactly once
    - declared field types map through FIELD_TYPE_MAP, unknown -> TEXT
    - oneToMany / manyToMany are virtual and produce no column
    - required -> NOT NULL
    - optional TEXT without default -> NOT NULL DEFAULT ''
    - slug / email -> unique

Usage:
    generator = SchemaGenerator()
    schema = generator.generate_schema(definition)
    schema.tableName, schema.version
"""

import hashlib
import json
import logging
import re
from typing import Callable, Dict, List, Optional

from core.contracts import BASE_CLASS_NAMES, FieldType, UNIQUE_BY_CONVENTION
from core.errors import SchemaGenerationError
from core.models.definitions import FieldDefinition, ObjectDefinition
from core.models.schema import (
    ColumnDefinition,
    ForeignKeyDefinition,
    ForeignKeyReference,
    IndexDefinition,
    SchemaDefinition,
    TriggerDefinition,
)
from core.naming import class_name_to_table_name, is_identifier, to_snake_case
from core.schema.ddl_utils import IndexBuilder, get_sql_type

logger = logging.getLogger(__name__)

_PACKAGE_PATTERN = re.compile(r"packages/([^/]+)")

TableResolver = Callable[[str], str]


def compute_version(definition: ObjectDefinition) -> str:
    """
    Content hash over (className, fields, extends).

    First 8 hex chars of SHA-256. Field order is part of the content.
    """
    content = json.dumps(
        {
            "className": definition.class_name,
            "fields": {
                name: field.hash_payload()
                for name, field in definition.fields.items()
            },
            "extends": definition.extends,
        },
        separators=(",", ":"),
        sort_keys=False,
        default=str,
    )
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:8]


def default_table_resolver(reference: str) -> str:
    """
    Resolve a foreign-key target without a registry.

    Lowercase references are table names; anything else is a class name.
    """
    if reference and reference == reference.lower():
        return reference
    return class_name_to_table_name(reference)


class SchemaGenerator:
    """
    Derive a SchemaDefinition from an ObjectDefinition.

    Stateless apart from the table resolver, so one instance can be shared.
    """

    def __init__(self, resolve_table: Optional[TableResolver] = None):
        """
        Args:
            resolve_table: Maps a foreign-key or parent reference (class or
                table name) to a table name. The registry supplies one that
                knows every registered class.
        """
        self.resolve_table = resolve_table or default_table_resolver

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def generate_schema(self, definition: ObjectDefinition) -> SchemaDefinition:
        """
        Generate the schema for one object definition.

        Raises:
            SchemaGenerationError: Class has zero fields or an unusable table name
        """
        class_name = definition.class_name
        if not any(not field.is_virtual for field in definition.fields.values()):
            raise SchemaGenerationError(
                f"Cannot generate schema for {class_name}: no stored fields are registered",
                class_name=class_name,
            )

        table_name = definition.resolved_table_name
        if not is_identifier(table_name):
            raise SchemaGenerationError(
                f"Cannot generate schema for {class_name}: invalid table name '{table_name}'",
                class_name=class_name,
            )

        columns = self.generate_columns(definition)
        foreign_keys = self.extract_foreign_keys(columns)

        schema = SchemaDefinition(
            table_name=table_name,
            class_name=class_name,
            columns=columns,
            indexes=self.generate_indexes(table_name, columns),
            triggers=self.generate_triggers(table_name),
            foreign_keys=foreign_keys,
            dependencies=self.extract_dependencies(definition, foreign_keys),
            version=compute_version(definition),
            package_name=self.extract_package_name(definition),
            base_class=definition.extends,
        )

        logger.debug(
            f"Generated schema {table_name} v{schema.version} "
            f"({len(columns)} columns, {len(schema.indexes)} indexes)"
        )
        return schema

    # =========================================================================
    # COLUMNS
    # =========================================================================

    def generate_columns(self, definition: ObjectDefinition) -> Dict[str, ColumnDefinition]:
        """
        Build the column map.

        Base columns are seeded first; every later insert is keyed by column
        name and skipped when the name is already present, so a redeclared
        or aliased id/created_at/updated_at can never appear twice.
        """
        columns: Dict[str, ColumnDefinition] = {}

        self._insert_column(columns, "id", ColumnDefinition(
            type="TEXT",
            primary_key=True,
            not_null=True,
            description="Primary identifier",
        ))
        self._insert_column(columns, "created_at", ColumnDefinition(
            type="DATETIME",
            not_null=True,
            default_expression="CURRENT_TIMESTAMP",
            description="Creation timestamp",
        ))
        self._insert_column(columns, "updated_at", ColumnDefinition(
            type="DATETIME",
            not_null=True,
            default_expression="CURRENT_TIMESTAMP",
            description="Last update timestamp",
        ))

        for field_name, field in definition.fields.items():
            if field.is_virtual:
                continue
            column_name = to_snake_case(field_name)
            if not is_identifier(column_name):
                raise SchemaGenerationError(
                    f"Cannot generate schema for {definition.class_name}: "
                    f"invalid field name '{field_name}'",
                    class_name=definition.class_name,
                )
            column = self.build_column(definition.class_name, column_name, field)
            if not self._insert_column(columns, column_name, column):
                logger.debug(
                    f"{definition.class_name}.{field_name} duplicates column "
                    f"'{column_name}', keeping first declaration"
                )

        return columns

    @staticmethod
    def _insert_column(columns: Dict[str, ColumnDefinition], name: str, column: ColumnDefinition) -> bool:
        """Insert if absent. Returns False when the name already exists."""
        if name in columns:
            return False
        columns[name] = column
        return True

    def build_column(self, class_name: str, column_name: str, field: FieldDefinition) -> ColumnDefinition:
        """Map one declared field to a column."""
        sql_type = get_sql_type(field.type)
        if sql_type is None:
            logger.warning(
                f"Unknown field type '{field.type}' on {class_name}.{field.name}, using TEXT"
            )
            sql_type = "TEXT"

        kind = field.field_type
        column = ColumnDefinition(
            type=sql_type,
            not_null=field.required,
            description=field.description,
        )

        if field.default is not None:
            column.default_value = (
                json.dumps(field.default, separators=(",", ":"))
                if kind == FieldType.JSON and not isinstance(field.default, str)
                else field.default
            )
        elif not field.required and sql_type == "TEXT" and kind != FieldType.FOREIGN_KEY:
            # No three-valued strings: absent text is ''
            column.not_null = True
            column.default_value = ""

        if kind == FieldType.FOREIGN_KEY and field.related:
            target, target_column = field.related_target()
            column.foreign_key = ForeignKeyReference(
                table=self.resolve_table(target),
                column=target_column,
                on_delete="CASCADE",
                on_update="CASCADE",
            )

        if field.unique or column_name in UNIQUE_BY_CONVENTION:
            column.unique = True

        return column

    # =========================================================================
    # INDEXES, TRIGGERS, FOREIGN KEYS
    # =========================================================================

    @staticmethod
    def generate_indexes(table_name: str, columns: Dict[str, ColumnDefinition]) -> List[IndexDefinition]:
        """FK indexes, then updated_at, then one unique index per unique column."""
        indexes = []

        for column_name, column in columns.items():
            if column.foreign_key:
                indexes.append(IndexDefinition(
                    name=IndexBuilder.generate_index_name(table_name, [column_name]),
                    columns=[column_name],
                    description=f"Index for foreign key {column_name}",
                ))

        indexes.append(IndexDefinition(
            name=IndexBuilder.generate_index_name(table_name, ["updated_at"]),
            columns=["updated_at"],
            description="Index for recency queries",
        ))

        for column_name, column in columns.items():
            if column.unique and not column.primary_key:
                indexes.append(IndexDefinition(
                    name=IndexBuilder.generate_index_name(table_name, [column_name], suffix="unique"),
                    columns=[column_name],
                    unique=True,
                    description=f"Unique index for {column_name}",
                ))

        return indexes

    @staticmethod
    def generate_triggers(table_name: str) -> List[TriggerDefinition]:
        return [
            TriggerDefinition(
                name=f"trg_{table_name}_updated_at",
                when="BEFORE",
                event="UPDATE",
                body=(
                    f'UPDATE "{table_name}" SET "updated_at" = CURRENT_TIMESTAMP '
                    f'WHERE "id" = NEW."id";'
                ),
                description="Automatically update updated_at timestamp",
            )
        ]

    @staticmethod
    def extract_foreign_keys(columns: Dict[str, ColumnDefinition]) -> List[ForeignKeyDefinition]:
        foreign_keys = []
        for column_name, column in columns.items():
            if column.foreign_key:
                foreign_keys.append(ForeignKeyDefinition(
                    column=column_name,
                    references_table=column.foreign_key.table,
                    references_column=column.foreign_key.column,
                    on_delete=column.foreign_key.on_delete,
                    on_update=column.foreign_key.on_update,
                ))
        return foreign_keys

    def extract_dependencies(
        self,
        definition: ObjectDefinition,
        foreign_keys: List[ForeignKeyDefinition],
    ) -> List[str]:
        """Referenced tables plus the parent table, first-seen order."""
        dependencies: List[str] = []
        for fk in foreign_keys:
            if fk.references_table not in dependencies:
                dependencies.append(fk.references_table)

        if definition.extends and definition.extends not in BASE_CLASS_NAMES:
            parent_table = self.resolve_table(definition.extends)
            if parent_table not in dependencies:
                dependencies.append(parent_table)

        return dependencies

    @staticmethod
    def extract_package_name(definition: ObjectDefinition) -> str:
        if definition.package_name:
            return definition.package_name
        if definition.file_path:
            match = _PACKAGE_PATTERN.search(definition.file_path)
            if match:
                return match.group(1)
        return "unknown"


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["SchemaGenerator", "compute_version", "default_table_resolver"]
