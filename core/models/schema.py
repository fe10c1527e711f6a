# ============================================================================
# SCHEMA DEFINITION MODELS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core model - Derived relational schema
# PURPOSE: Output of SchemaGenerator, input of SchemaToSQL
# CREATED: 19 OCT 2026
# EXPORTS: ColumnDefinition, ForeignKeyReference, IndexDefinition,
#          TriggerDefinition, ForeignKeyDefinition, SchemaDefinition
# DEPENDENCIES: pydantic
# ============================================================================
"""
Schema Definition Models

A SchemaDefinition is a pure, cacheable description of one table. It is
keyed by `version`, a content hash of the object definition it came from,
so two definitions with the same hash always render byte-identical DDL.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from core.models.definitions import ManifestModel


class ForeignKeyReference(ManifestModel):
    """Inline foreign-key target of a column."""
    table: str
    column: str = "id"
    on_delete: str = "CASCADE"
    on_update: str = "CASCADE"


class ColumnDefinition(ManifestModel):
    """
    One table column.

    `default_value` is a literal rendered through SQL quoting.
    `default_expression` is raw SQL such as CURRENT_TIMESTAMP.
    """
    type: str
    primary_key: bool = False
    not_null: bool = False
    default_value: Any = None
    default_expression: Optional[str] = None
    unique: bool = False
    foreign_key: Optional[ForeignKeyReference] = None
    description: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self.default_value is not None or self.default_expression is not None


class IndexDefinition(ManifestModel):
    name: str
    columns: List[str]
    unique: bool = False
    description: Optional[str] = None


class TriggerDefinition(ManifestModel):
    """Row-level trigger keeping a column in sync."""
    name: str
    when: str = "BEFORE"
    event: str = "UPDATE"
    body: str
    description: Optional[str] = None


class ForeignKeyDefinition(ManifestModel):
    """Table-level foreign-key constraint."""
    column: str
    references_table: str
    references_column: str = "id"
    on_delete: str = "CASCADE"
    on_update: str = "CASCADE"


class SchemaDefinition(ManifestModel):
    """Complete derived schema for one object definition."""
    table_name: str
    class_name: str
    columns: Dict[str, ColumnDefinition] = Field(default_factory=dict)
    indexes: List[IndexDefinition] = Field(default_factory=list)
    triggers: List[TriggerDefinition] = Field(default_factory=list)
    foreign_keys: List[ForeignKeyDefinition] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    version: str
    package_name: str = "unknown"
    base_class: Optional[str] = None

    @property
    def column_names(self) -> List[str]:
        return list(self.columns)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ForeignKeyReference",
    "ColumnDefinition",
    "IndexDefinition",
    "TriggerDefinition",
    "ForeignKeyDefinition",
    "SchemaDefinition",
]
