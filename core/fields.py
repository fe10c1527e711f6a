# ============================================================================
# FIELD DECLARATION HELPERS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - Field factories for ad hoc classes
# PURPOSE: Declare fields in Python classes for runtime introspection
# CREATED: 19 OCT 2026
# EXPORTS: text, integer, decimal, boolean, datetime, json, foreign_key,
#          one_to_many, many_to_many
# DEPENDENCIES: none
# ============================================================================
"""
Field Declaration Helpers

Manifests are the primary input. These helpers cover ad hoc and test classes
that are registered through ObjectRegistry.register_class():

    class Article:
        title = text(required=True, max_length=200)
        body = text()
        category_id = foreign_key("categories")

    registry.register_class(Article)

The attribute name becomes the field name.
"""

from typing import Any, Optional

from core.contracts import FieldType
from core.models.definitions import FieldDefinition


def _field(field_type: FieldType, **options: Any) -> FieldDefinition:
    return FieldDefinition(type=field_type.value, **options)


def text(
    required: bool = False,
    default: Optional[str] = None,
    unique: bool = False,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    description: Optional[str] = None,
) -> FieldDefinition:
    return _field(
        FieldType.TEXT,
        required=required,
        default=default,
        unique=unique,
        min_length=min_length,
        max_length=max_length,
        description=description,
    )


def integer(
    required: bool = False,
    default: Optional[int] = None,
    min: Optional[int] = None,
    max: Optional[int] = None,
    description: Optional[str] = None,
) -> FieldDefinition:
    return _field(
        FieldType.INTEGER,
        required=required,
        default=default,
        minimum=min,
        maximum=max,
        description=description,
    )


def decimal(
    required: bool = False,
    default: Optional[float] = None,
    min: Optional[float] = None,
    max: Optional[float] = None,
    description: Optional[str] = None,
) -> FieldDefinition:
    return _field(
        FieldType.DECIMAL,
        required=required,
        default=default,
        minimum=min,
        maximum=max,
        description=description,
    )


def boolean(required: bool = False, default: Optional[bool] = None, description: Optional[str] = None) -> FieldDefinition:
    return _field(FieldType.BOOLEAN, required=required, default=default, description=description)


def datetime(required: bool = False, description: Optional[str] = None) -> FieldDefinition:
    return _field(FieldType.DATETIME, required=required, description=description)


def json(default: Any = None, description: Optional[str] = None) -> FieldDefinition:
    """Opaque JSON blob, stored serialized."""
    return _field(FieldType.JSON, default=default, description=description)


def foreign_key(related: str, required: bool = False, description: Optional[str] = None) -> FieldDefinition:
    """Many-to-one reference; `related` is 'table', 'table.column' or a class name."""
    return _field(FieldType.FOREIGN_KEY, related=related, required=required, description=description)


def one_to_many(related: str, description: Optional[str] = None) -> FieldDefinition:
    """Virtual inverse of a foreign key declared on `related`."""
    return _field(FieldType.ONE_TO_MANY, related=related, description=description)


def many_to_many(related: str, description: Optional[str] = None) -> FieldDefinition:
    """Declared for metadata only; eager loading is not supported."""
    return _field(FieldType.MANY_TO_MANY, related=related, description=description)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "text",
    "integer",
    "decimal",
    "boolean",
    "datetime",
    "json",
    "foreign_key",
    "one_to_many",
    "many_to_many",
]
