# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Foundation - Core enums shared by every component
# PURPOSE: Field kinds, relationship kinds, CRUD actions, tool policies
# CREATED: 19 OCT 2026
# EXPORTS: FieldType, RelationshipType, CrudAction, CallableMode, constants
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for objectforge.

These enums are the vocabulary that crosses every boundary:
- Manifest JSON (camelCase field type strings)
- Schema generation (SQL type selection)
- Query engine (relationship loading strategy)
- Manifest generation (CRUD surfaces, tool policies)
"""

from enum import Enum
from typing import FrozenSet, Tuple


# ============================================================================
# FIELD ENUMS
# ============================================================================

class FieldType(str, Enum):
    """
    Declared field kinds.

    Column kinds map to one SQL column each. Relationship-only kinds
    (ONE_TO_MANY, MANY_TO_MANY) are virtual and never become columns.
    """
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    JSON = "json"
    FOREIGN_KEY = "foreignKey"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_MANY = "manyToMany"

    @property
    def is_virtual(self) -> bool:
        """Check if this kind has no backing column."""
        return self in (FieldType.ONE_TO_MANY, FieldType.MANY_TO_MANY)

    @property
    def is_relationship(self) -> bool:
        """Check if this kind links to another object."""
        return self in (
            FieldType.FOREIGN_KEY,
            FieldType.ONE_TO_MANY,
            FieldType.MANY_TO_MANY,
        )

    @classmethod
    def parse(cls, value: str):
        """Return the matching member, or None for unrecognized type strings."""
        try:
            return cls(value)
        except ValueError:
            return None


class RelationshipType(str, Enum):
    """Relationship kinds understood by the eager-loading engine."""
    FOREIGN_KEY = "foreignKey"      # many-to-one, FK column on this table
    ONE_TO_MANY = "oneToMany"       # inverse FK column on the related table
    MANY_TO_MANY = "manyToMany"     # no join-table convention, not loadable


# ============================================================================
# SURFACE ENUMS
# ============================================================================

class CrudAction(str, Enum):
    """Generated CRUD operations, in canonical surface order."""
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class CallableMode(str, Enum):
    """Named AI tool inclusion policies (a list of names is the third form)."""
    ALL = "all"
    PUBLIC_ASYNC = "public-async"


# ============================================================================
# CONSTANTS
# ============================================================================

# Columns every table carries, in declaration order
BASE_COLUMNS: Tuple[str, ...] = ("id", "created_at", "updated_at")

# `extends` values that do not imply a parent table
BASE_CLASS_NAMES: FrozenSet[str] = frozenset({"BaseObject", "BaseCollection"})

# Field names that are unique by convention
UNIQUE_BY_CONVENTION: FrozenSet[str] = frozenset({"slug", "email"})

CRUD_ACTIONS: Tuple[CrudAction, ...] = tuple(CrudAction)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "FieldType",
    "RelationshipType",
    "CrudAction",
    "CallableMode",
    "BASE_COLUMNS",
    "BASE_CLASS_NAMES",
    "UNIQUE_BY_CONVENTION",
    "CRUD_ACTIONS",
]
