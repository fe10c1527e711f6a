# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Foundation - Exceptions raised across components
# PURPOSE: One exception family so callers can catch by failure kind
# CREATED: 19 OCT 2026
# EXPORTS: ObjectForgeError and subclasses
# DEPENDENCIES: none
# ============================================================================
"""
Error Taxonomy

    ObjectForgeError
    ├── ConfigurationError          fatal, surfaced immediately
    │   ├── SchemaGenerationError   zero-field or unregistered class
    │   └── RegistrySealedError     registry mutated after warm-up
    ├── QueryError                  malformed where/order tokens
    │   └── RelationshipError       unknown relationship, missing inverse FK
    ├── UnsupportedOperationError   many-to-many eager loading
    └── RepositoryError             collaborator failure (wrapped)
        └── ValidationError         bad data on write

Not-found is never an exception: get() returns None and list() returns [].
"""

from typing import Any, Dict, Optional


class ObjectForgeError(Exception):
    """Base exception for all objectforge failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(ObjectForgeError):
    """Raised when object metadata cannot drive the requested operation."""


class SchemaGenerationError(ConfigurationError):
    """Raised when a class cannot produce a valid table."""

    def __init__(self, message: str, class_name: Optional[str] = None):
        self.class_name = class_name
        super().__init__(message, details={"class_name": class_name})


class RegistrySealedError(ConfigurationError):
    """Raised on registration after the registry warm-up phase has ended."""


class QueryError(ObjectForgeError):
    """Raised for malformed query specifications. Fails closed."""


class RelationshipError(QueryError):
    """Raised when an include names something that is not a usable relationship."""

    def __init__(self, message: str, class_name: Optional[str] = None, field: Optional[str] = None):
        self.class_name = class_name
        self.field = field
        super().__init__(message, details={"class_name": class_name, "field": field})


class UnsupportedOperationError(ObjectForgeError):
    """Raised for operations that are explicitly not implemented."""


class RepositoryError(ObjectForgeError):
    """Raised when the SQL collaborator fails during an operation."""

    def __init__(self, message: str, operation: str = None, entity_id: str = None):
        self.operation = operation
        self.entity_id = entity_id
        super().__init__(message, details={"operation": operation, "entity_id": entity_id})


class ValidationError(RepositoryError):
    """Raised when data fails validation before a write."""

    def __init__(self, message: str, field: str = None, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ObjectForgeError",
    "ConfigurationError",
    "SchemaGenerationError",
    "RegistrySealedError",
    "QueryError",
    "RelationshipError",
    "UnsupportedOperationError",
    "RepositoryError",
    "ValidationError",
]
