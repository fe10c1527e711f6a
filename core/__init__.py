# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core module initialization
# PURPOSE: Export core contracts, errors and models
# CREATED: 19 OCT 2026
# ============================================================================

from core.contracts import CallableMode, CrudAction, FieldType, RelationshipType
from core.errors import (
    ConfigurationError,
    ObjectForgeError,
    QueryError,
    RegistrySealedError,
    RelationshipError,
    RepositoryError,
    SchemaGenerationError,
    UnsupportedOperationError,
    ValidationError,
)
from core.models import (
    FieldDefinition,
    MethodDefinition,
    ObjectDefinition,
    ObjectManifest,
    SchemaDefinition,
    StoredObject,
)

__all__ = [
    # Enums
    "FieldType",
    "RelationshipType",
    "CrudAction",
    "CallableMode",
    # Errors
    "ObjectForgeError",
    "ConfigurationError",
    "SchemaGenerationError",
    "RegistrySealedError",
    "QueryError",
    "RelationshipError",
    "UnsupportedOperationError",
    "RepositoryError",
    "ValidationError",
    # Models
    "FieldDefinition",
    "MethodDefinition",
    "ObjectDefinition",
    "ObjectManifest",
    "SchemaDefinition",
    "StoredObject",
]
