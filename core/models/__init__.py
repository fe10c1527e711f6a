# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# CREATED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Definitions are the input (manifest), schema models and descriptors are the
derived outputs, StoredObject is the base of every hydrated row.
"""

from core.models.definitions import (
    ManifestModel,
    FieldDefinition,
    ParameterDefinition,
    MethodDefinition,
    SurfaceConfig,
    AiConfig,
    ObjectDefinition,
    ObjectManifest,
)
from core.models.schema import (
    ColumnDefinition,
    ForeignKeyReference,
    IndexDefinition,
    TriggerDefinition,
    ForeignKeyDefinition,
    SchemaDefinition,
)
from core.models.descriptors import (
    FunctionSpec,
    ToolDescriptor,
    EndpointDescriptor,
    MCPToolDescriptor,
    CliCommandDescriptor,
)
from core.models.stored_object import StoredObject

__all__ = [
    # Definitions
    "ManifestModel",
    "FieldDefinition",
    "ParameterDefinition",
    "MethodDefinition",
    "SurfaceConfig",
    "AiConfig",
    "ObjectDefinition",
    "ObjectManifest",
    # Schema
    "ColumnDefinition",
    "ForeignKeyReference",
    "IndexDefinition",
    "TriggerDefinition",
    "ForeignKeyDefinition",
    "SchemaDefinition",
    # Descriptors
    "FunctionSpec",
    "ToolDescriptor",
    "EndpointDescriptor",
    "MCPToolDescriptor",
    "CliCommandDescriptor",
    # Instances
    "StoredObject",
]
