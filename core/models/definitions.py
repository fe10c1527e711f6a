# ============================================================================
# OBJECT DEFINITION MODELS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core model - Declarative object metadata
# PURPOSE: Typed shape of the externally produced object-definition manifest
# CREATED: 19 OCT 2026
# EXPORTS: FieldDefinition, ParameterDefinition, MethodDefinition,
#          SurfaceConfig, AiConfig, ObjectDefinition, ObjectManifest
# DEPENDENCIES: pydantic
# ============================================================================
"""
Object Definition Models

An ObjectDefinition is plain data: fields, methods and per-surface inclusion
policy for one persistent class. Definitions are produced by an external
scanning step and loaded into the ObjectRegistry; nothing here assumes how
they were produced.

Manifest JSON uses camelCase keys. Every model accepts either the camelCase
alias or the snake_case attribute name, and dumps by alias.

Usage:
    from core.models.definitions import ObjectDefinition

    article = ObjectDefinition.model_validate({
        "className": "Article",
        "fields": {
            "title": {"type": "text", "required": True},
            "body": {"type": "text"},
        },
    })
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from core.contracts import CallableMode, FieldType
from core.naming import class_name_to_table_name


class ManifestModel(BaseModel):
    """Shared config: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_manifest(self) -> Dict[str, Any]:
        """Dump with camelCase keys, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# FIELDS
# ============================================================================

class FieldDefinition(ManifestModel):
    """
    One declared field of an object.

    `type` stays a free string so unrecognized kinds survive loading and
    fall back to TEXT at schema generation time.
    """
    name: str = ""
    type: str = FieldType.TEXT.value
    required: bool = False
    default: Any = None
    unique: bool = False
    minimum: Optional[float] = Field(default=None, alias="min")
    maximum: Optional[float] = Field(default=None, alias="max")
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    description: Optional[str] = None
    related: Optional[str] = Field(
        default=None,
        description="'table.column' for foreignKey, target class for oneToMany/manyToMany",
    )

    @property
    def field_type(self) -> Optional[FieldType]:
        """Known FieldType, or None for unrecognized type strings."""
        return FieldType.parse(self.type)

    @property
    def is_virtual(self) -> bool:
        """Relationship-only fields have no backing column."""
        kind = self.field_type
        return kind is not None and kind.is_virtual

    @property
    def is_relationship(self) -> bool:
        kind = self.field_type
        return kind is not None and kind.is_relationship

    def related_target(self) -> Tuple[str, str]:
        """
        Split `related` into (target, column).

        The column defaults to 'id' when the reference has no dot.
        """
        if not self.related:
            return "", "id"
        target, _, column = self.related.partition(".")
        return target, column or "id"

    def hash_payload(self) -> Dict[str, Any]:
        """Stable content used by schema version hashing."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# METHODS
# ============================================================================

class ParameterDefinition(ManifestModel):
    """One method parameter: type string, optionality, default."""
    name: str
    type: str = "any"
    optional: bool = False
    default: Any = None
    description: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set and self.default is not None


class MethodDefinition(ManifestModel):
    """Signature of a method exposed by an object."""
    name: str
    parameters: List[ParameterDefinition] = Field(default_factory=list)
    is_async: bool = Field(default=False, alias="async")
    is_public: bool = True
    is_static: bool = False
    description: Optional[str] = None
    return_type: Optional[str] = None


# ============================================================================
# SURFACE POLICIES
# ============================================================================

class SurfaceConfig(ManifestModel):
    """
    Inclusion policy for a generated surface (REST, MCP, CLI).

    `include=None` means every CRUD action; `exclude` always wins.
    """
    enabled: bool = True
    include: Optional[List[str]] = None
    exclude: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_bool(cls, data: Any) -> Any:
        if isinstance(data, bool):
            return {"enabled": data}
        return data

    def allows(self, action: str) -> bool:
        """Include-list check first, then the deny-list overrides."""
        if not self.enabled:
            return False
        if self.include is not None and action not in self.include:
            return False
        return action not in self.exclude


class AiConfig(ManifestModel):
    """Inclusion policy for AI function-calling tools."""
    enabled: bool = True
    callable: Union[CallableMode, List[str], None] = None
    exclude: List[str] = Field(default_factory=list)
    descriptions: Dict[str, str] = Field(default_factory=dict)


# ============================================================================
# OBJECTS
# ============================================================================

class ObjectDefinition(ManifestModel):
    """
    Declarative description of one persistent class.

    Field names are filled from the `fields` map keys, so a manifest entry
    never needs to repeat them.
    """
    class_name: str
    table_name: Optional[str] = None
    fields: Dict[str, FieldDefinition] = Field(default_factory=dict)
    extends: Optional[str] = None
    methods: List[MethodDefinition] = Field(default_factory=list)
    api_config: SurfaceConfig = Field(default_factory=SurfaceConfig)
    mcp_config: SurfaceConfig = Field(default_factory=SurfaceConfig)
    cli_config: SurfaceConfig = Field(default_factory=SurfaceConfig)
    ai_config: Optional[AiConfig] = None
    file_path: Optional[str] = None
    package_name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("fields", mode="before")
    @classmethod
    def _fields_from_list(cls, value: Any) -> Any:
        if isinstance(value, list):
            ordered = {}
            for item in value:
                if isinstance(item, FieldDefinition):
                    ordered[item.name] = item
                else:
                    ordered[item["name"]] = item
            return ordered
        return value

    @field_validator("methods", mode="before")
    @classmethod
    def _methods_from_map(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [{"name": name, **entry} for name, entry in value.items()]
        return value

    @model_validator(mode="after")
    def _name_fields(self) -> "ObjectDefinition":
        for name, definition in self.fields.items():
            if definition.name != name:
                definition.name = name
        return self

    @property
    def resolved_table_name(self) -> str:
        """Explicit override, else derived from the class name."""
        return self.table_name or class_name_to_table_name(self.class_name)

    def get_method(self, name: str) -> Optional[MethodDefinition]:
        for method in self.methods:
            if method.name == name:
                return method
        return None


class ObjectManifest(ManifestModel):
    """
    Top-level manifest document.

    `objects` may be a map keyed by class name or a plain list.
    """
    version: str = "1"
    objects: List[ObjectDefinition] = Field(default_factory=list)

    @field_validator("objects", mode="before")
    @classmethod
    def _objects_from_map(cls, value: Any) -> Any:
        if isinstance(value, dict):
            result = []
            for class_name, entry in value.items():
                if isinstance(entry, dict):
                    entry = {"className": class_name, **entry}
                result.append(entry)
            return result
        return value


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ManifestModel",
    "FieldDefinition",
    "ParameterDefinition",
    "MethodDefinition",
    "SurfaceConfig",
    "AiConfig",
    "ObjectDefinition",
    "ObjectManifest",
]
