# ============================================================================
# OBJECT REGISTRY
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Registry - Metadata service for every component
# PURPOSE: Class name -> fields, methods, schema, model, relationships
# CREATED: 19 OCT 2026
# EXPORTS: ObjectRegistry, Relationship
# DEPENDENCIES: pydantic, pyyaml
# ============================================================================
"""
Object Registry

An explicitly constructed, long-lived service object. It is passed by
reference to the schema manager, collections and manifest generator; there
is no module-level global.

Lifecycle:
    1. Warm-up: register() / load_manifest() / from_file(), or lazily from
       `manifest_path` on first read
    2. seal(): registry becomes immutable shared state
    3. Reads: synchronous and side-effect free (apart from cache fills)

Re-registering a class name replaces the previous definition, so field
maps never accumulate duplicates.

Usage:
    registry = ObjectRegistry.from_file("objects.json")
    registry.seal()

    registry.get_fields("Article")        # ordered map, {} if unknown
    registry.get_schema("Article")        # cached SchemaDefinition
    registry.get_initialization_order()   # FK targets first
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Type, Union

import yaml
from pydantic import Field, create_model

from core.contracts import BASE_CLASS_NAMES, FieldType, RelationshipType
from core.errors import ConfigurationError, RegistrySealedError, SchemaGenerationError
from core.logging import log_checkpoint, log_context
from core.models.definitions import FieldDefinition, MethodDefinition, ObjectDefinition, ObjectManifest
from core.models.schema import SchemaDefinition
from core.models.stored_object import StoredObject
from core.naming import class_name_to_table_name, to_snake_case
from core.schema.generator import SchemaGenerator, compute_version, default_table_resolver
from core.schema.sql_generator import SchemaToSQL
from registry.introspection import extract_fields

logger = logging.getLogger(__name__)

DefinitionInput = Union[ObjectDefinition, Dict[str, Any]]

# Column field type -> annotation used on hydrated models
_MODEL_TYPES = {
    FieldType.TEXT: Optional[str],
    FieldType.INTEGER: Optional[int],
    FieldType.DECIMAL: Optional[float],
    FieldType.BOOLEAN: Optional[bool],
    FieldType.DATETIME: Optional[Union[datetime, str]],
    FieldType.JSON: Any,
    FieldType.FOREIGN_KEY: Optional[str],
}


@dataclass(frozen=True)
class Relationship:
    """One relationship field, as seen from its declaring class."""
    source_class: str
    field_name: str
    target_class: str
    type: RelationshipType
    target_column: str = "id"

    @property
    def column_name(self) -> str:
        """Backing column on the source table (foreignKey only)."""
        return to_snake_case(self.field_name)


class ObjectRegistry:
    """
    Metadata registry for object definitions.
    """

    def __init__(
        self,
        definitions: Optional[Iterable[DefinitionInput]] = None,
        manifest_path: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize registry.

        Args:
            definitions: Definitions to register immediately
            manifest_path: Manifest file loaded lazily on first read
        """
        self._definitions: Dict[str, ObjectDefinition] = {}
        self._schemas: Dict[str, SchemaDefinition] = {}
        self._models: Dict[str, Type[StoredObject]] = {}
        self._sealed = False
        self._manifest_path = Path(manifest_path) if manifest_path else None
        self._lazy_pending = self._manifest_path is not None
        self.schema_generator = SchemaGenerator(resolve_table=self.resolve_table_reference)

        for definition in definitions or []:
            self.register(definition)

    # =========================================================================
    # WARM-UP
    # =========================================================================

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> "ObjectRegistry":
        """End the warm-up phase. Further registration raises."""
        self._ensure_loaded()
        self._sealed = True
        log_checkpoint("registry_sealed", {"classes": len(self._definitions)}, logger)
        return self

    def register(self, definition: DefinitionInput) -> ObjectDefinition:
        """
        Register (or replace) one object definition.

        Raises:
            RegistrySealedError: After seal()
        """
        if self._sealed:
            raise RegistrySealedError(
                "Registry is sealed; register classes during warm-up only"
            )
        if not isinstance(definition, ObjectDefinition):
            definition = ObjectDefinition.model_validate(definition)

        class_name = definition.class_name
        replaced = class_name in self._definitions
        self._definitions[class_name] = definition
        # FK table names depend on other registrations
        self._schemas.clear()
        self._models.pop(class_name, None)

        with log_context(class_name=class_name, operation="register"):
            logger.debug(
                f"{'Replaced' if replaced else 'Registered'} {class_name} "
                f"({len(definition.fields)} fields, {len(definition.methods)} methods)"
            )
        return definition

    def register_class(self, cls: type, **config: Any) -> ObjectDefinition:
        """
        Register a Python class through runtime introspection.

        Args:
            cls: Class declaring fields (core.fields helpers, pydantic, or primitives)
            **config: Extra ObjectDefinition attributes (table_name, api_config, ...)
        """
        parent = cls.__bases__[0].__name__ if cls.__bases__ and cls.__bases__[0] is not object else None
        if parent in ("BaseModel", StoredObject.__name__):
            parent = None
        definition = ObjectDefinition(
            class_name=config.pop("class_name", cls.__name__),
            fields=extract_fields(cls),
            extends=config.pop("extends", parent),
            description=config.pop("description", (cls.__doc__ or "").strip() or None),
            **config,
        )
        return self.register(definition)

    def load_manifest(self, manifest: Union[ObjectManifest, Dict[str, Any], List[Any]]) -> int:
        """
        Register every definition of a manifest.

        Returns:
            Number of definitions registered
        """
        if isinstance(manifest, list):
            manifest = {"objects": manifest}
        if not isinstance(manifest, ObjectManifest):
            manifest = ObjectManifest.model_validate(manifest)

        for definition in manifest.objects:
            self.register(definition)

        logger.info(f"Loaded manifest v{manifest.version}: {len(manifest.objects)} object definitions")
        return len(manifest.objects)

    def load_file(self, path: Union[str, Path]) -> int:
        """Load a JSON or YAML manifest file."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        if data is None:
            raise ConfigurationError(f"Manifest file is empty: {path}")
        return self.load_manifest(data)

    @classmethod
    def from_file(cls, path: Union[str, Path], seal: bool = False) -> "ObjectRegistry":
        """Build a registry from a manifest file."""
        registry = cls()
        registry.load_file(path)
        if seal:
            registry.seal()
        return registry

    def _ensure_loaded(self) -> None:
        if self._lazy_pending:
            self._lazy_pending = False
            logger.info(f"Lazy-loading object manifest from {self._manifest_path}")
            self.load_file(self._manifest_path)

    # =========================================================================
    # DEFINITION LOOKUP
    # =========================================================================

    def has_class(self, class_name: str) -> bool:
        self._ensure_loaded()
        return class_name in self._definitions

    @property
    def class_names(self) -> List[str]:
        """Registered class names, in registration order."""
        self._ensure_loaded()
        return list(self._definitions)

    def get_definition(self, class_name: str) -> Optional[ObjectDefinition]:
        self._ensure_loaded()
        return self._definitions.get(class_name)

    def require_definition(self, class_name: str) -> ObjectDefinition:
        """
        Raises:
            ConfigurationError: Class is not registered
        """
        definition = self.get_definition(class_name)
        if definition is None:
            raise ConfigurationError(f"Class '{class_name}' is not registered")
        return definition

    def get_fields(self, class_name: str) -> Dict[str, FieldDefinition]:
        """
        Ordered field map for a class.

        Returns an empty map for unregistered classes so callers can check
        before deciding to fail.
        """
        definition = self.get_definition(class_name)
        if definition is None:
            return {}
        return dict(definition.fields)

    def get_methods(self, class_name: str) -> List[MethodDefinition]:
        definition = self.get_definition(class_name)
        if definition is None:
            return []
        return list(definition.methods)

    def get_table_name(self, class_name: str) -> str:
        return self.require_definition(class_name).resolved_table_name

    def find_by_table(self, table_name: str) -> Optional[ObjectDefinition]:
        self._ensure_loaded()
        for definition in self._definitions.values():
            if definition.resolved_table_name == table_name:
                return definition
        return None

    @staticmethod
    def extract_fields(cls: type) -> Dict[str, FieldDefinition]:
        """Runtime introspection fallback for classes outside the manifest."""
        return extract_fields(cls)

    # =========================================================================
    # REFERENCE RESOLUTION
    # =========================================================================

    def resolve_class_reference(self, reference: str) -> Optional[str]:
        """
        Resolve 'Class', 'table' or 'table.column' to a registered class name.

        Returns:
            Class name, or None when nothing registered matches
        """
        if not reference:
            return None
        target = reference.partition(".")[0]
        if self.has_class(target):
            return target
        definition = self.find_by_table(target) or self.find_by_table(class_name_to_table_name(target))
        return definition.class_name if definition else None

    def resolve_table_reference(self, reference: str) -> str:
        """Table name for a class or table reference (registered or not)."""
        class_name = self.resolve_class_reference(reference)
        if class_name is not None:
            return self._definitions[class_name].resolved_table_name
        return default_table_resolver(reference.partition(".")[0])

    # =========================================================================
    # RELATIONSHIPS
    # =========================================================================

    def get_relationships(self, class_name: str) -> List[Relationship]:
        """Relationship fields declared on a class, in field order."""
        relationships = []
        for field_name, field in self.get_fields(class_name).items():
            if not field.is_relationship or not field.related:
                continue
            target, target_column = field.related_target()
            relationships.append(Relationship(
                source_class=class_name,
                field_name=field_name,
                target_class=self.resolve_class_reference(field.related) or target,
                type=RelationshipType(field.type),
                target_column=target_column,
            ))
        return relationships

    def get_relationship(self, class_name: str, field_name: str) -> Optional[Relationship]:
        for relationship in self.get_relationships(class_name):
            if relationship.field_name == field_name:
                return relationship
        return None

    def get_inverse_relationships(self, class_name: str) -> List[Relationship]:
        """Relationships on any class that point at `class_name`."""
        inverse = []
        for source in self.class_names:
            for relationship in self.get_relationships(source):
                if relationship.target_class == class_name:
                    inverse.append(relationship)
        return inverse

    def find_inverse_foreign_key(self, class_name: str, target_class: str) -> Optional[Relationship]:
        """The foreignKey on `target_class` that points back at `class_name`."""
        for relationship in self.get_inverse_relationships(class_name):
            if (
                relationship.source_class == target_class
                and relationship.type == RelationshipType.FOREIGN_KEY
            ):
                return relationship
        return None

    # =========================================================================
    # DEPENDENCY ORDERING
    # =========================================================================

    def get_dependencies(self, class_name: str) -> List[str]:
        """Registered classes this class's table depends on (FK targets, parent)."""
        definition = self.require_definition(class_name)
        dependencies: List[str] = []
        for field in definition.fields.values():
            if field.field_type == FieldType.FOREIGN_KEY and field.related:
                target = self.resolve_class_reference(field.related)
                if target and target != class_name and target not in dependencies:
                    dependencies.append(target)
        if definition.extends and definition.extends not in BASE_CLASS_NAMES:
            parent = self.resolve_class_reference(definition.extends)
            if parent and parent != class_name and parent not in dependencies:
                dependencies.append(parent)
        return dependencies

    def get_dependency_graph(self) -> Dict[str, List[str]]:
        return {name: self.get_dependencies(name) for name in self.class_names}

    def get_initialization_order(
        self,
        class_names: Optional[Iterable[str]] = None,
        allow_cycles: bool = False,
    ) -> List[str]:
        """
        Topological order: every class after the classes it depends on.

        Requested classes pull in their registered dependencies. Ties keep
        registration order.

        Raises:
            ConfigurationError: Dependency cycle (unless allow_cycles)
        """
        roots = list(class_names) if class_names is not None else self.class_names
        order: List[str] = []
        done = set()
        visiting: List[str] = []

        def visit(name: str) -> None:
            if name in done:
                return
            if name in visiting:
                cycle = visiting[visiting.index(name):] + [name]
                if allow_cycles:
                    logger.warning(f"Dependency cycle allowed: {' -> '.join(cycle)}")
                    return
                raise ConfigurationError(
                    f"Dependency cycle detected: {' -> '.join(cycle)}",
                    details={"cycle": cycle},
                )
            visiting.append(name)
            for dependency in self.get_dependencies(name):
                visit(dependency)
            visiting.pop()
            done.add(name)
            order.append(name)

        for root in roots:
            self.require_definition(root)
            visit(root)
        return order

    # =========================================================================
    # DERIVED ARTIFACTS (cached)
    # =========================================================================

    def get_schema(self, class_name: str) -> SchemaDefinition:
        """
        SchemaDefinition for a class, cached by content version.

        Raises:
            SchemaGenerationError: Class unregistered or has zero fields
        """
        definition = self.get_definition(class_name)
        if definition is None:
            raise SchemaGenerationError(
                f"Cannot generate schema for {class_name}: class is not registered",
                class_name=class_name,
            )

        cached = self._schemas.get(class_name)
        if cached is not None and cached.version == compute_version(definition):
            return cached

        with log_context(class_name=class_name, operation="generate_schema"):
            schema = self.schema_generator.generate_schema(definition)
        self._schemas[class_name] = schema
        return schema

    def get_schema_ddl(self, class_name: str, dialect: str = "sqlite", schema_name: Optional[str] = None) -> str:
        """Rendered DDL text for one class."""
        return SchemaToSQL(dialect=dialect, schema_name=schema_name).render(self.get_schema(class_name))

    def get_model(self, class_name: str) -> Type[StoredObject]:
        """
        Hydration model for a class: StoredObject plus one attribute per column.
        """
        model = self._models.get(class_name)
        if model is not None:
            return model

        schema = self.get_schema(class_name)
        definition = self.require_definition(class_name)

        field_specs: Dict[str, Any] = {}
        for field_name, field in definition.fields.items():
            if field.is_virtual:
                continue
            column = to_snake_case(field_name)
            if column in schema.columns and column not in StoredObject.model_fields:
                annotation = _MODEL_TYPES.get(field.field_type, Any)
                field_specs[column] = (annotation, Field(default=None, description=field.description))

        model = create_model(class_name, __base__=StoredObject, **field_specs)
        model.__class_name__ = class_name
        self._models[class_name] = model
        return model

    def __len__(self) -> int:
        return len(self.class_names)

    def __contains__(self, class_name: str) -> bool:
        return self.has_class(class_name)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["ObjectRegistry", "Relationship"]
