# ============================================================================
# COLLECTION QUERY ENGINE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core - Query, persistence and relationship loading per class
# PURPOSE: list/get/count/create/update/delete/get_or_upsert + eager loading
# CREATED: 19 OCT 2026
# EXPORTS: Collection, CollectionManager
# DEPENDENCIES: psycopg, pydantic
# ============================================================================
"""
Collection Query Engine

One Collection per registered class. Every statement is a psycopg.sql
composition with %s placeholders; values are always bound parameters.

Eager loading (include=[...]) costs one batched query per relationship,
whatever the result size:

    foreignKey  -> SELECT ... FROM target WHERE "id" IN (%s, ...)
    oneToMany   -> SELECT ... FROM target WHERE "<inverse fk>" IN (%s, ...)
    manyToMany  -> UnsupportedOperationError (no join-table convention)

Every include is validated before the first query is sent. Independent
relationships are loaded concurrently and each batch is attached only
after it completes.

JSON fields are stored as serialized text: stringified on write, parsed
on hydration.

Usage:
    articles = Collection(registry, "Article", executor, schema_manager)

    page = await articles.list(
        where={"price >": 100, "category in": ["A", "B"]},
        order_by="created_at DESC",
        limit=20,
        include=["category"],
    )
    article = await articles.get("my-first-post")        # slug
    article = await articles.get_or_upsert({"slug": "x", "title": "X"})
"""

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

from psycopg import sql
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.config.defaults import QueryDefaults, get_defaults
from core.contracts import FieldType, RelationshipType
from core.errors import QueryError, RelationshipError, UnsupportedOperationError
from core.logging import timed
from core.models.definitions import FieldDefinition
from core.models.stored_object import StoredObject
from core.naming import to_snake_case
from core.schema.manager import SchemaManager
from infrastructure.base_repository import BaseRepository
from repositories.where import build_order_by, build_where

if TYPE_CHECKING:
    from registry.object_registry import ObjectRegistry, Relationship
    from repositories.database import SqlExecutor

logger = logging.getLogger(__name__)

Target = Union[StoredObject, str]

# Columns the engine manages itself
_MANAGED_COLUMNS = ("id", "created_at", "updated_at")


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


# Field type -> adapter giving the typed value used for change detection
_COMPARISON_ADAPTERS = {
    FieldType.INTEGER: TypeAdapter(int),
    FieldType.DECIMAL: TypeAdapter(float),
    FieldType.BOOLEAN: TypeAdapter(bool),
    FieldType.DATETIME: TypeAdapter(datetime),
}


def _comparable(field: FieldDefinition, value: Any) -> Any:
    """Typed form of a column value; values that do not coerce compare raw."""
    if value is None:
        return None
    if field.field_type == FieldType.JSON:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value

    adapter = _COMPARISON_ADAPTERS.get(field.field_type)
    if adapter is None:
        return value
    try:
        value = adapter.validate_python(value)
    except PydanticValidationError:
        return value
    # Naive timestamps are stored as UTC
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class Collection(BaseRepository):
    """
    Query and persistence engine for one registered class.
    """

    def __init__(
        self,
        registry: "ObjectRegistry",
        class_name: str,
        executor: "SqlExecutor",
        schema_manager: Optional[SchemaManager] = None,
        defaults: Optional[QueryDefaults] = None,
        manager: Optional["CollectionManager"] = None,
    ):
        """
        Args:
            registry: Shared object registry
            class_name: Registered class this collection serves
            executor: SQL collaborator (query + sync_schema)
            schema_manager: Table setup; None disables auto setup
            defaults: Query defaults (limits, auto setup)
            manager: Owning CollectionManager, used to reach related collections
        """
        super().__init__()
        self.registry = registry
        self.class_name = class_name
        self.executor = executor
        self.schema_manager = schema_manager
        self.defaults = defaults or get_defaults().query
        self.manager = manager

        self.definition = registry.require_definition(class_name)
        self.schema = registry.get_schema(class_name)
        self.table_name = self.schema.table_name
        self.model = registry.get_model(class_name)

        schema_name = schema_manager.renderer.schema_name if schema_manager else None
        self.table = sql.Identifier(schema_name, self.table_name) if schema_name else sql.Identifier(self.table_name)

    def __repr__(self) -> str:
        return f"Collection({self.class_name!r}, table={self.table_name!r})"

    # =========================================================================
    # SETUP
    # =========================================================================

    async def setup_db(self, force: bool = False) -> None:
        """Create this collection's table through the shared SchemaManager."""
        if self.schema_manager is None:
            raise QueryError(f"{self.class_name} collection has no schema manager")
        await self.schema_manager.ensure_table(self.class_name, force=force)

    async def _ready(self) -> None:
        if self.schema_manager is not None and self.defaults.auto_setup:
            await self.schema_manager.ensure_table(self.class_name)

    # =========================================================================
    # READ
    # =========================================================================

    @timed("collection.list")
    async def list(
        self,
        where: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Union[str, Sequence[str], None] = None,
        include: Optional[Sequence[str]] = None,
        unlimited: bool = False,
    ) -> List[StoredObject]:
        """
        Query instances.

        Args:
            where: Filter mapping (see repositories.where)
            limit: Max rows (defaults and upper bound from QueryDefaults)
            offset: Rows to skip
            order_by: "field [ASC|DESC]" or a list of them
            include: Relationship field names to eager-load
            unlimited: Return every matching row; QueryDefaults limits do not
                apply and `limit` must be None

        Returns:
            Hydrated instances; storage order unless order_by is given

        Raises:
            QueryError: Malformed where/order_by/limit
            RelationshipError: Unknown include
            UnsupportedOperationError: manyToMany include
        """
        relationships = self._resolve_includes(include)
        if unlimited:
            if limit is not None:
                raise QueryError(f"limit={limit} conflicts with unlimited=True")
        else:
            limit = self._effective_limit(limit)

        instances = await self._select(where, limit=limit, offset=offset, order_by=order_by)
        if relationships:
            await self._eager_load(instances, relationships)
        return instances

    async def _select(
        self,
        where: Optional[Mapping[str, Any]],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Union[str, Sequence[str], None] = None,
    ) -> List[StoredObject]:
        """SELECT with exactly the paging given; no QueryDefaults applied."""
        condition, params = build_where(where, self.schema.column_names)

        parts = [sql.SQL("SELECT * FROM {} WHERE {}").format(self.table, condition)]
        order = build_order_by(order_by, self.schema.column_names)
        if order is not None:
            parts.append(sql.SQL("ORDER BY {}").format(order))

        if limit is not None:
            parts.append(sql.SQL("LIMIT {}").format(sql.Placeholder()))
            params.append(limit)
        if offset:
            if offset < 0:
                raise QueryError(f"offset must be >= 0, got {offset}")
            parts.append(sql.SQL("OFFSET {}").format(sql.Placeholder()))
            params.append(offset)

        await self._ready()
        with self._error_context(f"list {self.table_name}"):
            rows = await self.executor.query(sql.SQL(" ").join(parts), params)
        return [self._hydrate(row) for row in rows]

    @timed("collection.count")
    async def count(self, where: Optional[Mapping[str, Any]] = None) -> int:
        """Number of rows matching `where` (paging and ordering do not apply)."""
        condition, params = build_where(where, self.schema.column_names)
        statement = sql.SQL("SELECT COUNT(*) AS count FROM {} WHERE {}").format(self.table, condition)

        await self._ready()
        with self._error_context(f"count {self.table_name}"):
            rows = await self.executor.query(statement, params)
        if not rows:
            return 0
        return int(rows[0]["count"])

    async def get(
        self,
        filter: Union[str, Mapping[str, Any]],
        include: Optional[Sequence[str]] = None,
    ) -> Optional[StoredObject]:
        """
        Fetch one instance by id, slug or filter mapping.

        A UUID string is looked up by id, any other string by slug (or id
        when the class has no slug column). Returns None when nothing matches.
        """
        if isinstance(filter, str):
            if _is_uuid(filter) or "slug" not in self.schema.columns:
                where = {"id": filter}
            else:
                where = {"slug": filter}
        else:
            where = dict(filter)

        rows = await self.list(where=where, limit=1, include=include)
        return rows[0] if rows else None

    # =========================================================================
    # WRITE
    # =========================================================================

    async def create(self, data: Mapping[str, Any]) -> StoredObject:
        """
        Insert a new row.

        Assigns id (uuid4) and timestamps unless given, applies declared
        defaults, validates required fields and limits.

        Raises:
            ValidationError: Required field missing or limit violated
        """
        fields = self.registry.get_fields(self.class_name)
        values = dict(data)
        for name, field in fields.items():
            if values.get(name) is None and field.default is not None and not field.is_virtual:
                values[name] = field.default
        self._validate_fields(values, fields)

        now = datetime.now(timezone.utc)
        record = self._to_columns(values, fields)
        record["id"] = str(values.get("id") or uuid.uuid4())
        record.setdefault("created_at", now)
        record.setdefault("updated_at", now)

        columns = list(record)
        statement = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
            self.table,
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )

        await self._ready()
        with self._error_context(f"create {self.class_name}", record["id"]):
            rows = await self.executor.query(statement, [record[c] for c in columns])

        self._log_operation(True, f"Created {self.class_name}", record["id"])
        return self._hydrate(rows[0] if rows else record)

    async def update(self, target: Target, changes: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Write exactly the given fields.

        Empty (or undeclared-only) changes issue no query. When `target` is
        an instance its attributes are updated in place.

        Returns:
            Column -> value map that was written ({} for a no-op)
        """
        fields = self.registry.get_fields(self.class_name)
        self._validate_fields(changes, fields, partial=True)
        record = self._to_columns(changes, fields)
        for column in _MANAGED_COLUMNS:
            record.pop(column, None)
        if not record:
            return {}

        object_id = self._target_id(target)
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = {}").format(sql.Identifier(c), sql.Placeholder()) for c in record
        )
        statement = sql.SQL("UPDATE {} SET {} WHERE {} = {}").format(
            self.table, assignments, sql.Identifier("id"), sql.Placeholder(),
        )

        await self._ready()
        with self._error_context(f"update {self.class_name}", object_id):
            await self.executor.query(statement, [*record.values(), object_id])

        if isinstance(target, StoredObject):
            for column, value in record.items():
                setattr(target, column, self._decode(column, value))

        self._log_operation(True, f"Updated {self.class_name}", object_id, {"columns": list(record)})
        return record

    async def delete(self, target: Target) -> bool:
        """Delete one row. Returns False when no row had that id."""
        object_id = self._target_id(target)
        statement = sql.SQL("DELETE FROM {} WHERE {} = {} RETURNING {}").format(
            self.table, sql.Identifier("id"), sql.Placeholder(), sql.Identifier("id"),
        )

        await self._ready()
        with self._error_context(f"delete {self.class_name}", object_id):
            rows = await self.executor.query(statement, [object_id])

        deleted = bool(rows)
        self._log_operation(deleted, f"Deleted {self.class_name}", object_id)
        return deleted

    async def get_or_upsert(
        self,
        data: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> StoredObject:
        """
        Return the row identified by `data`, creating or updating as needed.

        Lookup is by id, else slug, else every given field. An existing row
        is updated only with the fields that actually differ; unchanged data
        causes no write at all.
        """
        if data.get("id"):
            where = {"id": data["id"]}
        elif data.get("slug") and "slug" in self.schema.columns:
            where = {"slug": data["slug"]}
        else:
            where = self._to_columns(data, self.registry.get_fields(self.class_name))

        existing = await self.get(where) if where else None
        if existing is not None:
            diff = self.get_diff(existing, data)
            if diff:
                await self.update(existing, diff)
            return existing

        return await self.create({**(defaults or {}), **data})

    def get_diff(self, existing: Union[StoredObject, Mapping[str, Any]], data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Declared fields in `data` whose values differ from `existing`.

        Both sides are compared in their typed form, so an ISO string equals
        the datetime read back from the database and a JSON string equals
        its decoded value. The returned values are the ones from `data`.
        """
        fields = self.registry.get_fields(self.class_name)
        current = existing.to_record() if isinstance(existing, StoredObject) else dict(existing)

        diff = {}
        for key, value in data.items():
            field = self._field_for(key, fields)
            if field is None or field.is_virtual:
                continue
            before = _comparable(field, current.get(to_snake_case(key)))
            if before != _comparable(field, value):
                diff[key] = value
        return diff

    # =========================================================================
    # RELATIONSHIPS
    # =========================================================================

    async def load_related(self, instance: StoredObject, field_name: str) -> Any:
        """Load one relationship for one instance and cache it."""
        relationship = self._resolve_includes([field_name])[0]
        await self._load_relationship([instance], relationship)
        return instance._loaded_relationships[field_name]

    def _resolve_includes(self, include: Optional[Sequence[str]]) -> List["Relationship"]:
        """Validate every include before any query is issued."""
        if not include:
            return []

        resolved = []
        for name in include:
            relationship = self.registry.get_relationship(self.class_name, name)
            if relationship is None:
                raise RelationshipError(
                    f"{self.class_name} has no relationship '{name}'",
                    class_name=self.class_name,
                    field=name,
                )
            if relationship.type == RelationshipType.MANY_TO_MANY:
                raise UnsupportedOperationError(
                    f"manyToMany eager loading is not supported ({self.class_name}.{name})",
                    details={"class_name": self.class_name, "field": name},
                )
            if not self.registry.has_class(relationship.target_class):
                raise RelationshipError(
                    f"{self.class_name}.{name} points at unregistered class '{relationship.target_class}'",
                    class_name=self.class_name,
                    field=name,
                )
            if (
                relationship.type == RelationshipType.ONE_TO_MANY
                and self.registry.find_inverse_foreign_key(self.class_name, relationship.target_class) is None
            ):
                raise RelationshipError(
                    f"No foreignKey on {relationship.target_class} points back at {self.class_name}",
                    class_name=self.class_name,
                    field=name,
                )
            resolved.append(relationship)
        return resolved

    async def _eager_load(self, instances: List[StoredObject], relationships: List["Relationship"]) -> None:
        await asyncio.gather(*(
            self._load_relationship(instances, relationship) for relationship in relationships
        ))

    async def _load_relationship(self, instances: List[StoredObject], relationship: "Relationship") -> None:
        if relationship.type == RelationshipType.FOREIGN_KEY:
            await self._load_foreign_keys(instances, relationship)
        else:
            await self._load_one_to_many(instances, relationship)

    async def _load_foreign_keys(self, instances: List[StoredObject], relationship: "Relationship") -> None:
        column = relationship.column_name
        keys = []
        for instance in instances:
            value = getattr(instance, column, None)
            if value is not None and value not in keys:
                keys.append(value)

        related: Dict[Any, StoredObject] = {}
        if keys:
            target = self._related_collection(relationship.target_class)
            for obj in await target._select({f"{relationship.target_column} in": keys}):
                related[getattr(obj, relationship.target_column)] = obj

        for instance in instances:
            instance.set_related(relationship.field_name, related.get(getattr(instance, column, None)))

        logger.debug(
            f"Eager-loaded {relationship.field_name} for {len(instances)} {self.class_name} "
            f"({len(related)} distinct {relationship.target_class})"
        )

    async def _load_one_to_many(self, instances: List[StoredObject], relationship: "Relationship") -> None:
        inverse = self.registry.find_inverse_foreign_key(self.class_name, relationship.target_class)
        fk_column = inverse.column_name
        parent_ids = [i.id for i in instances if i.id]

        grouped: Dict[str, List[StoredObject]] = {}
        if parent_ids:
            target = self._related_collection(relationship.target_class)
            for obj in await target._select({f"{fk_column} in": parent_ids}):
                grouped.setdefault(getattr(obj, fk_column), []).append(obj)

        for instance in instances:
            instance.set_related(relationship.field_name, grouped.get(instance.id, []))

    def _related_collection(self, class_name: str) -> "Collection":
        if self.manager is not None:
            return self.manager.get(class_name)
        return Collection(
            self.registry,
            class_name,
            self.executor,
            schema_manager=self.schema_manager,
            defaults=self.defaults,
        )

    # =========================================================================
    # ROW MAPPING
    # =========================================================================

    @staticmethod
    def _field_for(key: str, fields: Dict[str, FieldDefinition]) -> Optional[FieldDefinition]:
        if key in fields:
            return fields[key]
        column = to_snake_case(key)
        for name, field in fields.items():
            if to_snake_case(name) == column:
                return field
        return None

    def _to_columns(
        self,
        data: Mapping[str, Any],
        fields: Dict[str, FieldDefinition],
    ) -> Dict[str, Any]:
        """Map field names to column names, dropping undeclared keys."""
        record: Dict[str, Any] = {}
        for key, value in data.items():
            column = to_snake_case(key)
            if column not in self.schema.columns:
                logger.debug(f"Ignoring undeclared key {key!r} for {self.class_name}")
                continue
            field = self._field_for(key, fields)
            if field is not None and field.field_type == FieldType.JSON and value is not None:
                if not isinstance(value, str):
                    value = json.dumps(value)
            record[column] = value
        return record

    def _decode(self, column: str, value: Any) -> Any:
        field = self._field_for(column, self.registry.get_fields(self.class_name))
        if field is not None and field.field_type == FieldType.JSON and isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                logger.warning(f"{self.class_name}.{column} holds non-JSON text, keeping raw value")
        return value

    def _hydrate(self, row: Mapping[str, Any]) -> StoredObject:
        values = {column: self._decode(column, value) for column, value in row.items()}
        return self.model.model_validate(values).bind(self)

    def _target_id(self, target: Target) -> str:
        object_id = target.id if isinstance(target, StoredObject) else target
        if not object_id:
            raise QueryError(f"{self.class_name} target has no id")
        return str(object_id)

    def _effective_limit(self, limit: Optional[int]) -> Optional[int]:
        if limit is None:
            limit = self.defaults.default_limit
        if limit is None:
            return None
        if limit < 0:
            raise QueryError(f"limit must be >= 0, got {limit}")
        return min(limit, self.defaults.max_limit)


# ============================================================================
# COLLECTION MANAGER
# ============================================================================

class CollectionManager:
    """
    One Collection per class, sharing one executor and one SchemaManager.

    Usage:
        collections = CollectionManager(registry, executor)
        articles = collections.get("Article")
        await collections.initialize_all()
    """

    def __init__(
        self,
        registry: "ObjectRegistry",
        executor: "SqlExecutor",
        schema_manager: Optional[SchemaManager] = None,
        defaults: Optional[QueryDefaults] = None,
    ):
        self.registry = registry
        self.executor = executor
        if schema_manager is None:
            schema_defaults = get_defaults().schema
            schema_manager = SchemaManager(
                registry,
                executor,
                dialect=schema_defaults.dialect,
                schema_name=schema_defaults.schema_name,
                include_comments=schema_defaults.include_comments,
            )
        self.schema_manager = schema_manager
        self.defaults = defaults or get_defaults().query
        self._collections: Dict[str, Collection] = {}

    def get(self, class_name: str) -> Collection:
        """Cached collection for a registered class (resolves table names too)."""
        resolved = self.registry.resolve_class_reference(class_name) or class_name
        collection = self._collections.get(resolved)
        if collection is None:
            collection = Collection(
                self.registry,
                resolved,
                self.executor,
                schema_manager=self.schema_manager,
                defaults=self.defaults,
                manager=self,
            )
            self._collections[resolved] = collection
        return collection

    def __getitem__(self, class_name: str) -> Collection:
        return self.get(class_name)

    async def initialize_all(self, force: bool = False):
        """Create every registered table in dependency order."""
        return await self.schema_manager.initialize_all(force=force)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["Collection", "CollectionManager"]
