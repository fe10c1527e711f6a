# ============================================================================
# STORED OBJECT MODEL
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core model - Hydrated row with relationship cache
# PURPOSE: Base class for instances returned by Collection queries
# CREATED: 19 OCT 2026
# EXPORTS: StoredObject
# DEPENDENCIES: pydantic
# ============================================================================
"""
Stored Object

Every row returned by a Collection is hydrated into a StoredObject subclass
built by ObjectRegistry.get_model(). Relationship values are kept in a
private per-instance cache, never in column attributes:

    article = (await articles.list(include=["category_id"]))[0]
    article.is_related_loaded("category_id")   # True, no query
    category = await article.get_related("category_id")

Instances are created per call and are not stored in the registry.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from core.errors import RelationshipError

if TYPE_CHECKING:
    from repositories.collection import Collection


class StoredObject(BaseModel):
    """
    A persisted object instance.

    Maps to: one row of the class's table
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True, protected_namespaces=())

    # Class name this model was built for (set by ObjectRegistry.get_model)
    __class_name__: ClassVar[str] = "StoredObject"

    id: Optional[str] = Field(default=None, description="UUID primary key")
    created_at: Optional[Union[datetime, str]] = None
    updated_at: Optional[Union[datetime, str]] = None

    _loaded_relationships: Dict[str, Any] = PrivateAttr(default_factory=dict)
    _collection: Any = PrivateAttr(default=None)

    # =========================================================================
    # RELATIONSHIP CACHE
    # =========================================================================

    def is_related_loaded(self, field_name: str) -> bool:
        """Check if a relationship is cached on this instance."""
        return field_name in self._loaded_relationships

    def set_related(self, field_name: str, value: Any) -> None:
        """Cache a loaded relationship value (instance, list, or None)."""
        self._loaded_relationships[field_name] = value

    def clear_related(self, field_name: Optional[str] = None) -> None:
        if field_name is None:
            self._loaded_relationships.clear()
        else:
            self._loaded_relationships.pop(field_name, None)

    async def get_related(self, field_name: str) -> Any:
        """
        Return a relationship value, loading it on first access.

        Cached values are returned without a query.

        Raises:
            RelationshipError: Unknown relationship or detached instance
            UnsupportedOperationError: manyToMany relationship
        """
        if self.is_related_loaded(field_name):
            return self._loaded_relationships[field_name]
        if self._collection is None:
            raise RelationshipError(
                f"Cannot load '{field_name}': instance is not attached to a collection",
                class_name=type(self).__class_name__,
                field=field_name,
            )
        return await self._collection.load_related(self, field_name)

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def bind(self, collection: "Collection") -> "StoredObject":
        self._collection = collection
        return self

    def to_record(self) -> Dict[str, Any]:
        """Column values including extra columns, without relationship cache."""
        return self.model_dump()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["StoredObject"]
