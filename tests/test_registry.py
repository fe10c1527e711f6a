# ============================================================================
# OBJECT REGISTRY TESTS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Tests - Metadata registry
# PURPOSE: Registration, lookup, relationships, ordering, derived artifacts
# CREATED: 19 OCT 2026
# ============================================================================
"""
Object Registry Tests

Covers:
1. Field lookup (empty map for unknown classes)
2. Idempotent re-registration and sealing
3. Manifest loading (map form, JSON, YAML, lazy path)
4. Runtime introspection fallback
5. Relationship and reference resolution
6. Dependency ordering and cycle detection
7. Schema and model caching

Run with:
    pytest tests/test_registry.py -v
"""

import json

import pytest
import yaml
from pydantic import BaseModel, Field

from core import fields
from core.contracts import FieldType, RelationshipType
from core.errors import ConfigurationError, RegistrySealedError, SchemaGenerationError
from core.models import StoredObject
from registry import ObjectRegistry

from tests.conftest import ARTICLE, CATEGORY


# ============================================================================
# LOOKUP
# ============================================================================

class TestFieldLookup:

    def test_get_fields_preserves_declaration_order(self, registry):
        names = list(registry.get_fields("Article"))
        assert names == ["title", "body", "slug", "price", "category", "metadata", "tags"]

    def test_get_fields_unknown_class_is_empty(self, registry):
        assert registry.get_fields("Nope") == {}

    def test_field_names_filled_from_map_keys(self, registry):
        assert registry.get_fields("Article")["title"].name == "title"

    def test_camel_case_aliases_parsed(self, registry):
        title = registry.get_fields("Article")["title"]
        price = registry.get_fields("Article")["price"]
        assert title.max_length == 200
        assert price.minimum == 0

    def test_get_methods(self, registry):
        methods = registry.get_methods("Article")
        assert [m.name for m in methods] == ["publish", "summarize", "reindexAll"]
        assert methods[0].is_async is True
        assert methods[2].is_static is True

    def test_require_definition_unknown_raises(self, registry):
        with pytest.raises(ConfigurationError):
            registry.require_definition("Nope")

    def test_table_name_derived_and_overridden(self):
        registry = ObjectRegistry([
            {"className": "BlogPost", "fields": {"title": {"type": "text"}}},
            {"className": "Person", "tableName": "people", "fields": {"name": {"type": "text"}}},
        ])
        assert registry.get_table_name("BlogPost") == "blog_posts"
        assert registry.get_table_name("Person") == "people"
        assert registry.find_by_table("people").class_name == "Person"


# ============================================================================
# REGISTRATION
# ============================================================================

class TestRegistration:

    def test_reregistration_replaces_fields(self, registry):
        registry.register({"className": "Article", "fields": {"title": {"type": "text"}}})
        registry.register({"className": "Article", "fields": {"title": {"type": "text"}}})

        assert list(registry.get_fields("Article")) == ["title"]
        assert registry.class_names.count("Article") == 1

    def test_reregistration_invalidates_schema_cache(self, registry):
        before = registry.get_schema("Tag")
        registry.register({"className": "Tag", "fields": {"label": {"type": "text"}}})
        after = registry.get_schema("Tag")

        assert before.version != after.version
        assert "label" in after.columns

    def test_later_registration_refreshes_foreign_key_table(self):
        registry = ObjectRegistry()
        registry.register({
            "className": "Post",
            "fields": {"title": {"type": "text"}, "author": {"type": "foreignKey", "related": "Author"}},
        })
        assert registry.get_schema("Post").foreign_keys[0].references_table == "authors"

        registry.register({"className": "Author", "tableName": "people", "fields": {"name": {"type": "text"}}})

        schema = registry.get_schema("Post")
        assert schema.foreign_keys[0].references_table == "people"
        assert schema.dependencies == ["people"]

    def test_sealed_registry_rejects_registration(self, registry):
        registry.seal()
        with pytest.raises(RegistrySealedError):
            registry.register({"className": "Late", "fields": {"x": {"type": "text"}}})

    def test_sealed_registry_still_reads(self, registry):
        registry.seal()
        assert registry.sealed
        assert registry.get_schema("Article").table_name == "articles"


# ============================================================================
# MANIFEST LOADING
# ============================================================================

class TestManifestLoading:

    def test_load_manifest_map_form(self, manifest_data):
        registry = ObjectRegistry()
        count = registry.load_manifest(manifest_data)

        assert count == 3
        assert registry.class_names == ["Article", "Category", "Tag"]

    def test_load_manifest_list_form(self):
        registry = ObjectRegistry()
        registry.load_manifest([ARTICLE, CATEGORY])
        assert len(registry) == 2

    def test_from_json_file(self, tmp_path, manifest_data):
        path = tmp_path / "objects.json"
        path.write_text(json.dumps(manifest_data))

        registry = ObjectRegistry.from_file(path, seal=True)
        assert registry.sealed
        assert "Category" in registry

    def test_from_yaml_file(self, tmp_path, manifest_data):
        path = tmp_path / "objects.yaml"
        path.write_text(yaml.safe_dump(manifest_data))

        registry = ObjectRegistry.from_file(path)
        assert registry.get_fields("Category")["name"].required is True

    def test_empty_yaml_file_raises(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        with pytest.raises(ConfigurationError):
            ObjectRegistry.from_file(path)

    def test_lazy_manifest_loaded_on_first_read(self, tmp_path, manifest_data):
        path = tmp_path / "objects.json"
        path.write_text(json.dumps(manifest_data))

        registry = ObjectRegistry(manifest_path=path)
        assert registry._definitions == {}
        assert registry.has_class("Article")


# ============================================================================
# INTROSPECTION
# ============================================================================

class TestRegisterClass:

    def test_field_helper_declarations(self):
        class Note:
            title = fields.text(required=True, max_length=80)
            pinned = fields.boolean(default=False)
            folder = fields.foreign_key("folders")

        registry = ObjectRegistry()
        registry.register_class(Note)

        note_fields = registry.get_fields("Note")
        assert list(note_fields) == ["title", "pinned", "folder"]
        assert note_fields["title"].max_length == 80
        assert note_fields["folder"].field_type == FieldType.FOREIGN_KEY

    def test_pydantic_model_fields(self):
        class Product(BaseModel):
            name: str = Field(max_length=120)
            price: float = Field(default=0.0, ge=0)
            active: bool = True
            attributes: dict = Field(default_factory=dict)

        extracted = ObjectRegistry.extract_fields(Product)

        assert extracted["name"].required is True
        assert extracted["name"].max_length == 120
        assert extracted["price"].type == "decimal"
        assert extracted["price"].minimum == 0
        assert extracted["active"].default is True
        assert extracted["attributes"].type == "json"

    def test_primitive_class_attributes(self):
        class Settings:
            theme = "dark"
            retries = 3
            _private = "hidden"

            def helper(self):
                return None

        extracted = ObjectRegistry.extract_fields(Settings)
        assert list(extracted) == ["theme", "retries"]
        assert extracted["retries"].type == "integer"
        assert extracted["theme"].default == "dark"

    def test_register_class_config_passthrough(self):
        class Item:
            name = fields.text()

        registry = ObjectRegistry()
        definition = registry.register_class(Item, table_name="inventory_items")
        assert definition.resolved_table_name == "inventory_items"
        assert definition.extends is None


# ============================================================================
# RELATIONSHIPS
# ============================================================================

class TestRelationships:

    def test_relationships_in_field_order(self, registry):
        relationships = registry.get_relationships("Article")
        assert [(r.field_name, r.type) for r in relationships] == [
            ("category", RelationshipType.FOREIGN_KEY),
            ("tags", RelationshipType.MANY_TO_MANY),
        ]

    def test_foreign_key_target_resolved_from_table(self, registry):
        category = registry.get_relationship("Article", "category")
        assert category.target_class == "Category"
        assert category.target_column == "id"
        assert category.column_name == "category"

    def test_resolve_references(self, registry):
        assert registry.resolve_class_reference("Category") == "Category"
        assert registry.resolve_class_reference("categories.id") == "Category"
        assert registry.resolve_class_reference("unknown_table") is None
        assert registry.resolve_table_reference("Article") == "articles"
        assert registry.resolve_table_reference("Widget") == "widgets"

    def test_inverse_foreign_key(self, registry):
        inverse = registry.find_inverse_foreign_key("Category", "Article")
        assert inverse.source_class == "Article"
        assert inverse.field_name == "category"

    def test_inverse_relationships(self, registry):
        inverse = registry.get_inverse_relationships("Category")
        assert [(r.source_class, r.field_name) for r in inverse] == [("Article", "category")]


# ============================================================================
# DEPENDENCY ORDERING
# ============================================================================

class TestInitializationOrder:

    def test_dependencies_come_first(self, registry):
        order = registry.get_initialization_order()
        assert order.index("Category") < order.index("Article")
        assert sorted(order) == ["Article", "Category", "Tag"]

    def test_subset_pulls_in_dependencies(self, registry):
        assert registry.get_initialization_order(["Article"]) == ["Category", "Article"]

    def test_parent_class_is_a_dependency(self):
        registry = ObjectRegistry([
            {"className": "Event", "extends": "Content", "fields": {"starts": {"type": "datetime"}}},
            {"className": "Content", "extends": "BaseObject", "fields": {"title": {"type": "text"}}},
        ])
        assert registry.get_dependencies("Event") == ["Content"]
        assert registry.get_dependencies("Content") == []
        assert registry.get_initialization_order() == ["Content", "Event"]

    def test_self_reference_is_not_a_cycle(self):
        registry = ObjectRegistry([{
            "className": "Comment",
            "fields": {"parent": {"type": "foreignKey", "related": "comments.id"}},
        }])
        assert registry.get_initialization_order() == ["Comment"]

    def test_cycle_detected(self):
        registry = ObjectRegistry([
            {"className": "Author", "fields": {"latest": {"type": "foreignKey", "related": "Book"}}},
            {"className": "Book", "fields": {"author": {"type": "foreignKey", "related": "Author"}}},
        ])
        with pytest.raises(ConfigurationError) as exc:
            registry.get_initialization_order()
        assert exc.value.details["cycle"][0] == exc.value.details["cycle"][-1]

    def test_cycle_allowed_when_requested(self):
        registry = ObjectRegistry([
            {"className": "Author", "fields": {"latest": {"type": "foreignKey", "related": "Book"}}},
            {"className": "Book", "fields": {"author": {"type": "foreignKey", "related": "Author"}}},
        ])
        assert sorted(registry.get_initialization_order(allow_cycles=True)) == ["Author", "Book"]


# ============================================================================
# DERIVED ARTIFACTS
# ============================================================================

class TestDerivedArtifacts:

    def test_schema_cached_until_definition_changes(self, registry):
        assert registry.get_schema("Article") is registry.get_schema("Article")

    def test_schema_for_unregistered_class_raises(self, registry):
        with pytest.raises(SchemaGenerationError) as exc:
            registry.get_schema("Ghost")
        assert exc.value.class_name == "Ghost"

    def test_schema_ddl_text(self, registry):
        ddl = registry.get_schema_ddl("Tag")
        assert ddl.startswith('CREATE TABLE IF NOT EXISTS "tags"')

    def test_model_has_column_attributes(self, registry):
        model = registry.get_model("Article")

        assert issubclass(model, StoredObject)
        assert model.__class_name__ == "Article"
        assert {"title", "body", "slug", "price", "category", "metadata"} <= set(model.model_fields)
        assert "tags" not in model.model_fields

    def test_model_is_cached(self, registry):
        assert registry.get_model("Tag") is registry.get_model("Tag")

    def test_model_hydrates_row(self, registry):
        model = registry.get_model("Article")
        article = model.model_validate({"id": "a1", "title": "Hello", "price": 12.5})
        assert article.title == "Hello"
        assert article.body is None
        assert article.is_related_loaded("category") is False
