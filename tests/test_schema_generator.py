# ============================================================================
# SCHEMA GENERATOR TESTS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Tests - Definition to table synthesis
# PURPOSE: Columns, indexes, foreign keys, versions and sqlite DDL text
# CREATED: 19 OCT 2026
# ============================================================================
"""
Schema Generator Tests

Covers:
1. Base columns present exactly once
2. Type mapping and the non-null text rule
3. Unique indexes by convention and declaration
4. Foreign keys, FK indexes and dependencies
5. Version hash determinism
6. Error cases (zero fields, bad names)
7. sqlite DDL rendering end to end

Run with:
    pytest tests/test_schema_generator.py -v
"""

import pytest

from core.errors import SchemaGenerationError
from core.models.definitions import ObjectDefinition
from core.schema import SchemaGenerator, SchemaToSQL, compute_version


def _definition(fields, class_name="Article", **extra):
    return ObjectDefinition.model_validate({"className": class_name, "fields": fields, **extra})


@pytest.fixture
def generator():
    return SchemaGenerator()


# ============================================================================
# COLUMNS
# ============================================================================

class TestColumns:

    def test_base_columns_first(self, generator):
        schema = generator.generate_schema(_definition({"title": {"type": "text"}}))
        assert list(schema.columns)[:3] == ["id", "created_at", "updated_at"]
        assert schema.columns["id"].primary_key is True
        assert schema.columns["created_at"].default_expression == "CURRENT_TIMESTAMP"

    @pytest.mark.parametrize("redeclared", ["id", "created_at", "createdAt", "updated_at", "updatedAt"])
    def test_redeclared_base_column_appears_once(self, generator, redeclared):
        schema = generator.generate_schema(_definition({
            redeclared: {"type": "datetime"},
            "title": {"type": "text"},
        }))
        ddl = SchemaToSQL().render(schema)

        assert list(schema.columns) == ["id", "created_at", "updated_at", "title"]
        assert ddl.count('"created_at" DATETIME') == 1
        assert ddl.count('"updated_at" DATETIME') == 1

    def test_type_mapping(self, generator):
        schema = generator.generate_schema(_definition({
            "views": {"type": "integer"},
            "price": {"type": "decimal"},
            "active": {"type": "boolean"},
            "published_at": {"type": "datetime"},
            "metadata": {"type": "json"},
        }))
        types = {name: column.type for name, column in schema.columns.items()}
        assert types["views"] == "INTEGER"
        assert types["price"] == "REAL"
        assert types["active"] == "BOOLEAN"
        assert types["published_at"] == "DATETIME"
        assert types["metadata"] == "JSON"

    def test_unknown_type_falls_back_to_text(self, generator, caplog):
        schema = generator.generate_schema(_definition({"shape": {"type": "geometry"}}))
        assert schema.columns["shape"].type == "TEXT"
        assert "Unknown field type 'geometry'" in caplog.text

    def test_relationship_fields_have_no_column(self, generator):
        schema = generator.generate_schema(_definition({
            "title": {"type": "text"},
            "comments": {"type": "oneToMany", "related": "Comment"},
            "tags": {"type": "manyToMany", "related": "Tag"},
        }))
        assert "comments" not in schema.columns
        assert "tags" not in schema.columns

    def test_camel_case_field_becomes_snake_case_column(self, generator):
        schema = generator.generate_schema(_definition({"publishedAt": {"type": "datetime"}}))
        assert "published_at" in schema.columns

    def test_optional_text_is_not_null_with_empty_default(self, generator):
        schema = generator.generate_schema(_definition({"body": {"type": "text"}}))
        body = schema.columns["body"]
        assert body.not_null is True
        assert body.default_value == ""

    def test_required_text_has_no_default(self, generator):
        schema = generator.generate_schema(_definition({"title": {"type": "text", "required": True}}))
        title = schema.columns["title"]
        assert title.not_null is True
        assert title.default_value is None

    def test_optional_foreign_key_stays_nullable(self, generator):
        schema = generator.generate_schema(_definition({
            "category": {"type": "foreignKey", "related": "categories.id"},
        }))
        assert schema.columns["category"].not_null is False

    def test_optional_integer_stays_nullable(self, generator):
        schema = generator.generate_schema(_definition({"views": {"type": "integer"}}))
        assert schema.columns["views"].not_null is False


# ============================================================================
# INDEXES AND FOREIGN KEYS
# ============================================================================

class TestIndexesAndForeignKeys:

    def test_slug_and_email_unique_by_convention(self, generator):
        schema = generator.generate_schema(_definition({
            "slug": {"type": "text"},
            "email": {"type": "text"},
            "code": {"type": "text", "unique": True},
            "title": {"type": "text"},
        }))
        unique = [index.name for index in schema.indexes if index.unique]
        assert unique == [
            "idx_articles_slug_unique",
            "idx_articles_email_unique",
            "idx_articles_code_unique",
        ]

    def test_updated_at_index(self, generator):
        schema = generator.generate_schema(_definition({"title": {"type": "text"}}))
        assert [index.name for index in schema.indexes] == ["idx_articles_updated_at"]

    def test_foreign_key_constraint_index_and_dependency(self, generator):
        schema = generator.generate_schema(_definition({
            "category": {"type": "foreignKey", "related": "categories.id"},
        }))

        fk = schema.foreign_keys[0]
        assert (fk.column, fk.references_table, fk.references_column) == ("category", "categories", "id")
        assert fk.on_delete == "CASCADE"
        assert fk.on_update == "CASCADE"
        assert schema.indexes[0].name == "idx_articles_category"
        assert schema.dependencies == ["categories"]

    def test_foreign_key_to_class_name_resolves_table(self, generator):
        schema = generator.generate_schema(_definition({
            "author": {"type": "foreignKey", "related": "BlogAuthor"},
        }))
        assert schema.foreign_keys[0].references_table == "blog_authors"

    def test_extends_adds_parent_dependency(self, generator):
        schema = generator.generate_schema(_definition({"title": {"type": "text"}}, extends="Content"))
        assert schema.dependencies == ["contents"]
        assert schema.base_class == "Content"

    def test_base_object_parent_is_not_a_dependency(self, generator):
        schema = generator.generate_schema(_definition({"title": {"type": "text"}}, extends="BaseObject"))
        assert schema.dependencies == []

    def test_registry_resolver_used_for_targets(self, registry):
        schema = registry.get_schema("Article")
        assert schema.dependencies == ["categories"]


# ============================================================================
# VERSIONING
# ============================================================================

class TestVersion:

    def test_identical_definitions_identical_output(self, generator):
        fields = {"title": {"type": "text", "required": True}, "views": {"type": "integer"}}
        first = generator.generate_schema(_definition(fields))
        second = generator.generate_schema(_definition(dict(fields)))

        assert first.version == second.version
        assert SchemaToSQL().render(first) == SchemaToSQL().render(second)

    def test_version_is_eight_hex_chars(self, generator):
        version = generator.generate_schema(_definition({"title": {"type": "text"}})).version
        assert len(version) == 8
        int(version, 16)

    def test_field_change_changes_version(self):
        before = compute_version(_definition({"title": {"type": "text"}}))
        after = compute_version(_definition({"title": {"type": "text", "required": True}}))
        assert before != after

    def test_extends_change_changes_version(self):
        before = compute_version(_definition({"title": {"type": "text"}}))
        after = compute_version(_definition({"title": {"type": "text"}}, extends="Content"))
        assert before != after

    def test_methods_do_not_change_version(self):
        before = compute_version(_definition({"title": {"type": "text"}}))
        after = compute_version(_definition({"title": {"type": "text"}}, methods=[{"name": "publish"}]))
        assert before == after


# ============================================================================
# ERRORS AND METADATA
# ============================================================================

class TestErrorsAndMetadata:

    def test_zero_fields_raises(self, generator):
        with pytest.raises(SchemaGenerationError) as exc:
            generator.generate_schema(_definition({}, class_name="Empty"))
        assert exc.value.class_name == "Empty"

    def test_relationship_only_fields_raise(self, generator):
        with pytest.raises(SchemaGenerationError, match="no stored fields") as exc:
            generator.generate_schema(_definition(
                {
                    "comments": {"type": "oneToMany", "related": "Comment"},
                    "tags": {"type": "manyToMany", "related": "Tag"},
                },
                class_name="Hub",
            ))
        assert exc.value.class_name == "Hub"

    def test_invalid_field_name_raises(self, generator):
        with pytest.raises(SchemaGenerationError):
            generator.generate_schema(_definition({"bad name; drop": {"type": "text"}}))

    def test_invalid_table_override_raises(self, generator):
        with pytest.raises(SchemaGenerationError):
            generator.generate_schema(_definition({"title": {"type": "text"}}, tableName="bad-table"))

    def test_package_name_from_file_path(self, generator):
        schema = generator.generate_schema(_definition(
            {"title": {"type": "text"}},
            filePath="/repo/packages/blog/src/article.ts",
        ))
        assert schema.package_name == "blog"

    def test_package_name_defaults_to_unknown(self, generator):
        schema = generator.generate_schema(_definition({"title": {"type": "text"}}))
        assert schema.package_name == "unknown"


# ============================================================================
# SQLITE DDL
# ============================================================================

class TestSqliteDDL:

    def test_article_end_to_end(self, registry):
        ddl = registry.get_schema_ddl("Article")

        assert ddl.startswith('CREATE TABLE IF NOT EXISTS "articles" (')
        assert '"id" TEXT PRIMARY KEY' in ddl
        assert '"title" TEXT NOT NULL' in ddl
        assert '"body" TEXT NOT NULL DEFAULT \'\'' in ddl
        assert '"price" REAL' in ddl
        assert '"metadata" JSON' in ddl
        assert ddl.count('"created_at" DATETIME') == 1
        assert (
            'FOREIGN KEY ("category") REFERENCES "categories" ("id") '
            'ON DELETE CASCADE ON UPDATE CASCADE'
        ) in ddl
        assert 'CREATE INDEX IF NOT EXISTS "idx_articles_category" ON "articles" ("category")' in ddl
        assert 'CREATE UNIQUE INDEX IF NOT EXISTS "idx_articles_slug_unique" ON "articles" ("slug")' in ddl
        assert 'CREATE TRIGGER IF NOT EXISTS "trg_articles_updated_at" BEFORE UPDATE ON "articles"' in ddl
        assert '"tags"' not in ddl

    def test_statements_end_with_semicolons(self, registry):
        ddl = registry.get_schema_ddl("Tag")
        assert all(line.endswith(";") for line in ddl.splitlines())

    @pytest.mark.parametrize("field, expected", [
        ({"type": "boolean", "default": False}, '"flag" BOOLEAN DEFAULT FALSE'),
        ({"type": "boolean", "default": True}, '"flag" BOOLEAN DEFAULT TRUE'),
        ({"type": "integer", "default": 0}, '"flag" INTEGER DEFAULT 0'),
        ({"type": "text", "default": "draft"}, '"flag" TEXT DEFAULT \'draft\''),
        ({"type": "json", "default": {"a": 1}}, '"flag" JSON DEFAULT \'{"a":1}\''),
    ])
    def test_default_rendering(self, generator, field, expected):
        schema = generator.generate_schema(_definition({"flag": field}))
        assert expected in SchemaToSQL().render(schema)

    def test_timestamp_defaults_render_as_expression(self, registry):
        ddl = registry.get_schema_ddl("Tag")
        assert '"created_at" DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP' in ddl
        assert '"updated_at" DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP' in ddl

    def test_literal_default_is_escaped(self, generator):
        schema = generator.generate_schema(_definition({"note": {"type": "text", "default": "it's"}}))
        assert "DEFAULT 'it''s'" in SchemaToSQL().render(schema)
