# ============================================================================
# TYPE SCHEMA TESTS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Tests - Type string conversion
# PURPOSE: Declared parameter types to JSON Schema fragments
# CREATED: 19 OCT 2026
# ============================================================================
"""
Type Schema Tests

Covers:
1. Primitives and unconstrained types
2. Arrays (T[] and Array<T>), nested
3. Literal unions and general unions
4. Object-like types, Date, fallback description
5. Top-level splitting that respects brackets and quotes

Run with:
    pytest tests/test_type_schema.py -v
"""

import pytest

from manifest.type_schema import convert_type_to_json_schema, split_top_level


class TestConvertTypeToJsonSchema:

    @pytest.mark.parametrize("type_string, expected", [
        ("string", {"type": "string"}),
        ("number", {"type": "number"}),
        ("boolean", {"type": "boolean"}),
        ("integer", {"type": "integer"}),
        ("null", {"type": "null"}),
        ("  string  ", {"type": "string"}),
        ("any", {}),
        ("unknown", {}),
        ("", {}),
        (None, {}),
    ])
    def test_primitives(self, type_string, expected):
        assert convert_type_to_json_schema(type_string) == expected

    def test_array_suffix(self):
        assert convert_type_to_json_schema("number[]") == {"type": "array", "items": {"type": "number"}}

    def test_array_generic(self):
        assert convert_type_to_json_schema("Array<boolean>") == {"type": "array", "items": {"type": "boolean"}}

    def test_nested_arrays(self):
        assert convert_type_to_json_schema("string[][]") == {
            "type": "array",
            "items": {"type": "array", "items": {"type": "string"}},
        }

    def test_literal_union_is_enum(self):
        assert convert_type_to_json_schema("'web' | 'email' | \"sms\"") == {
            "type": "string",
            "enum": ["web", "email", "sms"],
        }

    def test_single_literal(self):
        assert convert_type_to_json_schema("'draft'") == {"type": "string", "enum": ["draft"]}

    def test_general_union_is_one_of(self):
        assert convert_type_to_json_schema("string | number") == {
            "oneOf": [{"type": "string"}, {"type": "number"}],
        }

    def test_union_inside_generic_not_split(self):
        assert convert_type_to_json_schema("Array<string | number>") == {
            "type": "array",
            "items": {"oneOf": [{"type": "string"}, {"type": "number"}]},
        }

    def test_parenthesized_union_array(self):
        assert convert_type_to_json_schema("(string | null)[]") == {
            "type": "array",
            "items": {"oneOf": [{"type": "string"}, {"type": "null"}]},
        }

    @pytest.mark.parametrize("type_string", [
        "object",
        "Object",
        "{ a: string }",
        "Record<string, number>",
        "Map<string, Widget>",
    ])
    def test_object_like(self, type_string):
        assert convert_type_to_json_schema(type_string) == {"type": "object"}

    def test_date(self):
        assert convert_type_to_json_schema("Date") == {"type": "string", "format": "date-time"}

    def test_unknown_type_described(self):
        assert convert_type_to_json_schema("Widget") == {"type": "string", "description": "type: Widget"}

    def test_literal_containing_separator(self):
        assert convert_type_to_json_schema("'a|b' | 'c'") == {"type": "string", "enum": ["a|b", "c"]}


class TestSplitTopLevel:

    def test_respects_brackets(self):
        assert split_top_level("A | Array<B | C> | { x: D | E }") == ["A", "Array<B | C>", "{ x: D | E }"]

    def test_single_part(self):
        assert split_top_level("string") == ["string"]

    def test_custom_separator(self):
        assert split_top_level("a, Map<b, c>", separator=",") == ["a", "Map<b, c>"]
