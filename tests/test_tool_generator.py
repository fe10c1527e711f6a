# ============================================================================
# AI TOOL GENERATOR TESTS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Tests - Function-calling tool manifests
# PURPOSE: Method inclusion policy and parameter schemas
# CREATED: 19 OCT 2026
# ============================================================================
"""
AI Tool Generator Tests

Covers:
1. Inclusion policy (disabled, exclude, private, static, callable modes)
2. Parameter schemas (required, optional, defaults)
3. Description precedence
4. Wire shape of the tool descriptor

Run with:
    pytest tests/test_tool_generator.py -v
"""

import pytest

from core.models.definitions import AiConfig, MethodDefinition
from manifest.tool_generator import (
    build_parameters_schema,
    generate_tool_from_method,
    generate_tool_manifest,
    should_include_method,
)


def _method(**data):
    return MethodDefinition.model_validate({"name": "publish", **data})


class TestShouldIncludeMethod:

    def test_no_config_excludes(self):
        assert should_include_method(_method(), None) is False

    def test_disabled_config_excludes(self):
        assert should_include_method(_method(), AiConfig(enabled=False, callable="all")) is False

    def test_no_callable_policy_excludes(self):
        assert should_include_method(_method(), AiConfig()) is False

    def test_all_mode(self):
        assert should_include_method(_method(), AiConfig(callable="all")) is True

    @pytest.mark.parametrize("is_async, expected", [(True, True), (False, False)])
    def test_public_async_mode(self, is_async, expected):
        config = AiConfig(callable="public-async")
        assert should_include_method(_method(**{"async": is_async}), config) is expected

    def test_explicit_list(self):
        config = AiConfig(callable=["publish"])
        assert should_include_method(_method(), config) is True
        assert should_include_method(_method(name="archive"), config) is False

    def test_exclude_wins(self):
        config = AiConfig(callable="all", exclude=["publish"])
        assert should_include_method(_method(), config) is False

    def test_private_and_static_excluded(self):
        config = AiConfig(callable="all")
        assert should_include_method(_method(isPublic=False), config) is False
        assert should_include_method(_method(isStatic=True), config) is False


class TestParametersSchema:

    def test_required_and_optional(self):
        method = _method(parameters=[
            {"name": "channel", "type": "'web' | 'email'"},
            {"name": "notify", "type": "boolean", "optional": True, "default": False},
            {"name": "note", "type": "string", "optional": True},
        ])
        assert build_parameters_schema(method) == {
            "type": "object",
            "properties": {
                "channel": {"type": "string", "enum": ["web", "email"]},
                "notify": {"type": "boolean", "default": False},
                "note": {"type": "string"},
            },
            "required": ["channel"],
        }

    def test_default_makes_parameter_optional(self):
        method = _method(parameters=[{"name": "retries", "type": "number", "default": 3}])
        schema = build_parameters_schema(method)
        assert "required" not in schema
        assert schema["properties"]["retries"]["default"] == 3

    def test_no_parameters(self):
        assert build_parameters_schema(_method()) == {"type": "object", "properties": {}}

    def test_parameter_description(self):
        method = _method(parameters=[{"name": "when", "type": "Date", "description": "Publish time"}])
        assert build_parameters_schema(method)["properties"]["when"]["description"] == "Publish time"


class TestToolDescriptor:

    def test_wire_shape(self):
        tool = generate_tool_from_method(_method(description="Publish the article"))
        assert tool.to_manifest() == {
            "type": "function",
            "function": {
                "name": "publish",
                "description": "Publish the article",
                "parameters": {"type": "object", "properties": {}},
            },
        }

    def test_description_override(self):
        config = AiConfig(callable="all", descriptions={"publish": "Make it live"})
        tool = generate_tool_from_method(_method(description="Publish the article"), config)
        assert tool.function.description == "Make it live"

    def test_generic_description(self):
        assert generate_tool_from_method(_method()).function.description == "Call the publish method"

    def test_manifest_for_registered_class(self, registry):
        definition = registry.get_definition("Article")
        tools = generate_tool_manifest(definition.methods, definition.ai_config)

        assert [t.function.name for t in tools] == ["publish"]
        assert tools[0].function.parameters["required"] == ["channel"]
