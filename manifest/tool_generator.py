# ============================================================================
# AI TOOL GENERATOR
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Manifest - Function-calling tool descriptors
# PURPOSE: Method signatures -> {type:"function", function:{...}} entries
# CREATED: 19 OCT 2026
# EXPORTS: should_include_method, generate_tool_from_method, generate_tool_manifest
# DEPENDENCIES: pydantic (descriptor models)
# ============================================================================
"""
AI Tool Generator

Turns the method signatures recorded in object definitions into AI
function-calling tools. Inclusion is governed by an object's AiConfig:

    callable="all"            every public instance method
    callable="public-async"   public async instance methods only
    callable=[names]          explicit allow-list
    exclude=[names]           always wins

Usage:
    tools = generate_tool_manifest(definition.methods, definition.ai_config)
    [tool.to_manifest() for tool in tools]
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from core.contracts import CallableMode
from core.models.definitions import AiConfig, MethodDefinition
from core.models.descriptors import FunctionSpec, ToolDescriptor
from manifest.type_schema import convert_type_to_json_schema

logger = logging.getLogger(__name__)


def should_include_method(method: MethodDefinition, config: Optional[AiConfig]) -> bool:
    """
    Decide whether a method becomes an AI tool.

    Order: missing/disabled config, deny-list, visibility, static, then the
    callable policy.
    """
    if config is None or not config.enabled or not config.callable:
        return False
    if method.name in config.exclude:
        return False
    if not method.is_public or method.is_static:
        return False

    if config.callable == CallableMode.ALL:
        return True
    if config.callable == CallableMode.PUBLIC_ASYNC:
        return method.is_async
    if isinstance(config.callable, list):
        return method.name in config.callable
    return False


def build_parameters_schema(method: MethodDefinition) -> Dict[str, Any]:
    """JSON Schema object for a method's parameters."""
    properties: Dict[str, Any] = {}
    required: List[str] = []

    for param in method.parameters:
        schema = convert_type_to_json_schema(param.type)
        if param.has_default:
            schema["default"] = param.default
        if param.description:
            schema.setdefault("description", param.description)
        properties[param.name] = schema

        if not param.optional and not param.has_default:
            required.append(param.name)

    parameters: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        parameters["required"] = required
    return parameters


def generate_tool_from_method(method: MethodDefinition, config: Optional[AiConfig] = None) -> ToolDescriptor:
    """
    Build one tool descriptor.

    Description precedence: config override, method description, generic.
    """
    overrides = config.descriptions if config else {}
    description = (
        overrides.get(method.name)
        or method.description
        or f"Call the {method.name} method"
    )
    return ToolDescriptor(
        function=FunctionSpec(
            name=method.name,
            description=description,
            parameters=build_parameters_schema(method),
        )
    )


def generate_tool_manifest(
    methods: Iterable[MethodDefinition],
    config: Optional[AiConfig],
) -> List[ToolDescriptor]:
    """Tools for every method the config lets through, in declaration order."""
    tools = [
        generate_tool_from_method(method, config)
        for method in methods
        if should_include_method(method, config)
    ]
    logger.debug(f"Generated {len(tools)} AI tools")
    return tools


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "should_include_method",
    "build_parameters_schema",
    "generate_tool_from_method",
    "generate_tool_manifest",
]
