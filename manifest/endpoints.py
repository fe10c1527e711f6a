# ============================================================================
# SURFACE ENDPOINT GENERATOR
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Manifest - REST, MCP and CLI descriptors per object
# PURPOSE: Deterministic CRUD surface descriptors from object definitions
# CREATED: 19 OCT 2026
# EXPORTS: generate_rest_endpoints, generate_mcp_tools, generate_cli_commands,
#          field_to_json_schema, surface_actions
# DEPENDENCIES: pydantic (descriptor models)
# ============================================================================
"""
Surface Endpoint Generator

Every object gets the same CRUD vocabulary on each surface, filtered by
that surface's SurfaceConfig (include-list first, exclude always wins):

    action   REST                        MCP                 CLI
    list     GET    /{collection}        list_{collection}   {name}:list    (ls)
    get      GET    /{collection}/:id    get_{name}          {name}:get     (show)
    create   POST   /{collection}        create_{name}       {name}:create  (new)
    update   PUT    /{collection}/:id    update_{name}       {name}:update  (edit)
    delete   DELETE /{collection}/:id    delete_{name}       {name}:delete  (rm)

`collection` is the table name, `name` the snake_case class name. Included
actions that are not CRUD but match a declared method become custom
actions: POST /{collection}/:id/{action}, {action}_{name}, {name}:{action}.

Descriptors are plain data; an external server does the dispatch.
"""

import logging
from typing import Any, Dict, List, Tuple

from core.contracts import CRUD_ACTIONS, CrudAction, FieldType
from core.models.definitions import FieldDefinition, MethodDefinition, ObjectDefinition, SurfaceConfig
from core.models.descriptors import CliCommandDescriptor, EndpointDescriptor, MCPToolDescriptor
from core.naming import singular_name
from manifest.tool_generator import build_parameters_schema

logger = logging.getLogger(__name__)

# CRUD action -> (HTTP method, path suffix)
_REST_ROUTES = {
    CrudAction.LIST: ("GET", ""),
    CrudAction.GET: ("GET", "/:id"),
    CrudAction.CREATE: ("POST", ""),
    CrudAction.UPDATE: ("PUT", "/:id"),
    CrudAction.DELETE: ("DELETE", "/:id"),
}

CLI_ALIASES = {
    CrudAction.LIST: ["ls"],
    CrudAction.GET: ["show"],
    CrudAction.CREATE: ["new"],
    CrudAction.UPDATE: ["edit"],
    CrudAction.DELETE: ["rm"],
}

_ID_SCHEMA = {"type": "string", "description": "Object id"}


# ============================================================================
# ACTION SELECTION
# ============================================================================

def surface_actions(
    definition: ObjectDefinition,
    config: SurfaceConfig,
) -> Tuple[List[CrudAction], List[MethodDefinition]]:
    """
    Actions a surface exposes for one object.

    Returns:
        (CRUD actions in canonical order, custom method actions in include order)
    """
    if not config.enabled:
        return [], []

    crud = [action for action in CRUD_ACTIONS if config.allows(action.value)]

    custom: List[MethodDefinition] = []
    crud_names = {action.value for action in CRUD_ACTIONS}
    for name in config.include or []:
        if name in crud_names or not config.allows(name):
            continue
        method = definition.get_method(name)
        if method is None:
            logger.warning(f"{definition.class_name}: included action '{name}' has no matching method")
            continue
        custom.append(method)

    return crud, custom


# ============================================================================
# FIELD SCHEMAS
# ============================================================================

def field_to_json_schema(field: FieldDefinition) -> Dict[str, Any]:
    """JSON Schema for one column field, limits and default included."""
    kind = field.field_type
    if kind == FieldType.INTEGER:
        schema: Dict[str, Any] = {"type": "integer"}
    elif kind == FieldType.DECIMAL:
        schema = {"type": "number"}
    elif kind == FieldType.BOOLEAN:
        schema = {"type": "boolean"}
    elif kind == FieldType.DATETIME:
        schema = {"type": "string", "format": "date-time"}
    elif kind == FieldType.JSON:
        schema = {}
    else:
        schema = {"type": "string"}

    if field.minimum is not None:
        schema["minimum"] = field.minimum
    if field.maximum is not None:
        schema["maximum"] = field.maximum
    if field.min_length is not None:
        schema["minLength"] = field.min_length
    if field.max_length is not None:
        schema["maxLength"] = field.max_length
    if field.default is not None:
        schema["default"] = field.default

    if field.description:
        schema["description"] = field.description
    elif kind == FieldType.FOREIGN_KEY and field.related:
        schema["description"] = f"Id of the related {field.related_target()[0]}"
    return schema


def _field_properties(definition: ObjectDefinition) -> Dict[str, Any]:
    return {
        name: field_to_json_schema(field)
        for name, field in definition.fields.items()
        if not field.is_virtual
    }


def _required_fields(definition: ObjectDefinition) -> List[str]:
    return [
        name for name, field in definition.fields.items()
        if field.required and field.default is None and not field.is_virtual
    ]


# ============================================================================
# REST
# ============================================================================

def generate_rest_endpoints(definition: ObjectDefinition, base_path: str = "") -> List[EndpointDescriptor]:
    """REST endpoint descriptors for one object."""
    collection = definition.resolved_table_name
    root = f"{base_path.rstrip('/')}/{collection}"
    crud, custom = surface_actions(definition, definition.api_config)

    endpoints = []
    for action in crud:
        method, suffix = _REST_ROUTES[action]
        endpoints.append(EndpointDescriptor(
            method=method,
            path=root + suffix,
            action=action.value,
            description=_crud_description(action, definition),
            parameters=["id"] if suffix else [],
        ))
    for method in custom:
        endpoints.append(EndpointDescriptor(
            method="POST",
            path=f"{root}/:id/{method.name}",
            action=method.name,
            description=method.description or f"Call {method.name} on a {definition.class_name}",
            parameters=["id"],
        ))
    return endpoints


# ============================================================================
# MCP
# ============================================================================

def _mcp_input_schema(action: CrudAction, definition: ObjectDefinition) -> Dict[str, Any]:
    if action == CrudAction.LIST:
        return {
            "type": "object",
            "properties": {
                "where": {"type": "object", "description": "Filter, e.g. {\"price >\": 100}"},
                "limit": {"type": "integer", "minimum": 0},
                "offset": {"type": "integer", "minimum": 0},
                "orderBy": {"oneOf": [{"type": "string"}, {"type": "array", "items": {"type": "string"}}]},
                "include": {"type": "array", "items": {"type": "string"}},
            },
        }
    if action in (CrudAction.GET, CrudAction.DELETE):
        return {"type": "object", "properties": {"id": dict(_ID_SCHEMA)}, "required": ["id"]}
    if action == CrudAction.CREATE:
        schema: Dict[str, Any] = {"type": "object", "properties": _field_properties(definition)}
        required = _required_fields(definition)
        if required:
            schema["required"] = required
        return schema
    # update: id plus any subset of fields
    return {
        "type": "object",
        "properties": {"id": dict(_ID_SCHEMA), **_field_properties(definition)},
        "required": ["id"],
    }


def generate_mcp_tools(definition: ObjectDefinition) -> List[MCPToolDescriptor]:
    """MCP tool descriptors for one object."""
    collection = definition.resolved_table_name
    name = singular_name(definition.class_name)
    crud, custom = surface_actions(definition, definition.mcp_config)

    tools = []
    for action in crud:
        tool_name = f"list_{collection}" if action == CrudAction.LIST else f"{action.value}_{name}"
        tools.append(MCPToolDescriptor(
            tool_name=tool_name,
            description=_crud_description(action, definition),
            input_schema=_mcp_input_schema(action, definition),
            action=action.value,
        ))
    for method in custom:
        parameters = build_parameters_schema(method)
        parameters["properties"] = {"id": dict(_ID_SCHEMA), **parameters["properties"]}
        parameters["required"] = ["id", *parameters.get("required", [])]
        tools.append(MCPToolDescriptor(
            tool_name=f"{method.name}_{name}",
            description=method.description or f"Call {method.name} on a {definition.class_name}",
            input_schema=parameters,
            action=method.name,
        ))
    return tools


# ============================================================================
# CLI
# ============================================================================

def generate_cli_commands(definition: ObjectDefinition) -> List[CliCommandDescriptor]:
    """CLI command descriptors for one object."""
    name = singular_name(definition.class_name)
    crud, custom = surface_actions(definition, definition.cli_config)

    commands = [
        CliCommandDescriptor(
            name=f"{name}:{action.value}",
            action=action.value,
            description=_crud_description(action, definition),
            aliases=[f"{name}:{alias}" for alias in CLI_ALIASES[action]],
        )
        for action in crud
    ]
    commands.extend(
        CliCommandDescriptor(
            name=f"{name}:{method.name}",
            action=method.name,
            description=method.description or "",
        )
        for method in custom
    )
    return commands


def _crud_description(action: CrudAction, definition: ObjectDefinition) -> str:
    collection = definition.resolved_table_name
    class_name = definition.class_name
    return {
        CrudAction.LIST: f"List {collection}",
        CrudAction.GET: f"Get a {class_name} by id",
        CrudAction.CREATE: f"Create a {class_name}",
        CrudAction.UPDATE: f"Update a {class_name}",
        CrudAction.DELETE: f"Delete a {class_name}",
    }[action]


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CLI_ALIASES",
    "surface_actions",
    "field_to_json_schema",
    "generate_rest_endpoints",
    "generate_mcp_tools",
    "generate_cli_commands",
]
