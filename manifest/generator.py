# ============================================================================
# MANIFEST GENERATOR
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Manifest - Registry-wide surface manifest
# PURPOSE: Collect tools, endpoints and commands for every registered object
# CREATED: 19 OCT 2026
# EXPORTS: ManifestGenerator
# DEPENDENCIES: pydantic
# ============================================================================
"""
Manifest Generator

Walks the registry in registration order and assembles every generated
surface into one JSON-ready document:

    {
        "version": "1",
        "tools": [...],            AI function-calling tools
        "endpoints": [...],        REST {method, path, action}
        "mcpTools": [...],         MCP {toolName, inputSchema}
        "cliCommands": [...],      CLI {name, aliases}
    }

Output is deterministic for a given registry.

Usage:
    generator = ManifestGenerator(registry, base_path="/api/v1")
    print(generator.to_json())
"""

import json
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from __version__ import MANIFEST_FORMAT_VERSION
from core.config.defaults import get_defaults
from core.models.descriptors import CliCommandDescriptor, EndpointDescriptor, MCPToolDescriptor, ToolDescriptor
from manifest.endpoints import generate_cli_commands, generate_mcp_tools, generate_rest_endpoints
from manifest.tool_generator import generate_tool_manifest

if TYPE_CHECKING:
    from registry.object_registry import ObjectRegistry

logger = logging.getLogger(__name__)


class ManifestGenerator:
    """Registry-wide surface descriptors."""

    def __init__(self, registry: "ObjectRegistry", base_path: Optional[str] = None):
        self.registry = registry
        self.base_path = base_path if base_path is not None else get_defaults().manifest.api_base_path

    def _definitions(self):
        return [self.registry.require_definition(name) for name in self.registry.class_names]

    def tool_manifest(self) -> List[ToolDescriptor]:
        tools: List[ToolDescriptor] = []
        for definition in self._definitions():
            tools.extend(generate_tool_manifest(definition.methods, definition.ai_config))
        return tools

    def rest_endpoints(self) -> List[EndpointDescriptor]:
        endpoints: List[EndpointDescriptor] = []
        for definition in self._definitions():
            endpoints.extend(generate_rest_endpoints(definition, self.base_path))
        return endpoints

    def mcp_tools(self) -> List[MCPToolDescriptor]:
        tools: List[MCPToolDescriptor] = []
        for definition in self._definitions():
            tools.extend(generate_mcp_tools(definition))
        return tools

    def cli_commands(self) -> List[CliCommandDescriptor]:
        commands: List[CliCommandDescriptor] = []
        for definition in self._definitions():
            commands.extend(generate_cli_commands(definition))
        return commands

    def build(self) -> Dict[str, Any]:
        """Complete manifest as plain data (camelCase keys)."""
        manifest = {
            "version": MANIFEST_FORMAT_VERSION,
            "tools": [t.to_manifest() for t in self.tool_manifest()],
            "endpoints": [e.to_manifest() for e in self.rest_endpoints()],
            "mcpTools": [t.to_manifest() for t in self.mcp_tools()],
            "cliCommands": [c.to_manifest() for c in self.cli_commands()],
        }
        logger.info(
            f"Built manifest: {len(manifest['tools'])} tools, {len(manifest['endpoints'])} endpoints, "
            f"{len(manifest['mcpTools'])} MCP tools, {len(manifest['cliCommands'])} CLI commands"
        )
        return manifest

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.build(), indent=indent)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["ManifestGenerator"]
