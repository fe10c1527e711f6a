# ============================================================================
# MANIFEST MODULE
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Manifest - Tool and endpoint descriptor generation
# PURPOSE: Object definitions -> AI tools, REST, MCP and CLI descriptors
# CREATED: 19 OCT 2026
# ============================================================================
"""
Manifest module for objectforge.

Provides:
- convert_type_to_json_schema: parameter type strings -> JSON Schema
- generate_tool_manifest: method signatures -> AI function-calling tools
- generate_rest_endpoints / generate_mcp_tools / generate_cli_commands
- ManifestGenerator: all of the above for a whole registry

Usage:
    from manifest import ManifestGenerator

    print(ManifestGenerator(registry).to_json())
"""

from manifest.type_schema import convert_type_to_json_schema
from manifest.tool_generator import (
    should_include_method,
    generate_tool_from_method,
    generate_tool_manifest,
)
from manifest.endpoints import (
    field_to_json_schema,
    generate_rest_endpoints,
    generate_mcp_tools,
    generate_cli_commands,
)
from manifest.generator import ManifestGenerator

__all__ = [
    'convert_type_to_json_schema',
    'should_include_method',
    'generate_tool_from_method',
    'generate_tool_manifest',
    'field_to_json_schema',
    'generate_rest_endpoints',
    'generate_mcp_tools',
    'generate_cli_commands',
    'ManifestGenerator',
]
