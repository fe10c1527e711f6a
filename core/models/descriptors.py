# ============================================================================
# SURFACE DESCRIPTOR MODELS
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Core model - Generated API and tool descriptors
# PURPOSE: Plain-data outputs consumed by external HTTP/MCP/CLI/AI servers
# CREATED: 19 OCT 2026
# EXPORTS: FunctionSpec, ToolDescriptor, EndpointDescriptor,
#          MCPToolDescriptor, CliCommandDescriptor
# DEPENDENCIES: pydantic
# ============================================================================
"""
Surface Descriptor Models

Descriptors are what the manifest generator emits. They carry no behaviour;
an external server performs the actual dispatch.

Tool manifest wire shape:
    {"type": "function", "function": {"name", "description", "parameters"}}
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from core.models.definitions import ManifestModel


class FunctionSpec(ManifestModel):
    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class ToolDescriptor(ManifestModel):
    """AI function-calling tool entry."""
    type: Literal["function"] = "function"
    function: FunctionSpec


class EndpointDescriptor(ManifestModel):
    """One REST endpoint: HTTP method and path template."""
    method: str
    path: str
    action: str
    description: str = ""
    parameters: List[str] = Field(default_factory=list)


class MCPToolDescriptor(ManifestModel):
    """One MCP tool: name plus JSON-Schema input."""
    tool_name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})
    action: Optional[str] = None


class CliCommandDescriptor(ManifestModel):
    """One CLI command: `{name}:{action}` with short aliases."""
    name: str
    action: str
    description: str = ""
    aliases: List[str] = Field(default_factory=list)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "FunctionSpec",
    "ToolDescriptor",
    "EndpointDescriptor",
    "MCPToolDescriptor",
    "CliCommandDescriptor",
]
