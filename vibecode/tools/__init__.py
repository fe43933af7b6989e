"""Tools the model can call."""

from vibecode.tools.base import ToolDefinition, ToolError, ToolParameter
from vibecode.tools.dispatcher import ToolDispatcher, UnknownToolError
from vibecode.tools.registry import ToolsRegistry, create_default_registry

__all__ = [
    "ToolDefinition",
    "ToolDispatcher",
    "ToolError",
    "ToolParameter",
    "ToolsRegistry",
    "UnknownToolError",
    "create_default_registry",
]
