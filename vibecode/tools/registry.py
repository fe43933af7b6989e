"""Tools registry for the coding agent."""

from collections.abc import Iterable, Iterator
from types import MappingProxyType
from typing import Any

from vibecode.tools.base import ToolDefinition
from vibecode.tools.filesystem import create_edit_tool, create_read_tool, create_write_tool
from vibecode.tools.search import create_glob_tool, create_grep_tool
from vibecode.tools.shell import create_bash_tool, create_diff_tool, create_undo_tool


class ToolsRegistry:
    """Immutable set of tools, keyed by name, in registration order."""

    def __init__(self, tools: Iterable[ToolDefinition]):
        """Initialize the registry.

        Args:
            tools: Tool definitions; names must be unique

        Raises:
            ValueError: If two tools share a name
        """
        registered: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in registered:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            registered[tool.name] = tool
        self._tools = MappingProxyType(registered)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def get_tool(self, name: str) -> ToolDefinition | None:
        """Look up a tool by name."""
        return self._tools.get(name)

    def get_tool_names(self) -> list[str]:
        """Get list of all registered tool names."""
        return list(self._tools.keys())

    def get_schema(self) -> list[dict[str, Any]]:
        """Serialize every tool into the request-time ``tools`` array."""
        return [tool.get_json_schema() for tool in self._tools.values()]


def create_default_registry() -> ToolsRegistry:
    """Build the registry with the standard file, search and shell tools."""
    return ToolsRegistry(
        [
            create_read_tool(),
            create_write_tool(),
            create_edit_tool(),
            create_glob_tool(),
            create_grep_tool(),
            create_bash_tool(),
            create_diff_tool(),
            create_undo_tool(),
        ]
    )
