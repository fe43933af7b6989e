"""Tool lookup and execution."""

from typing import Any

from vibecode.tools.registry import ToolsRegistry
from vibecode.utils.logging import get_logger

logger = get_logger(__name__)


class UnknownToolError(KeyError):
    """Raised when the model asks for a tool that is not registered."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown tool {self.name}"


class ToolDispatcher:
    """Runs registered tools and turns their failures into text."""

    def __init__(self, registry: ToolsRegistry):
        self.registry = registry

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> str:
        """Validate ``arguments`` and run the named tool.

        Args:
            name: Registered tool name
            arguments: Parsed argument object from the tool call

        Returns:
            The tool's text result, or ``error: <message>`` if it failed

        Raises:
            UnknownToolError: If ``name`` is not registered
        """
        tool = self.registry.get_tool(name)
        if tool is None:
            logger.error(f"Unknown tool requested: {name}")
            raise UnknownToolError(name)

        logger.debug(f"Executing tool: {name} with input: {arguments}")
        try:
            params = tool.parse_input(arguments)
            result = await tool.handler(params)
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}")
            return f"error: {e}"

        logger.debug(f"Tool {name} succeeded: {result[:100]}...")
        return result
