"""Tests for the tool registry and dispatcher."""

import pytest
from pydantic import BaseModel, Field

from vibecode.tools import (
    ToolDefinition,
    ToolDispatcher,
    ToolError,
    ToolParameter,
    ToolsRegistry,
    UnknownToolError,
    create_default_registry,
)


class EchoInput(BaseModel):
    text: str = Field(..., description="Text to echo")
    times: int | None = Field(None, description="Repeat count")


async def echo_handler(params: EchoInput) -> str:
    return params.text * (params.times or 1)


async def failing_handler(params: EchoInput) -> str:
    raise ToolError("boom")


async def crashing_handler(params: EchoInput) -> str:
    raise RuntimeError("unexpected")


def make_tool(name: str = "echo", handler=echo_handler) -> ToolDefinition:
    return ToolDefinition(name=name, description="Echo text", input_schema_class=EchoInput, handler=handler)


class TestToolDefinition:
    """Tests for deriving parameter declarations and schemas."""

    def test_parameters_from_input_model(self):
        """Test parameter types and optionality come from the input model."""
        assert make_tool().parameters == {
            "text": ToolParameter(type="string", optional=False, description="Text to echo"),
            "times": ToolParameter(type="number", optional=True, description="Repeat count"),
        }

    def test_json_schema(self):
        """Test the function schema sent to the model."""
        assert make_tool().get_json_schema() == {
            "type": "function",
            "function": {
                "name": "echo",
                "description": "Echo text",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "text": {"type": "string", "description": "Text to echo"},
                        "times": {"type": "integer", "description": "Repeat count"},
                    },
                    "required": ["text"],
                },
            },
        }

    def test_unsupported_parameter_type(self):
        """Test parameters other than string, number or boolean are rejected."""

        class ListInput(BaseModel):
            items: list[str]

        tool = ToolDefinition(name="bad", description="", input_schema_class=ListInput, handler=echo_handler)
        with pytest.raises(TypeError):
            tool.get_json_schema()


class TestToolsRegistry:
    """Tests for the registry."""

    def test_default_registry_tools(self):
        """Test every standard tool is registered, in order."""
        registry = create_default_registry()
        assert registry.get_tool_names() == ["read", "write", "edit", "glob", "grep", "bash", "diff", "undo"]
        assert len(registry) == 8
        assert "grep" in registry
        assert "search" not in registry

    def test_default_schema(self):
        """Test the schema declares types and required parameters."""
        schema = {
            entry["function"]["name"]: entry["function"]["parameters"]
            for entry in create_default_registry().get_schema()
        }

        assert schema["read"]["properties"]["offset"]["type"] == "integer"
        assert schema["read"]["required"] == ["path"]
        assert schema["edit"]["properties"]["all"]["type"] == "boolean"
        assert schema["edit"]["required"] == ["path", "old", "new"]
        assert schema["glob"]["required"] == ["pat"]
        assert schema["bash"]["required"] == ["cmd"]
        assert schema["diff"]["required"] == []
        assert schema["undo"]["required"] == ["path"]

    def test_schema_is_stable(self):
        """Test serializing twice gives the same result."""
        registry = create_default_registry()
        assert registry.get_schema() == registry.get_schema()

    def test_duplicate_names_rejected(self):
        """Test two tools with one name cannot be registered."""
        with pytest.raises(ValueError, match="Duplicate tool name: echo"):
            ToolsRegistry([make_tool(), make_tool()])

    def test_get_unknown_tool(self):
        """Test looking up a missing tool returns None."""
        assert ToolsRegistry([make_tool()]).get_tool("nope") is None


class TestToolDispatcher:
    """Tests for validating and running tool calls."""

    @pytest.fixture
    def dispatcher(self):
        """Dispatcher over a few test tools."""
        return ToolDispatcher(
            ToolsRegistry(
                [
                    make_tool(),
                    make_tool("fail", failing_handler),
                    make_tool("crash", crashing_handler),
                ]
            )
        )

    @pytest.mark.asyncio
    async def test_dispatch_success(self, dispatcher):
        """Test a valid call returns the handler's result."""
        assert await dispatcher.dispatch("echo", {"text": "ab", "times": 2}) == "abab"

    @pytest.mark.asyncio
    async def test_dispatch_unknown_tool(self, dispatcher):
        """Test an unregistered name raises."""
        with pytest.raises(UnknownToolError) as exc_info:
            await dispatcher.dispatch("rm", {})

        assert exc_info.value.name == "rm"
        assert str(exc_info.value) == "unknown tool rm"

    @pytest.mark.asyncio
    async def test_dispatch_missing_required_argument(self, dispatcher):
        """Test a validation failure becomes an error result."""
        result = await dispatcher.dispatch("echo", {})
        assert result.startswith("error: ")
        assert "text" in result

    @pytest.mark.asyncio
    async def test_dispatch_wrong_argument_type(self, dispatcher):
        """Test a mistyped argument becomes an error result."""
        result = await dispatcher.dispatch("echo", {"text": "a", "times": "many"})
        assert result.startswith("error: ")

    @pytest.mark.asyncio
    async def test_dispatch_tool_error(self, dispatcher):
        """Test a ToolError message is passed through."""
        assert await dispatcher.dispatch("fail", {"text": "a"}) == "error: boom"

    @pytest.mark.asyncio
    async def test_dispatch_unexpected_exception(self, dispatcher):
        """Test any other handler exception is also reported as text."""
        assert await dispatcher.dispatch("crash", {"text": "a"}) == "error: unexpected"

    @pytest.mark.asyncio
    async def test_dispatch_file_tool_error(self, tmp_path):
        """Test a missing file in a real tool becomes an error result."""
        dispatcher = ToolDispatcher(create_default_registry())
        result = await dispatcher.dispatch("read", {"path": str(tmp_path / "missing.txt")})
        assert result.startswith("error: ")
