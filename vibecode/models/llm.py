"""LLM-related data models: messages, tool calls and streaming events."""

import json
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel


class MalformedToolCallError(ValueError):
    """Raised when an assembled tool call's arguments are not a JSON object."""


class ToolCall(BaseModel):
    """A completed tool call requested by the model.

    ``arguments`` keeps the raw JSON text exactly as streamed so it can be
    echoed back to the model in the assistant message.
    """

    id: str
    name: str
    arguments: str = ""

    def parse_arguments(self) -> dict[str, Any]:
        """Parse the arguments buffer into an argument object.

        An empty buffer means no arguments.

        Raises:
            MalformedToolCallError: If the buffer is not a single JSON object
        """
        if not self.arguments.strip():
            return {}

        try:
            parsed = json.loads(self.arguments)
        except json.JSONDecodeError as e:
            raise MalformedToolCallError(f"malformed arguments for {self.name}: {e.msg}") from e

        if not isinstance(parsed, dict):
            raise MalformedToolCallError(f"malformed arguments for {self.name}: expected a JSON object")

        return parsed

    def to_wire(self) -> dict[str, Any]:
        """Convert to the chat-completions ``tool_calls`` entry format."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


class Message(BaseModel):
    """A message in the conversation."""

    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None
    name: str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Convert to the chat-completions message format."""
        wire: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            wire["tool_calls"] = [tool_call.to_wire() for tool_call in self.tool_calls]
        if self.role == "tool":
            wire["tool_call_id"] = self.tool_call_id
            wire["name"] = self.name
        return wire


@dataclass
class ToolInvocation:
    """A tool call whose arguments parsed successfully."""

    id: str
    name: str
    arguments: dict[str, Any]


@dataclass(frozen=True)
class ContentDelta:
    """A fragment of assistant text."""

    text: str


@dataclass(frozen=True)
class ToolCallDelta:
    """A fragment of a tool call at a given position in the turn."""

    index: int
    id: str | None = None
    name: str = ""
    arguments: str = ""


StreamEvent = ContentDelta | ToolCallDelta


@dataclass
class ToolCallFragment:
    """Mutable accumulator for one tool call while it streams in."""

    index: int
    id: str | None = None
    name: str = ""
    arguments: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.id or self.name or self.arguments)


@dataclass
class CompletedTurn:
    """Everything one streamed model response produced."""

    text: str
    tool_calls: list[ToolCall]
