"""In-memory conversation state."""

from dataclasses import dataclass, field

from vibecode.models.llm import Message, ToolCall
from vibecode.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ConversationState:
    """Ordered message history for the current session.

    The list is what gets sent to the model on every request. It only grows,
    except for an explicit ``clear()``.
    """

    messages: list[Message] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.messages)

    def add_user_message(self, content: str) -> Message:
        """Append a user message."""
        message = Message(role="user", content=content)
        self.messages.append(message)
        return message

    def add_assistant_message(self, content: str, tool_calls: list[ToolCall] | None = None) -> Message:
        """Append an assistant message, with its tool calls if any."""
        message = Message(role="assistant", content=content, tool_calls=tool_calls or None)
        self.messages.append(message)
        return message

    def add_tool_result(self, tool_call: ToolCall, content: str) -> Message:
        """Append the result of a tool call, keyed to the call's id."""
        message = Message(role="tool", content=content, tool_call_id=tool_call.id, name=tool_call.name)
        self.messages.append(message)
        return message

    def clear(self) -> None:
        """Drop the whole history."""
        logger.info(f"Clearing conversation with {len(self.messages)} messages")
        self.messages.clear()
