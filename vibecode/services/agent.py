"""Agent loop: alternate model completions with local tool execution."""

import os
from collections.abc import Callable
from enum import StrEnum

from vibecode.clients.chat_completions import ChatCompletionsClient
from vibecode.models.conversation import ConversationState
from vibecode.models.llm import CompletedTurn, MalformedToolCallError, Message, ToolCall, ToolInvocation
from vibecode.services.streaming import collect_turn, decode_stream
from vibecode.tools.dispatcher import ToolDispatcher, UnknownToolError
from vibecode.utils.logging import get_logger

logger = get_logger(__name__)

CLEAR_COMMANDS = frozenset({"/clear"})
QUIT_COMMANDS = frozenset({"/quit", "exit"})


class AgentState(StrEnum):
    """Where the loop currently is within a user request."""

    AWAITING_INPUT = "awaiting_input"
    REQUESTING_COMPLETION = "requesting_completion"
    STREAMING_RESPONSE = "streaming_response"
    EXECUTING_TOOLS = "executing_tools"


class InputOutcome(StrEnum):
    """What ``AgentLoop.handle_input`` did with a line of input."""

    IGNORED = "ignored"
    CLEARED = "cleared"
    QUIT = "quit"
    ANSWERED = "answered"


def get_system_prompt(cwd: str | None = None) -> str:
    """Generate the system prompt for the current working directory."""
    return f"Concise coding assistant. cwd: {cwd or os.getcwd()}"


class AgentLoop:
    """Runs user requests to completion, executing tool calls along the way.

    The loop owns the conversation state. Each model response is appended as
    one assistant message, followed by one tool message per tool call, in the
    order the calls were received.
    """

    def __init__(
        self,
        client: ChatCompletionsClient,
        dispatcher: ToolDispatcher,
        conversation: ConversationState | None = None,
        system_prompt: str | None = None,
        on_content: Callable[[str], None] | None = None,
        on_tool_call: Callable[[ToolInvocation], None] | None = None,
        on_tool_result: Callable[[ToolCall, str], None] | None = None,
    ):
        """Initialize the agent loop.

        Args:
            client: Completion client used for every request
            dispatcher: Executes the tools the model asks for
            conversation: History to continue (defaults to a fresh one)
            system_prompt: Prepended to every request (defaults to get_system_prompt())
            on_content: Receives assistant text fragments as they stream in
            on_tool_call: Called with each parsed invocation before it runs
            on_tool_result: Called with each tool call's text result
        """
        self.client = client
        self.dispatcher = dispatcher
        self.conversation = conversation if conversation is not None else ConversationState()
        self.system_prompt = system_prompt or get_system_prompt()
        self.on_content = on_content
        self.on_tool_call = on_tool_call
        self.on_tool_result = on_tool_result
        self.state = AgentState.AWAITING_INPUT

    async def handle_input(self, text: str) -> InputOutcome:
        """Interpret one line of user input.

        Control commands are handled here; anything else is sent to the model.
        """
        command = text.strip()
        if not command:
            return InputOutcome.IGNORED

        if command in QUIT_COMMANDS:
            return InputOutcome.QUIT

        if command in CLEAR_COMMANDS:
            self.conversation.clear()
            return InputOutcome.CLEARED

        await self.run(command)
        return InputOutcome.ANSWERED

    async def run(self, user_input: str) -> str:
        """Answer a user message, looping while the model requests tools.

        Returns:
            Text of the final assistant turn (the one without tool calls)
        """
        self.conversation.add_user_message(user_input)
        rounds = 0

        try:
            while True:
                rounds += 1
                logger.debug(f"Agent loop round {rounds}")

                turn = await self._request_completion()
                if not turn.tool_calls:
                    logger.info(f"Agent loop completed in {rounds} round(s)")
                    return turn.text

                logger.info(f"Model requested {len(turn.tool_calls)} tool call(s)")
                await self._execute_tools(turn.tool_calls)
        finally:
            self.state = AgentState.AWAITING_INPUT

    async def _request_completion(self) -> CompletedTurn:
        self.state = AgentState.REQUESTING_COMPLETION
        messages = [Message(role="system", content=self.system_prompt), *self.conversation.messages]
        lines = self.client.stream_lines(messages, self.dispatcher.registry.get_schema())

        self.state = AgentState.STREAMING_RESPONSE
        turn = await collect_turn(decode_stream(lines), self.on_content)

        self.conversation.add_assistant_message(turn.text, turn.tool_calls)
        return turn

    async def _execute_tools(self, tool_calls: list[ToolCall]) -> None:
        self.state = AgentState.EXECUTING_TOOLS
        for tool_call in tool_calls:
            result = await self._run_tool_call(tool_call)
            self.conversation.add_tool_result(tool_call, result)

    async def _run_tool_call(self, tool_call: ToolCall) -> str:
        """Run one tool call; malformed or unknown calls become error results."""
        try:
            arguments = tool_call.parse_arguments()
        except MalformedToolCallError as e:
            logger.warning(f"Tool call {tool_call.id} has malformed arguments: {tool_call.arguments!r}")
            result = f"error: {e}"
        else:
            invocation = ToolInvocation(id=tool_call.id, name=tool_call.name, arguments=arguments)
            if self.on_tool_call:
                self.on_tool_call(invocation)
            try:
                result = await self.dispatcher.dispatch(invocation.name, invocation.arguments)
            except UnknownToolError as e:
                result = f"error: {e}"

        if self.on_tool_result:
            self.on_tool_result(tool_call, result)
        return result
