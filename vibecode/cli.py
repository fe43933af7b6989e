"""Interactive terminal front end for the coding agent."""

import asyncio
import os

from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from vibecode.clients.chat_completions import ChatCompletionsClient
from vibecode.config import API_KEY_ENV, VibecodeConfig
from vibecode.models.llm import ToolCall, ToolInvocation
from vibecode.services.agent import AgentLoop, InputOutcome
from vibecode.tools.dispatcher import ToolDispatcher
from vibecode.tools.registry import ToolsRegistry, create_default_registry
from vibecode.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

ARG_PREVIEW_CHARS = 50
RESULT_PREVIEW_CHARS = 60


def preview_arguments(invocation: ToolInvocation) -> str:
    """Short preview of a call: its first argument value."""
    first = next(iter(invocation.arguments.values()), "")
    return str(first if first is not None else "")[:ARG_PREVIEW_CHARS]


def preview_result(result: str) -> str:
    """First line of a tool result, noting how much was left out."""
    lines = result.split("\n")
    preview = lines[0][:RESULT_PREVIEW_CHARS]
    if len(lines) > 1:
        preview += f" ... +{len(lines) - 1} lines"
    elif len(lines[0]) > RESULT_PREVIEW_CHARS:
        preview += "..."
    return preview


class ChatCLI:
    """Read-eval-print loop around the agent."""

    def __init__(
        self,
        config: VibecodeConfig | None = None,
        console: Console | None = None,
        client: ChatCompletionsClient | None = None,
        registry: ToolsRegistry | None = None,
    ):
        """Initialize chat CLI."""
        self.config = config or VibecodeConfig.from_env()
        self.console = console or Console()
        self.agent = AgentLoop(
            client or ChatCompletionsClient(self.config),
            ToolDispatcher(registry or create_default_registry()),
            on_content=self._show_content,
            on_tool_call=self._show_tool_call,
            on_tool_result=self._show_tool_result,
        )

    def start(self) -> None:
        """Start the interactive chat session."""
        self.console.print(
            Text.assemble(("vibecode", "bold"), (f" | {self.config.model} | {os.getcwd()}", "dim")),
        )
        if not self.config.api_key:
            self.console.print(f"[yellow]{API_KEY_ENV} is not set; requests will fail until it is.[/yellow]")
        self.console.print()

        try:
            while True:
                self.console.rule(style="dim")
                user_input = Prompt.ask("[bold blue]❯[/bold blue]", console=self.console)
                self.console.rule(style="dim")

                if asyncio.run(self.process(user_input)) is InputOutcome.QUIT:
                    break
        except (EOFError, KeyboardInterrupt):
            pass
        finally:
            self.console.print()

    async def process(self, user_input: str) -> InputOutcome | None:
        """Handle one line of input, reporting any failure instead of raising.

        Returns:
            The outcome, or None if the request failed
        """
        try:
            outcome = await self.agent.handle_input(user_input)
        except Exception as e:
            logger.debug(f"Request failed: {e}", exc_info=True)
            self.console.print()
            self.console.print(Text(f"⏺ Error: {e}", style="red"))
            return None

        if outcome is InputOutcome.CLEARED:
            self.console.print("[green]⏺ Cleared conversation[/green]")
        elif outcome is InputOutcome.ANSWERED:
            self.console.print()
        return outcome

    def _show_content(self, text: str) -> None:
        self.console.print(text, end="", markup=False, highlight=False, soft_wrap=True)

    def _show_tool_call(self, invocation: ToolInvocation) -> None:
        self.console.print()
        self.console.print(
            Text.assemble(
                ("⏺ ", "green"),
                (invocation.name.capitalize(), "green"),
                "(",
                (preview_arguments(invocation), "dim"),
                ")",
            )
        )

    def _show_tool_result(self, tool_call: ToolCall, result: str) -> None:
        self.console.print(Text(f"  ⎿  {preview_result(result)}", style="dim"))


def main() -> None:
    """Main entry point for the vibecode CLI."""
    setup_logging()
    ChatCLI().start()


if __name__ == "__main__":
    main()
