"""Streaming client for OpenAI-compatible chat-completions endpoints."""

from collections.abc import AsyncIterator
from typing import Any

import httpx

from vibecode.config import API_KEY_ENV, VibecodeConfig
from vibecode.models.llm import Message
from vibecode.utils.logging import get_logger

logger = get_logger(__name__)


class MissingAPIKeyError(ValueError):
    """Raised before any network call when no API key is configured."""


class ChatCompletionsError(Exception):
    """Non-200 response from the chat-completions endpoint."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ChatCompletionsClient:
    """Low-level client that streams raw SSE lines from the completion endpoint."""

    def __init__(self, config: VibecodeConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the client.

        Args:
            config: Client configuration (defaults to the environment)
            transport: Optional httpx transport, used to fake the server in tests
        """
        self.config = config or VibecodeConfig.from_env()
        self.transport = transport

    def build_request_body(self, messages: list[Message], tools: list[dict[str, Any]]) -> dict[str, Any]:
        """Assemble the JSON body for a streaming completion request."""
        return {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "messages": [message.to_wire() for message in messages],
            "tools": tools,
            "tool_choice": "auto",
            "stream": True,
        }

    async def stream_lines(self, messages: list[Message], tools: list[dict[str, Any]]) -> AsyncIterator[str]:
        """Send the conversation and yield the response body line by line.

        Args:
            messages: Full message history, system prompt first
            tools: Tool schema array from the registry

        Raises:
            MissingAPIKeyError: If no API key is configured (checked before connecting)
            ChatCompletionsError: If the server answers with a non-200 status
            httpx.HTTPError: On transport failures
        """
        if not self.config.api_key:
            raise MissingAPIKeyError(f"{API_KEY_ENV} is not set in environment")

        body = self.build_request_body(messages, tools)
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        timeout = httpx.Timeout(self.config.read_timeout, connect=self.config.connect_timeout)

        logger.debug(f"Requesting completion from {self.config.api_url} with {len(messages)} messages")

        async with httpx.AsyncClient(transport=self.transport, timeout=timeout) as client:
            async with client.stream("POST", self.config.api_url, json=body, headers=headers) as response:
                if response.status_code != 200:
                    error_body = (await response.aread()).decode("utf-8", errors="replace")
                    logger.error(f"Completion request failed: {response.status_code} - {error_body}")
                    raise ChatCompletionsError(response.status_code, error_body)

                async for line in response.aiter_lines():
                    yield line
