"""Server-sent event decoding and tool-call assembly."""

import json
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import Any

from cuid2 import cuid_wrapper

from vibecode.models.llm import (
    CompletedTurn,
    ContentDelta,
    StreamEvent,
    ToolCall,
    ToolCallDelta,
    ToolCallFragment,
)
from vibecode.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


async def iter_sse_payloads(lines: AsyncIterable[str]) -> AsyncIterator[dict[str, Any]]:
    """Yield the JSON payload of every ``data:`` line until ``[DONE]``.

    Blank lines, keep-alive comments and other SSE fields are ignored. A line
    that does not decode to a JSON object is logged and skipped.
    """
    async for raw_line in lines:
        line = raw_line.strip()
        if not line or not line.startswith(DATA_PREFIX):
            continue

        data = line[len(DATA_PREFIX) :].strip()
        if data == DONE_SENTINEL:
            logger.debug("Stream finished")
            return

        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse SSE line: {line} ({e.msg})")
            continue

        if not isinstance(payload, dict):
            logger.warning(f"Ignoring SSE payload that is not an object: {line}")
            continue

        yield payload


def _parse_tool_call(tool_call: Any) -> ToolCallDelta | None:
    """Convert one ``tool_calls`` entry, or return None if it has the wrong shape."""
    if not isinstance(tool_call, dict):
        return None

    index = tool_call.get("index", 0)
    call_id = tool_call.get("id")
    function = tool_call.get("function") or {}
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        return None
    if call_id is not None and not isinstance(call_id, str):
        return None
    if not isinstance(function, dict):
        return None

    name = function.get("name") or ""
    arguments = function.get("arguments") or ""
    if not isinstance(name, str) or not isinstance(arguments, str):
        return None

    return ToolCallDelta(index=index, id=call_id or None, name=name, arguments=arguments)


def parse_delta(payload: dict[str, Any]) -> list[StreamEvent]:
    """Extract content and tool-call events from one payload's ``choices[0].delta``.

    Parts of the delta with an unexpected shape are logged and skipped; the
    rest of the payload is still used.
    """
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return []

    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return []

    events: list[StreamEvent] = []

    content = delta.get("content")
    if isinstance(content, str):
        if content:
            events.append(ContentDelta(text=content))
    elif content is not None:
        logger.warning(f"Ignoring non-text content: {content!r}")

    tool_calls = delta.get("tool_calls") or []
    if not isinstance(tool_calls, list):
        logger.warning(f"Ignoring malformed tool_calls: {tool_calls!r}")
        return events

    for tool_call in tool_calls:
        event = _parse_tool_call(tool_call)
        if event is None:
            logger.warning(f"Ignoring malformed tool-call fragment: {tool_call!r}")
            continue
        events.append(event)

    return events


async def decode_stream(lines: AsyncIterable[str]) -> AsyncIterator[StreamEvent]:
    """Turn raw SSE lines into ContentDelta and ToolCallDelta events."""
    async for payload in iter_sse_payloads(lines):
        for event in parse_delta(payload):
            yield event


class ToolCallAssembler:
    """Accumulates tool-call fragments by index until the stream ends."""

    def __init__(self) -> None:
        self._fragments: dict[int, ToolCallFragment] = {}

    def add(self, delta: ToolCallDelta) -> None:
        """Merge one fragment into the accumulator for its index."""
        fragment = self._fragments.get(delta.index)
        if fragment is None:
            fragment = ToolCallFragment(index=delta.index, id=delta.id)
            self._fragments[delta.index] = fragment
        elif delta.id and not fragment.id:
            fragment.id = delta.id

        fragment.name += delta.name
        fragment.arguments += delta.arguments

    def finish(self) -> list[ToolCall]:
        """Return the completed calls densely, in index order.

        Indices that never received data are dropped. Calls the server sent
        without an id get a generated one.
        """
        tool_calls: list[ToolCall] = []
        for index in sorted(self._fragments):
            fragment = self._fragments[index]
            if fragment.is_empty:
                continue
            tool_calls.append(
                ToolCall(
                    id=fragment.id or f"call_{cuid()}",
                    name=fragment.name,
                    arguments=fragment.arguments,
                )
            )

        if len(tool_calls) != len(self._fragments):
            logger.debug(f"Dropped {len(self._fragments) - len(tool_calls)} empty tool-call slot(s)")

        return tool_calls


async def collect_turn(
    events: AsyncIterable[StreamEvent],
    on_content: Callable[[str], None] | None = None,
) -> CompletedTurn:
    """Consume a response's events into its full text and finished tool calls.

    Args:
        events: Decoded stream events
        on_content: Called with each text fragment as soon as it arrives
    """
    text_parts: list[str] = []
    assembler = ToolCallAssembler()

    async for event in events:
        if isinstance(event, ContentDelta):
            text_parts.append(event.text)
            if on_content:
                on_content(event.text)
        else:
            assembler.add(event)

    return CompletedTurn(text="".join(text_parts), tool_calls=assembler.finish())
