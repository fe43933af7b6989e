"""File read, write and edit tools."""

from pydantic import BaseModel, Field

from vibecode.tools.base import ToolDefinition, ToolError
from vibecode.utils.logging import get_logger

logger = get_logger(__name__)


class ReadInput(BaseModel):
    """Input schema for the read tool."""

    path: str = Field(..., description="Path of the file to read (a file, not a directory)")
    offset: int | None = Field(None, ge=0, description="Zero-based line to start from")
    limit: int | None = Field(None, ge=0, description="Maximum number of lines to return")


class WriteInput(BaseModel):
    """Input schema for the write tool."""

    path: str = Field(..., description="Path of the file to write")
    content: str = Field(..., description="Full new content of the file")


class EditInput(BaseModel):
    """Input schema for the edit tool."""

    path: str = Field(..., description="Path of the file to edit")
    old: str = Field(..., description="Exact text to replace")
    new: str = Field(..., description="Replacement text")
    all: bool | None = Field(None, description="Replace every occurrence instead of requiring a unique match")


def _read_text(path: str) -> str:
    # newline="" keeps line endings exactly as they are on disk
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _write_text(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def read_file(path: str, offset: int | None = None, limit: int | None = None) -> str:
    """Return a numbered slice of a file's lines.

    Args:
        path: File to read
        offset: Zero-based index of the first line (default 0)
        limit: Number of lines to return (default, or 0: the rest of the file)

    Returns:
        Lines formatted as ``"   N| text"`` joined with newlines
    """
    lines = _read_text(path).split("\n")
    start = offset or 0
    count = limit or len(lines)
    selected = lines[start : start + count]
    return "\n".join(f"{start + idx + 1:>4}| {line}" for idx, line in enumerate(selected))


def write_file(path: str, content: str) -> str:
    """Overwrite (or create) a file with exactly ``content``."""
    _write_text(path, content)
    logger.info(f"Wrote {len(content)} characters to {path}")
    return "ok"


def edit_file(path: str, old: str, new: str, replace_all: bool = False) -> str:
    """Replace literal text in a file.

    Raises:
        ToolError: If ``old`` is empty, missing, or ambiguous without ``replace_all``
    """
    if not old:
        raise ToolError("old_string must not be empty")

    text = _read_text(path)
    count = text.count(old)

    if count == 0:
        raise ToolError("old_string not found")

    if count > 1 and not replace_all:
        raise ToolError(f"old_string appears {count} times, must be unique (use all=true)")

    updated = text.replace(old, new) if replace_all else text.replace(old, new, 1)
    _write_text(path, updated)
    logger.info(f"Replaced {count if replace_all else 1} occurrence(s) in {path}")
    return "ok"


def create_read_tool() -> ToolDefinition:
    async def read_handler(params: ReadInput) -> str:
        return read_file(params.path, params.offset, params.limit)

    return ToolDefinition(
        name="read",
        description="Read file with line numbers (file path, not directory)",
        input_schema_class=ReadInput,
        handler=read_handler,
    )


def create_write_tool() -> ToolDefinition:
    async def write_handler(params: WriteInput) -> str:
        return write_file(params.path, params.content)

    return ToolDefinition(
        name="write",
        description="Write content to file",
        input_schema_class=WriteInput,
        handler=write_handler,
    )


def create_edit_tool() -> ToolDefinition:
    async def edit_handler(params: EditInput) -> str:
        return edit_file(params.path, params.old, params.new, replace_all=bool(params.all))

    return ToolDefinition(
        name="edit",
        description="Replace old with new in file (old must be unique unless all=true)",
        input_schema_class=EditInput,
        handler=edit_handler,
    )
