"""Filename (glob) and content (grep) search tools."""

import os
import re
from collections.abc import Iterator
from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, Field

from vibecode.tools.base import ToolDefinition, ToolError
from vibecode.utils.logging import get_logger

logger = get_logger(__name__)

MAX_GREP_HITS = 50
NO_MATCHES = "none"


class GlobInput(BaseModel):
    """Input schema for the glob tool."""

    pat: str = Field(
        ...,
        validation_alias=AliasChoices("pat", "pattern"),
        description="Glob pattern matched against paths relative to the search root, e.g. **/*.py",
    )
    path: str | None = Field(None, description="Directory to search (default: current directory)")


class GrepInput(BaseModel):
    """Input schema for the grep tool."""

    pat: str = Field(
        ...,
        validation_alias=AliasChoices("pat", "pattern"),
        description="Regular expression searched for in each line",
    )
    path: str | None = Field(None, description="Directory to search (default: current directory)")


@dataclass
class SearchMatch:
    """A file found by a search, with its modification time for ordering."""

    path: str
    mtime_ns: int


def walk_files(root: str) -> Iterator[tuple[str, os.stat_result]]:
    """Yield ``(path, stat)`` for every regular file below ``root``.

    Entries are visited in name order. Directories that cannot be listed and
    entries that cannot be stat'd are skipped; one unreadable subtree never
    aborts the walk. Directory symlinks are not followed.
    """
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        logger.debug(f"Skipping unreadable directory {root}: {e}")
        return

    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                yield from walk_files(entry.path)
            elif entry.is_file():
                yield entry.path, entry.stat()
        except OSError as e:
            logger.debug(f"Skipping {entry.path}: {e}")


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob pattern into a regular expression meant for ``fullmatch``.

    ``**`` matches across ``/`` (``**/`` also matches zero directories), ``*``
    stays within one path segment, ``?`` matches one character and ``[...]``
    classes are kept. Everything else is literal.
    """
    parts: list[str] = []
    i = 0
    n = len(pattern)

    while i < n:
        ch = pattern[i]
        if ch == "*":
            if pattern.startswith("**/", i):
                parts.append("(?:.*/)?")
                i += 3
                continue
            if pattern.startswith("**", i):
                parts.append(".*")
                i += 2
                continue
            parts.append("[^/]*")
        elif ch == "?":
            parts.append("[^/]")
        elif ch == "[":
            end = pattern.find("]", i + 2)
            if end == -1:
                parts.append(re.escape(ch))
            else:
                body = pattern[i + 1 : end].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                elif body.startswith("^"):
                    body = "\\" + body
                parts.append("[" + body + "]")
                i = end + 1
                continue
        else:
            parts.append(re.escape(ch))
        i += 1

    return re.compile("".join(parts))


def _relative(path: str, root: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, "/")


def glob_files(pattern: str, path: str | None = None) -> str:
    """Find files whose root-relative path matches ``pattern``, newest first.

    Returns:
        Newline-joined paths, or ``none``
    """
    root = path or "."
    regex = glob_to_regex(pattern)

    matches = [
        SearchMatch(path=os.path.normpath(file_path), mtime_ns=stat.st_mtime_ns)
        for file_path, stat in walk_files(root)
        if regex.fullmatch(_relative(file_path, root))
    ]
    matches.sort(key=lambda match: match.mtime_ns, reverse=True)

    logger.info(f"glob {pattern!r} under {root}: {len(matches)} match(es)")
    return "\n".join(match.path for match in matches) or NO_MATCHES


def _read_lines(file_path: str) -> list[str] | None:
    try:
        with open(file_path, encoding="utf-8") as f:
            return f.read().split("\n")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Skipping unreadable file {file_path}: {e}")
        return None


def grep_files(pattern: str, path: str | None = None, max_hits: int = MAX_GREP_HITS) -> str:
    """Search file contents for a regular expression.

    Returns:
        Up to ``max_hits`` lines formatted ``path:lineNumber:content``, or ``none``

    Raises:
        ToolError: If ``pattern`` is not a valid regular expression
    """
    try:
        regex = re.compile(pattern)
    except re.error as e:
        raise ToolError(f"invalid regex {pattern!r}: {e}") from e

    root = path or "."
    hits: list[str] = []

    for file_path, _ in walk_files(root):
        lines = _read_lines(file_path)
        if lines is None:
            continue

        display_path = os.path.normpath(file_path)
        for number, line in enumerate(lines, start=1):
            if regex.search(line):
                hits.append(f"{display_path}:{number}:{line.rstrip()}")
                if len(hits) >= max_hits:
                    logger.info(f"grep {pattern!r} under {root}: stopped at {max_hits} hits")
                    return "\n".join(hits)

    logger.info(f"grep {pattern!r} under {root}: {len(hits)} hit(s)")
    return "\n".join(hits) or NO_MATCHES


def create_glob_tool() -> ToolDefinition:
    async def glob_handler(params: GlobInput) -> str:
        return glob_files(params.pat, params.path)

    return ToolDefinition(
        name="glob",
        description="Find files by pattern, sorted by mtime",
        input_schema_class=GlobInput,
        handler=glob_handler,
    )


def create_grep_tool() -> ToolDefinition:
    async def grep_handler(params: GrepInput) -> str:
        return grep_files(params.pat, params.path)

    return ToolDefinition(
        name="grep",
        description="Search files for regex pattern",
        input_schema_class=GrepInput,
        handler=grep_handler,
    )
