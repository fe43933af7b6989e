"""Shell execution and git diff/undo tools."""

import asyncio
import os
import shlex
import signal

from pydantic import BaseModel, Field

from vibecode.tools.base import ToolDefinition, ToolError
from vibecode.utils.logging import get_logger

logger = get_logger(__name__)

BASH_TIMEOUT_SECONDS = 30.0
GIT_TIMEOUT_SECONDS = 5.0
EMPTY_OUTPUT = "(empty)"


class BashInput(BaseModel):
    """Input schema for the bash tool."""

    cmd: str = Field(..., description="Shell command to run")


class DiffInput(BaseModel):
    """Input schema for the diff tool."""

    path: str | None = Field(None, description="File to diff (default: whole working tree)")


class UndoInput(BaseModel):
    """Input schema for the undo tool."""

    path: str = Field(..., description="File whose uncommitted changes should be discarded")


def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill a process together with anything it spawned."""
    try:
        if os.name == "posix":
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except ProcessLookupError:
        pass


async def _drain(stream: asyncio.StreamReader | None, chunks: list[bytes]) -> None:
    if stream is None:
        return
    while chunk := await stream.read(65536):
        chunks.append(chunk)


async def _communicate(process: asyncio.subprocess.Process, timeout: float) -> tuple[bytes, bytes, bool]:
    """Wait for a process, killing it once ``timeout`` seconds have passed.

    Output is collected by reader tasks that outlive the timeout, so whatever
    the process printed before it was killed is kept.

    Returns:
        ``(stdout, stderr, timed_out)``
    """
    stdout: list[bytes] = []
    stderr: list[bytes] = []
    readers = [
        asyncio.create_task(_drain(process.stdout, stdout)),
        asyncio.create_task(_drain(process.stderr, stderr)),
    ]

    timed_out = False
    try:
        await asyncio.wait_for(process.wait(), timeout)
    except TimeoutError:
        timed_out = True
        _kill(process)
        await process.wait()

    await asyncio.gather(*readers)
    return b"".join(stdout), b"".join(stderr), timed_out


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


async def run_bash(cmd: str, timeout: float = BASH_TIMEOUT_SECONDS) -> str:
    """Run a shell command and return its output.

    Args:
        cmd: Command line passed to the system shell
        timeout: Wall-clock limit in seconds

    Returns:
        Trimmed stdout on success; trimmed stdout+stderr on failure, timeout or
        spawn error; ``(empty)`` when there is nothing to show
    """
    logger.info(f"Running command: {cmd}")
    try:
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=os.name == "posix",
        )
    except OSError as e:
        logger.error(f"Failed to start command {cmd!r}: {e}")
        return EMPTY_OUTPUT

    stdout, stderr, timed_out = await _communicate(process, timeout)

    if timed_out:
        logger.warning(f"Command timed out after {timeout}s: {cmd}")
    elif process.returncode == 0:
        return _decode(stdout).strip() or EMPTY_OUTPUT
    else:
        logger.info(f"Command exited with status {process.returncode}: {cmd}")

    return (_decode(stdout) + _decode(stderr)).strip() or EMPTY_OUTPUT


async def _run_git(*args: str, timeout: float = GIT_TIMEOUT_SECONDS) -> str:
    """Run a git command and return its stdout.

    Raises:
        ToolError: If git cannot be started, fails, or times out
    """
    command = shlex.join(["git", *args])
    try:
        process = await asyncio.create_subprocess_exec(
            "git",
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=os.name == "posix",
        )
    except OSError as e:
        raise ToolError(f"{command} failed: {e}") from e

    stdout, stderr, timed_out = await _communicate(process, timeout)

    if timed_out:
        raise ToolError(f"{command} timed out after {timeout:g}s")
    if process.returncode != 0:
        detail = _decode(stderr).strip() or _decode(stdout).strip()
        raise ToolError(f"{command} failed: {detail}")

    return _decode(stdout)


async def show_diff(path: str | None = None) -> str:
    """Show uncommitted changes for one file or the whole working tree."""
    cmd = f"git diff -- {shlex.quote(path)}" if path else "git diff"
    return await run_bash(cmd)


async def undo_changes(path: str) -> str:
    """Discard uncommitted changes to ``path`` by checking it out from git."""
    status = (await _run_git("status", "--porcelain", "--", path)).strip()
    if not status:
        return f"{path} has no uncommitted changes"

    await _run_git("checkout", "--", path)
    logger.info(f"Restored {path} from git")
    return f"restored {path} from git repository"


def create_bash_tool() -> ToolDefinition:
    async def bash_handler(params: BashInput) -> str:
        return await run_bash(params.cmd)

    return ToolDefinition(
        name="bash",
        description="Run shell command",
        input_schema_class=BashInput,
        handler=bash_handler,
    )


def create_diff_tool() -> ToolDefinition:
    async def diff_handler(params: DiffInput) -> str:
        return await show_diff(params.path)

    return ToolDefinition(
        name="diff",
        description="Show diff of file",
        input_schema_class=DiffInput,
        handler=diff_handler,
    )


def create_undo_tool() -> ToolDefinition:
    async def undo_handler(params: UndoInput) -> str:
        return await undo_changes(params.path)

    return ToolDefinition(
        name="undo",
        description="Undo changes in file",
        input_schema_class=UndoInput,
        handler=undo_handler,
    )
