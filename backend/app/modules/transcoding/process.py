"""Spawn-and-wait wrapper for external media tools (ffmpeg, ffprobe)."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass
class ToolOutput:
    """Exit status and captured streams of a finished process."""
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ToolError(Exception):
    """The tool could not be run to completion (missing binary, timeout)."""


async def _kill(proc: asyncio.subprocess.Process) -> None:
    """Kill ``proc`` if it is still running and reap it."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        logger.warning("Killed external tool", extra={"pid": proc.pid})
    await asyncio.shield(proc.wait())


async def run_external_tool(
    argv: Sequence[str],
    timeout: Optional[float] = None,
) -> ToolOutput:
    """Run ``argv`` and wait for it to exit.

    A non-zero exit status is not an error here; callers inspect
    ``ToolOutput.exit_code`` and decide.

    Args:
        argv: Program and arguments
        timeout: Seconds to wait before killing the process

    Returns:
        ToolOutput with exit code and decoded stdout/stderr

    Raises:
        ToolError: If the program cannot be started or times out
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ToolError(f"Failed to start {argv[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _kill(proc)
        raise ToolError(f"{argv[0]} timed out after {timeout} seconds")
    except BaseException:
        # Cancelled or interrupted: the child must not outlive its caller
        await _kill(proc)
        raise

    return ToolOutput(
        exit_code=proc.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
