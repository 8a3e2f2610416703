"""Subprocess helpers."""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Type

from rootfetch.errors import CommandError, RootfetchError


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""


async def run_command(
    cmd: List[str],
    check: bool = True,
    timeout: Optional[int] = None,
    error: Type[RootfetchError] = CommandError,
    failure: Optional[str] = None,
) -> CommandResult:
    """Run a command asynchronously and capture its output.

    With check, a non-zero exit or a timeout raises error with the message
    "<failure>: <reason>", where the reason is the command's stderr.
    """
    logger.debug(f"Running command: {' '.join(cmd)}")
    failure = failure or f"Command {cmd[0]!r} failed"

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise error(f"{failure}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        process.kill()
        await process.wait()
        raise error(f"{failure}: timed out after {timeout}s") from e

    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )

    if check and result.returncode != 0:
        reason = result.stderr.strip() or f"exit status {result.returncode}"
        raise error(f"{failure}: {reason}")

    return result
