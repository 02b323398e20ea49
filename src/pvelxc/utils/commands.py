"""Host command execution."""

import asyncio
import logging
import subprocess
from typing import Optional, List, Sequence
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined output, stderr preferred, for log and warning messages."""
        return (self.stderr or self.stdout).strip()


def format_command(cmd: Sequence[str], sensitive: Sequence[str] = ()) -> str:
    """Render a command for logging with sensitive values masked."""
    masked = {value for value in sensitive if value}
    return " ".join("***" if part in masked else part for part in cmd)


async def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = True,
    timeout: Optional[int] = None,
    sensitive: Sequence[str] = (),
    **kwargs
) -> CommandResult:
    """Run a command asynchronously."""
    logger.debug(f"Running command: {format_command(cmd, sensitive)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE if capture_output else None,
            stderr=asyncio.subprocess.PIPE if capture_output else None,
            **kwargs
        )
    except FileNotFoundError as e:
        # Missing binaries behave like a failed command (exit 127 in a shell)
        if check:
            raise
        return CommandResult(returncode=127, stderr=str(e))

    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(),
            timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise subprocess.TimeoutExpired(cmd, timeout)

    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode(errors="replace") if stdout else "",
        stderr=stderr.decode(errors="replace") if stderr else "",
    )

    if check and process.returncode != 0:
        error = subprocess.CalledProcessError(
            process.returncode, cmd
        )
        error.stdout = result.stdout
        error.stderr = result.stderr
        raise error

    return result
