"""Command execution inside a running container."""

import asyncio
import logging
import os
import subprocess
import tempfile
from abc import ABC, abstractmethod
from typing import List, Optional

from pvelxc.utils.commands import CommandResult, run_command


logger = logging.getLogger(__name__)

EXEC_TIMEOUT = 1800


class GuestExecutor(ABC):
    """Runs commands and places files inside a container."""

    @abstractmethod
    async def execute(self, vmid: int, command: List[str]) -> CommandResult:
        """Run a command in the container, capturing status and output."""
        pass

    @abstractmethod
    async def push(self, vmid: int, content: str, destination: str, perms: Optional[str] = None) -> CommandResult:
        """Write content to a file in the container."""
        pass

    @abstractmethod
    def enter(self, vmid: int) -> int:
        """Attach an interactive session to the container."""
        pass

    async def shell(self, vmid: int, script: str) -> CommandResult:
        """Run a shell snippet in the container."""
        return await self.execute(vmid, ["sh", "-c", script])


class PctExecutor(GuestExecutor):
    """Executor backed by pct exec / pct push / pct enter."""

    def __init__(self, timeout: int = EXEC_TIMEOUT):
        self.timeout = timeout

    async def execute(self, vmid: int, command: List[str]) -> CommandResult:
        cmd = ["pct", "exec", str(vmid), "--", *command]
        try:
            return await run_command(cmd, check=False, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out in container {vmid}: {' '.join(command)}")
            return CommandResult(returncode=124, stderr=f"timed out after {self.timeout}s")

    async def push(self, vmid: int, content: str, destination: str, perms: Optional[str] = None) -> CommandResult:
        fd, local_path = await asyncio.to_thread(tempfile.mkstemp, prefix="pvelxc-")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)

            cmd = ["pct", "push", str(vmid), local_path, destination]
            if perms:
                cmd += ["--perms", perms]
            return await run_command(cmd, check=False)
        finally:
            await asyncio.to_thread(os.unlink, local_path)

    def enter(self, vmid: int) -> int:
        # Interactive: inherit the operator's terminal
        return subprocess.call(["pct", "enter", str(vmid)])
