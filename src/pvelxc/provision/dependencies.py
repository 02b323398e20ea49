"""Host dependency checks."""

import logging
import shutil
from typing import List

from pvelxc.errors import DependencyError
from pvelxc.models.report import StepOutcome
from pvelxc.utils.commands import run_command


logger = logging.getLogger(__name__)

JSON_TOOL = "jq"
PROXMOX_TOOLS = ("pct", "pvesh", "pveam")


class DependencyChecker:
    """Ensures the host tools the provisioning sequence calls are available."""

    def __init__(self, tools: tuple = PROXMOX_TOOLS, json_tool: str = JSON_TOOL):
        self.tools = tools
        self.json_tool = json_tool

    @staticmethod
    def is_available(tool: str) -> bool:
        return shutil.which(tool) is not None

    async def check(self) -> List[StepOutcome]:
        """Verify host tools, installing the JSON tool when missing."""
        missing = [tool for tool in self.tools if not self.is_available(tool)]
        if missing:
            logger.error(f"Missing Proxmox tools: {', '.join(missing)}")
            raise DependencyError("This script must be run on a Proxmox VE host")

        outcomes = []
        if self.is_available(self.json_tool):
            outcomes.append(StepOutcome.ok("dependencies"))
        else:
            await self._install_json_tool()
            outcomes.append(StepOutcome.ok(f"install {self.json_tool}"))
        return outcomes

    async def _install_json_tool(self) -> None:
        logger.info(f"Installing missing dependencies: {self.json_tool}")

        result = await run_command(["apt-get", "update"], check=False)
        if not result.ok:
            logger.error(result.output)
            raise DependencyError("Failed to update package list")

        result = await run_command(
            ["apt-get", "install", "-y", self.json_tool], check=False
        )
        if not result.ok:
            logger.error(result.output)
            raise DependencyError(f"Failed to install {self.json_tool}")

        if not self.is_available(self.json_tool):
            raise DependencyError(f"{self.json_tool} installation failed")

        logger.info("Dependencies installed successfully")

    async def load_tun_module(self) -> StepOutcome:
        """Load the host TUN module needed by Tailscale inside the container."""
        name = "host tun module"
        result = await run_command(["lsmod"], check=False)
        if result.ok and any(line.split()[:1] == ["tun"] for line in result.stdout.splitlines()):
            logger.debug("TUN module already loaded")
            return StepOutcome.ok(name)

        result = await run_command(["modprobe", "tun"], check=False)
        if not result.ok:
            logger.warning("Failed to load TUN module - Tailscale may not work properly")
            return StepOutcome.warning(name, result.output or "modprobe tun failed")
        return StepOutcome.ok(name)
