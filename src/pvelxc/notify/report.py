"""Provisioning report."""

import asyncio
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pvelxc.guest import assets
from pvelxc.guest.executor import GuestExecutor
from pvelxc.models.config import LxcConfig
from pvelxc.models.report import RunSummary, StepOutcome
from pvelxc.utils.templates import render_template


logger = logging.getLogger(__name__)

PENDING_IP = "Pending DHCP"
PACKAGE_SAMPLE_SIZE = 20
INET_RE = re.compile(r"\binet (\d{1,3}(?:\.\d{1,3}){3})")

# Report checklist entries and the steps each one depends on
FEATURES: List[Tuple[str, Tuple[str, ...]]] = [
    ("Docker & Docker Compose", ("docker",)),
    ("Tailscale VPN", ("tailscale",)),
    ("Dropbear SSH Server", ("dropbear",)),
    ("Mosh (Mobile Shell)", ("base packages",)),
    ("Ansible", ("base packages",)),
    ("Oh My Posh (installed, custom prompt active)", ("oh-my-posh", "shell profile")),
    ("JetBrains Mono Nerd Font", ("font JetBrains Mono",)),
    ("Development tools (git, vim, nano, htop, etc.)", ("base packages",)),
]

# Configuration status lines and the steps each one depends on
CHECKS: List[Tuple[str, Tuple[str, ...]]] = [
    ("Unprivileged container", ("create container",)),
    ("Nesting enabled (for Docker)", ("create container",)),
    ("Tailscale kernel support configured", ("container raw config", "host tun module")),
    ("Auto-start on boot enabled", ("create container",)),
    ("Custom MOTD configured", ("motd",)),
    (f"Root directory set to {assets.ROOT_HOME}", ("root home",)),
    ("Bash shell configured", ("root shell",)),
]


class ReportBuilder:
    """Collects final container facts and renders the run report."""

    def __init__(self, executor: GuestExecutor, config: LxcConfig, vmid: int):
        self.executor = executor
        self.config = config
        self.vmid = vmid

    async def container_ip(self, interface: str = "eth0") -> str:
        """First IPv4 address on the container interface."""
        result = await self.executor.execute(self.vmid, ["ip", "-4", "addr", "show", interface])
        if result.ok:
            match = INET_RE.search(result.stdout)
            if match:
                return match.group(1)
        logger.debug(f"No IPv4 address on {interface} yet")
        return PENDING_IP

    async def package_sample(self, limit: int = PACKAGE_SAMPLE_SIZE) -> List[str]:
        """First installed packages in name order."""
        result = await self.executor.execute(self.vmid, ["apk", "info"])
        if not result.ok:
            return []
        return sorted(line.strip() for line in result.stdout.splitlines() if line.strip())[:limit]

    @staticmethod
    def checklist(
        summary: RunSummary, entries: List[Tuple[str, Tuple[str, ...]]]
    ) -> List[Dict[str, object]]:
        """Mark each entry ok unless one of its steps ended with a warning."""
        checklist = []
        for label, steps in entries:
            ok = True
            for step in steps:
                outcome = summary.get(step)
                if outcome is not None and not outcome.succeeded:
                    ok = False
            checklist.append({"label": label, "ok": ok})
        return checklist

    def ssh_key_status(self, summary: RunSummary) -> Dict[str, bool]:
        outcome = summary.get("ssh key")
        ok = outcome is None or outcome.succeeded
        return {"ok": ok, "installed": ok and self.config.ssh_key_installed}

    def render(
        self,
        summary: RunSummary,
        container_ip: str,
        packages: List[str],
        timestamp: Optional[datetime] = None,
    ) -> str:
        """Render the report text."""
        timestamp = timestamp or datetime.now()
        ssh_host = "<pending-ip>" if container_ip == PENDING_IP else container_ip
        return render_template(
            assets.REPORT,
            rule=assets.RULE,
            timestamp=timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            config=self.config,
            vmid=self.vmid,
            container_ip=container_ip,
            ssh_host=ssh_host,
            features=self.checklist(summary, FEATURES),
            checks=self.checklist(summary, CHECKS),
            ssh_key=self.ssh_key_status(summary),
            warnings=summary.warnings,
            packages=packages,
        )

    def file_name(self, timestamp: datetime) -> str:
        return f"{self.config.hostname}_{timestamp.strftime('%Y%m%d_%H%M%S')}_report.txt"

    async def write_local(self, report: str, directory: Path, timestamp: datetime) -> Path:
        """Keep a copy of the report on the host."""
        path = Path(directory) / self.file_name(timestamp)
        await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_text, report)
        logger.info(f"Report written to {path}")
        return path

    async def push(self, report: str, timestamp: datetime) -> StepOutcome:
        """Place the report in the container's root home."""
        destination = f"{assets.ROOT_HOME}/{self.file_name(timestamp)}"
        result = await self.executor.push(self.vmid, report, destination, "0644")
        if not result.ok:
            logger.warning(f"Failed to push report to container: {result.output}")
            return StepOutcome.warning("report", result.output or "pct push failed")
        return StepOutcome.ok("report")
