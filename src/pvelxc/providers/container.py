"""Container provider for managing Proxmox LXC containers."""

import asyncio
import logging
import re
import subprocess
from pathlib import Path
from typing import Optional, List, TYPE_CHECKING

from pvelxc.errors import ContainerCreateError, VmidCollisionError
from pvelxc.models.container import ContainerSpec
from pvelxc.models.report import StepOutcome
from pvelxc.providers.base import BaseProvider, ProviderStatus
from pvelxc.utils.commands import CommandResult, run_command

if TYPE_CHECKING:
    from pvelxc.providers.registry import ProviderRegistry
    from pvelxc.providers.template import TemplateProvider

logger = logging.getLogger(__name__)

CREATE_TIMEOUT = 600
HOSTNAME_RE = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?(\.[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$")

# Device access for Tailscale's tun interface and a console on /dev/console
RAW_CONFIG_LINES = [
    "lxc.cgroup2.devices.allow: c 10:200 rwm",
    "lxc.mount.entry: /dev/net/tun dev/net/tun none bind,create=file",
    "lxc.console.path: /dev/console",
]


class ContainerProvider(BaseProvider):
    """Provider for LXC containers managed by pct."""

    name = "container"

    def __init__(self):
        """Initialize container provider."""
        self.lxc_config_dir: Path = Path("/etc/pve/lxc")
        self.ready_timeout: int = 60
        self._template_provider: Optional["TemplateProvider"] = None

    async def initialize(self, config, registry: "ProviderRegistry") -> None:
        """Initialize provider with configuration and registry."""
        self.lxc_config_dir = Path(config.lxc_config_dir)
        self.ready_timeout = config.ready_timeout
        self._template_provider = registry.get_provider("template") if registry else None

    @property
    def template_provider(self) -> Optional["TemplateProvider"]:
        """Get template provider."""
        return self._template_provider

    async def status(self, spec: ContainerSpec) -> ProviderStatus:
        """Check if a container with this VMID exists."""
        try:
            result = await run_command(["pct", "status", str(spec.vmid)], check=False)
        except Exception as e:
            logger.error(f"Error checking container {spec.vmid}: {e}")
            return ProviderStatus.ERROR

        if result.ok:
            return ProviderStatus.PRESENT
        return ProviderStatus.ABSENT

    async def present(self, spec: ContainerSpec) -> bool:
        """Ensure the container exists. Returns True when it was created now."""
        if await self.is_present(spec):
            owner = await self.configured_hostname(spec.vmid)
            if owner is not None and owner != spec.hostname:
                raise VmidCollisionError(f"VMID {spec.vmid} belongs to another guest ({owner})")
            logger.info(f"Container {spec.vmid} already present, skipping creation")
            return False

        logger.info("Creating LXC container...")
        try:
            result = await run_command(
                self._create_command(spec),
                check=False,
                timeout=CREATE_TIMEOUT,
                sensitive=[spec.password],
            )
        except subprocess.TimeoutExpired:
            # str(TimeoutExpired) would include the password argument
            result = CommandResult(returncode=124, stderr=f"pct create timed out after {CREATE_TIMEOUT}s")
        if result.ok:
            logger.info(f"Created container {spec.vmid} ({spec.hostname})")
            return True

        logger.error(f"Failed to create container {spec.vmid}: {result.output}")
        await self._compensate_failed_create(spec)
        raise ContainerCreateError(f"Failed to create container {spec.vmid}: {result.output}")

    def _create_command(self, spec: ContainerSpec) -> List[str]:
        return [
            "pct", "create", str(spec.vmid), spec.template.volid,
            "--hostname", spec.hostname,
            "--password", spec.password,
            "--unprivileged", "1" if spec.unprivileged else "0",
            "--tags", spec.tags,
            "--net0", spec.net0,
            "--storage", spec.storage,
            "--rootfs", spec.rootfs,
            "--cores", str(spec.cores),
            "--memory", str(spec.memory),
            "--swap", str(spec.swap),
            "--console", "1",
            "--onboot", "1",
            "--start", "0",
            "--features", spec.features,
            "--ostype", spec.ostype,
        ]

    async def _compensate_failed_create(self, spec: ContainerSpec) -> None:
        """Remove a partially created container, leaving foreign guests alone."""
        if not await self.is_present(spec):
            return

        owner = await self.configured_hostname(spec.vmid)
        # No readable config right after our own failed create means it is ours
        if owner is not None and owner != spec.hostname:
            raise VmidCollisionError(
                f"VMID {spec.vmid} was claimed by another guest ({owner})"
            )

        logger.warning(f"Removing partially created container {spec.vmid}")
        await self.absent(spec)

    async def configured_hostname(self, vmid: int) -> Optional[str]:
        """Hostname recorded in the container's configuration."""
        result = await run_command(["pct", "config", str(vmid)], check=False)
        if not result.ok:
            return None
        for line in result.stdout.splitlines():
            key, _, value = line.partition(":")
            if key.strip() == "hostname":
                return value.strip()
        return None

    async def absent(self, spec: ContainerSpec) -> None:
        """Ensure the container is destroyed."""
        if await self.status(spec) == ProviderStatus.ABSENT:
            logger.debug(f"Container {spec.vmid} already absent")
            return

        logger.info(f"Removing container {spec.vmid}")
        await run_command(["pct", "stop", str(spec.vmid)], check=False)
        try:
            result = await run_command(
                ["pct", "destroy", str(spec.vmid), "--purge"], check=False, timeout=120
            )
        except subprocess.TimeoutExpired:
            result = CommandResult(returncode=124, stderr="pct destroy timed out after 120s")
        if not result.ok:
            logger.error(f"Failed to remove container {spec.vmid}: {result.output}")

    async def validate_spec(self, spec: ContainerSpec) -> bool:
        """Validate container specification."""
        if not HOSTNAME_RE.match(spec.hostname):
            logger.error(f"Invalid hostname: {spec.hostname}")
            return False

        if self.template_provider:
            if await self.template_provider.status(spec.template) != ProviderStatus.PRESENT:
                logger.error(f"Template {spec.template.volid} is not in the local cache")
                return False

        return True

    async def ensure_raw_config(self, spec: ContainerSpec) -> StepOutcome:
        """Append the device and console lines pct create cannot express."""
        name = "container raw config"
        config_file = self.lxc_config_dir / f"{spec.vmid}.conf"
        logger.info("Configuring container settings...")

        try:
            content = await asyncio.to_thread(config_file.read_text)
        except OSError as e:
            logger.warning(f"Cannot read {config_file}: {e}")
            return StepOutcome.warning(name, str(e))

        existing = {line.strip() for line in content.splitlines()}
        missing = [line for line in RAW_CONFIG_LINES if line not in existing]
        if not missing:
            logger.debug(f"{config_file} already has Tailscale and console settings")
            return StepOutcome.ok(name)

        addition = "" if content.endswith("\n") or not content else "\n"
        addition += "\n# Tailscale support\n" + "\n".join(missing) + "\n"

        def _append():
            with config_file.open("a") as f:
                f.write(addition)

        try:
            await asyncio.to_thread(_append)
        except OSError as e:
            logger.warning(f"Cannot update {config_file}: {e}")
            return StepOutcome.warning(name, str(e))

        logger.debug(f"Appended {len(missing)} line(s) to {config_file}")
        return StepOutcome.ok(name)

    async def is_running(self, spec: ContainerSpec) -> bool:
        """Check if container is running."""
        result = await run_command(["pct", "status", str(spec.vmid)], check=False)
        return result.ok and "running" in result.stdout

    async def start(self, spec: ContainerSpec) -> StepOutcome:
        """Start the container and wait until it accepts commands."""
        if await self.is_running(spec):
            logger.debug(f"Container {spec.vmid} already running")
        else:
            logger.info("Starting container...")
            result = await run_command(["pct", "start", str(spec.vmid)], check=False)
            if not result.ok:
                logger.error(f"Failed to start container: {result.output}")
                return StepOutcome.warning("start container", result.output or "pct start failed")

        return await self._wait_for_ready(spec.vmid, self.ready_timeout)

    async def _wait_for_ready(self, vmid: int, timeout: int) -> StepOutcome:
        """Poll until the container runs commands."""
        logger.info("Waiting for container to be ready...")
        for _ in range(max(timeout, 1)):
            result = await run_command(["pct", "exec", str(vmid), "--", "true"], check=False)
            if result.ok:
                logger.debug(f"Container {vmid} is ready")
                return StepOutcome.ok("start container")
            await asyncio.sleep(1)

        logger.warning(f"Container {vmid} did not become ready in {timeout}s")
        return StepOutcome.warning("start container", f"not ready after {timeout}s")
