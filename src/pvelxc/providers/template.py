"""Template provider for resolving and caching container templates."""

import logging
import posixpath
import re
import socket
import subprocess
from typing import List, Optional
from urllib.parse import urlparse

from pvelxc.errors import ConfigError, TemplateDownloadError, TemplateNotFoundError
from pvelxc.models.config import DEFAULT_TEMPLATE_PATTERN
from pvelxc.models.report import StepOutcome
from pvelxc.models.template import TemplateRef
from pvelxc.providers.base import BaseProvider, ProviderStatus
from pvelxc.utils.commands import CommandResult, run_command
from pvelxc.utils.templates import version_key


logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = (".tar.xz", ".tar.gz", ".tar.zst")
DOWNLOAD_TIMEOUT = 900


class TemplateProvider(BaseProvider):
    """Provider for Proxmox container templates managed by pveam."""

    name = "template"

    def __init__(self):
        """Initialize template provider."""
        self.storage: str = "local"
        self.pattern: str = DEFAULT_TEMPLATE_PATTERN
        self.template_url: str = ""

    async def initialize(self, config, registry=None):
        """Initialize provider with configuration."""
        self.storage = config.template_storage
        self.pattern = config.template_pattern
        self.template_url = config.template_url

    async def refresh(self) -> StepOutcome:
        """Update the appliance catalog; a stale catalog is still usable."""
        logger.info("Updating container template list...")
        result = await run_command(["pveam", "update"], check=False)
        if not result.ok:
            logger.warning("Failed to update template list - continuing anyway")
            return StepOutcome.warning("template catalog update", result.output or "pveam update failed")
        return StepOutcome.ok("template catalog update")

    async def available(self) -> List[str]:
        """Template names listed in the remote catalog."""
        result = await run_command(["pveam", "available"], check=False)
        if not result.ok:
            logger.warning(f"Failed to list available templates: {result.output}")
            return []

        names = []
        for line in result.stdout.splitlines():
            fields = line.split()
            if len(fields) >= 2:
                names.append(fields[1])
        return names

    async def latest(self, pattern: Optional[str] = None) -> str:
        """Newest catalog entry matching the pattern, by version order."""
        logger.info("Searching for Alpine templates...")
        regex = re.compile(pattern or self.pattern)
        matches = [name for name in await self.available() if regex.search(name)]
        if not matches:
            raise TemplateNotFoundError("No Alpine templates found in repository")

        name = max(matches, key=version_key)
        logger.info(f"Found Alpine template: {name}")
        return name

    async def resolve(self) -> TemplateRef:
        """Template to use: the configured URL's file, or the newest catalog entry."""
        if self.template_url:
            name = self.name_from_url(self.template_url)
            logger.info(f"Using template from URL: {name}")
        else:
            name = await self.latest()
        return TemplateRef(storage=self.storage, name=name)

    @staticmethod
    def name_from_url(url: str) -> str:
        name = posixpath.basename(urlparse(url).path)
        if not name.endswith(TEMPLATE_SUFFIXES):
            raise ConfigError(f"template_url does not point to a template archive: {url}")
        return name

    async def status(self, spec: TemplateRef) -> ProviderStatus:
        """Check if the template is in the local cache."""
        result = await run_command(["pveam", "list", spec.storage], check=False)
        if not result.ok:
            logger.error(f"Error listing templates on {spec.storage}: {result.output}")
            return ProviderStatus.ERROR

        for line in result.stdout.splitlines():
            fields = line.split()
            if fields and fields[0].endswith(f"/{spec.name}"):
                return ProviderStatus.PRESENT
        return ProviderStatus.ABSENT

    async def present(self, spec: TemplateRef) -> None:
        """Ensure the template is downloaded."""
        if await self.is_present(spec):
            logger.info(f"Template already downloaded: {spec.name}")
            return

        logger.info(f"Downloading Alpine Linux template: {spec.name}")
        if self.template_url:
            cmd = [
                "pvesh", "create",
                f"/nodes/{self.node_name()}/storage/{spec.storage}/download-url",
                "--content", "vztmpl",
                "--filename", spec.name,
                "--url", self.template_url,
            ]
        else:
            cmd = ["pveam", "download", spec.storage, spec.name]

        try:
            result = await run_command(cmd, check=False, timeout=DOWNLOAD_TIMEOUT)
        except subprocess.TimeoutExpired:
            result = CommandResult(returncode=124, stderr=f"download timed out after {DOWNLOAD_TIMEOUT}s")
        if not result.ok:
            logger.error(f"Failed to download template: {result.output}")
            # Remove whatever partial file the failed download left behind
            await self.absent(spec)
            raise TemplateDownloadError(f"Failed to download template {spec.name}")

        logger.info(f"Template {spec.name} downloaded")

    async def absent(self, spec: TemplateRef) -> None:
        """Remove the template from the local cache."""
        result = await run_command(["pveam", "remove", spec.volid], check=False)
        if result.ok:
            logger.debug(f"Removed template {spec.volid}")

    async def validate_spec(self, spec: TemplateRef) -> bool:
        """Validate template reference."""
        if not spec.name.endswith(TEMPLATE_SUFFIXES):
            logger.error(f"Not a container template archive: {spec.name}")
            return False
        return True

    @staticmethod
    def node_name() -> str:
        """Proxmox node name of this host."""
        return socket.gethostname().split(".")[0]
