"""Provisioning sequence."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Set

from pvelxc.errors import ContainerCreateError, TemplateNotFoundError, VmidCollisionError
from pvelxc.guest.configurator import GuestConfigurator
from pvelxc.guest.executor import GuestExecutor
from pvelxc.models.config import LxcConfig
from pvelxc.models.container import ContainerSpec
from pvelxc.models.report import RunSummary, StepOutcome
from pvelxc.models.template import TemplateRef
from pvelxc.notify.mailer import Mailer
from pvelxc.notify.report import ReportBuilder
from pvelxc.providers import ProviderRegistry
from pvelxc.provision.dependencies import DependencyChecker
from pvelxc.provision.vmid import VmidAllocator


logger = logging.getLogger(__name__)


class ProvisionEngine:
    """Runs the ordered provisioning steps against one container.

    Fatal problems (template resolution, download, creation) raise a
    ProvisionError. Everything after creation is best-effort and lands in the
    returned RunSummary as step outcomes.
    """

    def __init__(
        self,
        config: LxcConfig,
        provider_registry: ProviderRegistry,
        executor: GuestExecutor,
        report_dir: Path,
        allocator: Optional[VmidAllocator] = None,
        dependency_checker: Optional[DependencyChecker] = None,
        mailer: Optional[Mailer] = None,
    ):
        """Initialize provisioning engine."""
        self.config = config
        self.provider_registry = provider_registry
        self.executor = executor
        self.report_dir = Path(report_dir)
        self.allocator = allocator or VmidAllocator(config.vmid_floor)
        self.dependency_checker = dependency_checker or DependencyChecker()
        self.mailer = mailer or Mailer(config)

    async def run(self) -> RunSummary:
        """Provision the container and return every step outcome."""
        start_time = datetime.now()
        logger.info("Starting Alpine LXC creation process...")
        summary = RunSummary(hostname=self.config.hostname)

        template = await self.prepare_template(summary)
        spec = await self.create_container(template, summary)
        summary.vmid = spec.vmid

        container_provider = self.provider_registry.container
        summary.add(await container_provider.ensure_raw_config(spec))
        summary.add(await container_provider.start(spec))
        summary.add(await self.dependency_checker.load_tun_module())

        configurator = GuestConfigurator(self.executor, self.config, spec.vmid)
        summary.extend(await configurator.configure())

        await self.publish_report(summary)

        duration = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Provisioning of {self.config.hostname} ({spec.vmid}) finished in {duration:.0f}s "
            f"with {len(summary.warnings)} warning(s)"
        )
        return summary

    async def prepare_template(self, summary: RunSummary) -> TemplateRef:
        """Resolve the newest matching template and make sure it is cached."""
        template_provider = self.provider_registry.template

        logger.info("Checking Alpine Linux template...")
        if not self.config.template_url:
            summary.add(await template_provider.refresh())

        template = await template_provider.resolve()
        if not await template_provider.validate_spec(template):
            raise TemplateNotFoundError(f"Not a usable template: {template.name}")

        await template_provider.present(template)
        summary.add(StepOutcome.ok("template"))
        return template

    async def create_container(self, template: TemplateRef, summary: RunSummary) -> ContainerSpec:
        """Create the container, retrying with a fresh VMID on collisions."""
        container_provider = self.provider_registry.container

        auto_vmid = self.config.vmid is None
        excluded: Set[int] = set()
        vmid = await self.allocator.allocate(self.config)

        spec = ContainerSpec.from_config(vmid, template, self.config)
        if not await container_provider.validate_spec(spec):
            raise ContainerCreateError(f"Invalid container configuration for {self.config.hostname}")

        for attempt in range(1, self.config.create_attempts + 1):
            spec = spec.with_vmid(vmid)

            if auto_vmid and await container_provider.is_present(spec):
                logger.warning(f"VMID {vmid} was taken after allocation, selecting another")
                excluded.add(vmid)
                vmid = await self.allocator.allocate(self.config, exclude=excluded)
                continue

            try:
                created = await container_provider.present(spec)
            except VmidCollisionError as e:
                if not auto_vmid:
                    raise
                logger.warning(f"{e} (attempt {attempt}/{self.config.create_attempts})")
                excluded.add(vmid)
                vmid = await self.allocator.allocate(self.config, exclude=excluded)
                continue

            if created:
                summary.add(StepOutcome.ok("create container"))
            else:
                summary.add(StepOutcome.skipped("create container", f"container {vmid} already exists"))
            return spec

        raise ContainerCreateError(
            f"No free VMID found after {self.config.create_attempts} attempt(s)"
        )

    async def publish_report(self, summary: RunSummary) -> None:
        """Build the report, store it on host and guest, and notify."""
        logger.info("Getting container network information...")
        await asyncio.sleep(self.config.settle_delay)

        builder = ReportBuilder(self.executor, self.config, summary.vmid)
        container_ip = await builder.container_ip()
        packages = await builder.package_sample()

        logger.info("Creating summary report...")
        timestamp = datetime.now()
        report = builder.render(summary, container_ip, packages, timestamp)
        summary.report = report

        try:
            path = await builder.write_local(report, self.report_dir, timestamp)
            summary.report_path = str(path)
        except OSError as e:
            logger.warning(f"Failed to write local report: {e}")
            summary.add(StepOutcome.warning("local report", str(e)))

        summary.add(await builder.push(report, timestamp))

        if self.config.unattended:
            summary.add(await self.mailer.notify(
                f"LXC Container Created: {self.config.hostname}", report
            ))
