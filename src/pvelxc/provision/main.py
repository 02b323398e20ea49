"""Top-level provisioning run."""

import logging
import os
from pathlib import Path
from typing import Optional

from pvelxc.guest.executor import GuestExecutor, PctExecutor
from pvelxc.models.config import LxcConfig
from pvelxc.models.report import RunSummary
from pvelxc.providers import ProviderRegistry
from pvelxc.provision.config import ConfigManager, DEFAULT_CONFIG_NAME
from pvelxc.provision.dependencies import DependencyChecker
from pvelxc.provision.engine import ProvisionEngine
from pvelxc.utils.logging import setup_logging


logger = logging.getLogger(__name__)


def default_config_path() -> Path:
    """Config file location, overridable through PVELXC_CONFIG."""
    return Path(os.environ.get("PVELXC_CONFIG", DEFAULT_CONFIG_NAME))


class Provisioner:
    """Wires dependency checks, configuration and the provisioning engine."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        attended: Optional[bool] = None,
        executor: Optional[GuestExecutor] = None,
        dependency_checker: Optional[DependencyChecker] = None,
        log_level: Optional[str] = None,
    ):
        """Initialize the provisioner."""
        self.config_manager = ConfigManager(config_path or default_config_path())
        self.attended = attended
        self.executor = executor or PctExecutor()
        self.dependency_checker = dependency_checker or DependencyChecker()
        self.config: Optional[LxcConfig] = None
        self.log_level = log_level
        self.first_run = False

    async def initialize(self) -> bool:
        """Check host tools and load configuration. False on a first run."""
        await self.dependency_checker.check()

        if self.config_manager.ensure_exists():
            self.first_run = True
            return False

        logger.info("Validating configuration...")
        config = await self.config_manager.load()
        if self.attended is not None:
            config = config.model_copy(update={"attended": self.attended})
        self.config = config

        setup_logging(self.log_level or config.log_level)
        return True

    async def run(self) -> Optional[RunSummary]:
        """Provision the configured container. None when a default config was written."""
        if not await self.initialize():
            return None

        registry = ProviderRegistry()
        await registry.initialize(self.config)

        engine = ProvisionEngine(
            config=self.config,
            provider_registry=registry,
            executor=self.executor,
            report_dir=self.report_dir,
            dependency_checker=self.dependency_checker,
        )
        return await engine.run()

    @property
    def report_dir(self) -> Path:
        if self.config and self.config.report_dir:
            return Path(self.config.report_dir)
        return self.config_manager.config_path.resolve().parent
