"""Fatal provisioning errors.

Anything raised from this module aborts the run with exit code 1. Best-effort
failures never raise; they are recorded as step outcomes instead.
"""


class ProvisionError(Exception):
    """Base class for errors that abort provisioning."""


class ConfigError(ProvisionError):
    """Configuration file is unreadable or invalid."""


class DependencyError(ProvisionError):
    """A required host tool is missing and could not be installed."""


class TemplateNotFoundError(ProvisionError):
    """No catalog entry matched the template pattern."""


class TemplateDownloadError(ProvisionError):
    """The selected template could not be downloaded into the cache."""


class ContainerCreateError(ProvisionError):
    """The container could not be created."""


class VmidCollisionError(ContainerCreateError):
    """Another guest claimed the VMID between allocation and creation."""
