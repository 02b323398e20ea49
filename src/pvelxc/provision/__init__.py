"""Host-side provisioning sequence."""

from pvelxc.provision.config import ConfigManager
from pvelxc.provision.engine import ProvisionEngine
from pvelxc.provision.main import Provisioner

__all__ = [
    "ConfigManager",
    "ProvisionEngine",
    "Provisioner",
]
