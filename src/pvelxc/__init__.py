"""
pvelxc - Alpine Linux LXC provisioning for Proxmox VE.

Creates an unprivileged Alpine container with Docker, Tailscale and a
development shell, then reports the result and optionally emails it.
"""

__version__ = "1.0.0"
__author__ = "pvelxc Development Team"

# Re-export key components for easier access
from pvelxc.models.config import LxcConfig
from pvelxc.models.container import ContainerSpec
from pvelxc.models.template import TemplateRef
from pvelxc.models.report import RunSummary, StepOutcome

__all__ = [
    "LxcConfig",
    "ContainerSpec",
    "TemplateRef",
    "RunSummary",
    "StepOutcome",
]
