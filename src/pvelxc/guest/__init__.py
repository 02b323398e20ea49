"""In-container configuration."""

from pvelxc.guest.executor import GuestExecutor, PctExecutor
from pvelxc.guest.configurator import GuestConfigurator

__all__ = [
    "GuestExecutor",
    "PctExecutor",
    "GuestConfigurator",
]
