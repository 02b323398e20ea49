"""Resource providers for pvelxc."""

from pvelxc.providers.base import BaseProvider, ProviderStatus
from pvelxc.providers.registry import ProviderRegistry

__all__ = [
    "BaseProvider",
    "ProviderStatus",
    "ProviderRegistry",
]
