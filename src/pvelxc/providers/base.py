"""Provider interface shared by the template and container providers."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel


class ProviderStatus(Enum):
    """State of a Proxmox resource as seen by its provider."""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"
    ERROR = "error"


class BaseProvider(ABC):
    """A Proxmox resource that can be queried, created and removed.

    present() must be safe to call again for a resource that already exists.
    absent() removes only what this provider would have created.
    """

    name: str = ""

    @abstractmethod
    async def initialize(self, config: Any, registry: Optional[Any] = None):
        """Read settings from the loaded configuration."""

    @abstractmethod
    async def status(self, spec: BaseModel) -> ProviderStatus:
        """Report whether the resource exists on this host."""

    @abstractmethod
    async def present(self, spec: BaseModel) -> Any:
        """Create the resource unless it already exists."""

    @abstractmethod
    async def absent(self, spec: BaseModel) -> None:
        """Remove the resource if it exists."""

    @abstractmethod
    async def validate_spec(self, spec: BaseModel) -> bool:
        """Check a specification before anything is changed on the host."""

    async def is_present(self, spec: BaseModel) -> bool:
        return await self.status(spec) == ProviderStatus.PRESENT
