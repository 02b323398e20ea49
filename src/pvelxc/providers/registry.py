"""Provider registry for the template and container providers."""

import logging
from typing import Dict, List, Optional, Type, TYPE_CHECKING

from pvelxc.providers.base import BaseProvider
from pvelxc.providers.template import TemplateProvider
from pvelxc.providers.container import ContainerProvider

if TYPE_CHECKING:
    from pvelxc.models.config import LxcConfig


logger = logging.getLogger(__name__)

# Order matters: the container provider looks up the template provider
PROVIDER_CLASSES: Dict[str, Type[BaseProvider]] = {
    "template": TemplateProvider,
    "container": ContainerProvider,
}


class ProviderRegistry:
    """Builds the providers for one run and hands them to each other."""

    def __init__(self, provider_classes: Optional[Dict[str, Type[BaseProvider]]] = None):
        self._providers: Dict[str, BaseProvider] = {}
        self._provider_classes = dict(provider_classes or PROVIDER_CLASSES)

    async def initialize(self, config: "LxcConfig") -> None:
        """Instantiate every provider first, then initialize them against this registry."""
        self._providers = {name: cls() for name, cls in self._provider_classes.items()}

        for name, provider in self._providers.items():
            try:
                await provider.initialize(config, self)
            except Exception as e:
                logger.error(f"Failed to initialize provider {name}: {e}")
                raise
            logger.debug(f"Initialized provider: {name}")

    def get_provider(self, name: str) -> Optional[BaseProvider]:
        return self._providers.get(name)

    def require(self, name: str) -> BaseProvider:
        """Provider by name; raises RuntimeError when the registry lacks it."""
        provider = self._providers.get(name)
        if provider is None:
            raise RuntimeError(f"{name.capitalize()} provider not available")
        return provider

    @property
    def template(self) -> TemplateProvider:
        return self.require("template")

    @property
    def container(self) -> ContainerProvider:
        return self.require("container")

    def list_providers(self) -> List[str]:
        return list(self._providers)
