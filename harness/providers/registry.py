"""
Provider Registry
=================

Selects and memoizes one provider instance per backend name.

The registry is an explicit object: create one per test session (the
pytest plugin does this) and pass it to brokers and fixtures. Callers
never construct providers directly.

Usage:
    async with ProviderRegistry() as registry:
        provider = registry.get_provider()          # configured backend
        same = registry.get_provider("LOCAL")       # same instance for "local"
"""

from collections.abc import Callable
from enum import Enum
from typing import Any, Optional

from harness.config import Settings, get_settings
from harness.providers.base import DeviceProvider
from harness.providers.browserstack import BrowserStackProvider
from harness.providers.local import LocalProvider
from harness.providers.saucelabs import SauceLabsProvider
from harness.utils.logger import get_logger

logger = get_logger(__name__)

ProviderFactory = Callable[[Settings], DeviceProvider]


class ProviderName(str, Enum):
    """Known backend names."""

    LOCAL = "local"
    BROWSERSTACK = "browserstack"
    SAUCELABS = "saucelabs"


_ALIASES: dict[str, ProviderName] = {
    "sauce": ProviderName.SAUCELABS,
}

_DEFAULT_FACTORIES: dict[ProviderName, ProviderFactory] = {
    ProviderName.LOCAL: LocalProvider,
    ProviderName.BROWSERSTACK: BrowserStackProvider,
    ProviderName.SAUCELABS: SauceLabsProvider,
}


def resolve_provider_name(name: Optional[str]) -> tuple[str, ProviderName]:
    """
    Normalize a configured backend name.

    Returns:
        (cache key, backend variant). Unknown names keep their own cache
        key but resolve to the local variant.
    """
    key = (name or ProviderName.LOCAL.value).strip().lower() or ProviderName.LOCAL.value
    if key in _ALIASES:
        variant = _ALIASES[key]
        return variant.value, variant
    try:
        return key, ProviderName(key)
    except ValueError:
        return key, ProviderName.LOCAL


class ProviderRegistry:
    """
    Process- or session-scoped cache of provider instances.

    Attributes:
        settings: Settings passed to every provider constructed here.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        factories: Optional[dict[ProviderName, ProviderFactory]] = None,
    ) -> None:
        """
        Args:
            settings: Harness settings (defaults to cached settings).
            factories: Override constructors per backend (tests use this).
        """
        self.settings = settings or get_settings()
        self._factories = {**_DEFAULT_FACTORIES, **(factories or {})}
        self._instances: dict[str, DeviceProvider] = {}

    def get_provider(self, name: Optional[str] = None) -> DeviceProvider:
        """
        Return the provider for ``name`` (or the configured backend).

        The lookup-or-insert below contains no await, so concurrent
        acquisitions can never build two providers for the same name.
        """
        key, variant = resolve_provider_name(name or self.settings.provider.device_provider)

        provider = self._instances.get(key)
        if provider is not None:
            return provider

        if variant.value != key:
            logger.warning("Unknown provider, falling back to local", provider=key)

        provider = self._factories[variant](self.settings)
        self._instances[key] = provider
        logger.debug("Provider created", provider=key, variant=variant.value)
        return provider

    def providers(self) -> list[DeviceProvider]:
        """Distinct cached provider instances, in creation order."""
        seen: list[DeviceProvider] = []
        for provider in self._instances.values():
            if not any(provider is p for p in seen):
                seen.append(provider)
        return seen

    async def shutdown(self) -> None:
        """Clean up every cached provider (best-effort) and clear the cache."""
        providers = self.providers()
        self._instances.clear()
        for provider in providers:
            try:
                await provider.cleanup()
            except Exception as e:
                logger.warning("Provider cleanup failed", provider=provider.name, error=str(e))

    def __len__(self) -> int:
        return len(self._instances)

    async def __aenter__(self) -> "ProviderRegistry":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.shutdown()
