"""
Resource Ledger
===============

LIFO record of teardown obligations for one test.

Every acquisition pushes exactly one teardown closure. ``cleanup()``
runs them newest-first, logging and continuing past individual
failures, then cleans up each provider the ledger tracked.
"""

from collections.abc import Awaitable, Callable

from harness.providers import DeviceProvider
from harness.utils.logger import get_logger

logger = get_logger(__name__)

Teardown = Callable[[], Awaitable[None]]


class ResourceLedger:
    """Ordered teardown stack plus the providers it initialized."""

    def __init__(self) -> None:
        self._stack: list[tuple[str, Teardown]] = []
        self._providers: list[DeviceProvider] = []

    def push(self, teardown: Teardown, label: str = "resource") -> None:
        self._stack.append((label, teardown))

    def track_provider(self, provider: DeviceProvider) -> None:
        """Remember a provider for cleanup after all resources are gone."""
        if not any(provider is p for p in self._providers):
            self._providers.append(provider)

    @property
    def providers(self) -> list[DeviceProvider]:
        return list(self._providers)

    async def cleanup(self) -> None:
        """
        Run all teardowns in reverse order, then clean up providers.

        Never raises for a failing teardown; every remaining teardown
        still runs.
        """
        while self._stack:
            label, teardown = self._stack.pop()
            try:
                await teardown()
            except Exception as e:
                logger.warning("Teardown failed", resource=label, error=str(e))

        providers, self._providers = self._providers, []
        for provider in providers:
            try:
                await provider.cleanup()
            except Exception as e:
                logger.warning("Provider cleanup failed", provider=provider.name, error=str(e))

    def __len__(self) -> int:
        return len(self._stack)
