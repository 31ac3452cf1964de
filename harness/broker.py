"""
Device Broker
=============

Orchestration between one provider and the mobile adapter.

The broker takes its provider from the registry once, gates provider
initialization through :meth:`DeviceBroker.ensure_init`, and hands out
either a bound adapter (preferred) or a raw session for low-level use.

Usage:
    broker = DeviceBroker(registry)
    adapter = await broker.get_mobile_adapter({"platformName": "Android"})
    await adapter.execute("tap", {"selector": "~login"})
    await adapter.teardown()
    await broker.cleanup()
"""

import asyncio
from typing import Optional

from harness.adapters import AdapterKind, MobileDriverAdapter, create_adapter
from harness.capabilities import CapsInput
from harness.providers import Closeable, DeviceProvider, ProviderRegistry, RemoteSession
from harness.utils.logger import get_logger

logger = get_logger(__name__)


class DeviceBroker:
    """
    Single entry point for mobile sessions on one backend.

    Attributes:
        provider: Provider obtained from the registry at construction.
        initialized: Whether ensure_init() has completed.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        provider_name: Optional[str] = None,
    ) -> None:
        self.provider: DeviceProvider = registry.get_provider(provider_name)
        self.initialized = False
        self._init_lock = asyncio.Lock()

    async def ensure_init(self) -> None:
        """Initialize the provider once; later calls return immediately."""
        if self.initialized:
            return
        async with self._init_lock:
            if self.initialized:
                return
            await self.provider.init()
            self.initialized = True
            logger.debug("Broker ready", provider=self.provider.name)

    async def get_mobile_adapter(self, options: CapsInput) -> MobileDriverAdapter:
        """
        Acquire a session and return a mobile adapter bound to it.

        The caller owns the adapter; tearing it down closes the session.
        """
        session = await self.get_mobile_session(options)
        adapter = create_adapter(AdapterKind.MOBILE_DRIVER)
        try:
            await adapter.bind(session)
        except BaseException:
            await self.release_session(session)
            raise
        return adapter

    async def get_mobile_session(self, options: CapsInput) -> RemoteSession:
        """Acquire a raw session; release it with release_session()."""
        await self.ensure_init()
        return await self.provider.get_mobile_session(options)

    async def release_session(self, session: Optional[Closeable]) -> None:
        await self.provider.release_session(session)

    async def cleanup(self) -> None:
        """Tear down provider-level resources (tunnels)."""
        await self.ensure_init()
        await self.provider.cleanup()
        self.initialized = False
