"""
Device Provider Abstraction
===========================

Abstract base class defining the contract every backend integration
(local grid, BrowserStack, Sauce Labs) implements:

    init()                -> idempotent connection setup (credentials, tunnel)
    get_mobile_session()  -> capabilities in, open RemoteSession out
    release_session()     -> close a session handed out earlier
    cleanup()             -> tear down whatever init() opened

Variants differ only in connection parameters, vendor namespace and the
vendor defaults they inject; the session flow itself lives here.

Usage:
    from harness.providers import ProviderRegistry

    registry = ProviderRegistry()
    provider = registry.get_provider("local")
    await provider.init()
    session = await provider.get_mobile_session({"platformName": "Android"})
    await provider.release_session(session)
    await provider.cleanup()
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional

from harness.capabilities import (
    CapsInput,
    Platform,
    detect_platform,
    merge_vendor_defaults,
    normalize_to_builder,
    to_capability_object,
)
from harness.config import Settings, get_settings
from harness.providers.tunnel import TunnelProcess
from harness.providers.webdriver import (
    Closeable,
    ConnectionParams,
    RemoteSession,
    open_remote_session,
)
from harness.utils.logger import get_logger

logger = get_logger(__name__)


class DeviceProvider(ABC):
    """
    Abstract base class for device providers.

    Attributes:
        name: Logical backend name (registry key).
        vendor_namespace: Capability key holding vendor options, if any.
        initialized: Whether init() has completed.
    """

    name: str = ""
    vendor_namespace: Optional[str] = None

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """
        Initialize provider and read connection settings.

        Args:
            settings: Harness settings (defaults to cached settings).
        """
        self.settings = settings or get_settings()
        self.initialized = False
        self._tunnel: Optional[TunnelProcess] = None
        self._init_lock = asyncio.Lock()

    @property
    @abstractmethod
    def connection(self) -> ConnectionParams:
        """Hub location and credentials for this backend."""
        pass

    def validate(self) -> None:
        """
        Check configuration before first use.

        Raises:
            ProviderConfigurationError: If required settings are missing.
        """
        pass

    def create_tunnel(self) -> Optional[TunnelProcess]:
        """Tunnel to start during init(), or None when no tunnel is managed here."""
        return None

    def vendor_defaults(self, platform: Platform) -> dict[str, Any]:
        """Defaults merged under :attr:`vendor_namespace` for each session."""
        return {}

    async def init(self) -> None:
        """
        Validate configuration and start the tunnel, once.

        Safe to call repeatedly and from concurrent fixtures.
        """
        async with self._init_lock:
            if self.initialized:
                return
            logger.debug("Initializing provider", provider=self.name)
            self.validate()
            tunnel = self.create_tunnel()
            if tunnel is not None:
                await tunnel.start()
                self._tunnel = tunnel
            self.initialized = True

    async def get_mobile_session(self, caps_input: CapsInput) -> RemoteSession:
        """
        Acquire a new mobile session.

        Args:
            caps_input: Raw mapping, CapabilitySet or CapabilityBuilder.

        Returns:
            Open RemoteSession; the caller owns it and must release it.
        """
        platform = detect_platform(caps_input)
        builder = normalize_to_builder(caps_input, platform)

        defaults = self.vendor_defaults(platform)
        if self.vendor_namespace and defaults:
            merge_vendor_defaults(builder, self.vendor_namespace, defaults)

        capabilities = to_capability_object(builder)
        logger.info("Acquiring mobile session", provider=self.name, platform=platform.value)
        return await self.open_session(capabilities)

    async def open_session(self, capabilities: dict[str, Any]) -> RemoteSession:
        """Negotiate the session on this backend's hub."""
        return await open_remote_session(
            self.connection,
            capabilities,
            timeout=self.settings.provider.session_timeout,
        )

    async def release_session(self, session: Optional[Closeable]) -> None:
        """Terminate a session previously returned by get_mobile_session(); None is a no-op."""
        if session is None:
            return
        logger.debug("Releasing session", provider=self.name, session=repr(session))
        await session.close()

    async def cleanup(self) -> None:
        """Stop the tunnel if init() started one."""
        logger.debug("Cleaning up provider", provider=self.name)
        tunnel, self._tunnel = self._tunnel, None
        if tunnel is not None:
            await tunnel.stop()
        self.initialized = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, initialized={self.initialized})"
