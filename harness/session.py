"""
Harness Session
===============

Per-test facade that acquires web, mobile and API resources and records
one teardown for each in a :class:`ResourceLedger`.

Mobile acquisitions push a single closure that tears the adapter down
and then releases the session through its provider, so the two can
never be separated. ``cleanup()`` unwinds newest-first and then cleans
up every provider this session initialized.

Usage:
    async with harness_session() as session:
        web = await session.web(browser="chromium")
        await web.navigate("https://example.com")

        app = await session.mobile(CapabilityBuilder.android().device_name("Pixel 7"))
        await app.execute("tap", {"selector": "~login"})
"""

from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from typing import Any, Optional, TypeVar, Union

from playwright.async_api import Page

from harness.adapters import (
    AdapterKind,
    MobileDriverAdapter,
    WebEngineAdapter,
    create_adapter,
)
from harness.api import ApiClient, ApiResponse, BuiltRequest, send
from harness.capabilities import CapsInput
from harness.config import Settings, get_settings
from harness.ledger import ResourceLedger
from harness.providers import DeviceProvider, ProviderRegistry
from harness.utils.logger import LogContext, get_logger

logger = get_logger(__name__)

PageT = TypeVar("PageT")


class HarnessSession:
    """
    Resource-tracking facade handed to tests.

    Attributes:
        registry: Provider registry shared across sessions.
        settings: Harness settings.
        ledger: Outstanding teardowns for this session.
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or (registry.settings if registry else get_settings())
        self.registry = registry or ProviderRegistry(self.settings)
        self.ledger = ResourceLedger()

    async def _provider(self, name: Optional[str]) -> DeviceProvider:
        provider = self.registry.get_provider(name)
        await provider.init()
        self.ledger.track_provider(provider)
        return provider

    # ── Web ───────────────────────────────────────────────────────

    async def web(self, **opts: Any) -> WebEngineAdapter:
        """Launch a browser owned by this session."""
        adapter = create_adapter(AdapterKind.WEB_ENGINE)
        await adapter.init(opts)
        self.ledger.push(adapter.teardown, "web")
        return adapter

    async def pages(self, page_cls: Callable[[Page], PageT], **opts: Any) -> PageT:
        """Launch a browser and wrap its page in a page object."""
        adapter = await self.web(**opts)
        return page_cls(adapter.page)

    # ── Mobile ────────────────────────────────────────────────────

    async def mobile(self, caps: CapsInput, provider: Optional[str] = None) -> MobileDriverAdapter:
        """
        Acquire a mobile session from a provider and bind an adapter to it.

        Args:
            caps: Raw mapping, CapabilitySet or CapabilityBuilder.
            provider: Backend name; defaults to the configured provider.
        """
        backend = await self._provider(provider)
        with LogContext(provider=backend.name):
            remote = await backend.get_mobile_session(caps)

            adapter = create_adapter(AdapterKind.MOBILE_DRIVER)

            async def teardown() -> None:
                try:
                    await adapter.teardown()
                finally:
                    await backend.release_session(remote)

            self.ledger.push(teardown, f"mobile:{backend.name}")
            await adapter.bind(remote)
            logger.info("Mobile session bound", session_id=remote.session_id)
        return adapter

    # ── API ───────────────────────────────────────────────────────

    def api(
        self,
        base_url: Optional[str] = None,
        default_headers: Optional[Mapping[str, str]] = None,
    ) -> ApiClient:
        """Create an ApiClient disposed with this session."""
        client = ApiClient(
            base_url or self.settings.environment.api_url,
            default_headers,
            timeout=self.settings.environment.api_timeout,
        )
        self.ledger.push(client.dispose, "api")
        return client

    async def api_send(
        self,
        client_or_config: Union[ApiClient, Mapping[str, Any]],
        request: BuiltRequest,
    ) -> ApiResponse:
        """
        Send a built request.

        Args:
            client_or_config: An ApiClient, or ``{"base_url": ..., "default_headers": ...}``
                to create one tracked by this session.
            request: Request from RequestBuilder.build().
        """
        if isinstance(client_or_config, ApiClient):
            client = client_or_config
        else:
            client = self.api(
                client_or_config.get("base_url"),
                client_or_config.get("default_headers"),
            )
        return await send(client, request)

    # ── Cleanup ───────────────────────────────────────────────────

    async def cleanup(self) -> None:
        """Release everything acquired through this session."""
        logger.debug("Session cleanup", resources=len(self.ledger))
        await self.ledger.cleanup()


@asynccontextmanager
async def harness_session(
    registry: Optional[ProviderRegistry] = None,
    settings: Optional[Settings] = None,
) -> AsyncIterator[HarnessSession]:
    """Yield a HarnessSession and clean it up on every exit path."""
    session = HarnessSession(registry, settings)
    try:
        yield session
    finally:
        await session.cleanup()
