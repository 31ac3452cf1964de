"""
Web Engine Adapter
==================

Adapter over the Playwright async API.

``init()`` launches a browser, context and page owned by the adapter;
``bind()`` adopts handles a caller already has. Selectors are passed
through to Playwright unchanged.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from harness.adapters.base import Adapter, AdapterState, optional_ms, require_params
from harness.exceptions import AdapterBindError, ConfigurationError
from harness.utils.logger import get_logger

logger = get_logger(__name__)

BROWSER_ENGINES = ("chromium", "firefox", "webkit")


class WebAction(str, Enum):
    """Verbs understood by the web engine adapter."""

    CLICK = "click"
    FILL = "fill"
    TYPE = "type"
    GET_TEXT = "getText"
    WAIT_FOR_SELECTOR = "waitForSelector"
    SCREENSHOT = "screenshot"
    TITLE = "title"
    URL = "url"


@dataclass
class WebSession:
    """Handles a caller can hand to :meth:`WebEngineAdapter.bind`."""

    page: Optional[Page] = None
    context: Optional[BrowserContext] = None
    browser: Optional[Browser] = None


class WebEngineAdapter(Adapter):
    """Playwright-backed adapter for browser sessions."""

    actions = WebAction

    def __init__(self) -> None:
        super().__init__()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def page(self) -> Page:
        """The bound page, for page objects."""
        self._ensure_bound()
        return self._page

    async def init(self, options: Optional[Mapping[str, Any]] = None) -> None:
        """
        Launch a browser and open one page.

        Args:
            options: ``browser`` (chromium/firefox/webkit, default chromium),
                ``headless``, ``launch_options`` and ``context_options``.
        """
        self._ensure_unbound()
        options = dict(options or {})
        engine = options.get("browser", "chromium")
        if engine not in BROWSER_ENGINES:
            raise ConfigurationError(
                f"Unknown browser engine {engine!r}; expected one of {', '.join(BROWSER_ENGINES)}"
            )

        launch_options = dict(options.get("launch_options") or {})
        if "headless" in options:
            launch_options["headless"] = options["headless"]

        self._playwright = await async_playwright().start()
        try:
            browser_type = getattr(self._playwright, engine)
            self._browser = await browser_type.launch(**launch_options)
            self._context = await self._browser.new_context(**(options.get("context_options") or {}))
            self._page = await self._context.new_page()
        except BaseException:
            await self._close()
            raise

        self.state = AdapterState.BOUND
        logger.info("Browser launched", engine=engine)

    async def bind(self, session: Union[WebSession, Mapping[str, Any]]) -> None:
        """
        Adopt an existing page, context or browser.

        A page resolves its context and browser; a context resolves its
        browser; a bare browser gets a fresh context and page.

        Raises:
            AdapterBindError: If the handles cannot be resolved to a browser.
        """
        self._ensure_unbound()
        if isinstance(session, Mapping):
            try:
                session = WebSession(**session)
            except TypeError as e:
                raise AdapterBindError(f"WebEngineAdapter.bind: {e}") from e
        if not isinstance(session, WebSession):
            raise AdapterBindError(
                f"WebEngineAdapter.bind: expected page/context/browser, got {type(session).__name__}"
            )

        page, context, browser = session.page, session.context, session.browser
        if page is not None:
            context = context or page.context
            browser = browser or context.browser
            if browser is None:
                raise AdapterBindError("WebEngineAdapter.bind: page has no browser")
        elif context is not None:
            browser = browser or context.browser
            if browser is None:
                raise AdapterBindError("WebEngineAdapter.bind: context has no browser")
            page = await context.new_page()
        elif browser is not None:
            context = await browser.new_context()
            page = await context.new_page()
        else:
            raise AdapterBindError("WebEngineAdapter.bind: no page, context or browser given")

        self._page, self._context, self._browser = page, context, browser
        self.state = AdapterState.BOUND
        logger.debug("Web session bound")

    async def navigate(self, target: str) -> None:
        self._ensure_bound()
        await self._page.goto(target, wait_until="domcontentloaded")

    async def _close(self) -> None:
        for label in ("_page", "_context", "_browser"):
            handle = getattr(self, label)
            setattr(self, label, None)
            if handle is None:
                continue
            try:
                await handle.close()
            except Exception as e:
                logger.debug("Close failed", handle=label.lstrip("_"), error=str(e))

        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.debug("Playwright stop failed", error=str(e))

    # ── Action handlers ───────────────────────────────────────────

    async def _click(self, params: Mapping[str, Any]) -> None:
        (selector,) = require_params(WebAction.CLICK, params, "selector")
        await self._page.locator(selector).click()

    async def _fill(self, params: Mapping[str, Any]) -> None:
        selector, value = require_params(WebAction.FILL, params, "selector", "value")
        await self._page.locator(selector).fill(str(value))

    async def _type(self, params: Mapping[str, Any]) -> None:
        selector, text = require_params(WebAction.TYPE, params, "selector", "text")
        delay = optional_ms(WebAction.TYPE, params, "delayMs", "delay") or 0
        locator = self._page.locator(selector)
        if delay:
            await locator.press_sequentially(str(text), delay=delay)
        else:
            await locator.fill(str(text))

    async def _get_text(self, params: Mapping[str, Any]) -> str:
        (selector,) = require_params(WebAction.GET_TEXT, params, "selector")
        return await self._page.locator(selector).text_content() or ""

    async def _wait_for_selector(self, params: Mapping[str, Any]) -> bool:
        (selector,) = require_params(WebAction.WAIT_FOR_SELECTOR, params, "selector")
        await self._page.locator(selector).wait_for(
            state=params.get("state", "visible"),
            timeout=optional_ms(WebAction.WAIT_FOR_SELECTOR, params, "timeoutMs", "timeout"),
        )
        return True

    async def _screenshot(self, params: Mapping[str, Any]) -> bytes:
        return await self._page.screenshot(
            path=params.get("path"),
            full_page=bool(params.get("fullPage", False)),
        )

    async def _title(self, params: Mapping[str, Any]) -> str:
        return await self._page.title()

    async def _url(self, params: Mapping[str, Any]) -> str:
        return self._page.url

    handlers = {
        WebAction.CLICK: _click,
        WebAction.FILL: _fill,
        WebAction.TYPE: _type,
        WebAction.GET_TEXT: _get_text,
        WebAction.WAIT_FOR_SELECTOR: _wait_for_selector,
        WebAction.SCREENSHOT: _screenshot,
        WebAction.TITLE: _title,
        WebAction.URL: _url,
    }
