"""
Mobile Driver Adapter
=====================

Adapter issuing W3C / Appium commands over a :class:`RemoteSession`.

Selectors follow the usual Appium shorthand:

    ~login                         -> accessibility id
    //android.widget.Button        -> xpath (also "(" prefixed and "xpath=")
    id=com.app:id/submit           -> id
    -android uiautomator:...       -> Android UiAutomator
    -ios predicate string:...      -> iOS predicate
    -ios class chain:...           -> iOS class chain
    anything else                  -> css selector (webviews)
"""

import base64
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from harness.adapters.base import Adapter, AdapterState, optional_ms, require_params
from harness.exceptions import AdapterBindError, ConfigurationError, SessionError
from harness.providers.webdriver import ConnectionParams, RemoteSession, open_remote_session
from harness.utils.logger import get_logger

logger = get_logger(__name__)

_STRATEGY_PREFIXES = (
    ("-android uiautomator:", "-android uiautomator"),
    ("-ios predicate string:", "-ios predicate string"),
    ("-ios class chain:", "-ios class chain"),
    ("xpath=", "xpath"),
    ("id=", "id"),
    ("css=", "css selector"),
)


class MobileAction(str, Enum):
    """Verbs understood by the mobile driver adapter."""

    TAP = "tap"
    SET_VALUE = "setValue"
    GET_TEXT = "getText"
    WAIT_FOR_ELEMENT = "waitForElement"
    SCREENSHOT = "screenshot"
    TITLE = "title"
    URL = "url"
    LAUNCH_APP = "launchApp"
    TERMINATE_APP = "terminateApp"


def to_locator(selector: str) -> tuple[str, str]:
    """Translate a selector string into a W3C (strategy, value) pair."""
    if selector.startswith("~"):
        return "accessibility id", selector[1:]
    if selector.startswith("//") or selector.startswith("("):
        return "xpath", selector
    for prefix, strategy in _STRATEGY_PREFIXES:
        if selector.startswith(prefix):
            return strategy, selector[len(prefix):]
    return "css selector", selector


class MobileDriverAdapter(Adapter):
    """Adapter for native and hybrid app sessions."""

    actions = MobileAction

    def __init__(self) -> None:
        super().__init__()
        self._session: Optional[RemoteSession] = None

    @property
    def session(self) -> RemoteSession:
        """The bound remote session."""
        self._ensure_bound()
        return self._session

    async def init(self, options: Optional[Mapping[str, Any]] = None) -> None:
        """
        Open a fresh session directly against a hub.

        Args:
            options: ``capabilities`` (required), plus ``protocol``,
                ``hostname``, ``port``, ``path``, ``user``, ``key`` and
                ``timeout``. Defaults target a local Appium server.

        Raises:
            ConfigurationError: If no capabilities are given.
        """
        self._ensure_unbound()
        options = dict(options or {})
        capabilities = options.get("capabilities")
        if not capabilities:
            raise ConfigurationError("MobileDriverAdapter.init requires options['capabilities']")

        connection = ConnectionParams(
            protocol=options.get("protocol", "http"),
            host=options.get("hostname", "localhost"),
            port=int(options.get("port", 4723)),
            path=options.get("path", "/"),
            username=options.get("user", ""),
            access_key=options.get("key", ""),
        )
        self._session = await open_remote_session(
            connection,
            dict(capabilities),
            timeout=float(options.get("timeout", 120.0)),
        )
        self.state = AdapterState.BOUND

    async def bind(self, session: Union[RemoteSession, Mapping[str, Any]]) -> None:
        """
        Adopt a session a provider opened.

        Accepts the session itself or a mapping with a ``driver`` entry.

        Raises:
            AdapterBindError: If no open RemoteSession is given.
        """
        self._ensure_unbound()
        if isinstance(session, Mapping):
            session = session.get("driver")
        if not isinstance(session, RemoteSession):
            raise AdapterBindError(
                f"MobileDriverAdapter.bind: expected a RemoteSession, got {type(session).__name__}"
            )
        if session.closed:
            raise AdapterBindError("MobileDriverAdapter.bind: session is already closed")

        self._session = session
        self.state = AdapterState.BOUND
        logger.debug("Mobile session bound", session_id=session.session_id)

    async def navigate(self, target: str) -> None:
        self._ensure_bound()
        await self._session.navigate_to(target)

    async def _close(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            await session.close()
        except Exception as e:
            logger.debug("Session close failed", error=str(e))

    # ── Helpers ───────────────────────────────────────────────────

    async def _find(self, selector: str) -> str:
        using, value = to_locator(selector)
        return await self._session.find_element(using, value)

    def _app_argument(self, app_id: str) -> dict[str, str]:
        platform = str(self._session.capabilities.get("platformName", "")).lower()
        key = "bundleId" if "ios" in platform else "appId"
        return {key: app_id}

    # ── Action handlers ───────────────────────────────────────────

    async def _tap(self, params: Mapping[str, Any]) -> None:
        (selector,) = require_params(MobileAction.TAP, params, "selector")
        await self._session.click_element(await self._find(selector))

    async def _set_value(self, params: Mapping[str, Any]) -> None:
        selector, value = require_params(MobileAction.SET_VALUE, params, "selector", "value")
        ref = await self._find(selector)
        await self._session.clear_element(ref)
        await self._session.send_keys(ref, str(value))

    async def _get_text(self, params: Mapping[str, Any]) -> str:
        (selector,) = require_params(MobileAction.GET_TEXT, params, "selector")
        return await self._session.element_text(await self._find(selector))

    async def _wait_for_element(self, params: Mapping[str, Any]) -> bool:
        """
        Wait using the server's implicit wait, then check visibility.

        ``timeoutMs`` (or ``timeout``) is in milliseconds, default 10000.
        """
        (selector,) = require_params(MobileAction.WAIT_FOR_ELEMENT, params, "selector")
        timeout = optional_ms(MobileAction.WAIT_FOR_ELEMENT, params, "timeoutMs", "timeout")
        implicit = 10000 if timeout is None else int(timeout)
        await self._session.command("POST", "/timeouts", {"implicit": implicit})
        try:
            ref = await self._find(selector)
        except SessionError as e:
            if e.status == 404:
                return False
            raise
        finally:
            await self._session.command("POST", "/timeouts", {"implicit": 0})
        return await self._session.element_displayed(ref)

    async def _screenshot(self, params: Mapping[str, Any]) -> bytes:
        data = base64.b64decode(await self._session.screenshot())
        path = params.get("path")
        if path:
            Path(path).write_bytes(data)
        return data

    async def _title(self, params: Mapping[str, Any]) -> str:
        return await self._session.title()

    async def _url(self, params: Mapping[str, Any]) -> str:
        return await self._session.current_url()

    async def _launch_app(self, params: Mapping[str, Any]) -> None:
        (app_id,) = require_params(MobileAction.LAUNCH_APP, params, "appId")
        await self._session.execute_script("mobile: activateApp", [self._app_argument(app_id)])

    async def _terminate_app(self, params: Mapping[str, Any]) -> None:
        (app_id,) = require_params(MobileAction.TERMINATE_APP, params, "appId")
        await self._session.execute_script("mobile: terminateApp", [self._app_argument(app_id)])

    handlers = {
        MobileAction.TAP: _tap,
        MobileAction.SET_VALUE: _set_value,
        MobileAction.GET_TEXT: _get_text,
        MobileAction.WAIT_FOR_ELEMENT: _wait_for_element,
        MobileAction.SCREENSHOT: _screenshot,
        MobileAction.TITLE: _title,
        MobileAction.URL: _url,
        MobileAction.LAUNCH_APP: _launch_app,
        MobileAction.TERMINATE_APP: _terminate_app,
    }
