"""
W3C WebDriver Session Client
============================

Thin aiohttp client for the W3C WebDriver / Appium REST protocol.

Providers open sessions through :func:`open_remote_session`; the returned
:class:`RemoteSession` is the handle that travels to adapters and back to
the provider for release. Every handle satisfies :class:`Closeable`, so
release logic never needs to inspect the handle's shape.

Usage:
    connection = ConnectionParams(protocol="http", host="localhost", port=4723, path="/wd/hub")
    session = await open_remote_session(connection, {"platformName": "Android"})
    await session.navigate_to("https://example.com")
    await session.close()
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

import aiohttp

from harness.exceptions import SessionError
from harness.utils.logger import get_logger
from harness.utils.security import mask_sensitive, sanitize_for_logging

logger = get_logger(__name__)

# W3C element reference key, plus the legacy JSONWire key some grids still return
W3C_ELEMENT_KEY = "element-6066-11e4-a23c-4ef33f3a5e86"
LEGACY_ELEMENT_KEY = "ELEMENT"


@runtime_checkable
class Closeable(Protocol):
    """Anything a provider hands out must be closeable exactly this way."""

    async def close(self) -> None: ...


@dataclass(frozen=True)
class ConnectionParams:
    """
    Where and how to reach a WebDriver hub.

    Attributes:
        protocol: "http" or "https".
        host: Hub hostname.
        port: Hub port.
        path: Base path (e.g. "/wd/hub").
        username: Basic auth user (empty for unauthenticated grids).
        access_key: Basic auth password.
    """

    protocol: str
    host: str
    port: int
    path: str = "/wd/hub"
    username: str = ""
    access_key: str = ""

    @property
    def hub_url(self) -> str:
        """Base URL of the hub, without trailing slash."""
        path = self.path.rstrip("/")
        return f"{self.protocol}://{self.host}:{self.port}{path}"

    def auth(self) -> Optional[aiohttp.BasicAuth]:
        """HTTP basic auth, if credentials are configured."""
        if self.username and self.access_key:
            return aiohttp.BasicAuth(self.username, self.access_key)
        return None

    def describe(self) -> dict[str, Any]:
        """Log-safe summary."""
        return {
            "hub": self.hub_url,
            "user": self.username,
            "key": mask_sensitive(self.access_key),
        }


def element_id(value: Any) -> str:
    """Extract the element reference from a find-element response value."""
    if isinstance(value, dict):
        ref = value.get(W3C_ELEMENT_KEY) or value.get(LEGACY_ELEMENT_KEY)
        if ref:
            return ref
    raise SessionError(f"Malformed element reference: {value!r}")


async def _send(
    http: aiohttp.ClientSession,
    method: str,
    url: str,
    payload: Optional[dict[str, Any]] = None,
) -> Any:
    """Issue one WebDriver call and unwrap ``value``."""
    async with http.request(method, url, json=payload) as response:
        if response.status != 200:
            error_text = await response.text()
            raise SessionError(
                f"{method} {url} failed with status {response.status}: {error_text}",
                status=response.status,
            )
        data = await response.json()
    return data.get("value") if isinstance(data, dict) else None


class RemoteSession:
    """
    Live W3C WebDriver session.

    Owns its aiohttp client session when created by
    :func:`open_remote_session`; closing the remote session also closes
    that client.
    """

    def __init__(
        self,
        session_id: str,
        hub_url: str,
        capabilities: dict[str, Any],
        http: aiohttp.ClientSession,
        owns_http: bool = True,
    ) -> None:
        self.session_id = session_id
        self.hub_url = hub_url
        self.capabilities = capabilities
        self._http = http
        self._owns_http = owns_http
        self._closed = False

    @property
    def url(self) -> str:
        """Session endpoint URL."""
        return f"{self.hub_url}/session/{self.session_id}"

    @property
    def closed(self) -> bool:
        return self._closed

    async def command(
        self,
        method: str,
        path: str = "",
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Send a command relative to the session endpoint.

        Args:
            method: HTTP method.
            path: Path under ``/session/{id}`` (e.g. "/element").
            payload: JSON body.

        Returns:
            The ``value`` field of the response.

        Raises:
            SessionError: If the session is closed or the call fails.
        """
        if self._closed:
            raise SessionError(f"Session {self.session_id} is closed")
        return await _send(self._http, method, f"{self.url}{path}", payload)

    # ── Element commands ──────────────────────────────────────────

    async def find_element(self, using: str, value: str) -> str:
        result = await self.command("POST", "/element", {"using": using, "value": value})
        return element_id(result)

    async def click_element(self, ref: str) -> None:
        await self.command("POST", f"/element/{ref}/click", {})

    async def clear_element(self, ref: str) -> None:
        await self.command("POST", f"/element/{ref}/clear", {})

    async def send_keys(self, ref: str, text: str) -> None:
        await self.command("POST", f"/element/{ref}/value", {"text": text, "value": list(text)})

    async def element_text(self, ref: str) -> str:
        return await self.command("GET", f"/element/{ref}/text") or ""

    async def element_displayed(self, ref: str) -> bool:
        return bool(await self.command("GET", f"/element/{ref}/displayed"))

    # ── Document / device commands ────────────────────────────────

    async def navigate_to(self, url: str) -> None:
        await self.command("POST", "/url", {"url": url})

    async def current_url(self) -> str:
        return await self.command("GET", "/url") or ""

    async def title(self) -> str:
        return await self.command("GET", "/title") or ""

    async def screenshot(self) -> str:
        """Base64-encoded PNG of the current screen."""
        return await self.command("GET", "/screenshot") or ""

    async def execute_script(self, script: str, args: Optional[list[Any]] = None) -> Any:
        """Run a script or an Appium ``mobile:`` extension command."""
        return await self.command("POST", "/execute/sync", {"script": script, "args": args or []})

    # ── Lifecycle ─────────────────────────────────────────────────

    async def close(self) -> None:
        """
        Delete the remote session and close the owned HTTP client.

        Safe to call more than once. The HTTP client is closed even when
        the delete call fails; the delete failure still propagates.
        """
        if self._closed:
            return
        self._closed = True
        try:
            await _send(self._http, "DELETE", self.url)
            logger.info("Remote session deleted", session_id=self.session_id)
        finally:
            if self._owns_http and not self._http.closed:
                await self._http.close()

    async def __aenter__(self) -> "RemoteSession":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"RemoteSession({self.session_id!r}, {self.hub_url!r}, {state})"


async def open_remote_session(
    connection: ConnectionParams,
    capabilities: dict[str, Any],
    timeout: float = 120.0,
    http: Optional[aiohttp.ClientSession] = None,
) -> RemoteSession:
    """
    Negotiate a new WebDriver session.

    Args:
        connection: Hub location and credentials.
        capabilities: Finalized capability object (sent as ``alwaysMatch``).
        timeout: Total HTTP timeout per call, in seconds.
        http: Client session to use; when omitted a new one is created
            and owned by the returned RemoteSession.

    Returns:
        The open RemoteSession.

    Raises:
        SessionError: If the hub refuses the session or returns no id.
    """
    owns_http = http is None
    if http is None:
        http = aiohttp.ClientSession(
            auth=connection.auth(),
            timeout=aiohttp.ClientTimeout(total=timeout),
        )

    logger.info(
        "Opening remote session",
        capabilities=sanitize_for_logging(capabilities),
        **connection.describe(),
    )

    try:
        value = await _send(
            http,
            "POST",
            f"{connection.hub_url}/session",
            {"capabilities": {"alwaysMatch": capabilities, "firstMatch": [{}]}},
        )
        value = value if isinstance(value, dict) else {}
        session_id = value.get("sessionId")
        if not session_id:
            raise SessionError(f"No session id in response from {connection.hub_url}")
    except BaseException:
        if owns_http:
            await http.close()
        raise

    logger.info("Remote session opened", session_id=session_id, hub=connection.hub_url)
    return RemoteSession(
        session_id=session_id,
        hub_url=connection.hub_url,
        capabilities=value.get("capabilities", {}),
        http=http,
        owns_http=owns_http,
    )
