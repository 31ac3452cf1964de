"""
API Client
==========

HTTP client that owns the aiohttp sessions it creates.

When a request is sent without a caller-supplied ``context`` session, the
client opens a fresh :class:`aiohttp.ClientSession` for it and tracks it;
``dispose()`` closes exactly those tracked sessions and never touches
sessions the caller passed in.

Response bodies are read before the call returns, so an
:class:`ApiResponse` stays usable after its session is closed.

Usage:
    client = ApiClient("https://api.example.com", {"accept": "application/json"})
    response = await client.get("/users", params={"page": 2})
    users = response.json()
    await client.dispose()
"""

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

import aiohttp

from harness.exceptions import DisposeError
from harness.utils.logger import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[], aiohttp.ClientSession]


@dataclass(frozen=True)
class ApiResponse:
    """Fully read HTTP response."""

    status: int
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")

    def json(self) -> Any:
        return json.loads(self.body or b"null")


class ApiClient:
    """
    Thin verb client over aiohttp.

    Attributes:
        base_url: Prefix for relative request paths.
        default_headers: Headers sent on sessions this client creates.
    """

    def __init__(
        self,
        base_url: str,
        default_headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        """
        Args:
            base_url: Base URL for relative paths.
            default_headers: Headers applied to every owned session.
            timeout: Total timeout per request, in seconds.
            session_factory: Builds owned sessions (defaults to aiohttp.ClientSession).
        """
        self.base_url = base_url.rstrip("/")
        self.default_headers = dict(default_headers or {})
        self.timeout = timeout
        self._session_factory = session_factory or self._new_session
        self._owned: set[aiohttp.ClientSession] = set()

    @property
    def owned_sessions(self) -> int:
        """Number of sessions awaiting dispose()."""
        return len(self._owned)

    def _new_session(self) -> aiohttp.ClientSession:
        timeout = aiohttp.ClientTimeout(total=self.timeout) if self.timeout else None
        return aiohttp.ClientSession(headers=self.default_headers, timeout=timeout)

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        context: Optional[aiohttp.ClientSession] = None,
        **options: Any,
    ) -> ApiResponse:
        """
        Send one request and read the whole body.

        Args:
            method: HTTP method.
            path: Path relative to base_url, or an absolute URL.
            context: Caller-owned session to use instead of an owned one.
            **options: Passed to ``aiohttp.ClientSession.request``
                (params, headers, json, data, timeout, ...).
        """
        session = context
        if session is None:
            session = self._session_factory()
            self._owned.add(session)

        url = self._url(path)
        async with session.request(method, url, **options) as response:
            body = await response.read()
            result = ApiResponse(
                status=response.status,
                url=str(response.url),
                headers=dict(response.headers),
                body=body,
            )

        logger.debug("API call", method=method, url=url, status=result.status)
        return result

    # ── Verbs ─────────────────────────────────────────────────────

    async def get(self, path: str, **options: Any) -> ApiResponse:
        return await self.request("GET", path, **options)

    async def post(self, path: str, **options: Any) -> ApiResponse:
        return await self.request("POST", path, **options)

    async def put(self, path: str, **options: Any) -> ApiResponse:
        return await self.request("PUT", path, **options)

    async def delete(self, path: str, **options: Any) -> ApiResponse:
        return await self.request("DELETE", path, **options)

    async def patch(self, path: str, **options: Any) -> ApiResponse:
        return await self.request("PATCH", path, **options)

    async def head(self, path: str, **options: Any) -> ApiResponse:
        return await self.request("HEAD", path, **options)

    async def options(self, path: str, **options: Any) -> ApiResponse:
        return await self.request("OPTIONS", path, **options)

    # ── Lifecycle ─────────────────────────────────────────────────

    async def dispose(self) -> None:
        """
        Close every session this client created.

        All sessions are attempted and the tracking set is cleared even
        when some closes fail.

        Raises:
            DisposeError: If one or more sessions failed to close.
        """
        errors: list[BaseException] = []
        disposed = 0
        owned = list(self._owned)
        self._owned.clear()

        for session in owned:
            try:
                await session.close()
                disposed += 1
            except Exception as e:
                errors.append(e)

        if errors:
            logger.warning("API client dispose failed", failed=len(errors), disposed=disposed)
            raise DisposeError("ApiClient.dispose() failed", errors, disposed)
        logger.debug("API client disposed", disposed=disposed)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.dispose()
