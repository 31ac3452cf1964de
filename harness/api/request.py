"""
Request Building
================

Fluent construction of requests, and dispatch of a built request
through an :class:`ApiClient`.

Usage:
    request = await (
        RequestBuilder.post("/users")
        .header("X-Trace", "abc")
        .json({"name": "Ada"})
        .auth(BearerAuth("API_TOKEN"))
        .build()
    )
    response = await send(client, request)
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import aiohttp

from harness.api.auth import AuthContext, AuthStrategy
from harness.api.client import ApiClient, ApiResponse
from harness.exceptions import ConfigurationError


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


# Methods whose requests never carry a body
_BODYLESS = frozenset({HttpMethod.HEAD, HttpMethod.OPTIONS})


@dataclass(frozen=True)
class BuiltRequest:
    """A finished request: method, path and ApiClient keyword options."""

    method: HttpMethod
    path: str
    options: dict[str, Any] = field(default_factory=dict)


class RequestBuilder:
    """Chainable request builder; every setter returns the builder."""

    def __init__(self, method: Optional[HttpMethod] = None, path: str = "") -> None:
        self._method = method
        self._path = path
        self._params: dict[str, Any] = {}
        self._headers: dict[str, str] = {}
        self._auth: Optional[AuthStrategy] = None
        self._auth_ctx: dict[str, Any] = {}
        self._context: Optional[aiohttp.ClientSession] = None
        self._body: Optional[tuple[str, Any]] = None
        self._extra: dict[str, Any] = {}

    # ── Factories ─────────────────────────────────────────────────

    @classmethod
    def get(cls, path: str) -> "RequestBuilder":
        return cls(HttpMethod.GET, path)

    @classmethod
    def post(cls, path: str) -> "RequestBuilder":
        return cls(HttpMethod.POST, path)

    @classmethod
    def put(cls, path: str) -> "RequestBuilder":
        return cls(HttpMethod.PUT, path)

    @classmethod
    def delete(cls, path: str) -> "RequestBuilder":
        return cls(HttpMethod.DELETE, path)

    @classmethod
    def patch(cls, path: str) -> "RequestBuilder":
        return cls(HttpMethod.PATCH, path)

    @classmethod
    def head(cls, path: str) -> "RequestBuilder":
        return cls(HttpMethod.HEAD, path)

    @classmethod
    def options(cls, path: str) -> "RequestBuilder":
        return cls(HttpMethod.OPTIONS, path)

    # ── Chaining ──────────────────────────────────────────────────

    def method(self, method: str) -> "RequestBuilder":
        self._method = HttpMethod(method.upper())
        return self

    def path(self, path: str) -> "RequestBuilder":
        self._path = path
        return self

    def context(self, session: aiohttp.ClientSession) -> "RequestBuilder":
        """Send on a caller-owned session instead of a client-owned one."""
        self._context = session
        return self

    def query(self, name: str, value: Any) -> "RequestBuilder":
        self._params[name] = value
        return self

    def queries(self, values: Optional[Mapping[str, Any]] = None) -> "RequestBuilder":
        self._params.update(values or {})
        return self

    def header(self, name: str, value: str) -> "RequestBuilder":
        # Header names are case-insensitive; last write wins
        self._headers[name.lower()] = value
        return self

    def headers(self, values: Optional[Mapping[str, str]] = None) -> "RequestBuilder":
        for name, value in (values or {}).items():
            self.header(name, value)
        return self

    def auth(self, strategy: AuthStrategy, **ctx: Any) -> "RequestBuilder":
        self._auth = strategy
        self._auth_ctx.update(ctx)
        return self

    def data(self, value: Any) -> "RequestBuilder":
        self._body = ("data", value)
        return self

    def json(self, value: Any) -> "RequestBuilder":
        self._body = ("json", value)
        return self

    def form(self, value: Mapping[str, str]) -> "RequestBuilder":
        """URL-encoded form body."""
        self._body = ("data", dict(value))
        return self

    def extra(self, **options: Any) -> "RequestBuilder":
        """Any other ``aiohttp`` request options (timeout, allow_redirects, ...)."""
        self._extra.update(options)
        return self

    # ── Build ─────────────────────────────────────────────────────

    async def build(self) -> BuiltRequest:
        """
        Resolve auth headers and produce the request.

        Raises:
            ConfigurationError: If method or path is missing.
        """
        if self._method is None:
            raise ConfigurationError("RequestBuilder: method is required")
        if not self._path:
            raise ConfigurationError("RequestBuilder: path is required")

        headers = dict(self._headers)
        if self._auth is not None:
            ctx = AuthContext(method=self._method.value, path=self._path, **self._auth_ctx)
            for name, value in (await self._auth.headers(ctx)).items():
                headers[name.lower()] = value

        options: dict[str, Any] = {}
        if headers:
            options["headers"] = headers
        if self._params:
            options["params"] = dict(self._params)
        if self._body is not None and self._method not in _BODYLESS:
            kind, value = self._body
            options[kind] = value
        if self._context is not None:
            options["context"] = self._context
        options.update(self._extra)

        return BuiltRequest(self._method, self._path, options)


_SEND: dict[HttpMethod, Callable[..., Awaitable[ApiResponse]]] = {
    HttpMethod.GET: ApiClient.get,
    HttpMethod.POST: ApiClient.post,
    HttpMethod.PUT: ApiClient.put,
    HttpMethod.DELETE: ApiClient.delete,
    HttpMethod.PATCH: ApiClient.patch,
    HttpMethod.HEAD: ApiClient.head,
    HttpMethod.OPTIONS: ApiClient.options,
}

_missing = set(HttpMethod) - set(_SEND)
if _missing:
    raise ImportError(f"No send handler for: {', '.join(sorted(m.value for m in _missing))}")


async def send(client: ApiClient, request: BuiltRequest) -> ApiResponse:
    """Dispatch a built request to the matching client verb."""
    return await _SEND[HttpMethod(request.method)](client, request.path, **request.options)
