"""
Test Helpers
============

Stand-ins for aiohttp objects shared by the test modules.
"""

import json
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock


class FakeResponse:
    """Stands in for an aiohttp response inside ``async with``."""

    def __init__(self, status: int = 200, payload: Any = None, body: Optional[bytes] = None):
        self.status = status
        self.url = "http://test.local/"
        self.headers = {"content-type": "application/json"}
        self._body = body if body is not None else json.dumps(payload).encode()

    async def read(self) -> bytes:
        return self._body

    async def text(self) -> str:
        return self._body.decode()

    async def json(self) -> Any:
        return json.loads(self._body)

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None


def make_http(*responses: FakeResponse) -> MagicMock:
    """
    Mock aiohttp.ClientSession returning ``responses`` in order.

    ``http.request.call_args_list`` records (method, url) and the json body.
    """
    http = MagicMock()
    http.closed = False
    http.request = MagicMock(side_effect=list(responses))
    http.close = AsyncMock()
    return http


def w3c(value: Any = None, status: int = 200) -> FakeResponse:
    """W3C-shaped response: ``{"value": ...}``."""
    return FakeResponse(status=status, payload={"value": value})
