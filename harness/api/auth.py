"""
Request Authentication
======================

Strategies that contribute headers to a built request.

Secrets are read from the environment at build time, so test code
refers to variable names rather than values.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import aiohttp

from harness.exceptions import ConfigurationError


@dataclass
class AuthContext:
    """What a strategy may look at when producing headers."""

    method: str
    path: str
    service: Optional[str] = None
    tenant: Optional[str] = None
    scope: Optional[str] = None
    audience: Optional[str] = None
    extras: dict[str, Any] = field(default_factory=dict)


def _env(name: str) -> str:
    return os.environ.get(name, "")


class AuthStrategy(ABC):
    """Produces auth headers for one request."""

    @abstractmethod
    async def headers(self, ctx: AuthContext) -> dict[str, str]:
        pass


class NoAuth(AuthStrategy):
    async def headers(self, ctx: AuthContext) -> dict[str, str]:
        return {}


class ApiKeyAuth(AuthStrategy):
    """Send an API key from ``value_env`` in ``header``."""

    def __init__(self, header: str, value_env: str) -> None:
        self.header = header
        self.value_env = value_env

    async def headers(self, ctx: AuthContext) -> dict[str, str]:
        value = _env(self.value_env)
        if not value:
            raise ConfigurationError(f"Missing API key env: {self.value_env}")
        return {self.header: value}


class BasicAuth(AuthStrategy):
    """HTTP basic auth from two environment variables."""

    def __init__(self, user_env: str, pass_env: str) -> None:
        self.user_env = user_env
        self.pass_env = pass_env

    async def headers(self, ctx: AuthContext) -> dict[str, str]:
        user, password = _env(self.user_env), _env(self.pass_env)
        if not user or not password:
            raise ConfigurationError(
                f"Missing basic creds envs: {self.user_env} and {self.pass_env}"
            )
        try:
            credentials = aiohttp.BasicAuth(user, password)
        except ValueError as e:
            raise ConfigurationError(f"Invalid basic creds in {self.user_env}: {e}") from e
        return {"Authorization": credentials.encode()}


class BearerAuth(AuthStrategy):
    """Bearer token read from ``token_env``."""

    def __init__(self, token_env: str) -> None:
        self.token_env = token_env

    async def headers(self, ctx: AuthContext) -> dict[str, str]:
        token = _env(self.token_env)
        if not token:
            raise ConfigurationError(f"Missing bearer token env: {self.token_env}")
        return {"Authorization": f"Bearer {token}"}
