"""
Harness Exceptions
==================

Error taxonomy shared by every layer of the harness.

Configuration and usage errors fail fast at the point of use. Backend
errors (session open/close failures) are raised as :class:`SessionError`
and propagate to the caller untouched by the core.
"""

from typing import Optional


class HarnessError(Exception):
    """Base exception for all harness errors."""

    pass


class ConfigurationError(HarnessError):
    """Raised for missing or malformed configuration."""

    pass


class ProviderConfigurationError(ConfigurationError):
    """Raised when a provider is missing credentials or connection settings."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class CapabilityError(ConfigurationError):
    """Raised for invalid capability input."""

    pass


class AdapterError(HarnessError):
    """Base exception for adapter misuse."""

    pass


class AdapterStateError(AdapterError):
    """Raised when an adapter is used before init/bind or after teardown."""

    pass


class AdapterBindError(AdapterError):
    """Raised when bind() receives a handle of the wrong shape."""

    pass


class UnsupportedActionError(AdapterError):
    """Raised when execute() receives an action outside the adapter's vocabulary."""

    def __init__(self, adapter: str, action: object):
        super().__init__(f'{adapter}.execute: unsupported action "{action}"')
        self.action = action


class ActionParameterError(AdapterError):
    """Raised when an action is missing required parameters."""

    pass


class SessionError(HarnessError):
    """Raised when a remote WebDriver session call fails."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DisposeError(HarnessError):
    """
    Aggregate error raised after disposing several resources.

    Attributes:
        errors: Every individual disposal failure, in disposal order.
        disposed: Number of resources closed successfully.
    """

    def __init__(self, message: str, errors: list[BaseException], disposed: int = 0):
        super().__init__(f"{message} ({len(errors)} failed, {disposed} disposed)")
        self.errors = errors
        self.disposed = disposed
