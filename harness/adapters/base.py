"""
Adapter Abstraction
===================

Uniform action-execution facade bound to one underlying engine handle.

An adapter starts *unbound*, becomes *bound* through exactly one of
``init()`` (launch a fresh engine session) or ``bind()`` (adopt a
session a provider already opened), and ends *torn down*. Actions are
a closed enum per adapter; every member must have a handler, which is
checked when the adapter class is defined.

Usage:
    adapter = create_adapter(AdapterKind.WEB_ENGINE)
    await adapter.init({"browser": "chromium"})
    await adapter.navigate("https://example.com")
    title = await adapter.execute("title")
    await adapter.teardown()
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from harness.exceptions import (
    ActionParameterError,
    AdapterStateError,
    UnsupportedActionError,
)
from harness.utils.logger import get_logger

logger = get_logger(__name__)

ActionHandler = Callable[[Any, Mapping[str, Any]], Awaitable[Any]]


class AdapterState(Enum):
    """Lifecycle state of an adapter."""

    UNBOUND = "unbound"
    BOUND = "bound"
    TORN_DOWN = "torn_down"


def require_params(
    action: Enum,
    params: Mapping[str, Any],
    *names: str,
) -> tuple[Any, ...]:
    """
    Fetch required parameters for an action.

    Raises:
        ActionParameterError: If any parameter is missing or None.
    """
    missing = [name for name in names if params.get(name) is None]
    if missing:
        raise ActionParameterError(f"{action.value}: {', '.join(missing)} required")
    return tuple(params[name] for name in names)


def optional_ms(
    action: Enum,
    params: Mapping[str, Any],
    *names: str,
) -> Optional[float]:
    """
    Fetch an optional millisecond value under any of ``names``.

    The first name present with a non-None value wins.

    Raises:
        ActionParameterError: If the value is not a non-negative number.
    """
    for name in names:
        value = params.get(name)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ActionParameterError(
                f"{action.value}: {name} must be a non-negative number of milliseconds"
            )
        return value
    return None


class Adapter(ABC):
    """
    Base class for engine adapters.

    Subclasses declare ``actions`` (their closed verb enum) and
    ``handlers`` (a mapping from every member to a coroutine method);
    a class whose handler table misses a member fails at definition time.
    """

    actions: ClassVar[type[Enum]]
    handlers: ClassVar[dict[Enum, ActionHandler]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not hasattr(cls, "actions") or not hasattr(cls, "handlers"):
            return
        missing = set(cls.actions) - set(cls.handlers)
        if missing:
            names = ", ".join(sorted(m.value for m in missing))
            raise TypeError(f"{cls.__name__} has no handler for: {names}")

    def __init__(self) -> None:
        self.state = AdapterState.UNBOUND

    @property
    def is_bound(self) -> bool:
        return self.state is AdapterState.BOUND

    # ── Startup modes ─────────────────────────────────────────────

    @abstractmethod
    async def init(self, options: Optional[Mapping[str, Any]] = None) -> None:
        """Launch a brand-new engine session and bind to it."""
        pass

    @abstractmethod
    async def bind(self, session: Any) -> None:
        """Adopt an existing session; validate its shape first."""
        pass

    @abstractmethod
    async def navigate(self, target: str) -> None:
        """Open a URL (web) or deep link / webview URL (mobile)."""
        pass

    @abstractmethod
    async def _close(self) -> None:
        """Close every sub-handle, each attempted independently."""
        pass

    # ── Action dispatch ───────────────────────────────────────────

    async def execute(
        self,
        action: Union[str, Enum],
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Execute a tool-agnostic action.

        Args:
            action: Action name or enum member.
            params: Action parameters.

        Returns:
            Action result (text, bytes, bool or None depending on the action).

        Raises:
            AdapterStateError: If the adapter is not bound.
            UnsupportedActionError: If the action is not in the vocabulary.
            ActionParameterError: If required parameters are missing.
        """
        self._ensure_bound()
        try:
            verb = self.actions(action)
        except ValueError:
            raise UnsupportedActionError(type(self).__name__, action) from None

        logger.debug("Executing action", adapter=type(self).__name__, action=verb.value)
        handler = self.handlers[verb]
        return await handler(self, params or {})

    # ── Lifecycle ─────────────────────────────────────────────────

    def _ensure_unbound(self) -> None:
        if self.state is not AdapterState.UNBOUND:
            raise AdapterStateError(
                f"{type(self).__name__}: already {self.state.value}; init() and bind() are one-shot"
            )

    def _ensure_bound(self) -> None:
        if self.state is AdapterState.UNBOUND:
            raise AdapterStateError(
                f"{type(self).__name__}: not started. Call init() or bind() first."
            )
        if self.state is AdapterState.TORN_DOWN:
            raise AdapterStateError(f"{type(self).__name__}: already torn down")

    async def teardown(self) -> None:
        """
        Release the bound session.

        Safe to call multiple times and before startup; never raises for
        handles that are already closed.
        """
        if self.state is AdapterState.TORN_DOWN:
            return
        was_bound = self.state is AdapterState.BOUND
        self.state = AdapterState.TORN_DOWN
        if was_bound:
            await self._close()
        logger.debug("Adapter torn down", adapter=type(self).__name__)
