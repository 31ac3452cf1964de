"""
Adapter Registry
================

Maps adapter kinds to adapter classes.
"""

from enum import Enum
from typing import Union

from harness.adapters.appium import MobileDriverAdapter
from harness.adapters.base import Adapter
from harness.adapters.playwright import WebEngineAdapter


class AdapterKind(str, Enum):
    """Supported adapter kinds."""

    WEB_ENGINE = "web-engine"
    MOBILE_DRIVER = "mobile-driver"


_REGISTRY: dict[AdapterKind, type[Adapter]] = {
    AdapterKind.WEB_ENGINE: WebEngineAdapter,
    AdapterKind.MOBILE_DRIVER: MobileDriverAdapter,
}

_missing = set(AdapterKind) - set(_REGISTRY)
if _missing:
    raise ImportError(f"No adapter registered for: {', '.join(sorted(k.value for k in _missing))}")


def create_adapter(kind: Union[AdapterKind, str]) -> Adapter:
    """
    Create a fresh, unbound adapter.

    Args:
        kind: AdapterKind or its string value ("web-engine", "mobile-driver").

    Raises:
        ValueError: If the kind is unknown.
    """
    return _REGISTRY[AdapterKind(kind)]()
