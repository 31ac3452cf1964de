"""
Engine Adapters
===============

Uniform verb facades over the automation engines.

This package contains:
    - base: Adapter ABC and lifecycle state
    - playwright: WebEngineAdapter (browsers)
    - appium: MobileDriverAdapter (native and hybrid apps)
    - registry: AdapterKind and create_adapter()
"""

from harness.adapters.appium import MobileAction, MobileDriverAdapter, to_locator
from harness.adapters.base import Adapter, AdapterState
from harness.adapters.playwright import WebAction, WebEngineAdapter, WebSession
from harness.adapters.registry import AdapterKind, create_adapter

__all__ = [
    "Adapter",
    "AdapterState",
    "WebAction",
    "WebEngineAdapter",
    "WebSession",
    "MobileAction",
    "MobileDriverAdapter",
    "to_locator",
    "AdapterKind",
    "create_adapter",
]
