"""
Device Providers
================

Backend integrations that open and close remote WebDriver sessions.

This package contains:
    - base: DeviceProvider abstract base class
    - webdriver: RemoteSession, ConnectionParams and the Closeable protocol
    - local: Local Appium grid (default, free)
    - browserstack: BrowserStack App Automate
    - saucelabs: Sauce Labs
    - tunnel: Optional vendor tunnel subprocess
    - registry: ProviderRegistry selecting one instance per backend name
"""

from harness.providers.base import DeviceProvider
from harness.providers.browserstack import BrowserStackProvider
from harness.providers.local import LocalProvider
from harness.providers.registry import ProviderName, ProviderRegistry, resolve_provider_name
from harness.providers.saucelabs import SauceLabsProvider
from harness.providers.webdriver import (
    Closeable,
    ConnectionParams,
    RemoteSession,
    open_remote_session,
)

__all__ = [
    "DeviceProvider",
    "LocalProvider",
    "BrowserStackProvider",
    "SauceLabsProvider",
    "ProviderName",
    "ProviderRegistry",
    "resolve_provider_name",
    "Closeable",
    "ConnectionParams",
    "RemoteSession",
    "open_remote_session",
]
