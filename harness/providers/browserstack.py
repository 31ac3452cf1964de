"""
BrowserStack Provider
=====================

Provider for BrowserStack App Automate.

BrowserStack provides cloud-hosted real devices reachable through its
WebDriver hub. Vendor options go under ``bstack:options``; the optional
BrowserStack Local tunnel is flagged with ``local`` and, when enabled,
identified with ``localIdentifier``.

Prerequisites:
    - BROWSERSTACK_USERNAME and BROWSERSTACK_ACCESS_KEY in the environment or .env
    - For private apps behind a firewall: BROWSERSTACK_LOCAL=true and either a
      running BrowserStackLocal or BROWSERSTACK_LOCAL_BINARY to let the
      provider start one
"""

from typing import Any, Optional

from harness.capabilities import Platform
from harness.config import Settings
from harness.exceptions import ProviderConfigurationError
from harness.providers.base import DeviceProvider
from harness.providers.tunnel import TunnelProcess
from harness.providers.webdriver import ConnectionParams
from harness.utils.logger import get_logger

logger = get_logger(__name__)

BROWSERSTACK_GLOBAL_HUB = "hub-cloud.browserstack.com"


class BrowserStackProvider(DeviceProvider):
    """BrowserStack App Automate backend."""

    name = "browserstack"
    vendor_namespace = "bstack:options"

    def __init__(self, settings: Optional[Settings] = None) -> None:
        super().__init__(settings)
        cfg = self.settings.provider
        self.username = cfg.browserstack_username
        self.access_key = cfg.browserstack_access_key
        self.region = cfg.browserstack_region.strip()
        self.local = cfg.browserstack_local
        self.local_identifier = cfg.browserstack_local_identifier

        host = f"{self.region}.browserstack.com" if self.region else BROWSERSTACK_GLOBAL_HUB
        self._connection = ConnectionParams(
            protocol="https",
            host=host,
            port=443,
            path="/wd/hub",
            username=self.username,
            access_key=self.access_key,
        )

        if not self.username or not self.access_key:
            logger.warning("BrowserStack credentials not configured")

    @property
    def connection(self) -> ConnectionParams:
        return self._connection

    def validate(self) -> None:
        if not self.username or not self.access_key:
            raise ProviderConfigurationError(
                self.name,
                "BROWSERSTACK_USERNAME and BROWSERSTACK_ACCESS_KEY must be set",
            )

    def create_tunnel(self) -> Optional[TunnelProcess]:
        binary = self.settings.provider.browserstack_local_binary
        if not self.local or not binary:
            return None
        return TunnelProcess(
            self.name,
            [binary, "--key", self.access_key, "--local-identifier", self.local_identifier],
        )

    def vendor_defaults(self, platform: Platform) -> dict[str, Any]:
        cfg = self.settings.provider
        return {
            "buildName": cfg.build_name,
            "sessionName": "Mobile Test",
            "appiumVersion": cfg.appium_version,
            "realMobile": True,
            "local": self.local,
            "localIdentifier": self.local_identifier if self.local else None,
        }
