"""
Sauce Labs Provider
===================

Provider for Sauce Labs real-device and emulator cloud.

The hub host is derived from the data center region
(``ondemand.{region}.saucelabs.com``). Vendor options go under
``sauce:options``; ``tunnelIdentifier`` is only sent when Sauce Connect is
enabled.
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


class SauceLabsProvider(DeviceProvider):
    """Sauce Labs backend."""

    name = "saucelabs"
    vendor_namespace = "sauce:options"

    def __init__(self, settings: Optional[Settings] = None) -> None:
        super().__init__(settings)
        cfg = self.settings.provider
        self.username = cfg.sauce_username
        self.access_key = cfg.sauce_access_key
        self.region = cfg.sauce_region.strip() or "us-west-1"
        self.sauce_connect = cfg.sauce_connect
        self.tunnel_identifier = cfg.sauce_tunnel_identifier

        self._connection = ConnectionParams(
            protocol="https",
            host=f"ondemand.{self.region}.saucelabs.com",
            port=443,
            path="/wd/hub",
            username=self.username,
            access_key=self.access_key,
        )

        if not self.username or not self.access_key:
            logger.warning("Sauce Labs credentials not configured")

    @property
    def connection(self) -> ConnectionParams:
        return self._connection

    def validate(self) -> None:
        if not self.username or not self.access_key:
            raise ProviderConfigurationError(
                self.name,
                "SAUCE_USERNAME and SAUCE_ACCESS_KEY must be set",
            )
        if self.sauce_connect and not self.tunnel_identifier:
            raise ProviderConfigurationError(
                self.name,
                "SAUCE_TUNNEL_IDENTIFIER must be set when SAUCE_CONNECT is enabled",
            )

    def create_tunnel(self) -> Optional[TunnelProcess]:
        binary = self.settings.provider.sauce_connect_binary
        if not self.sauce_connect or not binary:
            return None
        return TunnelProcess(
            self.name,
            [
                binary,
                "-u", self.username,
                "-k", self.access_key,
                "-r", self.region,
                "-i", self.tunnel_identifier,
            ],
        )

    def vendor_defaults(self, platform: Platform) -> dict[str, Any]:
        cfg = self.settings.provider
        return {
            "build": cfg.build_name,
            "name": "Mobile Test",
            "appiumVersion": cfg.appium_version,
            "tunnelIdentifier": self.tunnel_identifier if self.sauce_connect else None,
        }
