"""
Local Grid Provider
===================

Provider for a locally running Appium server or on-premise device farm.

Reads host/port/path from settings (LOCAL_APPIUM_HOST, LOCAL_APPIUM_PORT,
LOCAL_APPIUM_PATH), defaulting to ``localhost:4723/wd/hub``. No
credentials, no vendor namespace, nothing to tear down.
"""

from typing import Optional

from harness.config import Settings
from harness.providers.base import DeviceProvider
from harness.providers.webdriver import ConnectionParams


class LocalProvider(DeviceProvider):
    """Local Appium grid."""

    name = "local"

    def __init__(self, settings: Optional[Settings] = None) -> None:
        super().__init__(settings)
        cfg = self.settings.provider
        self._connection = ConnectionParams(
            protocol="http",
            host=cfg.local_appium_host,
            port=cfg.local_appium_port,
            path=cfg.local_appium_path,
        )

    @property
    def connection(self) -> ConnectionParams:
        return self._connection
