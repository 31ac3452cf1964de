"""
Shared Test Fixtures
====================

Pytest fixtures used across all test modules.
Provides settings objects and mocks matching the harness APIs.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from harness.config import EnvironmentSettings, LogSettings, ProviderSettings, Settings
from harness.providers import DeviceProvider, RemoteSession
from tests.helpers import make_http

pytest_plugins = ["pytester"]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    """Settings with deterministic values, independent of the host environment."""
    return Settings(
        provider=ProviderSettings(
            device_provider="local",
            local_appium_host="localhost",
            local_appium_port=4723,
            local_appium_path="/wd/hub",
            browserstack_username="bs-user",
            browserstack_access_key="bs-key-123456",
            browserstack_region="",
            browserstack_local=False,
            sauce_username="sauce-user",
            sauce_access_key="sauce-key-123456",
            sauce_region="eu-central-1",
            sauce_connect=False,
            build_name="ci-build",
            appium_version="2.0.0",
        ),
        environment=EnvironmentSettings(
            test_environment="dev",
            base_url="http://localhost:3000",
            api_url="http://api.test.local",
            api_timeout=5.0,
        ),
        log=LogSettings(debug=True, log_level="INFO"),
    )


# ---------------------------------------------------------------------------
# Session / provider mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def remote_session() -> RemoteSession:
    """RemoteSession over a mock HTTP client; set ``http.request.side_effect`` per test."""
    return RemoteSession(
        session_id="sess-1",
        hub_url="http://localhost:4723/wd/hub",
        capabilities={"platformName": "Android"},
        http=make_http(),
    )


@pytest.fixture
def mock_provider(remote_session: RemoteSession) -> MagicMock:
    """Provider mock handing out ``remote_session``."""
    provider = MagicMock(spec=DeviceProvider)
    provider.name = "local"
    provider.init = AsyncMock()
    provider.get_mobile_session = AsyncMock(return_value=remote_session)
    provider.release_session = AsyncMock()
    provider.cleanup = AsyncMock()
    return provider


@pytest.fixture
def mock_registry(mock_provider: MagicMock, settings: Settings) -> MagicMock:
    """Registry mock that always returns ``mock_provider``."""
    registry = MagicMock()
    registry.settings = settings
    registry.get_provider = MagicMock(return_value=mock_provider)
    return registry
