"""
Pytest Plugin
=============

Fixtures exposing the harness to test suites. Registered through the
``pytest11`` entry point, so installing the package is enough.

Fixtures:
    harness_settings   -> Settings (session scope)
    provider_registry  -> ProviderRegistry, shut down at session end
    harness            -> HarnessSession, cleaned up after each test

Usage:
    @pytest.mark.asyncio
    async def test_login(harness):
        app = await harness.mobile({"platformName": "Android", "appium:app": "/tmp/app.apk"})
        await app.execute("tap", {"selector": "~login"})
"""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from harness.config import Settings, get_settings
from harness.providers import ProviderRegistry
from harness.session import HarnessSession, harness_session
from harness.utils.logger import setup_logging


@pytest.fixture(scope="session")
def harness_settings() -> Settings:
    settings = get_settings()
    setup_logging(settings)
    return settings


@pytest_asyncio.fixture
async def provider_registry(harness_settings: Settings) -> AsyncIterator[ProviderRegistry]:
    """Provider registry shared by every acquisition in one test."""
    async with ProviderRegistry(harness_settings) as registry:
        yield registry


@pytest_asyncio.fixture
async def harness(
    provider_registry: ProviderRegistry,
    harness_settings: Settings,
) -> AsyncIterator[HarnessSession]:
    """Per-test session; everything acquired through it is released afterwards."""
    async with harness_session(provider_registry, harness_settings) as session:
        yield session
