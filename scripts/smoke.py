#!/usr/bin/env python3
"""
Harness Smoke Test
==================

Quick end-to-end check of the web, mobile and API layers against the
configured environment.

Usage:
    python scripts/smoke.py            # all layers
    python scripts/smoke.py web api    # selected layers

This script will:
1. Open the configured BASE_URL in Chromium and print the page title
2. Acquire a mobile session from DEVICE_PROVIDER and print the screen title
3. Send a GET to API_URL and print the status
"""

import asyncio
import sys

from harness.api import RequestBuilder
from harness.capabilities import CapabilityBuilder
from harness.config import get_settings
from harness.providers import ProviderRegistry
from harness.session import HarnessSession, harness_session
from harness.utils.logger import get_logger, setup_logging

LAYERS = ("web", "mobile", "api")


async def smoke_web(session: HarnessSession) -> None:
    url = session.settings.environment.base_url
    web = await session.web(browser="chromium", headless=True)
    await web.navigate(url)
    print(f"  ✓ {url}: {await web.execute('title')!r}")


async def smoke_mobile(session: HarnessSession) -> None:
    caps = (
        CapabilityBuilder.android()
        .device_name("Android Emulator")
        .merge_from_env_variable("CAPS")
    )
    app = await session.mobile(caps)
    print(f"  ✓ session {app.session.session_id} on {session.settings.provider.device_provider}")


async def smoke_api(session: HarnessSession) -> None:
    client = session.api()
    request = await RequestBuilder.get("/").build()
    response = await session.api_send(client, request)
    print(f"  ✓ GET {client.base_url}/ -> {response.status}")


SMOKES = {
    "web": smoke_web,
    "mobile": smoke_mobile,
    "api": smoke_api,
}


async def main(layers: list[str]) -> int:
    """Run the selected smoke checks; returns the process exit code."""
    settings = get_settings()
    setup_logging(settings)
    logger = get_logger(__name__)

    print("=" * 60)
    print(f"Device Harness Smoke Test ({settings.environment.test_environment})")
    print("=" * 60)

    failures = 0
    async with ProviderRegistry(settings) as registry:
        async with harness_session(registry, settings) as session:
            for layer in layers:
                print(f"\n[{layer}]")
                try:
                    await SMOKES[layer](session)
                except Exception as e:
                    failures += 1
                    logger.error("Smoke check failed", layer=layer, error=str(e))
                    print(f"  ❌ {layer}: {e}")

    print()
    print("=" * 60)
    print("All checks passed" if not failures else f"{failures} check(s) failed")
    return 1 if failures else 0


if __name__ == "__main__":
    selected = sys.argv[1:] or list(LAYERS)
    unknown = [layer for layer in selected if layer not in SMOKES]
    if unknown:
        print(f"Unknown layer(s): {', '.join(unknown)}; choose from {', '.join(LAYERS)}")
        sys.exit(2)
    sys.exit(asyncio.run(main(selected)))
