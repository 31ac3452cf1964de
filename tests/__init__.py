"""
Test Package
============

Unit tests for the device harness.

Test organization:
    - test_capabilities.py: Builder, capability sets, platform detection
    - test_webdriver.py: W3C session client over a mocked aiohttp session
    - test_providers.py: Registry, backends, vendor defaults, tunnels
    - test_adapters.py: Web engine and mobile driver adapters
    - test_broker.py / test_ledger.py / test_session.py: Lifecycle and cleanup
    - test_api_client.py: API client ownership, requests, validation

Run tests with:
    pytest tests/ -v
"""
