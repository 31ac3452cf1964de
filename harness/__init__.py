"""
Device Harness
==============

Test-automation harness for acquiring, driving and releasing browser and
mobile sessions against a local Appium grid or a cloud device farm.

Modules:
    - capabilities: Capability builder and input normalization
    - providers: Backend integrations (local, BrowserStack, Sauce Labs) and registry
    - adapters: Uniform action execution over Playwright and Appium sessions
    - broker: Provider-backed session facade
    - ledger: Per-fixture resource tracking and ordered teardown
    - session: Test-facing fixture facade
    - api: HTTP client with owned/caller-supplied session tracking
    - utils: Logging and credential masking
"""

__version__ = "1.0.0"
__author__ = "Device Harness Team"
