"""
Tests for ResourceLedger
========================

Tests for:
- LIFO teardown order
- Best-effort cleanup past failing teardowns
- Provider cleanup after all resources, once per provider
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from harness.ledger import ResourceLedger


def recorder(order: list, name: str, fail: bool = False):
    async def teardown():
        order.append(name)
        if fail:
            raise RuntimeError(f"{name} failed")
    return teardown


def make_provider(order: list, name: str) -> MagicMock:
    provider = MagicMock()
    provider.name = name
    provider.cleanup = AsyncMock(side_effect=lambda: order.append(f"provider:{name}"))
    return provider


class TestResourceLedger:
    @pytest.mark.asyncio
    async def test_lifo_order(self):
        order: list[str] = []
        ledger = ResourceLedger()
        for name in ("A", "B", "C"):
            ledger.push(recorder(order, name), name)

        await ledger.cleanup()

        assert order == ["C", "B", "A"]
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_failures_do_not_stop_cleanup(self):
        order: list[str] = []
        ledger = ResourceLedger()
        ledger.push(recorder(order, "A"))
        ledger.push(recorder(order, "B", fail=True))
        ledger.push(recorder(order, "C"))

        await ledger.cleanup()

        assert order == ["C", "B", "A"]

    @pytest.mark.asyncio
    async def test_providers_cleaned_after_resources(self):
        order: list[str] = []
        ledger = ResourceLedger()
        local = make_provider(order, "local")
        ledger.track_provider(local)
        ledger.push(recorder(order, "mobile"))

        await ledger.cleanup()

        assert order == ["mobile", "provider:local"]

    @pytest.mark.asyncio
    async def test_provider_tracked_once(self):
        order: list[str] = []
        ledger = ResourceLedger()
        local = make_provider(order, "local")
        ledger.track_provider(local)
        ledger.track_provider(local)

        await ledger.cleanup()

        local.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_provider_cleanup_failure_swallowed(self):
        order: list[str] = []
        ledger = ResourceLedger()
        broken = MagicMock()
        broken.cleanup = AsyncMock(side_effect=RuntimeError("tunnel"))
        ledger.track_provider(broken)
        ledger.track_provider(make_provider(order, "sauce"))

        await ledger.cleanup()

        assert order == ["provider:sauce"]
        assert ledger.providers == []

    @pytest.mark.asyncio
    async def test_cleanup_twice_is_noop(self):
        order: list[str] = []
        ledger = ResourceLedger()
        ledger.push(recorder(order, "A"))

        await ledger.cleanup()
        await ledger.cleanup()

        assert order == ["A"]
