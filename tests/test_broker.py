"""
Tests for DeviceBroker
======================

Tests for:
- Provider obtained once from the registry
- ensure_init gating provider init exactly once
- Adapter and raw session acquisition, release and cleanup
"""

import asyncio

import pytest

from harness.adapters import MobileDriverAdapter
from harness.broker import DeviceBroker
from harness.exceptions import AdapterBindError


class TestDeviceBroker:
    def test_provider_obtained_once(self, mock_registry, mock_provider):
        broker = DeviceBroker(mock_registry, "local")
        mock_registry.get_provider.assert_called_once_with("local")
        assert broker.provider is mock_provider
        assert not broker.initialized

    @pytest.mark.asyncio
    async def test_ensure_init_runs_provider_init_once(self, mock_registry, mock_provider):
        broker = DeviceBroker(mock_registry)
        for _ in range(5):
            await broker.ensure_init()
        mock_provider.init.assert_awaited_once()
        assert broker.initialized

    @pytest.mark.asyncio
    async def test_concurrent_ensure_init(self, mock_registry, mock_provider):
        async def slow_init():
            await asyncio.sleep(0.01)

        mock_provider.init.side_effect = slow_init
        broker = DeviceBroker(mock_registry)

        await asyncio.gather(*(broker.ensure_init() for _ in range(5)))

        mock_provider.init.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_init_can_be_retried(self, mock_registry, mock_provider):
        mock_provider.init.side_effect = [RuntimeError("no credentials"), None]
        broker = DeviceBroker(mock_registry)

        with pytest.raises(RuntimeError):
            await broker.ensure_init()
        await broker.ensure_init()

        assert mock_provider.init.await_count == 2
        assert broker.initialized

    @pytest.mark.asyncio
    async def test_get_mobile_adapter(self, mock_registry, mock_provider, remote_session):
        broker = DeviceBroker(mock_registry)
        caps = {"platformName": "Android"}

        adapter = await broker.get_mobile_adapter(caps)

        mock_provider.init.assert_awaited_once()
        mock_provider.get_mobile_session.assert_awaited_once_with(caps)
        assert isinstance(adapter, MobileDriverAdapter)
        assert adapter.session is remote_session

    @pytest.mark.asyncio
    async def test_bind_failure_releases_session(self, mock_registry, mock_provider):
        stale = object()
        mock_provider.get_mobile_session.return_value = stale
        broker = DeviceBroker(mock_registry)

        with pytest.raises(AdapterBindError):
            await broker.get_mobile_adapter({})

        mock_provider.release_session.assert_awaited_once_with(stale)

    @pytest.mark.asyncio
    async def test_raw_session_and_release(self, mock_registry, mock_provider, remote_session):
        broker = DeviceBroker(mock_registry)

        session = await broker.get_mobile_session({})
        await broker.release_session(session)

        assert session is remote_session
        mock_provider.release_session.assert_awaited_once_with(remote_session)

    @pytest.mark.asyncio
    async def test_cleanup_initializes_first(self, mock_registry, mock_provider):
        broker = DeviceBroker(mock_registry)
        await broker.cleanup()

        mock_provider.init.assert_awaited_once()
        mock_provider.cleanup.assert_awaited_once()
        assert not broker.initialized
