"""
Tests for device location sources.
"""

import asyncio

import pytest

from src.models.location_data import DeviceError, DeviceReading
from src.services.geolocation_service import (
    UNSUPPORTED_MESSAGE,
    GeoWatchOptions,
    QueuedDeviceLocationSource,
    UnavailableDeviceLocationSource,
)
from conftest import wait_for


class TestUnavailableDeviceLocationSource:
    """Tests for hosts without positioning."""

    @pytest.mark.asyncio
    async def test_yields_single_error(self):
        source = UnavailableDeviceLocationSource()
        events = [event async for event in source.watch(GeoWatchOptions())]
        assert events == [DeviceError(UNSUPPORTED_MESSAGE)]
        assert not source.is_supported()
        assert source.active_watch_count == 0


class TestQueuedDeviceLocationSource:
    """Tests for the push-based device source."""

    @pytest.mark.asyncio
    async def test_position_delivered_to_open_watch(self):
        source = QueuedDeviceLocationSource()
        watch = source.watch(GeoWatchOptions(timeout_ms=0))
        pending = asyncio.create_task(watch.__anext__())
        await wait_for(lambda: source.active_watch_count == 1)

        source.push_position(51.5, -0.12, 15.0)
        event = await pending

        assert event == DeviceReading(51.5, -0.12, 15.0)
        await watch.aclose()
        assert source.active_watch_count == 0

    @pytest.mark.asyncio
    async def test_invalid_position_becomes_error(self):
        source = QueuedDeviceLocationSource()
        watch = source.watch(GeoWatchOptions(timeout_ms=0))
        pending = asyncio.create_task(watch.__anext__())
        await wait_for(lambda: source.active_watch_count == 1)

        source.push_position(120.0, 0.0)
        event = await pending

        assert isinstance(event, DeviceError)
        await watch.aclose()

    @pytest.mark.asyncio
    async def test_watch_timeout_yields_error(self):
        source = QueuedDeviceLocationSource()
        watch = source.watch(GeoWatchOptions(timeout_ms=20))
        event = await watch.__anext__()
        assert isinstance(event, DeviceError)
        assert "Timeout" in event.error_message
        await watch.aclose()

    @pytest.mark.asyncio
    async def test_cached_fix_replayed_within_max_age(self):
        source = QueuedDeviceLocationSource()
        source.push_position(48.85, 2.35)

        watch = source.watch(GeoWatchOptions(timeout_ms=20, max_cache_age_ms=60000))
        event = await watch.__anext__()
        assert event == DeviceReading(48.85, 2.35)
        await watch.aclose()

    @pytest.mark.asyncio
    async def test_cached_fix_ignored_without_max_age(self):
        source = QueuedDeviceLocationSource()
        source.push_position(48.85, 2.35)

        watch = source.watch(GeoWatchOptions(timeout_ms=20, max_cache_age_ms=0))
        event = await watch.__anext__()
        assert isinstance(event, DeviceError)
        await watch.aclose()

    @pytest.mark.asyncio
    async def test_error_broadcast_to_all_watches(self):
        source = QueuedDeviceLocationSource()
        watches = [source.watch(GeoWatchOptions(timeout_ms=0)) for _ in range(2)]
        pending = [asyncio.create_task(w.__anext__()) for w in watches]
        await wait_for(lambda: source.active_watch_count == 2)

        source.push_error("User denied Geolocation")
        events = await asyncio.gather(*pending)

        assert events == [DeviceError("User denied Geolocation")] * 2
        for watch in watches:
            await watch.aclose()
        assert source.active_watch_count == 0
