"""
Device geolocation sources for the Skywatch application.
Author: Oliver Ernster

This module defines the device location capability consumed by the
location resolver. A watch is an async iterator of readings or errors that
stays open until the consumer closes it, so every watch must be closed
to release its subscription.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Tuple, Union

from ..models.location_data import DeviceError, DeviceReading, validate_coordinates

logger = logging.getLogger(__name__)

DeviceEvent = Union[DeviceReading, DeviceError]

UNSUPPORTED_MESSAGE = "Geolocation is not supported by this device"


@dataclass(frozen=True)
class GeoWatchOptions:
    """Options passed to the device location capability."""
    high_accuracy: bool = True
    timeout_ms: int = 10000
    max_cache_age_ms: int = 0


class DeviceLocationSource(ABC):
    """
    Abstract device location capability.

    Follows Dependency Inversion Principle - the resolver depends on this
    abstraction, not on any particular positioning backend.
    """

    @abstractmethod
    def watch(self, options: GeoWatchOptions) -> AsyncIterator[DeviceEvent]:
        """Open a watch yielding readings or errors until closed."""
        pass

    @property
    @abstractmethod
    def active_watch_count(self) -> int:
        """Number of watches currently open."""
        pass

    def is_supported(self) -> bool:
        return True


class UnavailableDeviceLocationSource(DeviceLocationSource):
    """Device source for hosts with no positioning capability."""

    def __init__(self, message: str = UNSUPPORTED_MESSAGE):
        self._message = message
        self._active = 0

    @property
    def active_watch_count(self) -> int:
        return self._active

    def is_supported(self) -> bool:
        return False

    async def watch(self, options: GeoWatchOptions) -> AsyncIterator[DeviceEvent]:
        self._active += 1
        try:
            yield DeviceError(self._message)
        finally:
            self._active -= 1


class QueuedDeviceLocationSource(DeviceLocationSource):
    """
    Push-based device source.

    The host positioning integration calls push_position/push_error and
    every open watch receives the event. The most recent fix is replayed to
    a new watch when it is younger than the watch's max_cache_age_ms.
    """

    def __init__(self):
        self._watchers: List[asyncio.Queue] = []
        self._last_fix: Optional[Tuple[float, DeviceReading]] = None

    @property
    def active_watch_count(self) -> int:
        return len(self._watchers)

    def push_position(self, latitude: float, longitude: float, accuracy: Optional[float] = None) -> None:
        """Deliver a position fix to every open watch."""
        if not validate_coordinates(latitude, longitude):
            self.push_error(f"Invalid position reported: ({latitude}, {longitude})")
            return
        reading = DeviceReading(latitude=latitude, longitude=longitude, accuracy=accuracy)
        self._last_fix = (time.monotonic(), reading)
        self._broadcast(reading)

    def push_error(self, message: str) -> None:
        """Deliver an error to every open watch."""
        self._broadcast(DeviceError(message))

    def _broadcast(self, event: DeviceEvent) -> None:
        logger.debug(f"Device event for {len(self._watchers)} watchers: {event}")
        for queue in list(self._watchers):
            queue.put_nowait(event)

    def _cached_fix(self, max_age_ms: int) -> Optional[DeviceReading]:
        if self._last_fix is None or max_age_ms <= 0:
            return None
        fixed_at, reading = self._last_fix
        if (time.monotonic() - fixed_at) * 1000 <= max_age_ms:
            return reading
        return None

    async def watch(self, options: GeoWatchOptions) -> AsyncIterator[DeviceEvent]:
        queue: asyncio.Queue = asyncio.Queue()
        self._watchers.append(queue)
        logger.debug(f"Device watch opened (high accuracy: {options.high_accuracy})")
        try:
            cached = self._cached_fix(options.max_cache_age_ms)
            if cached is not None:
                yield cached

            while True:
                if options.timeout_ms > 0:
                    try:
                        event = await asyncio.wait_for(queue.get(), options.timeout_ms / 1000)
                    except asyncio.TimeoutError:
                        event = DeviceError("Timeout expired while waiting for position")
                else:
                    event = await queue.get()
                yield event
        finally:
            self._watchers.remove(queue)
            logger.debug("Device watch closed")
