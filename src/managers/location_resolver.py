"""
Location resolver for the Skywatch application.
Author: Oliver Ernster

This module provides the cascading location resolution state machine:
device location raced against a fallback timer, then IP lookup, then
manual entry. Each attempt carries a generation number and only events
from the current generation may change the published state, so a
straggling earlier attempt can never overwrite a newer resolution.
"""

import asyncio
import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from ..models.location_data import (
    Coordinates,
    DeviceReading,
    InvalidCoordinatesError,
    LocationOrigin,
    LocationState,
    ResolverPhase,
)
from ..services.geolocation_service import DeviceLocationSource, GeoWatchOptions
from ..services.geocoding_service import GeocodingService
from ..services.ip_location_service import IPLocationService
from .app_config import LocationConfig

logger = logging.getLogger(__name__)

IP_LOOKUP_EMPTY_MESSAGE = "Could not determine location automatically"
IP_LOOKUP_ERROR_MESSAGE = "Failed to get location automatically"
MANUAL_EMPTY_MESSAGE = "Please enter a location."
MANUAL_NOT_FOUND_MESSAGE = "Location not found. Please try a different city name."
MANUAL_SEARCH_ERROR_MESSAGE = "Error searching for location. Please try again."


class LocationResolver(QObject):
    """
    State machine that resolves the observer's location.

    Follows Single Responsibility Principle - only responsible for deciding
    which source supplies the location. Implements Observer pattern through
    Qt signals for presentation updates.
    """

    # Qt Signals for observer pattern
    state_changed = Signal(object)  # LocationState
    location_resolved = Signal(object)  # Coordinates

    def __init__(
        self,
        device_source: DeviceLocationSource,
        ip_service: IPLocationService,
        geocoder: GeocodingService,
        config: Optional[LocationConfig] = None,
    ):
        """
        Initialize location resolver.

        Args:
            device_source: Device location capability
            ip_service: IP-based fallback lookup
            geocoder: Manual entry geocoder
            config: Location configuration (defaults if None)
        """
        super().__init__()
        self._device_source = device_source
        self._ip_service = ip_service
        self._geocoder = geocoder
        self._config = config or LocationConfig()
        self._state = LocationState()
        self._generation = 0
        self._cascade_task: Optional[asyncio.Task] = None

        logger.debug(
            f"LocationResolver initialized (device timeout: {self._config.device_timeout_ms}ms)"
        )

    @property
    def state(self) -> LocationState:
        """Get the current location state snapshot."""
        return self._state

    @property
    def generation(self) -> int:
        """Get the current attempt generation."""
        return self._generation

    def _begin_attempt(self) -> int:
        """Start a new attempt generation, cancelling the running cascade."""
        self._generation += 1
        if self._cascade_task is not None and not self._cascade_task.done():
            self._cascade_task.cancel()
        self._cascade_task = None
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _set_state(self, state: LocationState) -> None:
        """Replace the state wholesale and notify observers."""
        previous = self._state
        self._state = state
        if previous.phase is not state.phase:
            logger.info(f"Location phase: {previous.phase.value} -> {state.phase.value}")
        self.state_changed.emit(state)

    def _apply(self, generation: int, **changes) -> bool:
        """Apply a transition if it belongs to the current attempt."""
        if not self._is_current(generation):
            logger.debug(
                f"Discarding stale transition from attempt {generation} "
                f"(current: {self._generation})"
            )
            return False
        self._set_state(self._state.evolve(**changes))
        return True

    def _resolve(self, generation: int, coordinates: Coordinates, origin: LocationOrigin, place=None) -> bool:
        applied = self._apply(
            generation,
            phase=ResolverPhase.RESOLVED,
            coordinates=coordinates,
            place=place,
            origin=origin,
            error=None,
            validation_error=None,
            manual_entry_available=False,
        )
        if applied:
            logger.info(f"Location resolved via {origin.value}: {coordinates}")
            self.location_resolved.emit(coordinates)
        return applied

    def start(self) -> asyncio.Task:
        """
        Start (or restart) automatic resolution.

        Must be called from a running event loop.

        Returns:
            The cascade task, finishing when the cascade settles
        """
        generation = self._begin_attempt()
        self._apply(
            generation,
            phase=ResolverPhase.AWAITING_DEVICE,
            error=None,
            validation_error=None,
            manual_entry_available=False,
        )
        self._cascade_task = asyncio.create_task(self._run_cascade(generation))
        return self._cascade_task

    async def _run_cascade(self, generation: int) -> None:
        coordinates = await self._await_device(generation)
        if coordinates is not None:
            self._resolve(generation, coordinates, LocationOrigin.DEVICE)
            return

        if not self._apply(generation, phase=ResolverPhase.AWAITING_NETWORK):
            return

        try:
            location = await self._ip_service.lookup()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"IP location lookup failed: {e}")
            self._fail(generation, IP_LOOKUP_ERROR_MESSAGE)
            return

        if location is None:
            self._fail(generation, IP_LOOKUP_EMPTY_MESSAGE)
            return

        try:
            coordinates = location.to_coordinates()
        except InvalidCoordinatesError as e:
            logger.error(f"IP location lookup returned an invalid position: {e}")
            self._fail(generation, IP_LOOKUP_ERROR_MESSAGE)
            return

        self._resolve(generation, coordinates, LocationOrigin.NETWORK, place=location.to_place())

    def _fail(self, generation: int, reason: str) -> None:
        if self._apply(
            generation,
            phase=ResolverPhase.FAILED,
            error=reason,
            manual_entry_available=True,
        ):
            logger.warning(f"Automatic location failed: {reason}")

    async def _await_device(self, generation: int) -> Optional[Coordinates]:
        """
        Wait for the first device event, racing the fallback timer.

        Returns:
            The device position, or None on error, timeout, an out-of-range
            reading or no support
        """
        if not self._device_source.is_supported():
            logger.warning("Device location not supported, falling back to IP lookup")
            return None

        options = GeoWatchOptions(
            high_accuracy=self._config.high_accuracy,
            timeout_ms=self._config.watch_timeout_ms,
            max_cache_age_ms=self._config.max_cache_age_ms,
        )
        timeout = self._config.device_timeout_ms / 1000 if self._config.device_timeout_ms > 0 else None

        watch = self._device_source.watch(options)
        try:
            event = await asyncio.wait_for(watch.__anext__(), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Device location timed out after {self._config.device_timeout_ms}ms")
            return None
        except StopAsyncIteration:
            logger.warning("Device location watch ended without a position")
            return None
        finally:
            # The watch is never left standing once the race is decided
            await watch.aclose()

        if not isinstance(event, DeviceReading):
            logger.warning(f"Device location error: {event.error_message}")
            return None

        try:
            return event.to_coordinates()
        except InvalidCoordinatesError as e:
            logger.warning(f"Device location error: {e}")
            return None

    def skip_waiting(self) -> None:
        """Short-circuit automatic detection straight into manual entry."""
        if self._state.phase not in (ResolverPhase.AWAITING_DEVICE, ResolverPhase.AWAITING_NETWORK):
            logger.debug(f"skip_waiting ignored in phase {self._state.phase.value}")
            return
        self._enter_manual()

    def change_location(self) -> None:
        """Return to manual entry, keeping the last known location until replaced."""
        self._enter_manual()

    def _enter_manual(self) -> None:
        generation = self._begin_attempt()
        self._apply(
            generation,
            phase=ResolverPhase.AWAITING_MANUAL,
            error=None,
            validation_error=None,
            manual_entry_available=True,
        )

    def cancel_manual_entry(self) -> None:
        """Leave manual entry and restore the previous location, if there is one."""
        if self._state.phase is not ResolverPhase.AWAITING_MANUAL or self._state.coordinates is None:
            return
        generation = self._begin_attempt()
        self._apply(
            generation,
            phase=ResolverPhase.RESOLVED,
            error=None,
            validation_error=None,
            manual_entry_available=False,
        )

    async def submit_manual_location(self, text: str) -> LocationState:
        """
        Resolve a user-entered place name.

        Args:
            text: Free-text place name or "latitude, longitude"

        Returns:
            The location state after the lookup settles
        """
        generation = self._begin_attempt()
        self._apply(
            generation,
            phase=ResolverPhase.AWAITING_MANUAL,
            error=None,
            validation_error=None,
            manual_entry_available=True,
        )

        if not text or not text.strip():
            self._apply(generation, validation_error=MANUAL_EMPTY_MESSAGE)
            return self._state

        try:
            coordinates = await self._geocoder.geocode(text)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Manual location lookup failed for '{text}': {e}")
            self._apply(generation, validation_error=MANUAL_SEARCH_ERROR_MESSAGE)
            return self._state

        if coordinates is None:
            logger.info(f"No match for manual location '{text}'")
            self._apply(generation, validation_error=MANUAL_NOT_FOUND_MESSAGE)
            return self._state

        self._resolve(generation, coordinates, LocationOrigin.MANUAL)
        return self._state

    async def shutdown(self) -> None:
        """Cancel in-flight work and tear down the device watch."""
        logger.debug("Shutting down location resolver...")
        task = self._cascade_task
        self._begin_attempt()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        logger.debug("Location resolver shutdown complete")
