"""
Sky session wiring for the Skywatch application.
Author: Oliver Ernster

This module connects the location resolver to the astronomy manager: each
confirmed location triggers an astronomy refresh. The factory builds the
concrete services, feeds and HTTP clients from configuration.
"""

import asyncio
import logging
from typing import List, Optional

from ..api.data_feeds import AstronomyFeedFactory
from ..api.http_client import AioHttpClient, HTTPClient
from ..models.astronomy_data import Highlight
from ..models.location_data import Coordinates, LocationState
from ..services.ephemeris_service import EphemerisService
from ..services.geocoding_service import GeocodingService
from ..services.geolocation_service import DeviceLocationSource, UnavailableDeviceLocationSource
from ..services.ip_location_service import IPLocationService
from .app_config import AppConfig
from .astronomy_aggregator import AstronomyAggregator, DateLike
from .astronomy_manager import AstronomyManager, AstronomyViewState
from .location_resolver import LocationResolver

logger = logging.getLogger(__name__)


class SkySession:
    """
    One observer session: a location resolver feeding an astronomy manager.

    Follows Facade pattern - presentation code talks to the session rather
    than to the individual managers.
    """

    def __init__(
        self,
        resolver: LocationResolver,
        manager: AstronomyManager,
        http_clients: Optional[List[HTTPClient]] = None,
    ):
        self.resolver = resolver
        self.manager = manager
        self._http_clients = list(http_clients or [])
        self.resolver.location_resolved.connect(self._on_location_resolved)
        logger.debug("SkySession initialized")

    def _on_location_resolved(self, coordinates: Coordinates) -> None:
        logger.debug(f"Location resolved, requesting astronomy for {coordinates}")
        self.manager.request_update(coordinates)

    @property
    def location_state(self) -> LocationState:
        return self.resolver.state

    def start(self) -> asyncio.Task:
        """Start automatic location resolution."""
        return self.resolver.start()

    async def submit_manual_location(self, text: str) -> LocationState:
        return await self.resolver.submit_manual_location(text)

    def change_location(self) -> None:
        self.resolver.change_location()

    def skip_waiting(self) -> None:
        self.resolver.skip_waiting()

    def cancel_manual_entry(self) -> None:
        self.resolver.cancel_manual_entry()

    def set_date(self, target_date: DateLike) -> Optional[asyncio.Task]:
        return self.manager.set_date(target_date)

    def get_view_state(self) -> AstronomyViewState:
        return self.manager.get_view_state()

    def get_highlights(self) -> List[Highlight]:
        return self.manager.get_highlights()

    async def shutdown(self) -> None:
        """Shutdown the session and release network resources."""
        logger.debug("Shutting down sky session...")
        await self.resolver.shutdown()
        await self.manager.shutdown()
        for client in self._http_clients:
            await client.close()
        logger.debug("Sky session shutdown complete")


class SkySessionFactory:
    """
    Factory for creating sky sessions.

    Implements Factory pattern for easy instantiation and testing.
    """

    @staticmethod
    def create_from_config(
        config: AppConfig, device_source: Optional[DeviceLocationSource] = None
    ) -> SkySession:
        """
        Create a fully wired session from configuration.

        Args:
            config: Application configuration
            device_source: Device location capability (unavailable if None)
        """
        location_client = AioHttpClient(timeout_seconds=config.location.lookup_timeout_seconds)
        feed_client = AioHttpClient(timeout_seconds=config.astronomy.http_timeout_seconds)

        ephemeris = EphemerisService(
            config.astronomy.get_cache_dir(), config.astronomy.ephemeris_file
        )
        feeds = AstronomyFeedFactory.create_from_config(config.astronomy, feed_client, ephemeris)
        aggregator = AstronomyAggregator(feeds, config.astronomy.feed_timeout_seconds)

        resolver = LocationResolver(
            device_source or UnavailableDeviceLocationSource(),
            IPLocationService(location_client),
            GeocodingService(location_client),
            config.location,
        )
        manager = AstronomyManager(aggregator)
        return SkySession(resolver, manager, http_clients=[location_client, feed_client])
