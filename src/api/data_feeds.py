"""
Astronomy data feed abstractions for the Skywatch application.
Author: Oliver Ernster

This module defines the common interface of the five independent astronomy
feeds and the factory that builds them from configuration.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Generic, Optional, TypeVar

from ..models.astronomy_data import FeedName

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DataFeed(ABC, Generic[T]):
    """
    Abstract base class for astronomy data feeds.

    Follows Interface Segregation Principle - minimal interface for a feed.
    A feed answers for one location and date; it returns None when it has
    nothing to offer and is expected not to raise.
    """

    @abstractmethod
    async def fetch(self, latitude: float, longitude: float, iso_date: str) -> Optional[T]:
        """Fetch this feed's record for the location and ISO-8601 date."""
        pass

    @abstractmethod
    def get_feed_name(self) -> FeedName:
        """Get the feed's name."""
        pass


@dataclass
class AstronomyFeeds:
    """The configured feed instances, one per feed name (None when disabled)."""

    moon: Optional[DataFeed] = None
    planets: Optional[DataFeed] = None
    satellites: Optional[DataFeed] = None
    meteor_showers: Optional[DataFeed] = None
    aurora: Optional[DataFeed] = None

    def get_enabled(self) -> Dict[FeedName, DataFeed]:
        """Get enabled feeds keyed by name, in dispatch order."""
        enabled = {}
        for feed_name in FeedName:
            feed = getattr(self, feed_name.value)
            if feed is not None:
                enabled[feed_name] = feed
        return enabled


class AstronomyFeedFactory:
    """
    Factory for creating astronomy feeds.

    Implements Factory pattern for easy instantiation and testing.
    """

    @staticmethod
    def create_from_config(config, http_client, ephemeris) -> AstronomyFeeds:
        """
        Create the enabled feeds for an AstronomyConfig.

        Args:
            config: AstronomyConfig instance
            http_client: HTTP client shared by the network feeds
            ephemeris: EphemerisService shared by the skyfield feeds
        """
        # Feed modules import this one for DataFeed
        from ..services.moon_phase_service import MoonPhaseCalculator
        from .aurora_feed import AuroraForecastFeed
        from .meteor_feed import MeteorShowerFeed
        from .moon_feed import MoonPhaseFeed
        from .planet_feed import PlanetVisibilityFeed
        from .satellite_feed import SatellitePassFeed

        toggles = config.feeds
        calculator = MoonPhaseCalculator()
        feeds = AstronomyFeeds(
            moon=MoonPhaseFeed(calculator) if toggles.moon else None,
            planets=PlanetVisibilityFeed(ephemeris) if toggles.planets else None,
            satellites=(
                SatellitePassFeed(http_client, ephemeris, config.tle_url, config.tracked_satellites)
                if toggles.satellites
                else None
            ),
            meteor_showers=MeteorShowerFeed(calculator) if toggles.meteor_showers else None,
            aurora=AuroraForecastFeed(http_client, config.aurora_url) if toggles.aurora else None,
        )
        logger.debug(f"Created feeds: {[name.value for name in feeds.get_enabled()]}")
        return feeds
