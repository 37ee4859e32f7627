"""
Planet visibility feed.
Author: Oliver Ernster

This module reports which naked-eye planets are up in the evening sky,
using the shared skyfield ephemeris. The evening reference time is 21:00
local mean solar time, derived from the observer's longitude.
"""

import asyncio
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from .data_feeds import DataFeed
from ..models.astronomy_data import FeedName, PlanetVisibility
from ..services.ephemeris_service import EphemerisService

logger = logging.getLogger(__name__)

NAKED_EYE_PLANETS = ["Mercury", "Venus", "Mars", "Jupiter", "Saturn"]

MIN_ALTITUDE_DEG = 10.0
EVENING_HOUR = 21


def evening_reference_time(target_date: date, longitude: float) -> datetime:
    """Get 21:00 local mean solar time on target_date as a UTC datetime."""
    local_evening = datetime.combine(target_date, time(EVENING_HOUR), tzinfo=timezone.utc)
    return local_evening - timedelta(hours=longitude / 15.0)


class PlanetVisibilityFeed(DataFeed[List[PlanetVisibility]]):
    """Evening visibility of the naked-eye planets."""

    def __init__(self, ephemeris: EphemerisService, planets: Optional[List[str]] = None):
        self._ephemeris = ephemeris
        self._planets = planets or list(NAKED_EYE_PLANETS)

    def get_feed_name(self) -> FeedName:
        return FeedName.PLANETS

    async def fetch(
        self, latitude: float, longitude: float, iso_date: str
    ) -> Optional[List[PlanetVisibility]]:
        try:
            target_date = date.fromisoformat(iso_date)
        except ValueError as e:
            logger.error(f"Invalid date for planet visibility: {e}")
            return None

        try:
            return await asyncio.to_thread(self._compute, latitude, longitude, target_date)
        except Exception as e:
            logger.error(f"Planet visibility calculation failed: {e}")
            return None

    def _compute(self, latitude: float, longitude: float, target_date: date) -> List[PlanetVisibility]:
        reference = evening_reference_time(target_date, longitude)
        window_start = reference - timedelta(hours=12)
        window_end = reference + timedelta(hours=12)

        results = []
        for planet in self._planets:
            altitude, azimuth = self._ephemeris.get_body_altaz(planet, latitude, longitude, reference)
            if altitude < MIN_ALTITUDE_DEG:
                results.append(PlanetVisibility(name=planet, visible=False))
                continue

            rise_time, set_time = self._ephemeris.find_rise_and_set(
                planet, latitude, longitude, window_start, window_end
            )
            results.append(
                PlanetVisibility(
                    name=planet,
                    visible=True,
                    rise_time=rise_time,
                    set_time=set_time,
                    altitude_deg=round(altitude, 1),
                    azimuth_deg=round(azimuth, 1),
                )
            )

        visible = [p.name for p in results if p.visible]
        logger.info(f"Planets visible on {target_date}: {visible or 'none'}")
        return results
