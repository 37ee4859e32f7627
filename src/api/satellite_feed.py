"""
Satellite pass feed.
Author: Oliver Ernster

This module predicts passes of the tracked satellites over the observer
during the night, using two-line elements from CelesTrak and skyfield's
pass search. A pass is visible when the satellite is sunlit at culmination
while the observer's sky is dark.
"""

import asyncio
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from skyfield.api import EarthSatellite, wgs84

from .data_feeds import DataFeed
from .http_client import HTTPClient, SkyAPIException
from ..models.astronomy_data import FeedName, SatellitePass
from ..services.ephemeris_service import EphemerisService

logger = logging.getLogger(__name__)

MIN_ELEVATION_DEG = 10.0
DARK_SKY_SUN_ALTITUDE_DEG = -6.0

# Search window in local mean solar time: noon on the date to noon the next day
WINDOW_START_HOUR = 12
WINDOW_HOURS = 24

RISE, CULMINATE, SET = 0, 1, 2


def parse_tle_catalog(text: str) -> Dict[str, Tuple[str, str]]:
    """
    Parse a three-line TLE catalog.

    Args:
        text: Catalog text of name / line 1 / line 2 triplets

    Returns:
        Dict mapping satellite name to its two element lines
    """
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    catalog = {}
    index = 0
    while index + 2 < len(lines):
        name, line1, line2 = lines[index], lines[index + 1], lines[index + 2]
        if line1.startswith("1 ") and line2.startswith("2 "):
            catalog[name.strip()] = (line1, line2)
            index += 3
        else:
            index += 1
    return catalog


class SatellitePassFeed(DataFeed[List[SatellitePass]]):
    """Passes of the tracked satellites over one night."""

    def __init__(
        self,
        http_client: HTTPClient,
        ephemeris: EphemerisService,
        tle_url: str,
        tracked_satellites: List[str],
    ):
        self._http_client = http_client
        self._ephemeris = ephemeris
        self._tle_url = tle_url
        self._tracked = list(tracked_satellites)

    def get_feed_name(self) -> FeedName:
        return FeedName.SATELLITES

    async def fetch(
        self, latitude: float, longitude: float, iso_date: str
    ) -> Optional[List[SatellitePass]]:
        try:
            target_date = date.fromisoformat(iso_date)
        except ValueError as e:
            logger.error(f"Invalid date for satellite passes: {e}")
            return None

        catalog = await self._fetch_catalog()
        if catalog is None:
            return None

        elements = {name: catalog[name] for name in self._tracked if name in catalog}
        missing = [name for name in self._tracked if name not in catalog]
        if missing:
            logger.warning(f"No elements found for tracked satellites: {missing}")
        if not elements:
            return None

        try:
            return await asyncio.to_thread(
                self._compute_passes, elements, latitude, longitude, target_date
            )
        except Exception as e:
            logger.error(f"Satellite pass calculation failed: {e}")
            return None

    async def _fetch_catalog(self) -> Optional[Dict[str, Tuple[str, str]]]:
        try:
            response = await self._http_client.get_text(self._tle_url)
        except SkyAPIException as e:
            logger.error(f"Failed to fetch satellite elements: {e}")
            return None

        if not response.ok or not isinstance(response.data, str):
            logger.error(f"Satellite elements request returned status {response.status_code}")
            return None

        catalog = parse_tle_catalog(response.data)
        logger.debug(f"Parsed {len(catalog)} satellite element sets")
        return catalog

    def _compute_passes(
        self,
        elements: Dict[str, Tuple[str, str]],
        latitude: float,
        longitude: float,
        target_date: date,
    ) -> List[SatellitePass]:
        ts = self._ephemeris.timescale
        eph = self._ephemeris.ephemeris
        topos = wgs84.latlon(latitude, longitude)

        local_noon = datetime.combine(target_date, time(WINDOW_START_HOUR), tzinfo=timezone.utc)
        start = local_noon - timedelta(hours=longitude / 15.0)
        end = start + timedelta(hours=WINDOW_HOURS)
        t0 = self._ephemeris.get_time(start)
        t1 = self._ephemeris.get_time(end)

        passes = []
        for name, (line1, line2) in elements.items():
            satellite = EarthSatellite(line1, line2, name, ts)
            difference = satellite - topos
            times, events = satellite.find_events(topos, t0, t1, altitude_degrees=MIN_ELEVATION_DEG)

            rise_t = culminate_t = None
            for t, event in zip(times, events):
                if event == RISE:
                    rise_t, culminate_t = t, None
                elif event == CULMINATE:
                    culminate_t = t
                elif event == SET and rise_t is not None and culminate_t is not None:
                    passes.append(
                        self._build_pass(name, satellite, difference, eph, topos, rise_t, culminate_t, t)
                    )
                    rise_t = culminate_t = None

        passes.sort(key=lambda p: p.start_time)
        logger.info(f"Found {len(passes)} satellite passes for {target_date}")
        return passes

    def _build_pass(self, name, satellite, difference, eph, topos, rise_t, culminate_t, set_t) -> SatellitePass:
        max_elevation, _, _ = difference.at(culminate_t).altaz()
        _, start_azimuth, _ = difference.at(rise_t).altaz()
        _, end_azimuth, _ = difference.at(set_t).altaz()

        sun_altitude, _, _ = (eph["earth"] + topos).at(culminate_t).observe(eph["sun"]).apparent().altaz()
        sunlit = bool(satellite.at(culminate_t).is_sunlit(eph))
        visible = sunlit and sun_altitude.degrees < DARK_SKY_SUN_ALTITUDE_DEG

        return SatellitePass(
            name=name,
            start_time=rise_t.utc_datetime(),
            end_time=set_t.utc_datetime(),
            max_elevation_deg=round(min(max(max_elevation.degrees, 0.0), 90.0), 1),
            start_azimuth_deg=round(start_azimuth.degrees, 1),
            end_azimuth_deg=round(end_azimuth.degrees, 1),
            visible=visible,
        )
