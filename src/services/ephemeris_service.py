"""
Skyfield ephemeris service for the Skywatch application.
Author: Oliver Ernster

This module loads the JPL ephemeris and timescale once per process and
provides the body positions and rise/set searches used by the planet and
satellite feeds. All methods are blocking and are called from worker
threads by the feeds.
"""

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from skyfield import almanac
from skyfield.api import Loader, wgs84

logger = logging.getLogger(__name__)


class EphemerisService:
    """Lazily loaded skyfield ephemeris shared by the feeds."""

    BODY_NAMES = {
        "Sun": "sun",
        "Moon": "moon",
        "Mercury": "mercury barycenter",
        "Venus": "venus barycenter",
        "Mars": "mars barycenter",
        "Jupiter": "jupiter barycenter",
        "Saturn": "saturn barycenter",
        "Uranus": "uranus barycenter",
        "Neptune": "neptune barycenter",
    }

    def __init__(self, cache_dir: Path, ephemeris_file: str = "de421.bsp"):
        """
        Initialize ephemeris service.

        Args:
            cache_dir: Directory where ephemeris files are downloaded
            ephemeris_file: JPL ephemeris file name
        """
        self._cache_dir = Path(cache_dir)
        self._ephemeris_file = ephemeris_file
        self._lock = threading.Lock()
        self._ts = None
        self._eph = None

    def _ensure_loaded(self) -> None:
        """Load timescale and ephemeris (downloads on first run)."""
        with self._lock:
            if self._eph is not None:
                return
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            loader = Loader(str(self._cache_dir))
            self._ts = loader.timescale()
            self._eph = loader(self._ephemeris_file)
            logger.info(f"Loaded ephemeris {self._ephemeris_file} from {self._cache_dir}")

    @property
    def timescale(self):
        self._ensure_loaded()
        return self._ts

    @property
    def ephemeris(self):
        self._ensure_loaded()
        return self._eph

    def get_time(self, when: datetime):
        """Get Skyfield time object, assuming UTC for naive datetimes."""
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return self.timescale.from_datetime(when)

    def get_body_altaz(
        self, body: str, latitude: float, longitude: float, when: datetime
    ) -> Tuple[float, float]:
        """
        Get altitude/azimuth of a solar system body.

        Args:
            body: Body display name, e.g. "Jupiter"
            latitude: Observer latitude
            longitude: Observer longitude
            when: Time for calculation

        Returns:
            (altitude_degrees, azimuth_degrees)
        """
        eph = self.ephemeris
        observer = eph["earth"] + wgs84.latlon(latitude, longitude)
        apparent = observer.at(self.get_time(when)).observe(eph[self.BODY_NAMES[body]]).apparent()
        alt, az, _ = apparent.altaz()
        return alt.degrees, az.degrees

    def find_rise_and_set(
        self,
        body: str,
        latitude: float,
        longitude: float,
        start: datetime,
        end: datetime,
    ) -> Tuple[Optional[datetime], Optional[datetime]]:
        """
        Find the first rising and first setting of a body in a window.

        Returns:
            (rise_time, set_time) as UTC datetimes; None when absent
        """
        eph = self.ephemeris
        topos = wgs84.latlon(latitude, longitude)
        search = almanac.risings_and_settings(eph, eph[self.BODY_NAMES[body]], topos)
        times, events = almanac.find_discrete(self.get_time(start), self.get_time(end), search)

        rise_time = None
        set_time = None
        for t, is_rise in zip(times, events):
            if is_rise and rise_time is None:
                rise_time = t.utc_datetime()
            elif not is_rise and set_time is None:
                set_time = t.utc_datetime()
        return rise_time, set_time
