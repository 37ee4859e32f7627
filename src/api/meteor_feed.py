"""
Meteor shower feed.
Author: Oliver Ernster

This module reports the major annual meteor showers for a date. Activity
comes from a calendar of shower windows; the expected hourly rate and the
visibility score are scaled by distance from the peak, moonlight and how
high the radiant climbs at the observer's latitude.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional

from .data_feeds import DataFeed
from ..models.astronomy_data import FeedName, MeteorShower
from ..services.moon_phase_service import MoonPhaseCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShowerDefinition:
    """Calendar entry for an annual meteor shower."""
    name: str
    peak_month: int
    peak_day: int
    peak_label: str
    days_before_peak: int
    days_after_peak: int
    zenithal_hourly_rate: int
    radiant_declination: float

    def nearest_peak(self, target_date: date) -> date:
        """Get the peak date closest to target_date across year boundaries."""
        candidates = [
            date(year, self.peak_month, self.peak_day)
            for year in (target_date.year - 1, target_date.year, target_date.year + 1)
        ]
        return min(candidates, key=lambda peak: abs((target_date - peak).days))

    def is_active(self, target_date: date) -> bool:
        peak = self.nearest_peak(target_date)
        start = peak - timedelta(days=self.days_before_peak)
        end = peak + timedelta(days=self.days_after_peak)
        return start <= target_date <= end


METEOR_SHOWERS = [
    ShowerDefinition("Quadrantids", 1, 3, "January 3-4", 6, 9, 110, 49.0),
    ShowerDefinition("Lyrids", 4, 22, "April 22-23", 8, 8, 18, 33.0),
    ShowerDefinition("Eta Aquariids", 5, 5, "May 5-6", 16, 23, 50, -1.0),
    ShowerDefinition("Perseids", 8, 12, "August 12-13", 26, 12, 100, 58.0),
    ShowerDefinition("Orionids", 10, 21, "October 21-22", 19, 17, 20, 16.0),
    ShowerDefinition("Leonids", 11, 17, "November 17-18", 11, 13, 15, 22.0),
    ShowerDefinition("Geminids", 12, 13, "December 13-14", 9, 7, 150, 33.0),
]

# Rate falls to this share of the peak at the edge of the window
EDGE_ACTIVITY = 0.1
MOONLIGHT_PENALTY = 0.6


def radiant_factor(latitude: float, declination: float) -> float:
    """Sine of the radiant's highest altitude, 0 when it never rises."""
    max_altitude = 90.0 - abs(latitude - declination)
    if max_altitude <= 0:
        return 0.0
    return math.sin(math.radians(max_altitude))


def peak_factor(shower: ShowerDefinition, target_date: date) -> float:
    """Activity relative to the peak, decaying linearly to EDGE_ACTIVITY."""
    offset = (target_date - shower.nearest_peak(target_date)).days
    half_width = shower.days_before_peak if offset < 0 else shower.days_after_peak
    if half_width <= 0:
        return 1.0
    return max(EDGE_ACTIVITY, 1.0 - (1.0 - EDGE_ACTIVITY) * abs(offset) / half_width)


class MeteorShowerFeed(DataFeed[List[MeteorShower]]):
    """Meteor shower activity from the annual shower calendar."""

    def __init__(
        self,
        calculator: Optional[MoonPhaseCalculator] = None,
        showers: Optional[List[ShowerDefinition]] = None,
    ):
        self._calculator = calculator or MoonPhaseCalculator()
        self._showers = showers or list(METEOR_SHOWERS)

    def get_feed_name(self) -> FeedName:
        return FeedName.METEOR_SHOWERS

    async def fetch(
        self, latitude: float, longitude: float, iso_date: str
    ) -> Optional[List[MeteorShower]]:
        try:
            target_date = date.fromisoformat(iso_date)
        except ValueError as e:
            logger.error(f"Invalid date for meteor showers: {e}")
            return None

        moon_factor = 1.0 - MOONLIGHT_PENALTY * self._calculator.get_illumination(target_date)
        return [self._summarise(shower, target_date, latitude, moon_factor) for shower in self._showers]

    def _summarise(
        self, shower: ShowerDefinition, target_date: date, latitude: float, moon_factor: float
    ) -> MeteorShower:
        if not shower.is_active(target_date):
            return MeteorShower(
                name=shower.name,
                active=False,
                peak_date_label=shower.peak_label,
                rate=0,
                visibility=0.0,
            )

        score = peak_factor(shower, target_date) * moon_factor * radiant_factor(
            latitude, shower.radiant_declination
        )
        score = min(max(score, 0.0), 1.0)
        logger.debug(f"{shower.name} active on {target_date} (score {score:.2f})")
        return MeteorShower(
            name=shower.name,
            active=True,
            peak_date_label=shower.peak_label,
            rate=int(round(shower.zenithal_hourly_rate * score)),
            visibility=round(score, 2),
        )
