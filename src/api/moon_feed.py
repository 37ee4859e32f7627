"""
Moon phase feed.
Author: Oliver Ernster
"""

import logging
from datetime import date
from typing import Optional

from .data_feeds import DataFeed
from ..models.astronomy_data import FeedName, MoonPhase
from ..services.moon_phase_service import MoonPhaseCalculator

logger = logging.getLogger(__name__)


class MoonPhaseFeed(DataFeed[MoonPhase]):
    """Moon phase feed backed by the local lunar cycle calculator."""

    def __init__(self, calculator: Optional[MoonPhaseCalculator] = None):
        self._calculator = calculator or MoonPhaseCalculator()

    def get_feed_name(self) -> FeedName:
        return FeedName.MOON

    async def fetch(self, latitude: float, longitude: float, iso_date: str) -> Optional[MoonPhase]:
        try:
            target_date = date.fromisoformat(iso_date)
        except ValueError as e:
            logger.error(f"Invalid date for moon phase: {e}")
            return None

        result = self._calculator.calculate(target_date)
        return MoonPhase(
            phase_name=result.phase.value,
            illumination=round(result.illumination, 3),
            age_days=round(result.age_days, 1),
            next_full_moon=result.next_full_moon,
            next_new_moon=result.next_new_moon,
        )
