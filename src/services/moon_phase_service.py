"""
Moon phase calculator for the Skywatch application.
Author: Oliver Ernster

This module provides local lunar cycle calculations anchored on verified
new moon dates, used by the moon phase and meteor shower feeds.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Tuple

from ..models.astronomy_data import MoonPhaseName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LunarCycleResult:
    """Result container for a lunar cycle calculation."""
    phase: MoonPhaseName
    illumination: float
    age_days: float
    next_full_moon: date
    next_new_moon: date


class MoonPhaseCalculator:
    """Local moon phase calculator with multiple reference points."""

    # Verified new moon dates from USNO data (UTC)
    REFERENCE_NEW_MOONS = [
        (date(2020, 1, 24), "2020-01-24 verified USNO"),
        (date(2021, 1, 13), "2021-01-13 verified USNO"),
        (date(2022, 1, 2), "2022-01-02 verified USNO"),
        (date(2023, 1, 21), "2023-01-21 verified USNO"),
        (date(2024, 1, 11), "2024-01-11 verified USNO"),
        (date(2025, 1, 29), "2025-01-29 verified USNO"),
        (date(2026, 1, 18), "2026-01-18 verified USNO"),
    ]

    LUNAR_CYCLE_DAYS = 29.530588853

    # Upper bound of each phase as a fraction of the cycle
    PHASE_BOUNDARIES = [
        (0.03125, MoonPhaseName.NEW_MOON),
        (0.21875, MoonPhaseName.WAXING_CRESCENT),
        (0.28125, MoonPhaseName.FIRST_QUARTER),
        (0.46875, MoonPhaseName.WAXING_GIBBOUS),
        (0.53125, MoonPhaseName.FULL_MOON),
        (0.71875, MoonPhaseName.WANING_GIBBOUS),
        (0.78125, MoonPhaseName.LAST_QUARTER),
        (0.96875, MoonPhaseName.WANING_CRESCENT),
        (1.0, MoonPhaseName.NEW_MOON),
    ]

    def get_closest_reference(self, target_date: date) -> Tuple[date, str]:
        """Get the closest reference new moon date to minimize calculation error."""
        return min(
            self.REFERENCE_NEW_MOONS,
            key=lambda reference: abs((target_date - reference[0]).days),
        )

    def get_moon_age(self, target_date: date) -> float:
        """Get days elapsed since the previous new moon."""
        if isinstance(target_date, datetime):
            target_date = target_date.date()
        ref_date, _ = self.get_closest_reference(target_date)
        days_since_ref = (target_date - ref_date).days
        return days_since_ref % self.LUNAR_CYCLE_DAYS

    def get_illumination(self, target_date: date) -> float:
        """Get illuminated fraction of the lunar disc (0.0 to 1.0)."""
        cycle_position = self.get_moon_age(target_date) / self.LUNAR_CYCLE_DAYS
        # Illumination follows a cosine curve over the lunar cycle
        return (1 - math.cos(2 * math.pi * cycle_position)) / 2

    def calculate(self, target_date: date) -> LunarCycleResult:
        """Calculate phase, illumination, age and upcoming full/new moons."""
        if isinstance(target_date, datetime):
            target_date = target_date.date()

        age = self.get_moon_age(target_date)
        cycle_position = age / self.LUNAR_CYCLE_DAYS
        illumination = (1 - math.cos(2 * math.pi * cycle_position)) / 2

        phase = MoonPhaseName.NEW_MOON
        for boundary, boundary_phase in self.PHASE_BOUNDARIES:
            if cycle_position < boundary:
                phase = boundary_phase
                break

        half_cycle = self.LUNAR_CYCLE_DAYS / 2
        days_to_full = (half_cycle - age) % self.LUNAR_CYCLE_DAYS
        days_to_new = self.LUNAR_CYCLE_DAYS - age
        next_full = target_date + timedelta(days=round(days_to_full))
        next_new = target_date + timedelta(days=round(days_to_new))
        # Today counts as "next" only when the event is still ahead
        if next_full <= target_date:
            next_full += timedelta(days=round(self.LUNAR_CYCLE_DAYS))
        if next_new <= target_date:
            next_new += timedelta(days=round(self.LUNAR_CYCLE_DAYS))

        logger.debug(
            f"Local calculation: {target_date} -> {phase.value} "
            f"(age {age:.1f} days, illumination {illumination:.2f})"
        )
        return LunarCycleResult(
            phase=phase,
            illumination=illumination,
            age_days=age,
            next_full_moon=next_full,
            next_new_moon=next_new,
        )
