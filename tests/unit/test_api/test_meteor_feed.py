"""
Tests for the meteor shower feed.
"""

from datetime import date
from unittest.mock import Mock

import pytest

from src.api.meteor_feed import (
    METEOR_SHOWERS,
    MeteorShowerFeed,
    peak_factor,
    radiant_factor,
)
from src.models.astronomy_data import FeedName


def shower_named(name):
    return next(s for s in METEOR_SHOWERS if s.name == name)


@pytest.fixture
def dark_sky_calculator():
    calculator = Mock()
    calculator.get_illumination.return_value = 0.0
    return calculator


class TestShowerCalendar:
    """Tests for shower activity windows."""

    def test_perseids_active_at_peak(self):
        assert shower_named("Perseids").is_active(date(2025, 8, 12))

    def test_quadrantids_window_crosses_new_year(self):
        quadrantids = shower_named("Quadrantids")
        assert quadrantids.is_active(date(2025, 12, 30))
        assert quadrantids.nearest_peak(date(2025, 12, 30)) == date(2026, 1, 3)
        assert not quadrantids.is_active(date(2025, 12, 27))

    def test_leonids_inactive_in_march(self):
        assert not shower_named("Leonids").is_active(date(2025, 3, 10))

    def test_peak_factor_decays_to_edge(self):
        perseids = shower_named("Perseids")
        assert peak_factor(perseids, date(2025, 8, 12)) == 1.0
        assert peak_factor(perseids, date(2025, 7, 17)) == pytest.approx(0.1)
        assert 0.1 < peak_factor(perseids, date(2025, 8, 18)) < 1.0

    def test_radiant_factor(self):
        assert radiant_factor(58.0, 58.0) == pytest.approx(1.0)
        assert radiant_factor(-60.0, 49.0) == 0.0


class TestMeteorShowerFeed:
    """Test cases for MeteorShowerFeed class."""

    def test_feed_name(self):
        assert MeteorShowerFeed().get_feed_name() is FeedName.METEOR_SHOWERS

    @pytest.mark.asyncio
    async def test_reports_every_shower(self, dark_sky_calculator):
        showers = await MeteorShowerFeed(dark_sky_calculator).fetch(51.5, -0.1, "2025-08-12")
        assert [s.name for s in showers] == [s.name for s in METEOR_SHOWERS]

    @pytest.mark.asyncio
    async def test_perseids_peak_under_dark_sky(self, dark_sky_calculator):
        showers = await MeteorShowerFeed(dark_sky_calculator).fetch(51.5, -0.1, "2025-08-12")
        perseids = next(s for s in showers if s.name == "Perseids")
        assert perseids.active
        assert perseids.peak_date_label == "August 12-13"
        assert perseids.rate == 99
        assert perseids.visibility == pytest.approx(0.99)

    @pytest.mark.asyncio
    async def test_moonlight_reduces_rate(self, dark_sky_calculator):
        bright = Mock()
        bright.get_illumination.return_value = 1.0
        dark_showers = await MeteorShowerFeed(dark_sky_calculator).fetch(51.5, -0.1, "2025-08-12")
        bright_showers = await MeteorShowerFeed(bright).fetch(51.5, -0.1, "2025-08-12")
        dark = next(s for s in dark_showers if s.name == "Perseids")
        lit = next(s for s in bright_showers if s.name == "Perseids")
        assert lit.rate < dark.rate
        assert lit.visibility < dark.visibility

    @pytest.mark.asyncio
    async def test_inactive_shower_has_zero_rate(self, dark_sky_calculator):
        showers = await MeteorShowerFeed(dark_sky_calculator).fetch(51.5, -0.1, "2025-08-12")
        leonids = next(s for s in showers if s.name == "Leonids")
        assert not leonids.active
        assert leonids.rate == 0
        assert leonids.visibility == 0.0

    @pytest.mark.asyncio
    async def test_radiant_below_horizon(self, dark_sky_calculator):
        showers = await MeteorShowerFeed(dark_sky_calculator).fetch(-60.0, 0.0, "2026-01-03")
        quadrantids = next(s for s in showers if s.name == "Quadrantids")
        assert quadrantids.active
        assert quadrantids.visibility == 0.0

    @pytest.mark.asyncio
    async def test_invalid_date_returns_none(self, dark_sky_calculator):
        assert await MeteorShowerFeed(dark_sky_calculator).fetch(51.5, -0.1, "not-a-date") is None
