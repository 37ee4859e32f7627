"""
Tests for astronomy data models.
"""

from datetime import date, datetime, timedelta

import pytest

from src.models.astronomy_data import (
    AstronomyData,
    AuroraForecast,
    FeedName,
    Highlight,
    MeteorShower,
    MoonPhase,
    PlanetVisibility,
    SatellitePass,
    SnapshotKey,
    azimuth_to_direction,
)
from src.models.location_data import Coordinates
from conftest import make_moon, make_pass, make_planet, make_shower


class TestMoonPhase:
    """Tests for MoonPhase class."""

    def test_icon_for_full_moon(self):
        assert make_moon("Full Moon", 1.0).moon_phase_icon == "🌕"

    def test_icon_for_waning_crescent(self):
        assert make_moon("Waning Crescent", 0.1).moon_phase_icon == "🌘"

    def test_illumination_out_of_range(self):
        with pytest.raises(ValueError, match="Moon illumination"):
            make_moon("Full Moon", 1.2)

    def test_negative_age_rejected(self):
        with pytest.raises(ValueError, match="Moon age"):
            MoonPhase("New Moon", 0.0, -1.0, date(2025, 1, 1), date(2025, 1, 2))


class TestPlanetVisibility:
    """Tests for PlanetVisibility class."""

    def test_invisible_planet_has_no_position(self):
        planet = PlanetVisibility(name="Mars", visible=False)
        assert planet.rise_time is None
        assert planet.altitude_deg is None

    def test_invisible_planet_with_position_rejected(self):
        with pytest.raises(ValueError, match="invisible planet"):
            PlanetVisibility(name="Mars", visible=False, altitude_deg=5.0)

    def test_altitude_range(self):
        with pytest.raises(ValueError, match="Altitude"):
            PlanetVisibility(name="Venus", visible=True, altitude_deg=95.0)


class TestSatellitePass:
    """Tests for SatellitePass class."""

    def test_duration_and_directions(self):
        sat_pass = make_pass()
        assert sat_pass.duration_minutes == pytest.approx(6.0)
        assert sat_pass.start_direction == "W"
        assert sat_pass.end_direction == "E"

    def test_end_before_start_rejected(self):
        start = datetime(2025, 8, 12, 21, 0)
        with pytest.raises(ValueError, match="End time"):
            SatellitePass("ISS", start, start - timedelta(minutes=1), 40.0, 0.0, 0.0, True)

    def test_max_elevation_range(self):
        start = datetime(2025, 8, 12, 21, 0)
        with pytest.raises(ValueError, match="Maximum elevation"):
            SatellitePass("ISS", start, start, 91.0, 0.0, 0.0, True)


class TestRecords:
    """Tests for shower, aurora and highlight records."""

    def test_negative_meteor_rate_rejected(self):
        with pytest.raises(ValueError, match="rate"):
            MeteorShower("Perseids", True, "August 12-13", -1, 0.5)

    def test_kp_index_range(self):
        with pytest.raises(ValueError, match="KP index"):
            AuroraForecast(kp_index=9.5, probability=0.1, visibility=0.1)

    def test_highlight_priority_non_negative(self):
        with pytest.raises(ValueError, match="priority"):
            Highlight("Title", "Description", "✨", -1)

    @pytest.mark.parametrize(
        "azimuth,direction",
        [(0, "N"), (44, "NE"), (90, "E"), (180, "S"), (270, "W"), (350, "N")],
    )
    def test_azimuth_to_direction(self, azimuth, direction):
        assert azimuth_to_direction(azimuth) == direction


class TestAstronomyData:
    """Tests for AstronomyData snapshots."""

    @pytest.fixture
    def key(self):
        return SnapshotKey(coordinates=Coordinates(51.5, -0.1), date=date(2025, 8, 12))

    def test_sequences_stored_as_tuples(self, key):
        data = AstronomyData(key=key, planets=[make_planet("Venus")], meteor_showers=[make_shower()])
        assert isinstance(data.planets, tuple)
        assert isinstance(data.meteor_showers, tuple)

    def test_absent_fields_default_to_none(self, key):
        data = AstronomyData(key=key)
        assert data.moon_phase is None
        assert data.planets is None
        assert data.visible_planets == ()
        assert data.active_meteor_showers == ()

    def test_visible_filters(self, key):
        data = AstronomyData(
            key=key,
            planets=[make_planet("Venus"), make_planet("Mars", visible=False)],
            satellites=[make_pass(visible=False), make_pass("HST")],
        )
        assert [p.name for p in data.visible_planets] == ["Venus"]
        assert [s.name for s in data.visible_satellite_passes] == ["HST"]

    def test_active_showers_sorted_by_visibility(self, key):
        data = AstronomyData(
            key=key,
            meteor_showers=[
                make_shower("Orionids", visibility=0.3),
                make_shower("Leonids", active=False),
                make_shower("Perseids", visibility=0.9),
            ],
        )
        assert [s.name for s in data.active_meteor_showers] == ["Perseids", "Orionids"]

    def test_failed_feeds(self, key):
        data = AstronomyData(key=key, failed_feeds=[FeedName.AURORA])
        assert data.failed_feeds == (FeedName.AURORA,)
        assert not data.is_complete
        assert not data.has_feed(FeedName.AURORA)
        assert data.has_feed(FeedName.MOON)

    def test_equality_ignores_creation_time(self, key):
        assert AstronomyData(key=key) == AstronomyData(key=key)

    def test_key_accessors(self, key):
        data = AstronomyData(key=key)
        assert data.coordinates == Coordinates(51.5, -0.1)
        assert data.date == date(2025, 8, 12)
        assert key.iso_date == "2025-08-12"
