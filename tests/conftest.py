"""
Global pytest configuration and fixtures.
"""

import asyncio
import warnings
from datetime import date, datetime, timezone

import pytest
from PySide6.QtCore import QCoreApplication

from src.api.http_client import APIResponse
from src.models.astronomy_data import (
    AstronomyData,
    AuroraForecast,
    MeteorShower,
    MoonPhase,
    PlanetVisibility,
    SatellitePass,
    SnapshotKey,
)
from src.models.location_data import Coordinates

# Suppress RuntimeWarnings globally at the Python level
warnings.filterwarnings("ignore", message="coroutine 'AsyncMockMixin._execute_mock_call' was never awaited")


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    """Provide a core application for Qt signals."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def london():
    return Coordinates(51.5074, -0.1278)


@pytest.fixture
def tromso():
    return Coordinates(69.6492, 18.9553)


def make_response(data, status_code=200, url="https://example.test"):
    """Build an APIResponse for mocked HTTP clients."""
    return APIResponse(status_code=status_code, data=data, timestamp=datetime.now(), url=url)


def make_snapshot(
    coordinates=None,
    target_date=date(2025, 8, 12),
    moon_phase=None,
    planets=None,
    satellites=None,
    meteor_showers=None,
    aurora=None,
    failed_feeds=(),
):
    """Build an AstronomyData snapshot for highlight and manager tests."""
    return AstronomyData(
        key=SnapshotKey(coordinates=coordinates or Coordinates(51.5074, -0.1278), date=target_date),
        moon_phase=moon_phase,
        planets=planets,
        satellites=satellites,
        meteor_showers=meteor_showers,
        aurora=aurora,
        failed_feeds=failed_feeds,
    )


def make_moon(phase_name="Waxing Crescent", illumination=0.25):
    return MoonPhase(
        phase_name=phase_name,
        illumination=illumination,
        age_days=5.0,
        next_full_moon=date(2025, 8, 20),
        next_new_moon=date(2025, 8, 28),
    )


def make_planet(name, visible=True):
    if not visible:
        return PlanetVisibility(name=name, visible=False)
    return PlanetVisibility(name=name, visible=True, altitude_deg=25.0, azimuth_deg=140.0)


def make_pass(name="ISS (ZARYA)", visible=True, max_elevation=67.3):
    start = datetime(2025, 8, 12, 21, 14, tzinfo=timezone.utc)
    return SatellitePass(
        name=name,
        start_time=start,
        end_time=start.replace(minute=20),
        max_elevation_deg=max_elevation,
        start_azimuth_deg=250.0,
        end_azimuth_deg=80.0,
        visible=visible,
    )


def make_shower(name="Perseids", active=True, visibility=0.8, rate=80):
    return MeteorShower(
        name=name,
        active=active,
        peak_date_label="August 12-13",
        rate=rate if active else 0,
        visibility=visibility if active else 0.0,
    )


def make_aurora(kp_index=6.0, probability=0.56, visibility=0.63):
    return AuroraForecast(kp_index=kp_index, probability=probability, visibility=visibility)


async def wait_for(predicate, timeout=2.0, interval=0.01):
    """Poll until predicate() is true or fail after timeout seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(interval)
