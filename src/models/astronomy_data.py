"""
Astronomy data models for the Skywatch application.
Author: Oliver Ernster

This module contains immutable data classes for astronomy information,
following solid Object-Oriented design principles with proper encapsulation,
single responsibility, and comprehensive validation.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Optional, Tuple

from .location_data import Coordinates

logger = logging.getLogger(__name__)


class MoonPhaseName(Enum):
    """Moon phase enumeration."""
    NEW_MOON = "New Moon"
    WAXING_CRESCENT = "Waxing Crescent"
    FIRST_QUARTER = "First Quarter"
    WAXING_GIBBOUS = "Waxing Gibbous"
    FULL_MOON = "Full Moon"
    WANING_GIBBOUS = "Waning Gibbous"
    LAST_QUARTER = "Last Quarter"
    WANING_CRESCENT = "Waning Crescent"


class FeedName(Enum):
    """Names of the five independent astronomy data feeds."""
    MOON = "moon"
    PLANETS = "planets"
    SATELLITES = "satellites"
    METEOR_SHOWERS = "meteor_showers"
    AURORA = "aurora"


def _check_fraction(value: float, name: str) -> None:
    if not (0.0 <= value <= 1.0):
        raise ValueError(f"{name} must be between 0.0 and 1.0")


@dataclass(frozen=True)
class MoonPhase:
    """Immutable moon phase information for one date."""
    phase_name: str
    illumination: float  # 0.0 to 1.0
    age_days: float
    next_full_moon: date
    next_new_moon: date

    def __post_init__(self):
        """Validate moon phase data on creation."""
        if not self.phase_name.strip():
            raise ValueError("Moon phase name cannot be empty")
        _check_fraction(self.illumination, "Moon illumination")
        if self.age_days < 0:
            raise ValueError("Moon age cannot be negative")

    @property
    def moon_phase_icon(self) -> str:
        """Get emoji icon for the moon phase."""
        name = self.phase_name.lower()
        if "new" in name:
            return "🌑"
        if "waxing crescent" in name:
            return "🌒"
        if "first quarter" in name:
            return "🌓"
        if "waxing gibbous" in name:
            return "🌔"
        if "full" in name:
            return "🌕"
        if "waning gibbous" in name:
            return "🌖"
        if "last quarter" in name:
            return "🌗"
        if "waning crescent" in name:
            return "🌘"
        return "🌙"


@dataclass(frozen=True)
class PlanetVisibility:
    """
    Visibility of a single planet.

    Rise/set times and position are only populated when the planet is
    visible.
    """
    name: str
    visible: bool
    rise_time: Optional[datetime] = None
    set_time: Optional[datetime] = None
    altitude_deg: Optional[float] = None
    azimuth_deg: Optional[float] = None

    def __post_init__(self):
        if not self.name.strip():
            raise ValueError("Planet name cannot be empty")
        if not self.visible and any(
            value is not None
            for value in (self.rise_time, self.set_time, self.altitude_deg, self.azimuth_deg)
        ):
            raise ValueError(f"Position details given for invisible planet {self.name}")
        if self.altitude_deg is not None and not (-90.0 <= self.altitude_deg <= 90.0):
            raise ValueError("Altitude must be between -90 and 90 degrees")
        if self.azimuth_deg is not None and not (0.0 <= self.azimuth_deg <= 360.0):
            raise ValueError("Azimuth must be between 0 and 360 degrees")


@dataclass(frozen=True)
class SatellitePass:
    """Immutable satellite pass prediction."""
    name: str
    start_time: datetime
    end_time: datetime
    max_elevation_deg: float
    start_azimuth_deg: float
    end_azimuth_deg: float
    visible: bool

    def __post_init__(self):
        if not self.name.strip():
            raise ValueError("Satellite name cannot be empty")
        if self.end_time < self.start_time:
            raise ValueError("End time cannot be before start time")
        if not (0.0 <= self.max_elevation_deg <= 90.0):
            raise ValueError("Maximum elevation must be between 0 and 90 degrees")

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60

    @property
    def start_direction(self) -> str:
        return azimuth_to_direction(self.start_azimuth_deg)

    @property
    def end_direction(self) -> str:
        return azimuth_to_direction(self.end_azimuth_deg)


@dataclass(frozen=True)
class MeteorShower:
    """Immutable meteor shower activity summary."""
    name: str
    active: bool
    peak_date_label: str
    rate: int  # meteors per hour
    visibility: float  # 0.0 to 1.0

    def __post_init__(self):
        if not self.name.strip():
            raise ValueError("Meteor shower name cannot be empty")
        if self.rate < 0:
            raise ValueError("Meteor rate cannot be negative")
        _check_fraction(self.visibility, "Meteor shower visibility")


@dataclass(frozen=True)
class AuroraForecast:
    """Immutable aurora forecast driven by the planetary KP index."""
    kp_index: float  # 0 to 9
    probability: float  # 0.0 to 1.0
    visibility: float  # 0.0 to 1.0

    def __post_init__(self):
        if not (0.0 <= self.kp_index <= 9.0):
            raise ValueError("KP index must be between 0 and 9")
        _check_fraction(self.probability, "Aurora probability")
        _check_fraction(self.visibility, "Aurora visibility")


@dataclass(frozen=True)
class SnapshotKey:
    """Identity of an astronomy snapshot: where and for which date."""
    coordinates: Coordinates
    date: date

    @property
    def iso_date(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class AstronomyData:
    """
    Immutable astronomy snapshot for one (coordinates, date) key.

    Follows Single Responsibility Principle - only responsible for holding
    the merged result of the data feeds. Each sub-record is independently
    absent when its feed failed. A new location or date produces a new
    snapshot; snapshots are never patched.
    """
    key: SnapshotKey
    moon_phase: Optional[MoonPhase] = None
    planets: Optional[Tuple[PlanetVisibility, ...]] = None
    satellites: Optional[Tuple[SatellitePass, ...]] = None
    meteor_showers: Optional[Tuple[MeteorShower, ...]] = None
    aurora: Optional[AuroraForecast] = None
    failed_feeds: Tuple[FeedName, ...] = ()
    created_at: datetime = field(default_factory=datetime.now, compare=False)

    def __post_init__(self):
        """Normalise sequences to tuples so the snapshot stays immutable."""
        for name in ("planets", "satellites", "meteor_showers"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))
        if not isinstance(self.failed_feeds, tuple):
            object.__setattr__(self, "failed_feeds", tuple(self.failed_feeds))

    @property
    def coordinates(self) -> Coordinates:
        return self.key.coordinates

    @property
    def date(self) -> date:
        return self.key.date

    @property
    def visible_planets(self) -> Tuple[PlanetVisibility, ...]:
        if not self.planets:
            return ()
        return tuple(planet for planet in self.planets if planet.visible)

    @property
    def visible_satellite_passes(self) -> Tuple[SatellitePass, ...]:
        if not self.satellites:
            return ()
        return tuple(sat for sat in self.satellites if sat.visible)

    @property
    def active_meteor_showers(self) -> Tuple[MeteorShower, ...]:
        """Active showers first, ordered by visibility."""
        if not self.meteor_showers:
            return ()
        active = [shower for shower in self.meteor_showers if shower.active]
        return tuple(sorted(active, key=lambda s: s.visibility, reverse=True))

    @property
    def is_complete(self) -> bool:
        return not self.failed_feeds

    def has_feed(self, feed: FeedName) -> bool:
        return feed not in self.failed_feeds


def azimuth_to_direction(azimuth: float) -> str:
    """Convert an azimuth in degrees to an 8-point compass direction."""
    directions = ["N", "NE", "E", "SE", "S", "SW", "W", "NW", "N"]
    return directions[int(round((azimuth % 360) / 45)) % 8]


@dataclass(frozen=True)
class Highlight:
    """A ranked, human-readable summary of one noteworthy condition."""
    title: str
    description: str
    icon: str
    priority: int  # 0 = highest

    def __post_init__(self):
        if self.priority < 0:
            raise ValueError("Highlight priority cannot be negative")
