"""
Data models for the Skywatch application.

This module contains the immutable data structures shared by the location
resolver, the astronomy aggregator and the highlight engine.
"""

from .location_data import (
    Coordinates,
    InvalidCoordinatesError,
    LocationOrigin,
    LocationState,
    LocationStatus,
    PlaceName,
    ResolverPhase,
)
from .astronomy_data import (
    AstronomyData,
    AuroraForecast,
    FeedName,
    Highlight,
    MeteorShower,
    MoonPhase,
    PlanetVisibility,
    SatellitePass,
    SnapshotKey,
)

__all__ = [
    "Coordinates",
    "InvalidCoordinatesError",
    "LocationOrigin",
    "LocationState",
    "LocationStatus",
    "PlaceName",
    "ResolverPhase",
    "AstronomyData",
    "AuroraForecast",
    "FeedName",
    "Highlight",
    "MeteorShower",
    "MoonPhase",
    "PlanetVisibility",
    "SatellitePass",
    "SnapshotKey",
]
