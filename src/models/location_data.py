"""
Location data models for the Skywatch application.
Author: Oliver Ernster

This module contains immutable data classes describing where the observer
is and how that position was obtained, plus the state snapshot published by
the location resolver.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class InvalidCoordinatesError(ValueError):
    """Raised when a latitude/longitude pair is outside the valid range."""

    pass


class LocationOrigin(Enum):
    """Source that produced the currently resolved location."""
    DEVICE = "device"
    NETWORK = "network"
    MANUAL = "manual"


class LocationStatus(Enum):
    """Coarse resolution status exposed to the presentation layer."""
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class ResolverPhase(Enum):
    """Fine-grained phase of the location resolution state machine."""
    IDLE = "idle"
    AWAITING_DEVICE = "awaiting_device"
    AWAITING_NETWORK = "awaiting_network"
    AWAITING_MANUAL = "awaiting_manual"
    RESOLVED = "resolved"
    FAILED = "failed"

    @property
    def status(self) -> LocationStatus:
        """Map the phase onto the coarse status."""
        if self is ResolverPhase.RESOLVED:
            return LocationStatus.RESOLVED
        if self is ResolverPhase.FAILED:
            return LocationStatus.FAILED
        return LocationStatus.PENDING


def validate_coordinates(latitude: float, longitude: float) -> bool:
    """Validate coordinate pair."""
    try:
        return (-90 <= latitude <= 90) and (-180 <= longitude <= 180)
    except TypeError:
        return False


@dataclass(frozen=True)
class Coordinates:
    """
    Immutable geographic position.

    Raises InvalidCoordinatesError on construction when either component is
    out of range, so every Coordinates value in the system is valid.
    """
    latitude: float
    longitude: float

    def __post_init__(self):
        """Validate coordinates on creation."""
        if not validate_coordinates(self.latitude, self.longitude):
            raise InvalidCoordinatesError(
                f"Invalid coordinates: ({self.latitude}, {self.longitude})"
            )

    def as_tuple(self) -> tuple[float, float]:
        """Get coordinates as (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)

    def __str__(self) -> str:
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


@dataclass(frozen=True)
class PlaceName:
    """Human-readable place description; any part may be missing."""
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.city or self.region or self.country)

    def get_label(self) -> str:
        """Get comma separated label of the available parts."""
        parts = [part for part in (self.city, self.region, self.country) if part]
        return ", ".join(parts)


@dataclass(frozen=True)
class DeviceReading:
    """A single successful reading from the device location capability."""
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    def to_coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


@dataclass(frozen=True)
class DeviceError:
    """An error reported by the device location capability."""
    error_message: str


@dataclass(frozen=True)
class NetworkLocation:
    """Result of an IP-based location lookup."""
    latitude: float
    longitude: float
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None

    def to_coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)

    def to_place(self) -> PlaceName:
        return PlaceName(city=self.city, region=self.region, country=self.country)


@dataclass(frozen=True)
class LocationState:
    """
    Immutable snapshot of the location resolution state.

    Exactly one LocationState is live per session; every transition replaces
    it wholesale. Coordinates, place and origin describe the last confirmed
    location and survive a return to manual entry until a new one is
    confirmed.
    """
    phase: ResolverPhase = ResolverPhase.IDLE
    coordinates: Optional[Coordinates] = None
    place: Optional[PlaceName] = None
    origin: Optional[LocationOrigin] = None
    error: Optional[str] = None
    validation_error: Optional[str] = None
    manual_entry_available: bool = False

    @property
    def status(self) -> LocationStatus:
        return self.phase.status

    @property
    def is_resolved(self) -> bool:
        return self.phase is ResolverPhase.RESOLVED

    @property
    def has_coordinates(self) -> bool:
        return self.coordinates is not None

    def evolve(self, **changes) -> "LocationState":
        """Return a new state with the given fields replaced."""
        return replace(self, **changes)

    def get_display_text(self) -> str:
        """Get a short human-readable description of the current location."""
        if self.phase is ResolverPhase.FAILED:
            return f"Error: {self.error}" if self.error else "Location unavailable"
        if self.coordinates is None:
            return "Detecting your location..."

        if self.origin is LocationOrigin.MANUAL:
            prefix = "Location entered manually"
        elif self.origin is LocationOrigin.NETWORK:
            prefix = "Location detected (using IP address)"
        else:
            prefix = "Location detected"

        if self.place and not self.place.is_empty:
            return f"{prefix}: {self.place.get_label()}"
        return f"{prefix}: {self.coordinates}"
