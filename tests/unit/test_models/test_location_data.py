"""
Tests for location data models.
"""

import pytest

from src.models.location_data import (
    Coordinates,
    DeviceReading,
    InvalidCoordinatesError,
    LocationOrigin,
    LocationState,
    LocationStatus,
    NetworkLocation,
    PlaceName,
    ResolverPhase,
    validate_coordinates,
)


class TestCoordinates:
    """Tests for Coordinates class."""

    def test_valid_coordinates(self):
        coords = Coordinates(51.5074, -0.1278)
        assert coords.latitude == 51.5074
        assert coords.longitude == -0.1278
        assert coords.as_tuple() == (51.5074, -0.1278)

    @pytest.mark.parametrize("lat,lon", [(90, 180), (-90, -180), (0, 0)])
    def test_boundary_coordinates_accepted(self, lat, lon):
        assert Coordinates(lat, lon).as_tuple() == (lat, lon)

    @pytest.mark.parametrize("lat,lon", [(90.01, 0), (-91, 0), (0, 180.5), (0, -181)])
    def test_out_of_range_rejected(self, lat, lon):
        with pytest.raises(InvalidCoordinatesError):
            Coordinates(lat, lon)

    def test_invalid_coordinates_error_is_value_error(self):
        with pytest.raises(ValueError):
            Coordinates(100, 0)

    def test_validate_coordinates_non_numeric(self):
        assert validate_coordinates("north", 0) is False

    def test_string_formatting(self):
        assert str(Coordinates(51.5, -0.12781)) == "51.5000, -0.1278"

    def test_immutable(self):
        coords = Coordinates(10, 10)
        with pytest.raises(AttributeError):
            coords.latitude = 20


class TestPlaceName:
    """Tests for PlaceName class."""

    def test_label_skips_missing_parts(self):
        place = PlaceName(city="Leeds", country="United Kingdom")
        assert place.get_label() == "Leeds, United Kingdom"
        assert not place.is_empty

    def test_empty_place(self):
        assert PlaceName().is_empty
        assert PlaceName().get_label() == ""


class TestSourceResults:
    """Tests for device and network results."""

    def test_device_reading_to_coordinates(self):
        reading = DeviceReading(latitude=40.0, longitude=-3.7, accuracy=12.0)
        assert reading.to_coordinates() == Coordinates(40.0, -3.7)

    def test_network_location_conversions(self):
        location = NetworkLocation(48.85, 2.35, city="Paris", region="Ile-de-France", country="France")
        assert location.to_coordinates() == Coordinates(48.85, 2.35)
        assert location.to_place() == PlaceName("Paris", "Ile-de-France", "France")


class TestLocationState:
    """Tests for LocationState snapshots."""

    def test_default_state_is_idle_pending(self):
        state = LocationState()
        assert state.phase is ResolverPhase.IDLE
        assert state.status is LocationStatus.PENDING
        assert not state.has_coordinates
        assert not state.is_resolved

    @pytest.mark.parametrize(
        "phase,status",
        [
            (ResolverPhase.AWAITING_DEVICE, LocationStatus.PENDING),
            (ResolverPhase.AWAITING_NETWORK, LocationStatus.PENDING),
            (ResolverPhase.AWAITING_MANUAL, LocationStatus.PENDING),
            (ResolverPhase.RESOLVED, LocationStatus.RESOLVED),
            (ResolverPhase.FAILED, LocationStatus.FAILED),
        ],
    )
    def test_phase_maps_to_status(self, phase, status):
        assert LocationState(phase=phase).status is status

    def test_evolve_returns_new_state(self):
        state = LocationState()
        resolved = state.evolve(
            phase=ResolverPhase.RESOLVED,
            coordinates=Coordinates(1, 2),
            origin=LocationOrigin.DEVICE,
        )
        assert state.phase is ResolverPhase.IDLE
        assert resolved.is_resolved
        assert resolved.coordinates == Coordinates(1, 2)

    def test_display_text_network_with_place(self):
        state = LocationState(
            phase=ResolverPhase.RESOLVED,
            coordinates=Coordinates(48.85, 2.35),
            place=PlaceName(city="Paris", country="France"),
            origin=LocationOrigin.NETWORK,
        )
        assert state.get_display_text() == "Location detected (using IP address): Paris, France"

    def test_display_text_manual_without_place(self):
        state = LocationState(
            phase=ResolverPhase.RESOLVED,
            coordinates=Coordinates(10, 20),
            origin=LocationOrigin.MANUAL,
        )
        assert state.get_display_text() == "Location entered manually: 10.0000, 20.0000"

    def test_display_text_failed(self):
        state = LocationState(phase=ResolverPhase.FAILED, error="Could not determine location automatically")
        assert state.get_display_text() == "Error: Could not determine location automatically"

    def test_display_text_detecting(self):
        assert LocationState(phase=ResolverPhase.AWAITING_DEVICE).get_display_text() == "Detecting your location..."
