"""
Tests for the geocoding service.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from src.api.http_client import SkyDataException, SkyNetworkException
from src.models.location_data import Coordinates
from src.services.geocoding_service import (
    GeocodingService,
    get_cities_matching,
    parse_coordinates,
)
from conftest import make_response


@pytest.fixture
def http_client():
    client = Mock()
    client.get_json = AsyncMock()
    return client


@pytest.fixture
def service(http_client):
    return GeocodingService(http_client)


class TestParseCoordinates:
    """Tests for literal coordinate input."""

    def test_parses_pair(self):
        assert parse_coordinates("51.5, -0.12") == Coordinates(51.5, -0.12)

    def test_parses_without_spaces(self):
        assert parse_coordinates("-33.9,18.4") == Coordinates(-33.9, 18.4)

    def test_out_of_range_pair_rejected(self):
        assert parse_coordinates("95, 10") is None

    def test_text_is_not_coordinates(self):
        assert parse_coordinates("London") is None


class TestGeocodingService:
    """Test cases for GeocodingService class."""

    @pytest.mark.asyncio
    async def test_empty_text_returns_none(self, service, http_client):
        assert await service.geocode("   ") is None
        http_client.get_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_literal_coordinates_skip_lookup(self, service, http_client):
        assert await service.geocode("64.1, -21.9") == Coordinates(64.1, -21.9)
        http_client.get_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_known_city_skips_lookup(self, service, http_client):
        assert await service.geocode("  London ") == Coordinates(51.5074, -0.1278)
        http_client.get_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nominatim_match(self, service, http_client):
        http_client.get_json.return_value = make_response([{"lat": "45.4642", "lon": "9.19"}])
        result = await service.geocode("Milan")
        assert result == Coordinates(45.4642, 9.19)
        url, params = http_client.get_json.await_args.args
        assert url == GeocodingService.BASE_URL
        assert params == {"q": "Milan", "format": "json", "limit": 1}

    @pytest.mark.asyncio
    async def test_no_match_returns_none(self, service, http_client):
        http_client.get_json.return_value = make_response([])
        assert await service.geocode("Nowhereville") is None

    @pytest.mark.asyncio
    async def test_unparseable_result_returns_none(self, service, http_client):
        http_client.get_json.return_value = make_response([{"lat": "north", "lon": "9"}])
        assert await service.geocode("Milan") is None

    @pytest.mark.asyncio
    async def test_bad_payload_returns_none(self, service, http_client):
        http_client.get_json.side_effect = SkyDataException("bad json")
        assert await service.geocode("Milan") is None

    @pytest.mark.asyncio
    async def test_network_error_raises(self, service, http_client):
        http_client.get_json.side_effect = SkyNetworkException("down")
        with pytest.raises(SkyNetworkException):
            await service.geocode("Milan")

    @pytest.mark.asyncio
    async def test_error_status_raises(self, service, http_client):
        http_client.get_json.return_value = make_response(None, status_code=503)
        with pytest.raises(SkyNetworkException, match="503"):
            await service.geocode("Milan")


class TestCityMatching:
    """Tests for built-in city autocomplete."""

    def test_prefix_match(self):
        matches = get_cities_matching("Lo")
        assert "london" in matches
        assert "los angeles" in matches
        assert matches == sorted(matches)

    def test_empty_prefix_returns_all(self):
        assert "tromso" in get_cities_matching("")
