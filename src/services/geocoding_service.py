"""
Geocoding service for converting place names to coordinates.
Author: Oliver Ernster

This module provides the manual location entry lookup: literal coordinates,
a table of well-known cities, and OpenStreetMap's Nominatim API.
"""

import logging
import re
from typing import Optional

from ..api.http_client import HTTPClient, SkyNetworkException, SkyAPIException
from ..models.location_data import Coordinates, validate_coordinates

logger = logging.getLogger(__name__)

COORDINATE_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


class GeocodingService:
    """Service for converting free-text place names to coordinates."""

    BASE_URL = "https://nominatim.openstreetmap.org/search"

    def __init__(self, http_client: HTTPClient, base_url: Optional[str] = None):
        """
        Initialize the geocoding service.

        Args:
            http_client: HTTP client used for Nominatim requests
            base_url: Override for the Nominatim search endpoint
        """
        self._http_client = http_client
        self.base_url = base_url or self.BASE_URL

    async def geocode(self, place: str) -> Optional[Coordinates]:
        """
        Convert a place name to coordinates.

        Args:
            place: City name, address or "latitude, longitude"

        Returns:
            Coordinates if a match was found, None if nothing matched

        Raises:
            SkyNetworkException: If the geocoding service could not be reached
        """
        if not place or not place.strip():
            return None

        clean_place = place.strip()

        literal = parse_coordinates(clean_place)
        if literal is not None:
            logger.info(f"Parsed literal coordinates from '{clean_place}'")
            return literal

        known = CITY_COORDINATES.get(clean_place.lower())
        if known is not None:
            logger.info(f"Resolved '{clean_place}' from the built-in city table")
            return Coordinates(*known)

        return await self._geocode_online(clean_place)

    async def _geocode_online(self, place: str) -> Optional[Coordinates]:
        params = {"q": place, "format": "json", "limit": 1}
        try:
            response = await self._http_client.get_json(self.base_url, params)
        except SkyNetworkException:
            logger.error(f"Network error during geocoding for '{place}'")
            raise
        except SkyAPIException as e:
            logger.error(f"Data parsing error during geocoding for '{place}': {e}")
            return None

        if not response.ok:
            raise SkyNetworkException(
                f"Geocoding API returned status {response.status_code} for '{place}'"
            )

        data = response.data
        if not isinstance(data, list) or not data:
            logger.warning(f"No results found for '{place}'")
            return None

        result = data[0]
        try:
            lat = float(result.get("lat"))
            lon = float(result.get("lon"))
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Data parsing error during geocoding for '{place}': {e}")
            return None

        if not validate_coordinates(lat, lon):
            logger.warning(f"Invalid coordinates returned for '{place}': ({lat}, {lon})")
            return None

        logger.info(f"Successfully geocoded '{place}' to ({lat:.4f}, {lon:.4f})")
        return Coordinates(lat, lon)


def parse_coordinates(text: str) -> Optional[Coordinates]:
    """Parse "latitude, longitude" text; None if it is not a valid pair."""
    match = COORDINATE_PATTERN.match(text)
    if not match:
        return None
    lat = float(match.group(1))
    lon = float(match.group(2))
    if not validate_coordinates(lat, lon):
        return None
    return Coordinates(lat, lon)


# Predefined coordinates for common cities to reduce API calls
CITY_COORDINATES = {
    # UK Cities
    "london": (51.5074, -0.1278),
    "manchester": (53.4808, -2.2426),
    "edinburgh": (55.9533, -3.1883),
    "glasgow": (55.8642, -4.2518),
    "belfast": (54.5973, -5.9301),
    "cardiff": (51.4816, -3.1791),
    "inverness": (57.4778, -4.2247),
    "lerwick": (60.1550, -1.1450),

    # Aurora latitudes
    "reykjavik": (64.1466, -21.9426),
    "tromso": (69.6492, 18.9553),
    "fairbanks": (64.8378, -147.7164),
    "yellowknife": (62.4540, -114.3718),
    "rovaniemi": (66.5039, 25.7294),
    "kiruna": (67.8558, 20.2253),

    # Major European Cities
    "paris": (48.8566, 2.3522),
    "berlin": (52.5200, 13.4050),
    "madrid": (40.4168, -3.7038),
    "rome": (41.9028, 12.4964),
    "amsterdam": (52.3676, 4.9041),
    "stockholm": (59.3293, 18.0686),
    "oslo": (59.9139, 10.7522),
    "helsinki": (60.1699, 24.9384),
    "dublin": (53.3498, -6.2603),

    # Major World Cities
    "new york": (40.7128, -74.0060),
    "los angeles": (34.0522, -118.2437),
    "chicago": (41.8781, -87.6298),
    "toronto": (43.6532, -79.3832),
    "vancouver": (49.2827, -123.1207),
    "anchorage": (61.2181, -149.9003),
    "sydney": (-33.8688, 151.2093),
    "melbourne": (-37.8136, 144.9631),
    "hobart": (-42.8821, 147.3272),
    "tokyo": (35.6762, 139.6503),
    "singapore": (1.3521, 103.8198),
    "cape town": (-33.9249, 18.4241),
    "buenos aires": (-34.6118, -58.3960),
    "ushuaia": (-54.8019, -68.3030),
}


def get_cities_matching(prefix: str) -> list[str]:
    """
    Get built-in cities that match the given prefix for autocomplete.

    Args:
        prefix: The prefix to match against

    Returns:
        List of matching city names sorted alphabetically
    """
    if not prefix or not prefix.strip():
        return sorted(CITY_COORDINATES.keys())

    prefix_lower = prefix.lower().strip()
    return sorted(city for city in CITY_COORDINATES if city.startswith(prefix_lower))
