"""
IP-based location lookup for the Skywatch application.
Author: Oliver Ernster

This module estimates the observer's position from the public IP address,
trying several free providers in turn. It is the fallback used when the
device location is unavailable or too slow.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..api.http_client import HTTPClient, SkyAPIException
from ..models.location_data import NetworkLocation, validate_coordinates

logger = logging.getLogger(__name__)


def _coerce_coordinates(lat_value: Any, lon_value: Any) -> Optional[tuple]:
    try:
        lat = float(lat_value)
        lon = float(lon_value)
    except (TypeError, ValueError):
        return None
    if not validate_coordinates(lat, lon):
        return None
    return lat, lon


def _clean(value: Any) -> Optional[str]:
    text = str(value or "").strip()
    return text or None


def parse_ipapi(payload: Dict[str, Any]) -> Optional[NetworkLocation]:
    """Parse an ipapi.co response."""
    if payload.get("error"):
        return None
    coords = _coerce_coordinates(payload.get("latitude"), payload.get("longitude"))
    if coords is None:
        return None
    return NetworkLocation(
        latitude=coords[0],
        longitude=coords[1],
        city=_clean(payload.get("city")),
        region=_clean(payload.get("region")),
        country=_clean(payload.get("country_name") or payload.get("country")),
    )


def parse_ipwho(payload: Dict[str, Any]) -> Optional[NetworkLocation]:
    """Parse an ipwho.is response."""
    if not payload.get("success", True):
        return None
    coords = _coerce_coordinates(payload.get("latitude"), payload.get("longitude"))
    if coords is None:
        return None
    return NetworkLocation(
        latitude=coords[0],
        longitude=coords[1],
        city=_clean(payload.get("city")),
        region=_clean(payload.get("region")),
        country=_clean(payload.get("country")),
    )


def parse_ipinfo(payload: Dict[str, Any]) -> Optional[NetworkLocation]:
    """Parse an ipinfo.io response, whose position is a "lat,lon" string."""
    loc = str(payload.get("loc") or "").strip()
    if "," not in loc:
        return None
    lat_raw, lon_raw = loc.split(",", 1)
    coords = _coerce_coordinates(lat_raw, lon_raw)
    if coords is None:
        return None
    return NetworkLocation(
        latitude=coords[0],
        longitude=coords[1],
        city=_clean(payload.get("city")),
        region=_clean(payload.get("region")),
        country=_clean(payload.get("country")),
    )


@dataclass(frozen=True)
class IPLocationProvider:
    """An IP geolocation endpoint and its response parser."""
    name: str
    url: str
    parser: Callable[[Dict[str, Any]], Optional[NetworkLocation]]


DEFAULT_PROVIDERS = [
    IPLocationProvider("ipapi", "https://ipapi.co/json/", parse_ipapi),
    IPLocationProvider("ipwho", "https://ipwho.is/", parse_ipwho),
    IPLocationProvider("ipinfo", "https://ipinfo.io/json", parse_ipinfo),
]


class IPLocationService:
    """Service for estimating the observer's location from the IP address."""

    def __init__(self, http_client: HTTPClient, providers: Optional[List[IPLocationProvider]] = None):
        """
        Initialize the IP location service.

        Args:
            http_client: HTTP client used for provider requests
            providers: Providers tried in order (defaults to DEFAULT_PROVIDERS)
        """
        self._http_client = http_client
        self._providers = list(providers) if providers is not None else list(DEFAULT_PROVIDERS)

    async def lookup(self) -> Optional[NetworkLocation]:
        """
        Look up the current location from the public IP address.

        Returns:
            NetworkLocation from the first provider that answers, None if
            the location could not be determined
        """
        for provider in self._providers:
            try:
                response = await self._http_client.get_json(provider.url)
            except SkyAPIException as e:
                logger.warning(f"IP lookup via {provider.name} failed: {e}")
                continue

            if not response.ok or not isinstance(response.data, dict):
                logger.warning(f"IP lookup via {provider.name} returned status {response.status_code}")
                continue

            location = provider.parser(response.data)
            if location is not None:
                logger.info(
                    f"IP lookup via {provider.name} resolved "
                    f"({location.latitude:.4f}, {location.longitude:.4f})"
                )
                return location
            logger.warning(f"IP lookup via {provider.name} returned no usable position")

        logger.error("Could not determine location from IP address")
        return None
