"""
Aurora forecast feed.
Author: Oliver Ernster

This module reads the latest planetary K-index from NOAA SWPC and turns it
into a probability and visibility score for the observer's latitude band.
The K-index is a current reading, so the requested date is not used.
"""

import logging
from typing import Any, Optional

from .data_feeds import DataFeed
from .http_client import HTTPClient, SkyAPIException
from ..models.astronomy_data import AuroraForecast, FeedName

logger = logging.getLogger(__name__)


def latitude_effect(latitude: float) -> float:
    """Weight of the observer's latitude band on aurora chances."""
    abs_lat = abs(latitude)
    if abs_lat > 50:
        return 0.7
    if abs_lat > 40:
        return 0.3
    return 0.1


def build_forecast(kp_index: float, latitude: float) -> AuroraForecast:
    """Derive an AuroraForecast from a KP index and latitude."""
    kp_index = min(max(kp_index, 0.0), 9.0)
    effect = latitude_effect(latitude)
    if kp_index > 5:
        probability, visibility = 0.8 * effect, 0.9 * effect
    elif kp_index > 3:
        probability, visibility = 0.5 * effect, 0.6 * effect
    else:
        probability, visibility = 0.2 * effect, 0.3 * effect
    return AuroraForecast(kp_index=kp_index, probability=probability, visibility=visibility)


def extract_latest_kp(payload: Any) -> Optional[float]:
    """Get the most recent KP value from a SWPC K-index series."""
    if not isinstance(payload, list):
        return None
    for entry in reversed(payload):
        if not isinstance(entry, dict):
            continue
        for field_name in ("estimated_kp", "kp_index"):
            value = entry.get(field_name)
            if value is None:
                continue
            try:
                return float(value)
            except (TypeError, ValueError):
                continue
    return None


class AuroraForecastFeed(DataFeed[AuroraForecast]):
    """Aurora likelihood from the NOAA SWPC planetary K-index."""

    def __init__(self, http_client: HTTPClient, url: str):
        self._http_client = http_client
        self._url = url

    def get_feed_name(self) -> FeedName:
        return FeedName.AURORA

    async def fetch(self, latitude: float, longitude: float, iso_date: str) -> Optional[AuroraForecast]:
        try:
            response = await self._http_client.get_json(self._url)
        except SkyAPIException as e:
            logger.error(f"Failed to fetch K-index: {e}")
            return None

        if not response.ok:
            logger.error(f"K-index request returned status {response.status_code}")
            return None

        kp_index = extract_latest_kp(response.data)
        if kp_index is None:
            logger.warning("K-index response contained no usable readings")
            return None

        forecast = build_forecast(kp_index, latitude)
        logger.info(f"Aurora forecast: KP {forecast.kp_index:.1f}, probability {forecast.probability:.2f}")
        return forecast
