"""
External data integration for the Skywatch application.

This module contains the HTTP client, the data feed interface and the
five astronomy feeds.
"""

from .http_client import (
    AioHttpClient,
    APIResponse,
    HTTPClient,
    SkyAPIException,
    SkyDataException,
    SkyNetworkException,
)
from .data_feeds import AstronomyFeedFactory, AstronomyFeeds, DataFeed

__all__ = [
    "AioHttpClient",
    "APIResponse",
    "HTTPClient",
    "SkyAPIException",
    "SkyDataException",
    "SkyNetworkException",
    "AstronomyFeedFactory",
    "AstronomyFeeds",
    "DataFeed",
]
