"""
Astronomy aggregator for the Skywatch application.
Author: Oliver Ernster

This module fans out one request to every enabled astronomy feed at once
and merges the answers into a single snapshot. Each feed is isolated: an
exception, a None answer or a missed deadline only leaves that feed's
field absent.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from ..api.data_feeds import AstronomyFeeds, DataFeed
from ..models.astronomy_data import AstronomyData, FeedName, SnapshotKey
from ..models.location_data import Coordinates, InvalidCoordinatesError

logger = logging.getLogger(__name__)

DateLike = Union[date, str]


def normalize_date(value: Optional[DateLike]) -> date:
    """Accept a date, datetime, ISO-8601 string or None (today)."""
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as e:
        raise ValueError(f"Invalid ISO-8601 date: {value!r}") from e


class AstronomyAggregator:
    """
    Concurrent fan-out over the astronomy feeds.

    Follows Single Responsibility Principle - only responsible for
    dispatching feeds and merging their results. Supersession of stale
    requests is handled by the caller.
    """

    def __init__(self, feeds: AstronomyFeeds, feed_timeout_seconds: Optional[float] = 15.0):
        """
        Initialize astronomy aggregator.

        Args:
            feeds: Configured feeds; disabled feeds are None
            feed_timeout_seconds: Per-feed deadline, None to wait indefinitely
        """
        self._feeds = feeds
        self._feed_timeout = feed_timeout_seconds
        logger.debug(
            f"AstronomyAggregator initialized with feeds "
            f"{[name.value for name in feeds.get_enabled()]} (timeout: {feed_timeout_seconds})"
        )

    async def resolve(self, coordinates: Coordinates, target_date: Optional[DateLike] = None) -> AstronomyData:
        """
        Build an astronomy snapshot for a location and date.

        Args:
            coordinates: Observer position
            target_date: date or ISO-8601 string (today if None)

        Returns:
            AstronomyData with absent fields for feeds that failed

        Raises:
            InvalidCoordinatesError: If coordinates are not a valid position;
                no feed is dispatched in that case
        """
        if not isinstance(coordinates, Coordinates):
            raise InvalidCoordinatesError(f"Invalid coordinates: {coordinates!r}")

        key = SnapshotKey(coordinates=coordinates, date=normalize_date(target_date))
        enabled = self._feeds.get_enabled()

        names = list(enabled.keys())
        results = await asyncio.gather(
            *(self._fetch_feed(enabled[name], key) for name in names)
        )
        values: Dict[FeedName, Any] = dict(zip(names, results))

        failed = tuple(name for name in names if values[name] is None)
        if failed:
            logger.warning(f"Feeds without data for {key.iso_date}: {[name.value for name in failed]}")

        data = AstronomyData(
            key=key,
            moon_phase=values.get(FeedName.MOON),
            planets=values.get(FeedName.PLANETS),
            satellites=values.get(FeedName.SATELLITES),
            meteor_showers=values.get(FeedName.METEOR_SHOWERS),
            aurora=values.get(FeedName.AURORA),
            failed_feeds=failed,
        )
        logger.info(
            f"Astronomy snapshot for {coordinates} on {key.iso_date}: "
            f"{len(names) - len(failed)}/{len(names)} feeds"
        )
        return data

    async def resolve_at(self, latitude: float, longitude: float, target_date: Optional[DateLike] = None) -> AstronomyData:
        """Build a snapshot from raw coordinates, validating them first."""
        return await self.resolve(Coordinates(latitude, longitude), target_date)

    async def _fetch_feed(self, feed: DataFeed, key: SnapshotKey) -> Optional[Any]:
        """Run one feed, turning any failure into None."""
        feed_name = feed.get_feed_name().value
        coordinates = key.coordinates
        try:
            return await asyncio.wait_for(
                feed.fetch(coordinates.latitude, coordinates.longitude, key.iso_date),
                self._feed_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Feed {feed_name} timed out after {self._feed_timeout}s")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Feed {feed_name} failed: {e}")
        return None
