"""
Astronomy manager for the Skywatch application.
Author: Oliver Ernster

This module provides the presentation-facing side of astronomy data:
it requests snapshots from the aggregator for the current location and
date, discards results for requests that were superseded while in flight,
and publishes the snapshot and its highlights through Qt signals.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from PySide6.QtCore import QObject, Signal

from ..models.astronomy_data import AstronomyData, Highlight, SnapshotKey
from ..models.location_data import Coordinates, InvalidCoordinatesError
from ..services.highlight_engine import derive_highlights
from .astronomy_aggregator import AstronomyAggregator, DateLike, normalize_date

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to fetch astronomy data"


def _cancelling() -> bool:
    """Check whether the running task itself has been asked to cancel."""
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


@dataclass(frozen=True)
class AstronomyViewState:
    """Snapshot of what the astronomy panel should render."""
    data: Optional[AstronomyData] = None
    loading: bool = False
    error: Optional[str] = None


class AstronomyManager(QObject):
    """
    Business logic manager for astronomy data.

    Follows Single Responsibility Principle - only responsible for
    astronomy data management and coordination with the UI layer.
    Implements Observer pattern through Qt signals for UI updates.
    """

    # Qt Signals for observer pattern
    astronomy_updated = Signal(object)  # AstronomyData
    highlights_updated = Signal(list)
    astronomy_error = Signal(str)
    loading_state_changed = Signal(bool)

    def __init__(self, aggregator: AstronomyAggregator):
        """
        Initialize astronomy manager.

        Args:
            aggregator: Feed aggregator used to build snapshots
        """
        super().__init__()
        self._aggregator = aggregator
        self._current_key: Optional[SnapshotKey] = None
        self._current_data: Optional[AstronomyData] = None
        self._highlights: List[Highlight] = []
        self._error: Optional[str] = None
        self._is_loading = False
        self._selected_date: Optional[DateLike] = None
        self._inflight: Optional[asyncio.Task] = None
        self._inflight_key: Optional[SnapshotKey] = None
        self._pending_updates: Set[asyncio.Task] = set()

        logger.debug("AstronomyManager initialized")

    async def refresh(
        self,
        coordinates: Coordinates,
        target_date: Optional[DateLike] = None,
        force_refresh: bool = False,
    ) -> Optional[AstronomyData]:
        """
        Refresh astronomy data for a location and date.

        Args:
            coordinates: Observer position
            target_date: date or ISO-8601 string (selected date if None)
            force_refresh: Re-aggregate even if this key already has data

        Returns:
            AstronomyData: Published snapshot, or None on error or when the
            request was superseded before it completed
        """
        if target_date is None:
            target_date = self._selected_date

        try:
            if not isinstance(coordinates, Coordinates):
                raise InvalidCoordinatesError(f"Invalid coordinates: {coordinates!r}")
            key = SnapshotKey(coordinates=coordinates, date=normalize_date(target_date))
        except ValueError as e:
            self._publish_error(str(e))
            return None

        self._current_key = key
        if self._inflight is not None and not self._inflight.done() and self._inflight_key != key:
            logger.debug(f"Cancelling superseded aggregation for {self._inflight_key}")
            self._inflight.cancel()

        if not force_refresh and self._should_skip_refresh(key):
            logger.info("Skipping astronomy refresh - data for this location and date available")
            self._set_loading_state(False)
            return self._current_data

        if self._inflight is not None and not self._inflight.done() and self._inflight_key == key:
            return await self._join_inflight(self._inflight, key)

        self._error = None
        self._set_loading_state(True)

        task = asyncio.create_task(self._aggregator.resolve(key.coordinates, key.date))
        self._inflight = task
        self._inflight_key = key

        try:
            data = await task
        except asyncio.CancelledError:
            if self._is_current(key) or _cancelling():
                raise
            logger.info(f"Astronomy request for {key.coordinates} on {key.iso_date} superseded")
            return None
        except Exception as e:
            if not self._is_current(key):
                return None
            logger.error(f"Unexpected error fetching astronomy data: {e}")
            self._publish_error(FETCH_ERROR_MESSAGE)
            return None
        finally:
            if self._inflight is task:
                self._inflight = None
                self._inflight_key = None
            if self._is_current(key):
                self._set_loading_state(False)

        if not self._is_current(key):
            logger.info(f"Discarding stale astronomy result for {key.coordinates} on {key.iso_date}")
            return None

        self._current_data = data
        self._highlights = derive_highlights(data)
        self.astronomy_updated.emit(data)
        self.highlights_updated.emit(list(self._highlights))
        logger.info(
            f"Astronomy data published: {len(self._highlights)} highlights, "
            f"{len(data.failed_feeds)} feeds without data"
        )
        return data

    async def _join_inflight(self, task: asyncio.Task, key: SnapshotKey) -> Optional[AstronomyData]:
        """Wait for the aggregation already running for this key; its owner publishes."""
        logger.debug(f"Joining in-flight aggregation for {key.coordinates} on {key.iso_date}")
        try:
            data = await asyncio.shield(task)
        except asyncio.CancelledError:
            if _cancelling():
                raise
            return None
        except Exception:
            return None
        return data if self._is_current(key) else None

    def request_update(
        self, coordinates: Coordinates, target_date: Optional[DateLike] = None
    ) -> Optional[asyncio.Task]:
        """
        Schedule a refresh on the running event loop.

        Suitable as a Qt slot; errors are reported through signals.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("Astronomy update requested without a running event loop")
            return None

        task = loop.create_task(self.refresh(coordinates, target_date))
        self._pending_updates.add(task)
        task.add_done_callback(self._pending_updates.discard)
        return task

    async def wait_for_pending_updates(self) -> None:
        """Wait until every scheduled update has settled."""
        while self._pending_updates:
            await asyncio.gather(*list(self._pending_updates), return_exceptions=True)

    def set_date(self, target_date: DateLike) -> Optional[asyncio.Task]:
        """Select the observation date and re-request for the current location."""
        try:
            normalize_date(target_date)
        except ValueError as e:
            self._publish_error(str(e))
            return None

        self._selected_date = target_date
        if self._current_key is None:
            logger.debug(f"Date set to {target_date}, waiting for a location")
            return None
        return self.request_update(self._current_key.coordinates, target_date)

    def _is_current(self, key: SnapshotKey) -> bool:
        return self._current_key == key

    def _should_skip_refresh(self, key: SnapshotKey) -> bool:
        """Check if the current snapshot already answers this key."""
        return self._current_data is not None and self._current_data.key == key

    def _publish_error(self, message: str) -> None:
        self._error = message
        logger.error(f"Astronomy error: {message}")
        self.astronomy_error.emit(message)

    def _set_loading_state(self, is_loading: bool) -> None:
        """Update loading state and emit signal."""
        if self._is_loading != is_loading:
            self._is_loading = is_loading
            self.loading_state_changed.emit(is_loading)
            logger.debug(f"Astronomy loading state changed: {is_loading}")

    def get_view_state(self) -> AstronomyViewState:
        """Get the data, loading flag and error for the astronomy panel."""
        return AstronomyViewState(
            data=self._current_data,
            loading=self._is_loading,
            error=self._error,
        )

    def get_highlights(self) -> List[Highlight]:
        """Get highlights for the current snapshot."""
        return list(self._highlights)

    def get_current_data(self) -> Optional[AstronomyData]:
        """Get the current astronomy snapshot."""
        return self._current_data

    def is_loading(self) -> bool:
        """Check if astronomy data is currently being loaded."""
        return self._is_loading

    def get_status_summary(self) -> str:
        """Get a human-readable status summary."""
        if self._is_loading:
            return "Loading astronomy data..."
        if self._error:
            return f"Error: {self._error}"
        if not self._current_data:
            return "No astronomy data available"
        if not self._current_data.is_complete:
            return f"Astronomy data partial ({len(self._current_data.failed_feeds)} feeds unavailable)"
        return f"Astronomy data current ({len(self._highlights)} highlights)"

    async def shutdown(self) -> None:
        """Cancel in-flight requests."""
        logger.debug("Shutting down astronomy manager...")
        tasks = [task for task in self._pending_updates if not task.done()]
        if self._inflight is not None and not self._inflight.done():
            tasks.append(self._inflight)
        self._current_key = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._set_loading_state(False)
        logger.debug("Astronomy manager shutdown complete")
