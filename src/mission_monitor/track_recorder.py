"""
Track Recorder for the vessel path.

Keeps the ordered list of reported positions for display, the latest course
over ground for the vessel marker and the interval between the last two
timestamped samples. The path grows for the whole session; only reset()
shrinks it.
"""

import logging
from datetime import datetime
from typing import List, Optional

from mission_monitor.mission_types import GeoCoordinate


class TrackRecorder:
    """Append-only vessel path, cleared on refresh."""

    def __init__(self):
        self._points: List[GeoCoordinate] = []
        self.heading_deg: Optional[float] = None
        self.update_interval_ms: Optional[float] = None
        self._last_timestamp: Optional[datetime] = None

    def record(self, position: GeoCoordinate, timestamp: Optional[datetime] = None) -> None:
        """
        Append a position to the path.

        Args:
            position: Reported vessel position
            timestamp: Sample time; when both this and the previous sample
                carry one, update_interval_ms is refreshed
        """
        self._points.append(position)
        if timestamp is not None:
            if self._last_timestamp is not None:
                try:
                    delta = timestamp - self._last_timestamp
                    self.update_interval_ms = delta.total_seconds() * 1000.0
                except TypeError:
                    # naive vs aware timestamps
                    logging.debug("[TrackRecorder] Cannot compare sample timestamps")
            self._last_timestamp = timestamp

    def update_heading(self, cog_deg: float) -> None:
        self.heading_deg = cog_deg % 360.0

    @property
    def points(self) -> List[GeoCoordinate]:
        return list(self._points)

    @property
    def latest_position(self) -> Optional[GeoCoordinate]:
        return self._points[-1] if self._points else None

    @property
    def path(self) -> Optional[List[GeoCoordinate]]:
        """Connectable path, available once at least two points exist."""
        if len(self._points) < 2:
            return None
        return list(self._points)

    def reset(self) -> None:
        """Forget the path and the sample timing."""
        self._points.clear()
        self._last_timestamp = None
        self.update_interval_ms = None
        logging.info("[TrackRecorder] Track cleared")

    def __len__(self) -> int:
        return len(self._points)
