# src/mission_monitor/errors.py
"""
Error types raised by mission store adapters.

The monitor catches these at its I/O boundary and degrades to stale or
ignored state; none of them ends a session.
"""

from typing import Optional


class MissionMonitorError(Exception):
    """Base class for mission monitor failures."""


class UpstreamFetchError(MissionMonitorError):
    """Loading status, waypoints, centers or map state from the store failed."""

    def __init__(self, resource: str, reason: str = ""):
        self.resource = resource
        self.reason = reason
        super().__init__(f"fetch {resource} failed: {reason}".rstrip(": "))


class WriteFailure(MissionMonitorError):
    """A status write to the store failed; the local result is kept."""

    def __init__(self, fields: Optional[dict] = None, reason: str = ""):
        self.fields = dict(fields or {})
        self.reason = reason
        super().__init__(f"write {self.fields} failed: {reason}".rstrip(": "))
