# src/mission_monitor/mission_store.py

"""
MissionStore Module
-------------------

Defines the asynchronous interface between the mission monitor and the
persistent store that holds the mission status record, the waypoint and
center tables, and the map-view selection.

Purpose:
--------
The monitor never talks to a database or HTTP API directly. It goes through
a `MissionStore`, so the same event handling runs against the hosted REST
store in the field and against `InMemoryMissionStore` in tests and replays.

Key Methods:
------------
- `fetch_status()`: Current status record as a dict of phase -> raw value.
- `write_status(fields)`: Partial update naming only the changed phases.
- `fetch_waypoint_rows()`: Rows of mission_name / waypoint_type / latitude / longitude.
- `fetch_center_rows()`: Rows of variant_id / latitude / longitude.
- `fetch_map_state()`: Dict with at least 'view_type'.

Error Contract:
---------------
- Fetch methods raise `UpstreamFetchError`.
- `write_status` raises `WriteFailure`.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from mission_monitor.errors import UpstreamFetchError, WriteFailure
from mission_monitor.mission_types import MissionStatus


class MissionStore(ABC):
    """
    Abstract Base Class for mission stores.
    """

    @abstractmethod
    async def fetch_status(self) -> Dict[str, Any]:
        """
        Retrieve the mission status record.

        Raises:
            UpstreamFetchError: If the record cannot be loaded.
        """
        pass

    @abstractmethod
    async def write_status(self, fields: Mapping[str, str]) -> None:
        """
        Update only the given status fields.

        Args:
            fields: Phase name -> new value, e.g. {'mission_buoys': 'selesai'}

        Raises:
            WriteFailure: If the store rejects or cannot receive the update.
        """
        pass

    @abstractmethod
    async def fetch_waypoint_rows(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def fetch_center_rows(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def fetch_map_state(self) -> Dict[str, Any]:
        pass

    async def close(self) -> None:
        """Release any held connections."""
        return None


class InMemoryMissionStore(MissionStore):
    """
    Process-local store used by tests and event replays.

    Every successful write is appended to `writes`. Setting `fail_writes`
    or `fail_fetches` makes the corresponding calls raise.
    """

    def __init__(self, status: Optional[Mapping[str, Any]] = None,
                 waypoint_rows: Optional[List[Dict[str, Any]]] = None,
                 center_rows: Optional[List[Dict[str, Any]]] = None,
                 map_state: Optional[Mapping[str, Any]] = None):
        self.status: Dict[str, Any] = dict(status or MissionStatus.initial().to_record())
        self.waypoint_rows: List[Dict[str, Any]] = list(waypoint_rows or [])
        self.center_rows: List[Dict[str, Any]] = list(center_rows or [])
        self.map_state: Dict[str, Any] = dict(map_state or {'view_type': None, 'is_refreshed': False})
        self.writes: List[Dict[str, str]] = []
        self.fail_writes = False
        self.fail_fetches = False

    def _check_fetch(self, resource: str) -> None:
        if self.fail_fetches:
            raise UpstreamFetchError(resource, "store unavailable")

    async def fetch_status(self) -> Dict[str, Any]:
        self._check_fetch('status')
        return dict(self.status)

    async def write_status(self, fields: Mapping[str, str]) -> None:
        if self.fail_writes:
            raise WriteFailure(dict(fields), "store unavailable")
        self.status.update(fields)
        self.writes.append(dict(fields))

    async def fetch_waypoint_rows(self) -> List[Dict[str, Any]]:
        self._check_fetch('waypoints')
        return [dict(row) for row in self.waypoint_rows]

    async def fetch_center_rows(self) -> List[Dict[str, Any]]:
        self._check_fetch('centers')
        return [dict(row) for row in self.center_rows]

    async def fetch_map_state(self) -> Dict[str, Any]:
        self._check_fetch('map_state')
        return dict(self.map_state)
