# src/mission_monitor/events.py
"""
Inbound Events - Typed Notifications from the Realtime Feed
===========================================================

The feed delivers loosely-typed dictionaries. They are parsed here into a
closed set of event models, discriminated by the 'kind' field, and the
monitor dispatches on the resulting type.

Malformed payloads (missing or invalid fields, unknown kinds) are not
errors: parse_event() returns None and the event is dropped.

Usage:
    from mission_monitor.events import parse_event
    event = parse_event({'kind': 'position', 'latitude': -7.91, 'longitude': 112.58})
"""

import logging
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from mission_monitor.mission_types import GeoCoordinate, MissionPhase

logger = logging.getLogger(__name__)


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class PositionUpdate(_Event):
    """New navigation sample of the vessel."""
    kind: Literal["position"] = "position"
    latitude: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)
    timestamp: Optional[datetime] = None
    sog_ms: Optional[float] = None

    @property
    def position(self) -> GeoCoordinate:
        return GeoCoordinate(self.latitude, self.longitude)


class HeadingUpdate(_Event):
    """Course over ground in degrees clockwise from north."""
    kind: Literal["heading"] = "heading"
    cog: float = Field(..., allow_inf_nan=False)


class VariantSelected(_Event):
    kind: Literal["variant_selected"] = "variant_selected"
    variant_id: str = Field(..., min_length=1)


class Refresh(_Event):
    """Hard reset of mission status and track."""
    kind: Literal["refresh"] = "refresh"


class WaypointRow(_Event):
    mission_name: Optional[str] = None
    waypoint_type: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class WaypointSetChanged(_Event):
    """
    Waypoint table changed.

    With rows the table is rebuilt from them; without rows the monitor
    refetches the table from the store.
    """
    kind: Literal["waypoints_changed"] = "waypoints_changed"
    rows: Optional[List[WaypointRow]] = None

    def row_dicts(self) -> List[Dict[str, Any]]:
        return [row.model_dump() for row in self.rows or []]


class CenterRow(_Event):
    variant_id: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class VariantCentersChanged(_Event):
    """Center table changed; rows as for WaypointSetChanged."""
    kind: Literal["variant_centers_changed"] = "variant_centers_changed"
    rows: Optional[List[CenterRow]] = None

    def row_dicts(self) -> List[Dict[str, Any]]:
        return [row.model_dump() for row in self.rows or []]


class PhaseCompletionConfirmed(_Event):
    """An external pipeline confirmed completion of an imaging phase."""
    kind: Literal["phase_completion_confirmed"] = "phase_completion_confirmed"
    phase: Literal["image_atas", "image_bawah"]

    @property
    def mission_phase(self) -> MissionPhase:
        return MissionPhase(self.phase)


class StatusChanged(_Event):
    """The stored status record was updated (by anyone, including us)."""
    kind: Literal["status_changed"] = "status_changed"
    record: Dict[str, Any]


MissionEvent = Annotated[
    Union[
        PositionUpdate,
        HeadingUpdate,
        VariantSelected,
        Refresh,
        WaypointSetChanged,
        VariantCentersChanged,
        PhaseCompletionConfirmed,
        StatusChanged,
    ],
    Field(discriminator="kind"),
]

_EVENT_ADAPTER = TypeAdapter(MissionEvent)


def parse_event(payload: Any) -> Optional[MissionEvent]:
    """
    Parse a raw feed payload into a typed event.

    Returns:
        The event, or None if the payload is malformed.
    """
    if not isinstance(payload, dict):
        logger.debug(f"[Events] Ignoring non-mapping payload: {payload!r}")
        return None
    try:
        return _EVENT_ADAPTER.validate_python(payload)
    except ValidationError as e:
        logger.debug(f"[Events] Ignoring malformed '{payload.get('kind')}' event: "
                     f"{e.error_count()} error(s)")
        return None
