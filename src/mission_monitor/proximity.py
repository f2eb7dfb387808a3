"""
Geofence proximity tests.

Distances are great-circle (Haversine) meters on a spherical earth; every
tolerance in the mission monitor is expressed in meters.

The sphere uses the mean earth radius, so a degree of latitude here is about
111195 m, while geo_projection draws with 111320 m per degree. Over a 25 m
course the two differ by a few centimeters, well under the tolerance, and
the geofence keeps the great-circle metric.
"""

from __future__ import annotations

import math
from typing import FrozenSet, Optional

from mission_monitor.mission_types import GeoCoordinate, WaypointKind, WaypointSet

EARTH_RADIUS_M = 6371000.0


def haversine_distance_m(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """Great-circle distance between two coordinates in meters."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(a.latitude)) * math.cos(math.radians(b.latitude))
         * math.sin(d_lon / 2) ** 2)
    # Clamp against rounding just above 1.0
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def is_near(position: GeoCoordinate, target: Optional[GeoCoordinate], tolerance_m: float) -> bool:
    """
    True when position lies within tolerance_m meters of target.

    A missing target is no geofence. A negative tolerance is never near.
    """
    if target is None or tolerance_m < 0:
        return False
    return haversine_distance_m(position, target) <= tolerance_m


def geofence_hits(position: GeoCoordinate, waypoints: Optional[WaypointSet],
                  tolerance_m: float) -> FrozenSet[WaypointKind]:
    """Kinds of every present waypoint whose geofence contains position."""
    if waypoints is None:
        return frozenset()
    return frozenset(
        kind for kind, target in waypoints.items()
        if is_near(position, target, tolerance_m)
    )
