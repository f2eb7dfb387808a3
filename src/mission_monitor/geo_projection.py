# src/mission_monitor/geo_projection.py
"""
Local tangent-plane projection around a reference point.

Converts between geographic coordinates and east/north meter offsets using a
flat-earth approximation: a fixed 111320 m per degree of latitude and
111320 * cos(latitude) m per degree of longitude, both evaluated at the
reference point. Only meaningful for offsets of tens of meters; error grows
with distance and towards the poles.
"""

import math
from typing import Tuple

from mission_monitor.mission_types import GeoBounds, GeoCoordinate

METERS_PER_DEG_LAT = 111320.0


def meters_per_degree(center_lat: float) -> Tuple[float, float]:
    """Return (meters per degree latitude, meters per degree longitude)."""
    return METERS_PER_DEG_LAT, METERS_PER_DEG_LAT * math.cos(math.radians(center_lat))


def meters_to_degrees(center_lat: float, meters: float) -> Tuple[float, float]:
    """Convert a distance in meters to (dLat, dLon) degrees at center_lat."""
    per_lat, per_lon = meters_per_degree(center_lat)
    return meters / per_lat, meters / per_lon


def offset_to_coordinate(center: GeoCoordinate, east_m: float, north_m: float) -> GeoCoordinate:
    """Shift center by (east_m, north_m) meters."""
    per_lat, per_lon = meters_per_degree(center.latitude)
    return GeoCoordinate(
        center.latitude + north_m / per_lat,
        center.longitude + east_m / per_lon,
    )


def coordinate_to_offset(center: GeoCoordinate, point: GeoCoordinate) -> Tuple[float, float]:
    """Inverse of offset_to_coordinate: (east_m, north_m) of point from center."""
    per_lat, per_lon = meters_per_degree(center.latitude)
    return (
        (point.longitude - center.longitude) * per_lon,
        (point.latitude - center.latitude) * per_lat,
    )


def view_bounds(center: GeoCoordinate, half_size_m: float) -> GeoBounds:
    """Axis-aligned box extending half_size_m in every direction from center."""
    d_lat, d_lon = meters_to_degrees(center.latitude, half_size_m)
    return GeoBounds(
        south_west=GeoCoordinate(center.latitude - d_lat, center.longitude - d_lon),
        north_east=GeoCoordinate(center.latitude + d_lat, center.longitude + d_lon),
    )
