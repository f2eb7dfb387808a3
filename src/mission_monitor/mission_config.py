# src/mission_monitor/mission_config.py
"""
Mission Config Module - Immutable Variant Table and Waypoint Sets
=================================================================

This module holds the explicit, immutable mission configuration that is
passed into the monitor and its components.

Resolution Order (variant lookup):
    1. Variant with the requested identifier
    2. Configured default variant
    3. Hardcoded default table (lintasan1)

Center Overrides:
    The store may publish a center per variant. Rows with a missing
    coordinate are ignored and variants without a row keep their configured
    center.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional

from mission_monitor.mission_types import (
    GeoCoordinate, MissionVariant, WaypointKind, WaypointSet
)

logger = logging.getLogger(__name__)

DEFAULT_VARIANT_ID = "lintasan1"
DEFAULT_GRID_BEARING_DEG = 150.0
DEFAULT_TOLERANCE_M = 1.5
DEFAULT_CELL_SIZE_M = 5.0
DEFAULT_DIVISIONS = 5
DEFAULT_VIEW_HALF_SIZE_M = 12.5
DEFAULT_BOUNDS_HALF_SIZE_M = 15.0

# Hardcoded course table, used when the config omits the Variants section
_DEFAULT_VARIANTS = {
    "lintasan1": MissionVariant(
        variant_id="lintasan1",
        center=GeoCoordinate(-7.9154834, 112.5891244),
        grid_bearing_deg=DEFAULT_GRID_BEARING_DEG,
        row_labels=("5", "4", "3", "2", "1"),
        column_labels=("A", "B", "C", "D", "E"),
    ),
    "lintasan2": MissionVariant(
        variant_id="lintasan2",
        center=GeoCoordinate(-7.9150524, 112.5888965),
        grid_bearing_deg=DEFAULT_GRID_BEARING_DEG,
        row_labels=("5", "4", "3", "2", "1"),
        column_labels=("E", "D", "C", "B", "A"),
    ),
}


def _default_variant_table() -> Mapping[str, MissionVariant]:
    return MappingProxyType(dict(_DEFAULT_VARIANTS))


@dataclass(frozen=True)
class MissionConfig:
    """Immutable configuration shared by every mission-phase check."""
    variants: Mapping[str, MissionVariant] = field(default_factory=_default_variant_table)
    default_variant_id: str = DEFAULT_VARIANT_ID
    tolerance_m: float = DEFAULT_TOLERANCE_M
    cell_size_m: float = DEFAULT_CELL_SIZE_M
    divisions: int = DEFAULT_DIVISIONS
    view_half_size_m: float = DEFAULT_VIEW_HALF_SIZE_M
    bounds_half_size_m: float = DEFAULT_BOUNDS_HALF_SIZE_M

    def __post_init__(self):
        if not self.variants:
            raise ValueError("mission config needs at least one variant")
        if self.default_variant_id not in self.variants:
            raise ValueError(f"default variant '{self.default_variant_id}' is not defined")
        if self.tolerance_m < 0:
            raise ValueError("tolerance_m must not be negative")
        if not isinstance(self.variants, MappingProxyType):
            object.__setattr__(self, 'variants', MappingProxyType(dict(self.variants)))

    def resolve_variant(self, variant_id: Optional[str]) -> MissionVariant:
        """Look up a variant, falling back to the default one for unknown ids."""
        variant = self.variants.get(variant_id) if variant_id is not None else None
        if variant is None:
            logger.debug(f"Unknown variant '{variant_id}', using '{self.default_variant_id}'")
            return self.variants[self.default_variant_id]
        return variant

    def resolve_variant_id(self, variant_id: Optional[str]) -> str:
        return self.resolve_variant(variant_id).variant_id

    def with_centers(self, center_rows: Iterable[Mapping[str, Any]]) -> 'MissionConfig':
        """
        Return a copy whose variant centers are overridden by store rows.

        Each row carries 'variant_id', 'latitude' and 'longitude'. Rows for
        unknown variants or with a null coordinate are ignored; rows whose
        coordinates are not finite numbers are skipped with a warning.
        """
        variants: Dict[str, MissionVariant] = dict(self.variants)
        for row in center_rows:
            variant_id = row.get('variant_id')
            if not isinstance(variant_id, str) or variant_id not in variants:
                continue
            if row.get('latitude') is None or row.get('longitude') is None:
                continue
            center = _parse_coordinate(row.get('latitude'), row.get('longitude'))
            if center is None:
                logger.warning(f"[Centers] Skipping malformed row: {dict(row)}")
                continue
            variants[variant_id] = variants[variant_id]._replace(center=center)
        return replace(self, variants=MappingProxyType(variants))

    @classmethod
    def from_dict(cls, config: Optional[Mapping[str, Any]]) -> 'MissionConfig':
        """
        Build a MissionConfig from the parsed YAML config.

        Reads the 'Mission' section; missing keys fall back to the module
        defaults and a missing 'Variants' table to the hardcoded courses.

        Raises:
            ValueError: On structurally invalid values.
        """
        section = (config or {}).get('Mission') or {}
        default_bearing = float(section.get('GRID_BEARING_DEG', DEFAULT_GRID_BEARING_DEG))

        raw_variants = section.get('Variants')
        if raw_variants:
            variants = {
                str(variant_id): _parse_variant(str(variant_id), raw, default_bearing)
                for variant_id, raw in raw_variants.items()
            }
        else:
            variants = dict(_DEFAULT_VARIANTS)

        return cls(
            variants=MappingProxyType(variants),
            default_variant_id=str(section.get('DEFAULT_VARIANT', DEFAULT_VARIANT_ID)),
            tolerance_m=float(section.get('TOLERANCE_M', DEFAULT_TOLERANCE_M)),
            cell_size_m=float(section.get('CELL_SIZE_M', DEFAULT_CELL_SIZE_M)),
            divisions=int(section.get('DIVISIONS', DEFAULT_DIVISIONS)),
            view_half_size_m=float(section.get('VIEW_HALF_SIZE_M', DEFAULT_VIEW_HALF_SIZE_M)),
            bounds_half_size_m=float(section.get('BOUNDS_HALF_SIZE_M', DEFAULT_BOUNDS_HALF_SIZE_M)),
        )


def _parse_variant(variant_id: str, raw: Mapping[str, Any], default_bearing: float) -> MissionVariant:
    if not isinstance(raw, Mapping):
        raise ValueError(f"variant '{variant_id}' must be a mapping")
    center = raw.get('CENTER')
    if not center or len(center) != 2:
        raise ValueError(f"variant '{variant_id}' needs CENTER as [latitude, longitude]")
    lat, lon = float(center[0]), float(center[1])
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"variant '{variant_id}' has a non-finite center")
    return MissionVariant(
        variant_id=variant_id,
        center=GeoCoordinate(lat, lon),
        grid_bearing_deg=float(raw.get('GRID_BEARING_DEG', default_bearing)),
        row_labels=tuple(str(label) for label in raw.get('ROW_LABELS', ())),
        column_labels=tuple(str(label) for label in raw.get('COLUMN_LABELS', ())),
    )


_WAYPOINT_KINDS = {kind.value: kind for kind in WaypointKind}


def _parse_coordinate(lat: Any, lon: Any) -> Optional[GeoCoordinate]:
    """Coordinate from raw store values, or None if either is missing, non-numeric or non-finite."""
    try:
        point = GeoCoordinate(float(lat), float(lon))
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(point.latitude) and math.isfinite(point.longitude)):
        return None
    return point


def build_waypoint_map(rows: Iterable[Mapping[str, Any]]) -> Dict[str, WaypointSet]:
    """
    Group waypoint rows by mission name into one WaypointSet per variant.

    Rows carry 'mission_name', 'waypoint_type', 'latitude' and 'longitude'.
    Malformed rows are skipped with a warning. A later row for the same
    name and type replaces an earlier one.
    """
    grouped: Dict[str, Dict[str, GeoCoordinate]] = {}
    for row in rows:
        mission_name = row.get('mission_name')
        waypoint_type = row.get('waypoint_type')
        kind = _WAYPOINT_KINDS.get(waypoint_type) if isinstance(waypoint_type, str) else None
        point = _parse_coordinate(row.get('latitude'), row.get('longitude'))
        if not isinstance(mission_name, str) or not mission_name or kind is None or point is None:
            logger.warning(f"[Waypoints] Skipping malformed row: {dict(row)}")
            continue
        grouped.setdefault(mission_name, {})[kind.value] = point
    return {name: WaypointSet(**points) for name, points in grouped.items()}
