# src/mission_monitor/mission_types.py
"""
Mission Types Module - Value Types for the Mission Monitor
===========================================================

This module defines the immutable value types shared by the projection,
grid, geofence and mission-phase components.

Project Information:
- Project Name: ASV Mission Monitor

Design Philosophy:
- Coordinates are (latitude, longitude) in degrees, no altitude
- Local offsets are (east, north) in meters
- Named tuples and frozen dataclasses so snapshots can be shared safely
- Phase values keep the wire strings used by the mission status record
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, NamedTuple, Optional, Tuple


class GeoCoordinate(NamedTuple):
    """Geographic position in degrees."""
    latitude: float
    longitude: float


class PhaseState(Enum):
    """Tri-state progress value of a mission phase."""
    BELUM = "belum"       # not started
    PROSES = "proses"     # in progress
    SELESAI = "selesai"   # done

    @property
    def rank(self) -> int:
        return _PHASE_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> 'PhaseState':
        """
        Leniently normalize a raw status value.

        'proses' and 'persiapan' read as PROSES, 'selesai' as SELESAI,
        anything else (including None) as BELUM.
        """
        if isinstance(value, PhaseState):
            return value
        text = str(value or "").strip().lower()
        if text in ("proses", "persiapan"):
            return cls.PROSES
        if text == "selesai":
            return cls.SELESAI
        return cls.BELUM


_PHASE_RANK = {
    PhaseState.BELUM: 0,
    PhaseState.PROSES: 1,
    PhaseState.SELESAI: 2,
}


class MissionPhase(Enum):
    """The six tracked slots of the mission status record."""
    PERSIAPAN = "mission_persiapan"
    START = "mission_start"
    BUOYS = "mission_buoys"
    IMAGE_ATAS = "image_atas"
    IMAGE_BAWAH = "image_bawah"
    FINISH = "mission_finish"


class WaypointKind(Enum):
    """Named mission waypoints of a variant."""
    START = "start"
    BUOYS = "buoys"
    FINISH = "finish"
    IMAGE_SURFACE = "image_surface"
    IMAGE_UNDERWATER = "image_underwater"


@dataclass(frozen=True)
class MissionStatus:
    """Six-slot mission progress record."""
    mission_persiapan: PhaseState = PhaseState.BELUM
    mission_start: PhaseState = PhaseState.BELUM
    mission_buoys: PhaseState = PhaseState.BELUM
    image_atas: PhaseState = PhaseState.BELUM
    image_bawah: PhaseState = PhaseState.BELUM
    mission_finish: PhaseState = PhaseState.BELUM

    @classmethod
    def initial(cls) -> 'MissionStatus':
        return cls()

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> 'MissionStatus':
        """Build a status from a store row; unknown keys are ignored."""
        record = record or {}
        return cls(**{
            phase.value: PhaseState.parse(record.get(phase.value))
            for phase in MissionPhase
        })

    def get(self, phase: MissionPhase) -> PhaseState:
        return getattr(self, phase.value)

    def with_updates(self, updates: Mapping[MissionPhase, PhaseState]) -> 'MissionStatus':
        return replace(self, **{phase.value: value for phase, value in updates.items()})

    def merged_forward(self, other: 'MissionStatus') -> 'MissionStatus':
        """Per phase, the further advanced of the two values."""
        return MissionStatus(**{
            phase.value: max(self.get(phase), other.get(phase), key=lambda state: state.rank)
            for phase in MissionPhase
        })

    def to_record(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name).value for f in fields(self)}

    def __iter__(self) -> Iterator[Tuple[MissionPhase, PhaseState]]:
        for phase in MissionPhase:
            yield phase, self.get(phase)


class StatusWrite(NamedTuple):
    """A single targeted update of one status slot."""
    phase: MissionPhase
    value: PhaseState

    def as_fields(self) -> Dict[str, str]:
        return {self.phase.value: self.value.value}


@dataclass(frozen=True)
class WaypointSet:
    """Up to five named waypoints of one mission variant."""
    start: Optional[GeoCoordinate] = None
    buoys: Optional[GeoCoordinate] = None
    finish: Optional[GeoCoordinate] = None
    image_surface: Optional[GeoCoordinate] = None
    image_underwater: Optional[GeoCoordinate] = None

    def get(self, kind: WaypointKind) -> Optional[GeoCoordinate]:
        return getattr(self, kind.value)

    def items(self) -> Iterator[Tuple[WaypointKind, GeoCoordinate]]:
        """Yield only the waypoints that are present."""
        for kind in WaypointKind:
            point = self.get(kind)
            if point is not None:
                yield kind, point


class MissionVariant(NamedTuple):
    """One selectable course configuration."""
    variant_id: str
    center: GeoCoordinate
    grid_bearing_deg: float
    row_labels: Tuple[str, ...]
    column_labels: Tuple[str, ...]


class GeoBounds(NamedTuple):
    """Axis-aligned geographic box."""
    south_west: GeoCoordinate
    north_east: GeoCoordinate


class GridLine(NamedTuple):
    """One grid line; axis is 'along' (heading) or 'across'."""
    axis: str
    start: GeoCoordinate
    end: GeoCoordinate


class GridCell(NamedTuple):
    """Labeled cell center of the reference grid."""
    label: str
    row: int
    column: int
    east_m: float
    north_m: float
    center: GeoCoordinate


class Grid(NamedTuple):
    """Full reference grid of a variant, recomputed on every draw."""
    variant_id: str
    cell_size_m: float
    divisions: int
    lines: Tuple[GridLine, ...]
    cells: Tuple[GridCell, ...]
    corners: Tuple[GeoCoordinate, ...]

    @property
    def footprint_m(self) -> float:
        return self.cell_size_m * self.divisions

    def cell(self, label: str) -> Optional[GridCell]:
        for cell in self.cells:
            if cell.label == label:
                return cell
        return None


def phase_display_class(value: Any) -> str:
    """CSS class of a status box: kotak-belum, kotak-proses or kotak-selesai."""
    return f"kotak-{PhaseState.parse(value).value}"
