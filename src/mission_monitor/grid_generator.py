# src/mission_monitor/grid_generator.py

"""
GridGenerator Module
====================

Builds the rotated, labeled reference grid attached to a mission variant.

Overview:
---------
The grid is a square of `divisions x divisions` cells centered on the
variant center and rotated by the variant's grid bearing. It stays fixed to
the mission geometry regardless of how a display rotates its viewport, so
operators always share the same cell names.

Frame:
------
Positions inside the grid are expressed as (a, b):
- a: meters along the heading      u = ( sin(bearing), cos(bearing) )
- b: meters left of the heading    v = (-cos(bearing), sin(bearing) )

Both basis vectors are (east, north). A grid point maps to the local offset
a*u + b*v, then through the tangent-plane projection to a coordinate.

Usage:
------
```python
generator = GridGenerator(cell_size_m=5.0, divisions=5)
grid = generator.generate(variant)
grid.cell("C3").center
```
"""

import logging
import math
from typing import List, Tuple

import numpy as np

from mission_monitor.geo_projection import offset_to_coordinate
from mission_monitor.mission_types import (
    GeoCoordinate, Grid, GridCell, GridLine, MissionVariant
)

logger = logging.getLogger(__name__)


class GridGenerator:
    """
    Stateless generator of rotated reference grids.

    Every call recomputes the grid from the variant, so regenerating after a
    variant or center change is always safe.
    """

    def __init__(self, cell_size_m: float = 5.0, divisions: int = 5):
        """
        Args:
            cell_size_m (float): Edge length of one cell in meters.
            divisions (int): Number of cells along each axis.
        """
        if cell_size_m <= 0:
            raise ValueError("cell_size_m must be positive")
        if divisions < 1:
            raise ValueError("divisions must be at least 1")
        self.cell_size_m = float(cell_size_m)
        self.divisions = int(divisions)
        logger.debug(f"GridGenerator initialized ({self.divisions}x{self.divisions}, "
                     f"{self.cell_size_m} m cells)")

    @property
    def footprint_m(self) -> float:
        """Edge length of the whole grid in meters."""
        return self.cell_size_m * self.divisions

    @property
    def half_size_m(self) -> float:
        return self.footprint_m / 2.0

    @staticmethod
    def basis_vectors(bearing_deg: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Return (u, v) as (east, north) unit vectors.

        u points along the bearing, v points to the left of it.
        """
        heading = math.radians(bearing_deg)
        sin_h = math.sin(heading)
        cos_h = math.cos(heading)
        u = np.array([sin_h, cos_h])
        v = np.array([-cos_h, sin_h])
        return u, v

    def local_offset(self, bearing_deg: float, a_m: float, b_m: float) -> np.ndarray:
        """Map grid point (a, b) to a local (east, north) offset in meters."""
        u, v = self.basis_vectors(bearing_deg)
        return a_m * u + b_m * v

    def to_coordinate(self, variant: MissionVariant, a_m: float, b_m: float) -> GeoCoordinate:
        east, north = self.local_offset(variant.grid_bearing_deg, a_m, b_m)
        return offset_to_coordinate(variant.center, float(east), float(north))

    def corner_offsets(self, bearing_deg: float) -> List[np.ndarray]:
        """Local offsets of the four grid corners, counter-clockwise from (-h, -h)."""
        h = self.half_size_m
        return [
            self.local_offset(bearing_deg, a, b)
            for a, b in ((-h, -h), (h, -h), (h, h), (-h, h))
        ]

    def _check_labels(self, variant: MissionVariant) -> None:
        if len(variant.row_labels) < self.divisions or len(variant.column_labels) < self.divisions:
            raise ValueError(
                f"variant '{variant.variant_id}' has fewer labels than grid divisions "
                f"({len(variant.row_labels)} rows, {len(variant.column_labels)} columns, "
                f"{self.divisions} needed)"
            )

    def generate(self, variant: MissionVariant) -> Grid:
        """
        Generate grid lines, labeled cell centers and corners for a variant.

        Raises:
            ValueError: If the variant's label sequences are shorter than divisions.
        """
        self._check_labels(variant)
        h = self.half_size_m
        size = self.cell_size_m

        lines: List[GridLine] = []
        # Lines along the heading, one per row boundary
        for row in range(self.divisions + 1):
            b = -h + row * size
            lines.append(GridLine("along",
                                  self.to_coordinate(variant, -h, b),
                                  self.to_coordinate(variant, h, b)))
        # Lines across the heading, one per column boundary
        for col in range(self.divisions + 1):
            a = -h + col * size
            lines.append(GridLine("across",
                                  self.to_coordinate(variant, a, -h),
                                  self.to_coordinate(variant, a, h)))

        cells: List[GridCell] = []
        for row in range(self.divisions):
            b = -h + (row + 0.5) * size
            for col in range(self.divisions):
                a = -h + (col + 0.5) * size
                east, north = self.local_offset(variant.grid_bearing_deg, a, b)
                cells.append(GridCell(
                    label=f"{variant.column_labels[col]}{variant.row_labels[row]}",
                    row=row,
                    column=col,
                    east_m=float(east),
                    north_m=float(north),
                    center=offset_to_coordinate(variant.center, float(east), float(north)),
                ))

        corners = tuple(
            offset_to_coordinate(variant.center, float(east), float(north))
            for east, north in self.corner_offsets(variant.grid_bearing_deg)
        )

        return Grid(
            variant_id=variant.variant_id,
            cell_size_m=self.cell_size_m,
            divisions=self.divisions,
            lines=tuple(lines),
            cells=tuple(cells),
            corners=corners,
        )
