# src/mission_monitor/config_validator.py
"""
Startup Validation for the Mission Config Section
=================================================

Validates the Mission (and, if present, Store) sections of config.yaml using
Pydantic.

Design decisions:
- Validation is NON-BLOCKING: logs a WARNING if invalid but does NOT raise.
  The monitor still starts with the hardcoded course table in that case.
- Returns bool so callers (e.g. the `validate` CLI command) can escalate.

Usage:
    from mission_monitor.config_validator import validate_mission_config
    validate_mission_config(Parameters.raw_config())
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class VariantModel(BaseModel):
    """One entry of Mission.Variants."""
    CENTER: List[float] = Field(..., min_length=2, max_length=2,
        description="[latitude, longitude] in degrees.")
    GRID_BEARING_DEG: Optional[float] = Field(None, ge=0.0, lt=360.0)
    ROW_LABELS: List[str] = Field(..., min_length=1)
    COLUMN_LABELS: List[str] = Field(..., min_length=1)

    model_config = {"extra": "allow", "coerce_numbers_to_str": True}

    @model_validator(mode="after")
    def _center_in_range(self) -> 'VariantModel':
        lat, lon = self.CENTER
        if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
            raise ValueError(f"CENTER out of range: {self.CENTER}")
        return self


class MissionSectionModel(BaseModel):
    """Validates the Mission section."""
    DEFAULT_VARIANT: Optional[str] = None
    TOLERANCE_M: Optional[float] = Field(None, ge=0.0, le=100.0,
        description="Geofence radius in meters.")
    CELL_SIZE_M: Optional[float] = Field(None, gt=0.0, le=1000.0)
    DIVISIONS: Optional[int] = Field(None, ge=1, le=26)
    GRID_BEARING_DEG: Optional[float] = Field(None, ge=0.0, lt=360.0)
    VIEW_HALF_SIZE_M: Optional[float] = Field(None, gt=0.0)
    BOUNDS_HALF_SIZE_M: Optional[float] = Field(None, gt=0.0)
    Variants: Optional[Dict[str, VariantModel]] = None

    model_config = {"extra": "allow"}

    @model_validator(mode="after")
    def _labels_cover_grid(self) -> 'MissionSectionModel':
        divisions = self.DIVISIONS or 5
        for name, variant in (self.Variants or {}).items():
            if len(variant.ROW_LABELS) < divisions or len(variant.COLUMN_LABELS) < divisions:
                raise ValueError(f"variant '{name}' needs at least {divisions} row and column labels")
        if self.DEFAULT_VARIANT and self.Variants and self.DEFAULT_VARIANT not in self.Variants:
            raise ValueError(f"DEFAULT_VARIANT '{self.DEFAULT_VARIANT}' is not in Variants")
        return self


class StoreSectionModel(BaseModel):
    BASE_URL: Optional[str] = None
    API_KEY: Optional[str] = None
    STATUS_ROW_ID: Optional[int] = Field(None, ge=0)
    TIMEOUT_S: Optional[float] = Field(None, gt=0.0, le=120.0)

    model_config = {"extra": "allow"}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_mission_config(config: dict) -> bool:
    """
    Validate the Mission and Store sections of a loaded config.

    Returns:
        True if all present sections pass.
        False if any section fails (errors are logged, nothing is raised).
    """
    ok = True

    mission_raw = config.get('Mission')
    if mission_raw and isinstance(mission_raw, dict):
        try:
            MissionSectionModel(**mission_raw)
            logger.debug("Mission config validation passed.")
        except ValidationError as e:
            logger.warning("Mission config validation failed:\n%s", _format_validation_errors(e))
            ok = False
    elif mission_raw is not None:
        logger.warning("Mission section must be a mapping, got %s", type(mission_raw).__name__)
        ok = False
    else:
        logger.debug("Mission section not present, built-in courses will be used.")

    store_raw = config.get('Store')
    if store_raw and isinstance(store_raw, dict):
        try:
            StoreSectionModel(**store_raw)
        except ValidationError as e:
            logger.warning("Store config validation failed:\n%s", _format_validation_errors(e))
            ok = False

    return ok


def _format_validation_errors(exc: ValidationError) -> str:
    """Format Pydantic ValidationError into a readable multi-line string."""
    lines = []
    for err in exc.errors():
        loc = " -> ".join(str(x) for x in err["loc"]) or "<section>"
        lines.append(f"  {loc}: {err['msg']}")
    return "\n".join(lines)
