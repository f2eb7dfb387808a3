# src/mission_monitor/mission_state_machine.py
"""
Mission State Machine for geofence-driven phase tracking.

This module turns one position sample plus one consistent snapshot of the
mission (status, active variant, waypoint set, tolerance) into the phase
transitions that sample causes.

RULES (evaluated in order, as one batch):
1. persiapan belum            -> persiapan proses (auto-start on first sample)
2. inside 'start' geofence    -> persiapan selesai, start selesai, buoys proses
3. inside 'buoys' geofence    -> buoys selesai
4. inside 'image_surface'     -> image_atas proses
5. inside 'finish' geofence
   and image_bawah selesai    -> finish selesai

GUARANTEES:
- Phases only move forward (belum < proses < selesai): a rule that would not
  advance a phase writes nothing, which makes re-delivered or duplicate
  samples harmless and rules out regression
- Several rules may fire for one sample; writes are collapsed to one per
  changed phase carrying its final value
- image_atas / image_bawah never reach selesai here, an external imaging
  pipeline confirms them
- mission_start goes straight from belum to selesai
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, FrozenSet, NamedTuple, Optional, Tuple

from mission_monitor.logging_manager import logging_manager
from mission_monitor.mission_types import (
    GeoCoordinate, MissionPhase, MissionStatus, PhaseState, StatusWrite,
    WaypointKind, WaypointSet
)
from mission_monitor.proximity import geofence_hits

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationSnapshot:
    """Everything one evaluation may read, captured once at its start."""
    status: MissionStatus
    variant_id: str
    waypoints: Optional[WaypointSet]
    tolerance_m: float


class TransitionResult(NamedTuple):
    """Outcome of evaluating one position sample."""
    status: MissionStatus
    writes: Tuple[StatusWrite, ...]
    geofences: FrozenSet[WaypointKind]

    @property
    def changed(self) -> bool:
        return bool(self.writes)


class MissionStateMachine:
    """
    Applies the mission rules to position samples.

    The machine itself holds no mission state; callers pass a snapshot in
    and keep the returned status.
    """

    def evaluate(self, snapshot: EvaluationSnapshot, position: GeoCoordinate) -> TransitionResult:
        """
        Evaluate all rules for one position against one snapshot.

        Args:
            snapshot: Status, variant and waypoints as of the start of this evaluation
            position: Reported vessel position

        Returns:
            TransitionResult with the new status and the writes that produce it
        """
        current = snapshot.status
        hits = geofence_hits(position, snapshot.waypoints, snapshot.tolerance_m)
        pending: Dict[MissionPhase, PhaseState] = OrderedDict()

        def advance(phase: MissionPhase, target: PhaseState) -> None:
            value = pending.get(phase, current.get(phase))
            if target.rank > value.rank:
                pending[phase] = target

        if current.mission_persiapan is PhaseState.BELUM:
            logger.info("[NEAR] PERSIAPAN (auto proses)")
            advance(MissionPhase.PERSIAPAN, PhaseState.PROSES)

        if WaypointKind.START in hits:
            logging_manager.log_operation(logger, "NEAR START")
            advance(MissionPhase.PERSIAPAN, PhaseState.SELESAI)
            advance(MissionPhase.START, PhaseState.SELESAI)
            advance(MissionPhase.BUOYS, PhaseState.PROSES)

        if WaypointKind.BUOYS in hits:
            logging_manager.log_operation(logger, "NEAR BUOYS")
            advance(MissionPhase.BUOYS, PhaseState.SELESAI)

        if WaypointKind.IMAGE_SURFACE in hits:
            logging_manager.log_operation(logger, "NEAR IMAGE_SURFACE")
            advance(MissionPhase.IMAGE_ATAS, PhaseState.PROSES)

        if WaypointKind.FINISH in hits:
            if current.image_bawah is PhaseState.SELESAI:
                logging_manager.log_operation(logger, "NEAR FINISH", details="image_bawah selesai")
                advance(MissionPhase.FINISH, PhaseState.SELESAI)
            else:
                logger.debug("[NEAR] FINISH ignored, image_bawah not selesai")

        writes = tuple(StatusWrite(phase, value) for phase, value in pending.items())
        return TransitionResult(
            status=current.with_updates(pending),
            writes=writes,
            geofences=hits,
        )

    @staticmethod
    def reset() -> MissionStatus:
        """Hard reset: every phase back to belum."""
        return MissionStatus.initial()
