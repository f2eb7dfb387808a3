# src/mission_monitor/mission_monitor.py
"""
MissionMonitor - async coordinator of one monitoring session.

Owns the mutable session state (active variant, waypoint map, status, track,
current grid) and applies inbound events to it one at a time. Store access
goes through a MissionStore; fetch and write failures are logged and the
previous in-memory state is kept.
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

from mission_monitor.errors import UpstreamFetchError, WriteFailure
from mission_monitor.events import (
    HeadingUpdate, MissionEvent, PhaseCompletionConfirmed, PositionUpdate, Refresh,
    StatusChanged, VariantCentersChanged, VariantSelected, WaypointSetChanged, parse_event
)
from mission_monitor.geo_projection import view_bounds
from mission_monitor.grid_generator import GridGenerator
from mission_monitor.logging_manager import logging_manager
from mission_monitor.mission_config import MissionConfig, build_waypoint_map
from mission_monitor.mission_state_machine import (
    EvaluationSnapshot, MissionStateMachine, TransitionResult
)
from mission_monitor.mission_store import MissionStore
from mission_monitor.mission_types import (
    GeoBounds, Grid, MissionStatus, MissionVariant, PhaseState, WaypointSet
)
from mission_monitor.track_recorder import TrackRecorder

logger = logging.getLogger(__name__)


class MissionMonitor:
    """
    Serialises mission events and keeps status, track and grid in sync.

    Usage:
        monitor = MissionMonitor(config, store)
        await monitor.start()
        await monitor.handle_raw({'kind': 'position', 'latitude': ..., 'longitude': ...})
    """

    def __init__(self, config: MissionConfig, store: MissionStore,
                 state_machine: Optional[MissionStateMachine] = None,
                 track: Optional[TrackRecorder] = None,
                 grid_generator: Optional[GridGenerator] = None):
        self.config = config
        self.store = store
        self.state_machine = state_machine or MissionStateMachine()
        self.track = track or TrackRecorder()
        self.grid_generator = grid_generator or GridGenerator(config.cell_size_m, config.divisions)

        self._lock = asyncio.Lock()
        self._variant_id = config.default_variant_id
        self._waypoint_map: Dict[str, WaypointSet] = {}
        self._status = MissionStatus.initial()
        self._grid: Optional[Grid] = None
        self.events_handled = 0
        self.events_dropped = 0

        self._regenerate_grid()

    # ------------------------------------------------------------------
    # Read-only session view
    # ------------------------------------------------------------------

    @property
    def status(self) -> MissionStatus:
        return self._status

    @property
    def variant(self) -> MissionVariant:
        return self.config.resolve_variant(self._variant_id)

    @property
    def waypoints(self) -> Optional[WaypointSet]:
        return self._waypoint_map.get(self._variant_id)

    @property
    def grid(self) -> Optional[Grid]:
        return self._grid

    @property
    def view_bounds(self) -> GeoBounds:
        return view_bounds(self.variant.center, self.config.view_half_size_m)

    @property
    def drag_bounds(self) -> GeoBounds:
        return view_bounds(self.variant.center, self.config.bounds_half_size_m)

    def snapshot(self) -> EvaluationSnapshot:
        """Capture status, variant, waypoints and tolerance as one consistent view."""
        return EvaluationSnapshot(
            status=self._status,
            variant_id=self._variant_id,
            waypoints=self.waypoints,
            tolerance_m=self.config.tolerance_m,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Initial load: map view, variant centers, waypoints and status."""
        async with self._lock:
            try:
                map_state = await self.store.fetch_map_state()
                self._select_variant(map_state.get('view_type'))
            except UpstreamFetchError as e:
                logger.warning(f"[MissionMonitor] Map state unavailable, keeping '{self._variant_id}': {e}")

            await self._reload_centers(None)
            await self._reload_waypoints(None)

            try:
                self._status = MissionStatus.from_record(await self.store.fetch_status())
            except UpstreamFetchError as e:
                logger.warning(f"[MissionMonitor] Status unavailable, starting from local state: {e}")

            logger.info(f"[MissionMonitor] Started on '{self._variant_id}' with "
                        f"{len(self._waypoint_map)} waypoint set(s)")

    async def close(self) -> None:
        await self.store.close()
        logging_manager.log_system_summary(logger)

    async def run(self, queue: 'asyncio.Queue[Any]') -> None:
        """Consume raw payloads from queue until a None sentinel arrives."""
        while True:
            payload = await queue.get()
            try:
                if payload is None:
                    break
                await self.handle_raw(payload)
            finally:
                queue.task_done()

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    async def handle_raw(self, payload: Any) -> Optional[TransitionResult]:
        """Parse a feed payload and handle it; malformed payloads are dropped."""
        event = parse_event(payload)
        if event is None:
            self.events_dropped += 1
            return None
        return await self.handle_event(event)

    async def handle_event(self, event: MissionEvent) -> Optional[TransitionResult]:
        """
        Apply one event. Events never overlap: the next one starts only
        after this one, including its store writes, has finished.

        Returns:
            The TransitionResult for position events, otherwise None.
        """
        async with self._lock:
            self.events_handled += 1
            if isinstance(event, PositionUpdate):
                return await self._on_position(event)
            if isinstance(event, HeadingUpdate):
                self.track.update_heading(event.cog)
            elif isinstance(event, VariantSelected):
                self._select_variant(event.variant_id)
            elif isinstance(event, Refresh):
                await self._on_refresh()
            elif isinstance(event, WaypointSetChanged):
                await self._reload_waypoints(event.row_dicts() if event.rows is not None else None)
            elif isinstance(event, VariantCentersChanged):
                await self._reload_centers(event.row_dicts() if event.rows is not None else None)
            elif isinstance(event, PhaseCompletionConfirmed):
                self._status = self._status.with_updates({event.mission_phase: PhaseState.SELESAI})
                logger.info(f"[MissionMonitor] {event.phase} confirmed selesai")
            elif isinstance(event, StatusChanged):
                self._sync_status(MissionStatus.from_record(event.record))
            return None

    async def _on_position(self, event: PositionUpdate) -> TransitionResult:
        position = event.position
        self.track.record(position, event.timestamp)
        result = self.state_machine.evaluate(self.snapshot(), position)
        self._status = result.status
        for write in result.writes:
            await self._write(write.as_fields())
        return result

    async def _on_refresh(self) -> None:
        self._status = self.state_machine.reset()
        self.track.reset()
        await self._write(self._status.to_record())
        logger.info("[MissionMonitor] Mission status reset")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _sync_status(self, incoming: MissionStatus) -> None:
        """
        Fold a stored record into local status.

        An all-belum record is an external reset. Any other record only moves
        phases forward, so stale or reordered echoes cannot undo progress.
        """
        if incoming == MissionStatus.initial():
            if self._status != incoming:
                logger.info("[MissionMonitor] External reset received")
            self._status = incoming
            return
        merged = self._status.merged_forward(incoming)
        if merged != incoming:
            logger.debug("[MissionMonitor] Status record behind local progress, keeping local phases")
        self._status = merged
        logger.debug(f"[MissionMonitor] Status synced: {self._status.to_record()}")

    async def _write(self, fields: Mapping[str, str]) -> None:
        try:
            await self.store.write_status(fields)
        except WriteFailure as e:
            logger.error(f"[MissionMonitor] Status write failed, local state kept: {e}")

    def _select_variant(self, variant_id: Optional[str]) -> None:
        resolved = self.config.resolve_variant_id(variant_id)
        if variant_id is not None and resolved != variant_id:
            logger.warning(f"[MissionMonitor] Unknown variant '{variant_id}', using '{resolved}'")
        if resolved != self._variant_id or self._grid is None:
            self._variant_id = resolved
            self._regenerate_grid()
            logger.info(f"[MissionMonitor] Active variant: {resolved}")

    async def _reload_waypoints(self, rows: Optional[list]) -> None:
        if rows is None:
            try:
                rows = await self.store.fetch_waypoint_rows()
            except UpstreamFetchError as e:
                logger.warning(f"[MissionMonitor] Waypoints unavailable, keeping previous set: {e}")
                return
        self._waypoint_map = build_waypoint_map(rows)
        if self.waypoints is None:
            logger.warning(f"[MissionMonitor] No waypoints for '{self._variant_id}'")

    async def _reload_centers(self, rows: Optional[list]) -> None:
        if rows is None:
            try:
                rows = await self.store.fetch_center_rows()
            except UpstreamFetchError as e:
                logger.warning(f"[MissionMonitor] Variant centers unavailable, keeping configured ones: {e}")
                return
        self.config = self.config.with_centers(rows)
        self._regenerate_grid()

    def _regenerate_grid(self) -> None:
        try:
            self._grid = self.grid_generator.generate(self.variant)
        except ValueError as e:
            logger.error(f"[MissionMonitor] Cannot build grid for '{self._variant_id}': {e}")
            self._grid = None
