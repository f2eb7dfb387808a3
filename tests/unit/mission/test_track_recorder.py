"""
TrackRecorder Unit Tests
"""

from datetime import datetime, timedelta, timezone

import pytest

from mission_monitor.mission_types import GeoCoordinate
from mission_monitor.track_recorder import TrackRecorder


pytestmark = [pytest.mark.unit, pytest.mark.mission]

P1 = GeoCoordinate(-7.9154834, 112.5891244)
P2 = GeoCoordinate(-7.9154900, 112.5891300)
P3 = GeoCoordinate(-7.9155000, 112.5891400)


class TestTrackRecorder:
    """Tests for path recording and reset."""

    def test_empty(self):
        track = TrackRecorder()
        assert len(track) == 0
        assert track.points == []
        assert track.latest_position is None
        assert track.path is None

    def test_path_needs_two_points(self):
        track = TrackRecorder()
        track.record(P1)
        assert track.path is None
        track.record(P2)
        assert track.path == [P1, P2]

    def test_track_scenario(self):
        """Three samples, reset, one sample."""
        track = TrackRecorder()
        for point in (P1, P2, P3):
            track.record(point)
        assert track.path == [P1, P2, P3]

        track.reset()
        assert len(track) == 0

        track.record(P2)
        assert track.points == [P2]
        assert track.path is None

    def test_duplicates_kept(self):
        track = TrackRecorder()
        track.record(P1)
        track.record(P1)
        assert track.points == [P1, P1]

    def test_points_is_a_copy(self):
        track = TrackRecorder()
        track.record(P1)
        track.points.append(P2)
        assert len(track) == 1

    def test_latest_position(self):
        track = TrackRecorder()
        track.record(P1)
        track.record(P3)
        assert track.latest_position == P3


class TestTrackTiming:
    """Tests for heading and update interval."""

    def test_update_interval_ms(self):
        track = TrackRecorder()
        t0 = datetime(2024, 5, 1, 8, 0, 0, tzinfo=timezone.utc)
        track.record(P1, t0)
        assert track.update_interval_ms is None
        track.record(P2, t0 + timedelta(milliseconds=250))
        assert track.update_interval_ms == pytest.approx(250.0)

    def test_untimestamped_sample_keeps_interval(self):
        track = TrackRecorder()
        t0 = datetime(2024, 5, 1, 8, 0, 0)
        track.record(P1, t0)
        track.record(P2, t0 + timedelta(seconds=1))
        track.record(P3)
        assert track.update_interval_ms == pytest.approx(1000.0)

    def test_mixed_naive_and_aware_timestamps(self):
        track = TrackRecorder()
        track.record(P1, datetime(2024, 5, 1, 8, 0, 0))
        track.record(P2, datetime(2024, 5, 1, 8, 0, 1, tzinfo=timezone.utc))
        assert track.update_interval_ms is None
        assert len(track) == 2

    @pytest.mark.parametrize("cog,expected", [(90.0, 90.0), (370.0, 10.0), (-30.0, 330.0)])
    def test_heading_normalized(self, cog, expected):
        track = TrackRecorder()
        track.update_heading(cog)
        assert track.heading_deg == pytest.approx(expected)

    def test_reset_clears_timing_keeps_heading(self):
        track = TrackRecorder()
        t0 = datetime(2024, 5, 1, 8, 0, 0)
        track.update_heading(45.0)
        track.record(P1, t0)
        track.record(P2, t0 + timedelta(seconds=1))
        track.reset()

        assert track.update_interval_ms is None
        assert track.heading_deg == 45.0
        track.record(P3, t0 + timedelta(seconds=5))
        assert track.update_interval_ms is None
