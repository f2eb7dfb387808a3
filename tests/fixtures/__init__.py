# tests/fixtures/__init__.py
"""
Test fixtures package for mission monitor testing.

Provides waypoint row factories and an aiohttp session stand-in.
"""

from tests.fixtures.mission_rows import WAYPOINT_OFFSETS, make_waypoint_rows, waypoint_position
from tests.fixtures.mock_http import MockResponse, MockSession

__all__ = [
    'WAYPOINT_OFFSETS',
    'make_waypoint_rows',
    'waypoint_position',
    'MockResponse',
    'MockSession',
]
