# tests/conftest.py
"""
Root pytest configuration and fixtures for mission monitor testing.

Provides the shared mission configuration, waypoint rows laid out around the
course center, and in-memory stores. All fixtures here are available to all
test modules.
"""

import pytest
import sys
import os
from typing import Dict, Any, List

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mission_monitor.logging_manager import logging_manager
from mission_monitor.mission_config import MissionConfig
from mission_monitor.mission_store import InMemoryMissionStore
from tests.fixtures.mission_rows import make_waypoint_rows


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def mission_config() -> MissionConfig:
    """Built-in two-course configuration (lintasan1 default, 1.5 m tolerance)."""
    return MissionConfig()


@pytest.fixture
def raw_config() -> Dict[str, Any]:
    """Parsed-YAML style config dictionary with a complete Mission section."""
    return {
        'Mission': {
            'DEFAULT_VARIANT': 'lintasan1',
            'TOLERANCE_M': 1.5,
            'CELL_SIZE_M': 5.0,
            'DIVISIONS': 5,
            'GRID_BEARING_DEG': 150.0,
            'VIEW_HALF_SIZE_M': 12.5,
            'BOUNDS_HALF_SIZE_M': 15.0,
            'Variants': {
                'lintasan1': {
                    'CENTER': [-7.9154834, 112.5891244],
                    'ROW_LABELS': ['5', '4', '3', '2', '1'],
                    'COLUMN_LABELS': ['A', 'B', 'C', 'D', 'E'],
                },
                'lintasan2': {
                    'CENTER': [-7.9150524, 112.5888965],
                    'ROW_LABELS': ['5', '4', '3', '2', '1'],
                    'COLUMN_LABELS': ['E', 'D', 'C', 'B', 'A'],
                },
            },
        },
        'Store': {
            'BASE_URL': 'https://example.test',
            'API_KEY': 'anon-key',
            'STATUS_ROW_ID': 1,
            'TIMEOUT_S': 5.0,
        },
    }


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def waypoint_rows(mission_config) -> List[Dict[str, Any]]:
    return make_waypoint_rows(mission_config)


@pytest.fixture
def memory_store(waypoint_rows) -> InMemoryMissionStore:
    """In-memory store with lintasan1 waypoints and an all-belum status."""
    return InMemoryMissionStore(waypoint_rows=waypoint_rows,
                                map_state={'view_type': 'lintasan1', 'is_refreshed': False})


# =============================================================================
# Isolation
# =============================================================================

@pytest.fixture(autouse=True)
def reset_logging_manager():
    """Clear the global spam filter so log assertions are independent."""
    logging_manager.reset()
    yield
    logging_manager.reset()
