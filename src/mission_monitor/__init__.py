"""ASV mission monitor: course grid, geofences and mission-phase tracking."""

__version__ = "1.0.0"
