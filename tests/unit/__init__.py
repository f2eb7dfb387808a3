# tests/unit/__init__.py
"""
Unit tests for mission monitor components.

Unit tests validate individual functions and classes in isolation,
with no external dependencies (no network, no real store).
"""
