"""
Throttled operational logging for the mission monitor.

Store outages are reported when they begin and end, with one reminder per
cooldown while they last. Store requests are tallied and summarised every
summary_interval seconds. Repeated operation messages such as geofence hits
are suppressed within the cooldown.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, replace
from threading import Lock
from typing import Dict, Optional


@dataclass
class ServiceHealth:
    """Reachability of one upstream service; online is None until first report."""
    online: Optional[bool] = None
    changed_at: float = 0.0
    failures_in_row: int = 0
    last_warned_at: float = 0.0


@dataclass
class StoreCounters:
    """Request tally of one store."""
    requests: int = 0
    failures: int = 0
    last_error: Optional[str] = None
    summarised_at: float = 0.0

    @property
    def success_rate(self) -> float:
        return 100.0 * (self.requests - self.failures) / max(self.requests, 1)

    @property
    def state(self) -> str:
        if not self.requests:
            return 'idle'
        return 'degraded' if self.failures * 2 > self.requests else 'healthy'


class LoggingManager:
    """Process-wide log throttle shared by the store adapter, state machine and monitor."""

    def __init__(self, summary_interval: float = 15.0, spam_cooldown: float = 5.0):
        self.summary_interval = summary_interval
        self.spam_cooldown = spam_cooldown
        self._lock = Lock()
        self._services: Dict[str, ServiceHealth] = {}
        self._stores: Dict[str, StoreCounters] = {}
        self._operations: Counter = Counter()
        self._last_emitted: Dict[str, float] = {}

    def log_connection_status(self, logger: logging.Logger, service_name: str,
                              is_connected: bool, details: str = "") -> None:
        """Report a reachability change at once and an ongoing outage once per cooldown."""
        now = time.time()
        with self._lock:
            health = self._services.setdefault(service_name, ServiceHealth())
            changed = health.online is not is_connected
            if changed:
                health.changed_at = now

            if is_connected:
                health.failures_in_row = 0
                if changed:
                    logger.info(f"[{service_name}] Reachable {details}".strip())
            else:
                health.failures_in_row += 1
                if changed:
                    logger.warning(f"[{service_name}] Unreachable {details}".strip())
                    health.last_warned_at = now
                elif now - health.last_warned_at >= self.spam_cooldown:
                    logger.warning(f"[{service_name}] Still unreachable after "
                                   f"{health.failures_in_row} failures {details}".strip())
                    health.last_warned_at = now
            health.online = is_connected

    def log_store_activity(self, logger: logging.Logger, service_name: str,
                           success: bool, details: str = "") -> None:
        """Tally one store request; details is the error text of a failed one."""
        now = time.time()
        with self._lock:
            counters = self._stores.setdefault(service_name, StoreCounters())
            counters.requests += 1
            if not success:
                counters.failures += 1
                counters.last_error = details or None
            if now - counters.summarised_at >= self.summary_interval:
                counters.summarised_at = now
                logger.info(f"[{service_name}] Requests {counters.state}: "
                            f"{counters.success_rate:.1f}% ok of {counters.requests}")

    def log_operation(self, logger: logging.Logger, operation: str,
                      level: str = 'info', details: str = "") -> bool:
        """
        Emit '[operation] details' at the given level.

        Returns:
            False if the same operation was emitted within the cooldown.
        """
        now = time.time()
        with self._lock:
            last = self._last_emitted.get(operation)
            if last is not None and now - last < self.spam_cooldown:
                return False
            self._last_emitted[operation] = now
            self._operations[operation] += 1
        message = f"[{operation}] {details}" if details else f"[{operation}]"
        getattr(logger, level, logger.info)(message)
        return True

    def store_stats(self, service_name: str) -> StoreCounters:
        """Copy of the tally for service_name."""
        with self._lock:
            return replace(self._stores.get(service_name, StoreCounters()))

    def log_system_summary(self, logger: logging.Logger) -> None:
        now = time.time()
        with self._lock:
            logger.info("Mission monitor summary:")
            for name, health in self._services.items():
                state = "reachable" if health.online else f"unreachable ({health.failures_in_row} failures)"
                logger.info(f"  {name} {state} for {int(now - health.changed_at)}s")
            for name, counters in self._stores.items():
                logger.info(f"  {name} requests {counters.state}: "
                            f"{counters.success_rate:.1f}% ok of {counters.requests}")
            for operation, count in self._operations.most_common(5):
                logger.info(f"  {operation} x{count}")

    def reset(self) -> None:
        with self._lock:
            self._services.clear()
            self._stores.clear()
            self._operations.clear()
            self._last_emitted.clear()


logging_manager = LoggingManager()
