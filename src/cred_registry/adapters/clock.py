"""
Clock adapter — wall-clock UTC time that never runs backwards.

Implements the Clock port. If the system clock steps back (NTP
correction, VM migration), the last timestamp handed out is repeated
until wall time catches up.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime


class MonotonicUtcClock:
    def __init__(self) -> None:
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        current = datetime.now(UTC)
        with self._lock:
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
            return current
