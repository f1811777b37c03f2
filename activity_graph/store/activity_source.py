"""Activity sources — where the graph pulls its event snapshot from.

Design notes:
    - The graph depends on the ActivitySource protocol only.  Swap
      implementations to feed it from somewhere else.
    - QueryTracker is the in-memory source.  An asyncio.Lock guards the
      event log so concurrent ingestion handlers never corrupt it, and every
      read returns a copy, so the curve builder always sees a stable snapshot.
    - Events are pruned on every write and read once they are too old to
      reach the last sample of the curve (CurveConfig.visible_age_ms), which
      is somewhat longer than the window because old events are broad.  The
      tracker does not decide what the events mean; it only remembers when
      they happened.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Protocol

from activity_graph.domain.curve import CurveConfig
from activity_graph.foundation.clock import monotonic_ms

logger = logging.getLogger(__name__)


class ActivitySource(Protocol):
    """Protocol for anything that can hand the graph its recent events."""

    async def get_recent_events(self, now: float | None = None) -> list[float]:
        """Return every event timestamp that can still be drawn at *now*."""
        ...


class QueryTracker:
    """Async-safe, in-memory log of query timestamps.

    Args:
        config: Geometry of the curve the events feed.  Events are retained
            for as long as they can still be drawn on it.
    """

    def __init__(self, config: CurveConfig | None = None) -> None:
        self._retention_ms = (config or CurveConfig()).visible_age_ms
        self._lock = asyncio.Lock()
        self._events: deque[float] = deque()
        self._query_count = 0

    # ── Public API ───────────────────────────────────────────────────────

    async def record(self, timestamp_ms: float | None = None) -> int:
        """Record one query at *timestamp_ms* (defaults to now).

        Returns the lifetime query count including this one.
        """
        async with self._lock:
            now = monotonic_ms()
            ts = now if timestamp_ms is None else timestamp_ms
            self._events.append(ts)
            self._query_count += 1
            self._prune(now)
            logger.debug("Recorded query at %.1f (retained=%d)", ts, len(self._events))
            return self._query_count

    async def get_recent_events(self, now: float | None = None) -> list[float]:
        """Snapshot of events still visible on the curve at *now*."""
        async with self._lock:
            now = monotonic_ms() if now is None else now
            self._prune(now)
            return list(self._events)

    async def retained_count(self) -> int:
        async with self._lock:
            self._prune(monotonic_ms())
            return len(self._events)

    @property
    def query_count(self) -> int:
        """Total queries recorded since the tracker was created."""
        return self._query_count

    @property
    def retention_ms(self) -> float:
        return self._retention_ms

    # ── Internals ────────────────────────────────────────────────────────

    def _prune(self, now: float) -> None:
        """Must be called while holding self._lock.

        Events may arrive out of order, so the whole log is filtered rather
        than only its head.
        """
        cutoff = now - self._retention_ms
        if self._events and min(self._events) < cutoff:
            before = len(self._events)
            self._events = deque(t for t in self._events if t >= cutoff)
            logger.debug("Pruned %d expired event(s)", before - len(self._events))
