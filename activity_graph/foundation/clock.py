"""Monotonic clock utilities.

Event timestamps and refresh times in activity-graph are milliseconds on a
monotonic clock.  This module is the single source of "now" so tests can
monkey-patch it trivially.
"""

from __future__ import annotations

import time


def monotonic_ms() -> float:
    """Return the current monotonic clock reading in milliseconds."""
    return time.monotonic() * 1000.0
