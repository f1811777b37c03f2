"""Peak tracker — the display scale of the curve.

The peak rises as needed to fit the curve and never falls while there is
anything to show, so the graph does not visibly shrink just because recent
activity eased off.  The moment the curve is entirely zero the peak snaps
back to exactly 0.
"""

from __future__ import annotations

from collections.abc import Iterable


def update_peak(samples: Iterable[float], prior_peak: float) -> float:
    """Return the new peak for *samples* given the previous frame's peak."""
    total = 0.0
    peak = prior_peak
    for value in samples:
        total += value
        if value > peak:
            peak = value

    if total == 0:
        return 0.0
    return peak
