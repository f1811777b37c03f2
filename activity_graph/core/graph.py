"""ActivityGraph — one refresh of the curve engine.

A refresh builds the curve from the current activity snapshot and then
updates the peak from it.  The only state carried between refreshes is the
previous peak, and it is threaded explicitly through ``refresh()``.
ActivityGraph is a convenience holder for callers that drive one
visualisation: it remembers the config and the last frame, nothing else.
"""

from __future__ import annotations

from collections.abc import Iterable

from activity_graph.core.kernel import build_curve
from activity_graph.core.peak import update_peak
from activity_graph.domain.curve import CurveConfig, CurveFrame


def refresh(
    now: float,
    activity: Iterable[object] | None,
    config: CurveConfig,
    prior_peak: float = 0.0,
) -> CurveFrame:
    """Compute the frame for *activity* at *now*, continuing from *prior_peak*."""
    samples, empty = build_curve(now, activity, config)
    peak = update_peak(samples, prior_peak)
    return CurveFrame(now=now, samples=tuple(samples), empty=empty, peak=peak)


class ActivityGraph:
    """Drives refreshes for a single visualisation.

    Not thread-safe: a graph belongs to the one caller that paces its
    frames.
    """

    __slots__ = ("_config", "_last_frame")

    def __init__(self, config: CurveConfig | None = None) -> None:
        self._config = config or CurveConfig()
        self._last_frame: CurveFrame | None = None

    @property
    def config(self) -> CurveConfig:
        return self._config

    @property
    def peak(self) -> float:
        """Peak of the most recent frame (0.0 before the first refresh)."""
        return self._last_frame.peak if self._last_frame else 0.0

    @property
    def last_frame(self) -> CurveFrame | None:
        return self._last_frame

    def refresh(self, now: float, activity: Iterable[object] | None) -> CurveFrame:
        frame = refresh(now, activity, self._config, self.peak)
        self._last_frame = frame
        return frame

    def __repr__(self) -> str:
        return (
            f"ActivityGraph(window_ms={self._config.window_ms}, "
            f"resolution_ms={self._config.resolution_ms}, "
            f"peak={self.peak:.4f})"
        )
