"""Kernel density curve builder.

Turns a snapshot of event timestamps into a sampled rate curve over the
trailing window.  Each event is spread with a Gaussian whose width grows as
the square root of its age (a diffusion model): a brand-new event is a sharp
spike, an old one is a broad low hump.  The more recent an event is, the more
its fine timing detail matters.

Design principles:
    1. Pure function: (now, activity, config) -> (samples, empty).
    2. No exceptions.  Future-dated events (clock skew), events older than
       the window and malformed timestamps are skipped silently.
    3. Cost is O(events x truncated support width), never O(events x N).
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from activity_graph.domain.curve import SUPPORT_SIGMAS, CurveConfig


def gaussian(mu: float, inverse_sigma: float, x: int) -> float:
    """Unnormalised Gaussian scaled by 1/sigma."""
    z = (x - mu) * inverse_sigma
    return math.exp(-z * z) * inverse_sigma


def event_age(now: float, timestamp: object) -> float | None:
    """Age of *timestamp* at *now*, or None if it cannot be placed on the curve."""
    try:
        age = float(now - timestamp)  # type: ignore[operator]
    except (TypeError, ValueError, ArithmeticError):
        return None
    if not math.isfinite(age) or age < 0:
        return None
    return age


def support_bounds(e: float, sigma: float, sample_count: int) -> tuple[int, int] | None:
    """Inclusive index range an event at position *e* contributes to.

    The range is every integer within ``SUPPORT_SIGMAS * sigma`` of *e*,
    clipped to the buffer.  Returns None when the event is offscreen.
    """
    support = SUPPORT_SIGMAS * sigma
    left = max(0, math.ceil(e - support))
    if left >= sample_count:
        return None
    right = min(sample_count - 1, math.floor(e + support))
    return left, right


def build_curve(
    now: float,
    activity: Iterable[object] | None,
    config: CurveConfig,
) -> tuple[list[float], bool]:
    """Build the density curve for *activity* as seen at *now*.

    Args:
        now: Monotonic clock reading in milliseconds.
        activity: Event timestamps (ms, same clock as *now*) in any order.
        config: Window geometry and smoothing floor.

    Returns:
        ``(samples, empty)`` where ``samples`` has ``config.sample_count``
        entries and ``empty`` is True iff every sample is exactly zero.
    """
    sample_count = config.sample_count
    scale = 1.0 / config.resolution_ms
    curve: list[float] | None = None

    for timestamp in activity or ():
        age = event_age(now, timestamp)
        if age is None:
            continue
        e = age * scale

        # Diffusion: sigma grows as sqrt(age).  The floor keeps it above zero.
        sigma = math.sqrt(e + config.smoothing_floor)
        bounds = support_bounds(e, sigma, sample_count)
        if bounds is None:
            continue

        # Only allocate once something is actually on screen.
        if curve is None:
            curve = [0.0] * sample_count

        left, right = bounds
        inverse_sigma = 1.0 / sigma
        for i in range(left, right + 1):
            curve[i] += gaussian(e, inverse_sigma, i)

    if curve is None:
        return [0.0] * sample_count, True
    # An on-screen event can still land on no sample, so emptiness is read
    # from the samples rather than from whether anything was accumulated.
    return curve, not any(curve)
