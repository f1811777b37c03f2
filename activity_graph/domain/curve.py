"""Curve value objects — the geometry of the trailing window and one frame.

These are pure data structures.  CurveConfig is fixed when the graph is
built and never mutated afterwards.  CurveFrame is what the rendering side
reads once per refresh: it carries no colours, no coordinates and no
decoration, only the numbers.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field, model_validator

# Beyond 2.7 sigma a Gaussian is below 1/1000 of its peak, which is not
# visible on the graph.
SUPPORT_SIGMAS = 2.7


class CurveConfig(BaseModel):
    """Immutable geometry of the density curve.

    Index ``i`` of a curve built with this config holds the density at age
    ``i * resolution_ms`` before "now".
    """

    window_ms: int = Field(60 * 1000, gt=0, description="Length of the trailing window")
    resolution_ms: int = Field(100, gt=0, description="Age covered by one sample")
    smoothing_floor: float = Field(
        10.0,
        gt=0.0,
        description="Added to the event age before the square root so sigma is never zero",
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def window_must_hold_one_sample(self) -> CurveConfig:
        if self.window_ms < self.resolution_ms:
            raise ValueError(
                f"window_ms ({self.window_ms}) must be at least resolution_ms ({self.resolution_ms})"
            )
        return self

    @property
    def sample_count(self) -> int:
        """Number of samples in the curve (N)."""
        return self.window_ms // self.resolution_ms

    @property
    def visible_age_ms(self) -> float:
        """Oldest age (ms) at which an event still reaches the last sample.

        The curve builder keeps an event while ``ceil(e - k*sigma) <= N - 1``
        with ``sigma = sqrt(e + smoothing_floor)``.  Solving the boundary
        for ``sigma`` gives ``sigma**2 - k*sigma - (smoothing_floor + N - 1) = 0``.
        Older events diffuse entirely past the end of the window.
        """
        k = SUPPORT_SIGMAS
        c = self.smoothing_floor + self.sample_count - 1
        sigma = (k + math.sqrt(k * k + 4.0 * c)) / 2.0
        return (sigma * sigma - self.smoothing_floor) * self.resolution_ms


class CurveFrame(BaseModel):
    """Output of one refresh, handed read-only to the rendering consumer."""

    now: float = Field(..., description="Monotonic clock reading (ms) the frame was built for")
    samples: tuple[float, ...] = Field(..., description="Density per sample, index 0 is the newest")
    empty: bool = Field(..., description="True iff every sample is exactly zero")
    peak: float = Field(..., ge=0.0, description="Display scale for the curve")

    model_config = {"frozen": True}

    def to_dict(self) -> dict:
        data = self.model_dump()
        data["samples"] = list(self.samples)
        return data
