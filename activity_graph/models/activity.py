"""Pydantic models for messages exchanged over the activity WebSockets."""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class QueryEvent(BaseModel):
    """One query reported by an upstream resolver."""

    timestamp_ms: Optional[float] = Field(
        default=None,
        description="Monotonic clock reading of the query in ms (None = now)",
    )

    model_config = {"frozen": True}

    @field_validator("timestamp_ms")
    @classmethod
    def timestamp_must_be_finite(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not math.isfinite(v):
            raise ValueError("timestamp_ms must be a finite number")
        return v


class QueryAck(BaseModel):
    """Acknowledgement sent back for every ingested event."""

    status: str = Field(..., description="'accepted' or 'error'")
    query_count: Optional[int] = Field(default=None, description="Lifetime queries recorded")
    detail: Optional[str] = Field(default=None, description="Why the event was rejected")
