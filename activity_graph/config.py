"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "activity-graph"
    debug: bool = False
    log_level: str = "INFO"

    # Curve geometry
    window_ms: int = 60 * 1000
    resolution_ms: int = 100
    smoothing_floor: float = 10.0

    # Frame pacing for pushed viewers
    refresh_interval_ms: int = 100

    model_config = {"env_prefix": "ACTIVITY_GRAPH_"}


settings = Settings()
