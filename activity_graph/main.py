"""activity-graph — rolling query-rate curve service.

This is the application entry point.  It wires the QueryTracker,
ActivityGraph, GraphBroadcaster and WebSocket endpoints together.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from activity_graph.api.ws_activity import create_activity_router
from activity_graph.api.ws_graph import GraphBroadcaster, create_graph_router
from activity_graph.config import settings
from activity_graph.core.graph import ActivityGraph
from activity_graph.domain.curve import CurveConfig
from activity_graph.services.connection_manager import ConnectionManager
from activity_graph.store.activity_source import QueryTracker

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

# ── Curve Engine ─────────────────────────────────────────────────────────────

curve_config = CurveConfig(
    window_ms=settings.window_ms,
    resolution_ms=settings.resolution_ms,
    smoothing_floor=settings.smoothing_floor,
)

graph = ActivityGraph(curve_config)

# ── State ────────────────────────────────────────────────────────────────────

tracker = QueryTracker(curve_config)

broadcaster = GraphBroadcaster(
    graph,
    tracker,
    viewers=ConnectionManager(),
    interval_ms=settings.refresh_interval_ms,
)

# ── App ──────────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(_: FastAPI):
    broadcaster.start()
    yield
    await broadcaster.stop()


app = FastAPI(
    title=settings.app_name,
    description="Rolling query-rate curve with Gaussian diffusion smoothing",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(create_activity_router(tracker))
app.include_router(create_graph_router(broadcaster))


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "total_queries": tracker.query_count,
        "queries_retained": await tracker.retained_count(),
        "viewers": broadcaster.viewers.active_count,
        "peak": graph.peak,
        "window_ms": curve_config.window_ms,
        "resolution_ms": curve_config.resolution_ms,
        "sample_count": curve_config.sample_count,
    }
