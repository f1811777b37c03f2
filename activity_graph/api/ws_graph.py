"""Graph WebSocket — pushes one curve frame per refresh to connected viewers.

Architecture:
    resolver  →  /ws/activity  →  QueryTracker records timestamps
                                        ↓
                                 GraphBroadcaster.tick()
                                   pulls recent events, refreshes graph
                                        ↓
    viewer    ←  /ws/graph     ←  broadcasts frame to every viewer

Viewers own every drawing decision.  They only receive samples, the empty
flag and the peak.
"""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from activity_graph.core.graph import ActivityGraph
from activity_graph.domain.curve import CurveFrame
from activity_graph.foundation.clock import monotonic_ms
from activity_graph.services.connection_manager import ConnectionManager
from activity_graph.store.activity_source import ActivitySource

logger = logging.getLogger(__name__)


class GraphBroadcaster:
    """Paces refreshes of one ActivityGraph and broadcasts the frames."""

    def __init__(
        self,
        graph: ActivityGraph,
        source: ActivitySource,
        viewers: ConnectionManager | None = None,
        interval_ms: int = 100,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        self._graph = graph
        self._source = source
        self._viewers = viewers or ConnectionManager()
        self._interval = interval_ms / 1000.0
        self._lock = asyncio.Lock()
        self._task: asyncio.Task | None = None

    @property
    def viewers(self) -> ConnectionManager:
        return self._viewers

    # ── Refresh ──────────────────────────────────────────────────────

    async def tick(self) -> CurveFrame:
        """Pull a snapshot from the source and refresh the graph once."""
        async with self._lock:
            now = monotonic_ms()
            events = await self._source.get_recent_events(now)
            return self._graph.refresh(now, events)

    async def run(self) -> None:
        """Refresh and broadcast until cancelled.

        Nothing is computed while no viewer is connected.
        """
        logger.info("Graph broadcaster started (interval=%.3fs)", self._interval)
        while True:
            if self._viewers.active_count:
                try:
                    frame = await self.tick()
                    await self._viewers.broadcast_text(json.dumps(frame.to_dict()))
                except Exception as exc:
                    logger.error("Graph refresh/broadcast failed: %s", exc, exc_info=True)
            await asyncio.sleep(self._interval)

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Graph broadcaster stopped")


# ── Endpoints ────────────────────────────────────────────────────────────


def create_graph_router(broadcaster: GraphBroadcaster) -> APIRouter:
    """Factory that creates the graph WebSocket and snapshot endpoints."""

    router = APIRouter()

    @router.get("/graph")
    async def graph_snapshot() -> dict:
        frame = await broadcaster.tick()
        return frame.to_dict()

    @router.websocket("/ws/graph")
    async def graph_ws(websocket: WebSocket) -> None:
        await broadcaster.viewers.connect(websocket)
        logger.info("Viewer connected (%d total)", broadcaster.viewers.active_count)
        try:
            # Frames are pushed server-side; viewers may send heartbeats
            while True:
                data = await websocket.receive_text()
                if data.strip().lower() == "ping":
                    await websocket.send_text("pong")
        except WebSocketDisconnect:
            await broadcaster.viewers.disconnect(websocket)
            logger.info("Viewer disconnected (%d remaining)", broadcaster.viewers.active_count)

    return router
