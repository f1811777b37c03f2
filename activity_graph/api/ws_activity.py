"""WebSocket endpoint for query ingestion.

Path: /ws/activity

Accepts JSON matching the QueryEvent schema, validates it at the boundary,
records it in the activity source and returns a minimal acknowledgement.
No curve computation happens on this path.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from activity_graph.models.activity import QueryAck, QueryEvent
from activity_graph.store.activity_source import QueryTracker

logger = logging.getLogger(__name__)


def create_activity_router(tracker: QueryTracker) -> APIRouter:
    """Factory that wires the ingestion endpoint to a concrete QueryTracker."""

    router = APIRouter()

    @router.websocket("/ws/activity")
    async def ingest_activity(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Activity source connected")

        try:
            while True:
                raw = await websocket.receive_text()

                # ── Validate at the boundary ─────────────────────────────
                try:
                    event = QueryEvent.model_validate_json(raw)
                except ValidationError as exc:
                    logger.debug("Rejected query event: %s", exc)
                    ack = QueryAck(status="error", detail="Query event validation failed")
                    await websocket.send_json(ack.model_dump(exclude_none=True))
                    continue

                # ── Record ───────────────────────────────────────────────
                count = await tracker.record(event.timestamp_ms)

                ack = QueryAck(status="accepted", query_count=count)
                await websocket.send_json(ack.model_dump(exclude_none=True))

        except WebSocketDisconnect:
            logger.info("Activity source disconnected")

    return router
