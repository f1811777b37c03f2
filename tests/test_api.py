"""Tests for the ingestion and graph endpoints and the frame broadcaster."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from activity_graph.api.ws_activity import create_activity_router
from activity_graph.api.ws_graph import GraphBroadcaster, create_graph_router
from activity_graph.core.graph import ActivityGraph
from activity_graph.domain.curve import CurveConfig
from activity_graph.services.connection_manager import ConnectionManager
from activity_graph.store.activity_source import QueryTracker


# ── Helpers ──────────────────────────────────────────────────────────────────


class _FixedSource:
    """ActivitySource returning the same snapshot every time."""

    def __init__(self, events: list[float]) -> None:
        self.events = events
        self.calls = 0

    async def get_recent_events(self, now: float | None = None) -> list[float]:
        self.calls += 1
        return list(self.events)


def _fake_socket(fail: bool = False) -> MagicMock:
    ws = MagicMock()
    ws.accept = AsyncMock()
    ws.send_text = AsyncMock(side_effect=RuntimeError("gone") if fail else None)
    return ws


@pytest.fixture
def tracker() -> QueryTracker:
    return QueryTracker(CurveConfig())


@pytest.fixture
def broadcaster(tracker: QueryTracker) -> GraphBroadcaster:
    return GraphBroadcaster(ActivityGraph(CurveConfig()), tracker, interval_ms=10)


@pytest.fixture
def client(tracker: QueryTracker, broadcaster: GraphBroadcaster) -> TestClient:
    app = FastAPI()
    app.include_router(create_activity_router(tracker))
    app.include_router(create_graph_router(broadcaster))
    return TestClient(app)


# ── Ingestion ────────────────────────────────────────────────────────────────


class TestActivityEndpoint:
    def test_valid_event_is_accepted(self, client: TestClient, tracker: QueryTracker) -> None:
        with client.websocket_connect("/ws/activity") as ws:
            ws.send_text(json.dumps({"timestamp_ms": 1234.5}))
            assert ws.receive_json() == {"status": "accepted", "query_count": 1}
            ws.send_text(json.dumps({}))
            assert ws.receive_json() == {"status": "accepted", "query_count": 2}
        assert tracker.query_count == 2

    def test_invalid_event_is_rejected(self, client: TestClient, tracker: QueryTracker) -> None:
        with client.websocket_connect("/ws/activity") as ws:
            ws.send_text(json.dumps({"timestamp_ms": "later"}))
            reply = ws.receive_json()
            assert reply["status"] == "error"
            assert "detail" in reply
        assert tracker.query_count == 0

    def test_malformed_json_is_rejected_without_disconnect(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/activity") as ws:
            ws.send_text("{not json")
            assert ws.receive_json()["status"] == "error"
            ws.send_text("{}")
            assert ws.receive_json()["status"] == "accepted"


# ── Graph ────────────────────────────────────────────────────────────────────


class TestGraphEndpoints:
    def test_snapshot_of_empty_graph(self, client: TestClient) -> None:
        resp = client.get("/graph")
        assert resp.status_code == 200
        body = resp.json()
        assert body["empty"] is True
        assert body["peak"] == 0.0
        assert len(body["samples"]) == 600

    def test_snapshot_reflects_ingested_queries(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/activity") as ws:
            for _ in range(3):
                ws.send_text("{}")
                ws.receive_json()
        body = client.get("/graph").json()
        assert body["empty"] is False
        assert body["peak"] > 0.0
        assert body["peak"] == pytest.approx(max(body["samples"]))

    def test_viewer_ping_pong(self, client: TestClient, broadcaster: GraphBroadcaster) -> None:
        with client.websocket_connect("/ws/graph") as ws:
            ws.send_text("ping")
            assert ws.receive_text() == "pong"
            assert broadcaster.viewers.active_count == 1


# ── Broadcaster ──────────────────────────────────────────────────────────────


class TestGraphBroadcaster:
    def test_interval_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            GraphBroadcaster(ActivityGraph(), _FixedSource([]), interval_ms=0)

    @pytest.mark.asyncio
    async def test_tick_pulls_once_per_refresh(self) -> None:
        source = _FixedSource([1_000.0])
        b = GraphBroadcaster(ActivityGraph(), source)
        with patch("activity_graph.api.ws_graph.monotonic_ms", return_value=1_050.0):
            frame = await b.tick()
        assert source.calls == 1
        assert frame.now == 1_050.0
        assert not frame.empty

    @pytest.mark.asyncio
    async def test_run_pushes_frames_to_viewers(self) -> None:
        viewers = ConnectionManager()
        ws = _fake_socket()
        await viewers.connect(ws)

        b = GraphBroadcaster(ActivityGraph(), _FixedSource([]), viewers=viewers, interval_ms=5)
        b.start()
        await asyncio.sleep(0.05)
        await b.stop()

        assert ws.send_text.await_count >= 1
        frame = json.loads(ws.send_text.await_args.args[0])
        assert frame["empty"] is True
        assert frame["peak"] == 0.0

    @pytest.mark.asyncio
    async def test_run_idles_without_viewers(self) -> None:
        source = _FixedSource([])
        b = GraphBroadcaster(ActivityGraph(), source, interval_ms=5)
        b.start()
        await asyncio.sleep(0.03)
        await b.stop()
        assert source.calls == 0

    @pytest.mark.asyncio
    async def test_dead_viewers_are_dropped(self) -> None:
        viewers = ConnectionManager()
        alive, dead = _fake_socket(), _fake_socket(fail=True)
        await viewers.connect(alive)
        await viewers.connect(dead)

        reached = await viewers.broadcast_text("frame")
        assert reached == 1
        assert viewers.active_count == 1
        alive.send_text.assert_awaited_once_with("frame")


# ── App ──────────────────────────────────────────────────────────────────────


class TestHealth:
    def test_health_reports_engine_state(self) -> None:
        from activity_graph.main import app

        body = TestClient(app).get("/health").json()
        assert body["status"] == "ok"
        assert body["sample_count"] == body["window_ms"] // body["resolution_ms"]
        assert body["viewers"] == 0
        assert body["peak"] >= 0.0
