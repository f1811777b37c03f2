"""Live check: connect to /ws/graph, send a burst of queries, watch the curve."""

import asyncio
import json

import websockets


HOST = "127.0.0.1"
ACTIVITY_URI = f"ws://{HOST}:8000/ws/activity"
GRAPH_URI = f"ws://{HOST}:8000/ws/graph"

BAR_WIDTH = 60


async def graph_listener(ready_event: asyncio.Event):
    """Connect to /ws/graph and print a one-line summary per frame."""
    async with websockets.connect(GRAPH_URI) as ws:
        print("[GRAPH] Connected — waiting for frames...\n")
        ready_event.set()

        while True:
            frame = json.loads(await ws.recv())
            samples = frame["samples"]
            peak = frame["peak"]

            if frame["empty"]:
                print("[GRAPH] (empty)")
                continue

            # Newest sample relative to the display scale
            newest = samples[0] / peak if peak else 0.0
            bar = "#" * int(newest * BAR_WIDTH)
            print(f"[GRAPH] peak={peak:8.4f} newest={samples[0]:8.4f} |{bar:<{BAR_WIDTH}}|")


async def send_queries(count: int = 30, delay: float = 0.05):
    """Send *count* queries to /ws/activity, stamped by the server clock."""
    async with websockets.connect(ACTIVITY_URI) as ws:
        for _ in range(count):
            await ws.send(json.dumps({}))
            resp = json.loads(await ws.recv())
            print(f"[ACTIVITY] {resp['status']} -> total={resp.get('query_count')}")
            await asyncio.sleep(delay)


async def main():
    print("Connecting to graph WebSocket...")
    ready = asyncio.Event()

    listener_task = asyncio.create_task(graph_listener(ready))
    await ready.wait()

    print("\nSending a burst of queries...\n")
    await send_queries()

    # Watch the burst diffuse and, eventually, the peak reset
    print("\nWatching the curve decay...\n")
    await asyncio.sleep(70)

    listener_task.cancel()
    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
