"""
WebSocket plumbing shared by the live feeds.

Each feed is one SnapshotHub subscription. Every snapshot is rendered to
JSON on the event loop and sent unless it renders the same as the previous
message.
"""
import asyncio
from typing import Any, Callable, List, Optional

from fastapi import WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool

from myroom.core.events import SnapshotHub
from myroom.core.events.snapshot_hub import Where
from myroom.core.exceptions import BaseAppException
from myroom.core.logging import get_logger

logger = get_logger(__name__)

Renderer = Callable[[List[Any]], Any]


def dump_records(records: List[Any]) -> List[dict]:
    return [record.model_dump(mode="json", by_alias=True) for record in records]


async def refuse(websocket: WebSocket, exc: BaseAppException) -> None:
    """Reject the handshake with a policy-violation close frame."""
    logger.warning(
        f"Live feed refused: {exc.error_code.value} - {exc.message}",
        extra={"path": websocket.url.path},
    )
    await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=exc.message)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def stream_snapshots(
    websocket: WebSocket,
    hub: SnapshotHub,
    collection: str,
    where: Where,
    render: Renderer = dump_records,
) -> None:
    """
    Accept the socket and push ``render(snapshot)`` until the client leaves.

    Hub callbacks run on whichever thread committed the write; they are
    handed to the event loop with ``call_soon_threadsafe``.
    """
    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_snapshot(records):
        loop.call_soon_threadsafe(queue.put_nowait, records)

    subscription = await run_in_threadpool(hub.subscribe, collection, on_snapshot, where)
    disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
    last_message: Optional[Any] = None
    try:
        while True:
            next_snapshot = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait(
                {next_snapshot, disconnected}, return_when=asyncio.FIRST_COMPLETED
            )
            if disconnected in done:
                next_snapshot.cancel()
                break

            message = render(next_snapshot.result())
            if message == last_message:
                continue
            last_message = message
            await websocket.send_json(message)
    except WebSocketDisconnect:
        pass
    finally:
        disconnected.cancel()
        subscription.unsubscribe()
        logger.debug(f"Live {collection} subscriber disconnected")


__all__ = ["dump_records", "refuse", "stream_snapshots"]
