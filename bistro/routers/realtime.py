from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool

from bistro.errors import BistroError
from bistro.realtime.feed import FeedSnapshot, LiveFeed, Predicate
from bistro.realtime.feeds import get_feed, orders_feed
from bistro.routers.orders import parse_status_filter
from bistro.services.orders import order_matches

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

QUEUE_LIMIT = 16


def _offer(queue: asyncio.Queue, message: Optional[dict]) -> None:
    # Drop the oldest snapshot when full
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(message)


async def stream_feed(websocket: WebSocket, feed: LiveFeed, predicate: Optional[Predicate] = None) -> None:
    """Relay a live feed over an accepted socket until the client leaves."""
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[Optional[dict]] = asyncio.Queue(maxsize=QUEUE_LIMIT)

    def on_snapshot(snapshot: FeedSnapshot) -> None:
        loop.call_soon_threadsafe(_offer, queue, snapshot.as_message())

    def on_error(_exc: Exception) -> None:
        loop.call_soon_threadsafe(_offer, queue, {"feed": feed.name, "error": "Feed temporarily unavailable"})

    subscription = await run_in_threadpool(feed.subscribe, on_snapshot, predicate, on_error)

    async def watch_disconnect() -> None:
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            _offer(queue, None)

    watcher = asyncio.create_task(watch_disconnect())
    try:
        while True:
            message = await queue.get()
            if message is None:
                break
            await websocket.send_json(message)
    except WebSocketDisconnect:
        logger.debug("client left %s feed", feed.name)
    finally:
        watcher.cancel()
        subscription.cancel()


@router.websocket("/ws/orders")
async def orders_socket(websocket: WebSocket, status_filter: Optional[List[str]] = Query(None, alias="status")):
    try:
        statuses = parse_status_filter(status_filter)
    except BistroError as exc:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=exc.message)
        return

    await websocket.accept()
    predicate = (lambda order: order_matches(order, statuses)) if statuses else None
    await stream_feed(websocket, orders_feed, predicate)


@router.websocket("/ws/{feed_name}")
async def collection_socket(websocket: WebSocket, feed_name: str):
    try:
        feed = get_feed(feed_name)
    except BistroError as exc:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=exc.message)
        return

    await websocket.accept()
    await stream_feed(websocket, feed)
