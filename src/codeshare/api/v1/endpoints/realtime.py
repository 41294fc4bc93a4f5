# src/codeshare/api/v1/endpoints/realtime.py
"""WebSocket channel carrying board events to connected viewers.

Server frames are ``{"event": name, "data": payload}``. Clients send
``joinPost`` / ``leavePost`` frames with a post id to follow the comment
stream of the post they have open; each is acknowledged with
``joinedPost`` / ``leftPost`` so the client knows when the room is live.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from codeshare.api.v1.dependencies import BroadcasterDep
from codeshare.services.broadcaster import Broadcaster, Subscriber

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

JOIN_POST = "joinPost"
LEAVE_POST = "leavePost"
JOINED_POST = "joinedPost"
LEFT_POST = "leftPost"

# Close code for a subscriber dropped because it could not keep up.
_TRY_AGAIN_LATER = 1013


def _parse_signal(raw: str) -> tuple[str, int] | None:
    try:
        message: Any = json.loads(raw)
        event = message["event"]
        post_id = message["data"]
    except (ValueError, TypeError, KeyError):
        return None
    # Post ids are JSON integers; bool is an int subclass and is rejected too.
    if not isinstance(event, str) or not isinstance(post_id, int) or isinstance(post_id, bool):
        return None
    return event, post_id


def _handle_signal(broadcaster: Broadcaster, subscriber: Subscriber, raw: str) -> None:
    signal = _parse_signal(raw)
    if signal is None:
        logger.debug("Ignoring malformed frame from subscriber %s", subscriber.id)
        return
    event, post_id = signal
    if event == JOIN_POST:
        broadcaster.join(subscriber, post_id)
        broadcaster.send(subscriber, JOINED_POST, post_id)
    elif event == LEAVE_POST:
        broadcaster.leave(subscriber, post_id)
        broadcaster.send(subscriber, LEFT_POST, post_id)
    else:
        logger.debug("Ignoring unknown event %r from subscriber %s", event, subscriber.id)


async def _pump(websocket: WebSocket, subscriber: Subscriber) -> None:
    """Forward queued frames to the socket in broadcast order."""
    try:
        while True:
            message = await subscriber.queue.get()
            await websocket.send_json(message)
            if subscriber.dropped and subscriber.queue.empty():
                await websocket.close(code=_TRY_AGAIN_LATER)
                return
    except (WebSocketDisconnect, RuntimeError):
        # The peer went away; the receive loop cleans up the subscription.
        return


@router.websocket("/ws")
async def realtime_channel(websocket: WebSocket, broadcaster: BroadcasterDep) -> None:
    """Subscribe the connection to board events until it disconnects."""
    # Register before accepting so no event published after the handshake is missed.
    subscriber = broadcaster.connect()
    await websocket.accept()
    sender = asyncio.create_task(_pump(websocket, subscriber))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                logger.debug("Ignoring binary frame from subscriber %s", subscriber.id)
                continue
            _handle_signal(broadcaster, subscriber, raw)
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(subscriber)
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender
