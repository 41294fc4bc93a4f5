"""Realtime fan-out of board events to connected subscribers.

Every subscriber owns a bounded outbound queue drained by its connection.
Broadcasting only enqueues, so a slow or dead connection never blocks the
request that triggered the event; a subscriber whose queue is full is dropped
and has to reconnect and re-fetch. There is no event log or replay.

The engine runs in worker threads, so :meth:`Broadcaster.publish` hands events
to the event loop that owns the subscriber queues instead of touching them
directly.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Iterable
from typing import Any

from codeshare.core.settings import settings
from codeshare.services.events import BoardEvent

logger = logging.getLogger(__name__)

_SUBSCRIBER_IDS = itertools.count(1)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Subscriber:
    """A connected client and the post rooms it has joined."""

    def __init__(self, queue_size: int) -> None:
        self.id = next(_SUBSCRIBER_IDS)
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)
        self.rooms: set[int] = set()
        self.dropped = False

    def __repr__(self) -> str:
        return f"Subscriber(id={self.id}, rooms={sorted(self.rooms)})"


def frame(event: str, payload: Any = None) -> dict[str, Any]:
    """Return the wire frame for an event."""
    return {"event": event, "data": payload}


class Broadcaster:
    """Registry of subscribers with global and per-post delivery."""

    def __init__(self, queue_size: int | None = None) -> None:
        self.queue_size = queue_size or settings.realtime_queue_size
        self._subscribers: dict[int, Subscriber] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def subscribers(self) -> list[Subscriber]:
        return list(self._subscribers.values())

    def connect(self) -> Subscriber:
        loop = _running_loop()
        if loop is not None:
            self._loop = loop
        subscriber = Subscriber(self.queue_size)
        self._subscribers[subscriber.id] = subscriber
        logger.info("Subscriber %s connected", subscriber.id)
        return subscriber

    def disconnect(self, subscriber: Subscriber) -> None:
        """Forget a subscriber and all of its room memberships."""
        if self._subscribers.pop(subscriber.id, None) is not None:
            logger.info("Subscriber %s disconnected", subscriber.id)
        subscriber.rooms.clear()

    def join(self, subscriber: Subscriber, post_id: int) -> None:
        subscriber.rooms.add(post_id)

    def leave(self, subscriber: Subscriber, post_id: int) -> None:
        subscriber.rooms.discard(post_id)

    def room_members(self, post_id: int) -> list[Subscriber]:
        return [sub for sub in self._subscribers.values() if post_id in sub.rooms]

    def send(self, subscriber: Subscriber, event: str, payload: Any = None) -> bool:
        """Queue a frame for one subscriber."""
        return self._deliver([subscriber], frame(event, payload)) == 1

    def broadcast_global(self, event: str, payload: Any = None) -> int:
        """Queue an event for every subscriber; return how many accepted it."""
        return self._deliver(self.subscribers, frame(event, payload))

    def broadcast_to_room(self, post_id: int, event: str, payload: Any = None) -> int:
        """Queue an event for subscribers that joined the room of ``post_id``."""
        return self._deliver(self.room_members(post_id), frame(event, payload))

    def publish(self, event: BoardEvent) -> None:
        """Deliver ``event``; safe to call from any thread."""
        loop = self._loop
        if loop is None or loop.is_closed() or _running_loop() is loop:
            self._dispatch(event)
        else:
            loop.call_soon_threadsafe(self._dispatch, event)

    def _dispatch(self, event: BoardEvent) -> None:
        if event.room is None:
            delivered = self.broadcast_global(event.name, event.payload)
        else:
            delivered = self.broadcast_to_room(event.room, event.name, event.payload)
        logger.debug("Published %s to %d subscriber(s)", event.name, delivered)

    def _deliver(self, targets: Iterable[Subscriber], message: dict[str, Any]) -> int:
        delivered = 0
        for subscriber in targets:
            if subscriber.dropped:
                continue
            try:
                subscriber.queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.warning("Dropping subscriber %s: outbound queue full", subscriber.id)
                subscriber.dropped = True
                self.disconnect(subscriber)
                continue
            delivered += 1
        return delivered


class _BroadcasterSingleton:
    """Singleton wrapper for Broadcaster."""

    _instance: Broadcaster | None = None

    @classmethod
    def get_instance(cls) -> Broadcaster:
        """Get or create the singleton Broadcaster instance."""
        if cls._instance is None:
            cls._instance = Broadcaster()
        return cls._instance


def get_broadcaster() -> Broadcaster:
    """Return the process-wide broadcaster."""
    return _BroadcasterSingleton.get_instance()
