"""
Server-Sent Events broker.

One bounded ``queue.Queue`` per connected client. Publishing never blocks:
a client whose queue is full is considered stalled and is dropped, so one
slow dashboard cannot hold up the ingest path or the other subscribers.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class SSESubscriber:
    """Queue handle for a single SSE client."""

    def __init__(self, maxsize: int) -> None:
        self.queue: "queue.Queue[tuple[str, Any]]" = queue.Queue(maxsize=maxsize)
        self.dropped = False


class SSEBroker:
    def __init__(self, queue_size: int = 10, keepalive_seconds: float = 15.0) -> None:
        self.queue_size = queue_size
        self.keepalive_seconds = keepalive_seconds
        self._subscribers: list[SSESubscriber] = []
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> SSESubscriber:
        subscriber = SSESubscriber(self.queue_size)
        with self._lock:
            self._subscribers.append(subscriber)
        logger.debug("SSE client subscribed (%d active)", self.subscriber_count)
        return subscriber

    def unsubscribe(self, subscriber: SSESubscriber) -> None:
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

    def publish(self, event: str, data: Any) -> int:
        """Queue *event* for every subscriber. Returns how many received it."""
        with self._lock:
            subscribers = list(self._subscribers)

        delivered = 0
        for subscriber in subscribers:
            try:
                subscriber.queue.put_nowait((event, data))
                delivered += 1
            except queue.Full:
                subscriber.dropped = True
                self.unsubscribe(subscriber)
                logger.warning("Dropping stalled SSE client (queue full on '%s')", event)
        return delivered

    def close(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
            self._subscribers.clear()
        for subscriber in subscribers:
            subscriber.dropped = True

    def stream(self, subscriber: SSESubscriber) -> Iterator[str]:
        """Yield SSE frames for *subscriber* until it is dropped or the client goes away."""
        try:
            yield format_sse("connected", {"type": "connected"})
            while not subscriber.dropped:
                try:
                    event, data = subscriber.queue.get(timeout=self.keepalive_seconds)
                except queue.Empty:
                    yield ": keepalive\n\n"
                    continue
                yield format_sse(event, data)
        finally:
            self.unsubscribe(subscriber)


def format_sse(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data, default=str)}\n\n"
