"""
In-process event hub for notification updates.

Replaces interval polling of the unread counter: the WebSocket endpoint
subscribes a queue per connection, and the routers publish events whenever
something changes the count (mark-read, mark-all-read, a new send).

Event shape: ``{"event": <name>, "data": {...}}``. ``None`` on a queue means
the session ended and the consumer should close.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)

UNREAD_COUNT = "unread_count"
NOTIFICATION_SENT = "notification_sent"
SESSION_CLOSED = "session_closed"


class NotificationHub:
    """Fan-out of notification events to per-session subscriber queues."""

    def __init__(self, max_queue: int = 100):
        self._max_queue = max_queue
        self._subscribers: dict[str, set[asyncio.Queue]] = {}
        self._unread: dict[str, int] = {}

    # --- Subscriptions ---

    def subscribe(self, session_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue)
        self._subscribers.setdefault(session_id, set()).add(queue)
        return queue

    def unsubscribe(self, session_id: str, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(session_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            del self._subscribers[session_id]

    def subscriber_count(self, session_id: str) -> int:
        return len(self._subscribers.get(session_id, ()))

    # --- Publishing ---

    def _offer(self, queue: asyncio.Queue, message: dict | None) -> None:
        if queue.full():
            # Slow consumer: keep the newest state, drop the oldest event.
            queue.get_nowait()
        queue.put_nowait(message)

    def publish(self, session_id: str, event: str, data: dict) -> int:
        """Deliver an event to every subscriber of one session."""
        queues = self._subscribers.get(session_id, set())
        message = {"event": event, "data": data}
        for queue in queues:
            self._offer(queue, message)
        return len(queues)

    def broadcast(self, event: str, data: dict) -> int:
        delivered = 0
        for session_id in list(self._subscribers):
            delivered += self.publish(session_id, event, data)
        return delivered

    # --- Unread counter ---

    def unread(self, session_id: str) -> int:
        return self._unread.get(session_id, 0)

    def set_unread(self, session_id: str, count: int) -> int:
        count = max(0, count)
        self._unread[session_id] = count
        self.publish(session_id, UNREAD_COUNT, {"unread_count": count})
        return count

    def decrement_unread(self, session_id: str) -> int:
        return self.set_unread(session_id, self.unread(session_id) - 1)

    # --- Teardown ---

    def close_session(self, session_id: str) -> None:
        """Signal end-of-stream to every subscriber and forget the session."""
        for queue in self._subscribers.pop(session_id, set()):
            self._offer(queue, None)
        self._unread.pop(session_id, None)
        logger.debug("Closed notification stream for session %s", session_id[:8])


notification_hub = NotificationHub()
