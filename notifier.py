# ─────────────────────────────────────────────────────────────────
# notifier.py — Logging Setup & Real-Time Notifications
#
# All "tell the viewers" logic lives here. The upload route calls
# hub.broadcast(event); it does not know how many viewers there are
# or how events reach them.
#
# HOW DELIVERY WORKS:
# Each connected viewer is a Subscriber with its own small queue.
# broadcast() drops the event into every queue and returns at once.
# The WebSocket route runs one pump per viewer that drains its
# queue onto the socket, so a slow or dead viewer only ever delays
# itself, and each viewer sees events in the order they were sent.
# ─────────────────────────────────────────────────────────────────

import asyncio
import logging

from models import NotificationEvent

# ── LOGGING CONFIGURATION ─────────────────────────────────────────
# One format for every logger in the service:
# "2026-03-01 10:34:22,123 — INFO — [assets] — 📸 Image stored: ..."
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s — %(levelname)s — [%(name)s] — %(message)s"
)

logger = logging.getLogger("notifier")

# Event name viewers listen for
NEW_IMAGE = "new_image"

# Events waiting for one viewer before new ones are dropped for it
QUEUE_SIZE = 100


class Subscriber:
    """One connected viewer: its socket, and the events not yet sent to it."""

    def __init__(self, websocket, queue_size: int = QUEUE_SIZE):
        self.websocket = websocket
        self.queue = asyncio.Queue(maxsize=queue_size)

    async def pump(self) -> None:
        """
        Sends queued events to the socket until cancelled.

        A send failure ends the pump; the route notices the
        disconnect and unsubscribes.
        """

        while True:
            event = await self.queue.get()
            await self.websocket.send_json({"event": NEW_IMAGE, "data": event.model_dump()})


class NotificationHub:
    """The set of connected viewers."""

    def __init__(self):
        self._subscribers = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, websocket) -> Subscriber:
        subscriber = Subscriber(websocket)
        self._subscribers.add(subscriber)
        logger.info(f"📱 Viewer connected ({self.subscriber_count} online)")
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Removes a viewer. Calling it for one already gone is a no-op."""
        if subscriber in self._subscribers:
            self._subscribers.discard(subscriber)
            logger.info(f"❌ Viewer disconnected ({self.subscriber_count} online)")

    def broadcast(self, event: NotificationEvent) -> int:
        """
        Queues the event for every viewer connected right now.

        Never blocks and never raises. Returns how many viewers the
        event was queued for.
        """

        delivered = 0
        # Iterate a snapshot: viewers may connect or leave meanwhile
        for subscriber in list(self._subscribers):
            try:
                subscriber.queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(f"⚠️  Viewer queue full — dropped event for {event.url}")

        logger.info(f"📣 {NEW_IMAGE} sent to {delivered} viewer(s): {event.url}")
        return delivered
