"""
Outbound notification queue.

Publishing is synchronous and never waits on delivery: messages go onto
an ``asyncio.Queue`` that a background worker drains into the email
transport. Delivery failures are logged and dropped, so the state that
produced a notification is never affected by it.
"""

import asyncio
import logging
from typing import Optional

from src.clients.email_transport import EmailTransport
from src.schemas.notification_schema import EmailMessage

logger = logging.getLogger(__name__)


class NotificationOutbox:
    """Fire-and-forget delivery of EmailMessages."""

    def __init__(self, transport: EmailTransport, max_size: int = 1000) -> None:
        self._transport = transport
        self._queue: asyncio.Queue[EmailMessage] = asyncio.Queue(maxsize=max_size)
        self._worker: Optional[asyncio.Task] = None
        self.delivered = 0
        self.failed = 0
        self.dropped = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def publish(self, message: EmailMessage) -> bool:
        """Queue a message for delivery. Returns False if it was dropped."""
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("Notification outbox full; dropped %r", message.subject)
            return False
        return True

    async def start(self) -> None:
        start = getattr(self._transport, "start", None)
        if start is not None:
            await start()
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="notification-outbox")
            logger.info("Notification outbox started")

    async def drain(self) -> None:
        """Wait until every queued message has been handled."""
        await self._queue.join()

    async def close(self, timeout: float = 5.0) -> None:
        """Flush pending messages (bounded by ``timeout``), then stop the worker."""
        if self._worker is not None:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning("Outbox closed with %d undelivered message(s)", self.pending)
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        close = getattr(self._transport, "close", None)
        if close is not None:
            await close()
        logger.info(
            "Notification outbox closed (delivered=%d failed=%d dropped=%d)",
            self.delivered, self.failed, self.dropped,
        )

    async def _run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self._transport.send(message)
                self.delivered += 1
            except Exception:
                self.failed += 1
                logger.exception("Failed to deliver notification %r", message.subject)
            finally:
                self._queue.task_done()
