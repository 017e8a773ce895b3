"""Single-consumer dispatch queue between the ingest path and the broadcast channel.

Messages are broadcast one at a time in the order they were submitted, which is the
order they were persisted. Submitting never waits for delivery.
"""

import asyncio
import logging
from typing import Optional

from the_hub.hub_models import Message
from .broadcast_channel import BroadcastChannel

logger = logging.getLogger(__name__)


class BroadcastDispatcher:
    """Runs broadcasts sequentially on a background task."""

    def __init__(self, channel: BroadcastChannel):
        self.channel = channel
        self._queue: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the consumer task on the running event loop."""
        if self.running:
            return
        if self._queue is None:
            self._queue = asyncio.Queue()
        self._task = asyncio.create_task(self._run(), name="the-hub-broadcast")
        logger.info("[DISPATCH] Broadcast dispatcher started")

    async def stop(self) -> None:
        """Stop the consumer and discard messages still queued."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        dropped = self._discard_pending()
        if dropped:
            logger.warning(f"[DISPATCH] Dropped {dropped} queued broadcasts on stop")
        logger.info("[DISPATCH] Broadcast dispatcher stopped")

    def _discard_pending(self) -> int:
        dropped = 0
        while self._queue is not None and not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
            dropped += 1
        return dropped

    def submit(self, message: Message) -> None:
        """Queue a persisted message for broadcast."""
        if self._queue is None:
            self._queue = asyncio.Queue()
        if not self.running:
            logger.warning(f"[DISPATCH] Message {message.id} queued while the dispatcher is stopped")
        self._queue.put_nowait(message)

    async def join(self) -> None:
        """Wait until every submitted message has been broadcast. Returns at once when stopped."""
        if self._queue is not None and self.running:
            await self._queue.join()

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    async def _run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self.channel.broadcast(message)
            except Exception as e:
                logger.error(f"[DISPATCH] Broadcast of message {message.id} failed: {type(e).__name__}: {e}")
            finally:
                self._queue.task_done()
