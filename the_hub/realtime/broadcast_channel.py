"""Live fan-out of persisted messages to the connections joined to their circle.

Delivery is best effort: every push is an independent attempt, a failing or slow
connection never aborts delivery to the others, and nothing is retried. Clients that
miss a push recover it from the message history.
"""

import asyncio
import logging
from typing import Optional

from the_hub.hub_models import DeliveryReport, Message, PushFrame
from .connection_registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)


class BroadcastChannel:
    """Pushes one message to every open connection interested in its circle."""

    def __init__(self, registry: ConnectionRegistry, *, push_timeout: Optional[float] = 5.0):
        self.registry = registry
        self.push_timeout = push_timeout

    async def _send_if_open(self, connection: Connection, payload: str) -> bool:
        # Check and send share one task with no await in between.
        if not self.registry.is_open(connection):
            logger.debug(f"[BROADCAST] Skipping connection {connection.id}, closed since snapshot")
            return False
        await connection.push(payload)
        return True

    async def _push(self, connection: Connection, payload: str) -> bool:
        try:
            if self.push_timeout is None:
                return await self._send_if_open(connection, payload)
            return await asyncio.wait_for(self._send_if_open(connection, payload), timeout=self.push_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[BROADCAST] Push to connection {connection.id} timed out after {self.push_timeout}s")
        except Exception as e:
            logger.warning(f"[BROADCAST] Push to connection {connection.id} failed: {type(e).__name__}: {e}")
        return False

    async def broadcast(self, message: Message) -> DeliveryReport:
        """Deliver ``message`` to its circle's current interest set."""
        snapshot = sorted(self.registry.interested_in(message.circle_id), key=lambda c: c.opened_at)
        report = DeliveryReport(message_id=message.id, circle_id=message.circle_id, attempted=len(snapshot))
        if not snapshot:
            logger.debug(f"[BROADCAST] No listeners for circle {message.circle_id}")
            return report

        payload = PushFrame.for_message(message).to_json()
        results = await asyncio.gather(
            *(self._push(connection, payload) for connection in snapshot),
            return_exceptions=True,
        )
        for connection, result in zip(snapshot, results):
            if result is True:
                report.delivered += 1
            else:
                if isinstance(result, BaseException):
                    logger.warning(f"[BROADCAST] Push to connection {connection.id} raised {result!r}")
                report.failed_connection_ids.append(connection.id)

        logger.info(
            f"[BROADCAST] Message {message.id} to circle {message.circle_id}: "
            f"{report.delivered}/{report.attempted} delivered"
        )
        return report
