"""The chat hub ties the realtime pieces to the message store.

Transport events (open, frame, close) and persisted messages enter here. Persisting a
message and queueing its broadcast happen under one lock, so every connection sees a
circle's messages in commit order.
"""

import asyncio
import logging
from typing import Any, List, Optional, Union

from the_hub.config import HubConfig, STORE_MONGODB
from the_hub.hub_models import Message
from the_hub.store import MemoryMessageStore, MessageStore
from .broadcast_channel import BroadcastChannel
from .connection_registry import Connection, ConnectionRegistry
from .dispatcher import BroadcastDispatcher
from .join_protocol import handle_frame

logger = logging.getLogger(__name__)


class ChatHub:
    """Realtime fan-out for circle chat plus the persist-then-broadcast ingest path."""

    def __init__(
        self,
        *,
        store: Optional[MessageStore] = None,
        registry: Optional[ConnectionRegistry] = None,
        push_timeout: Optional[float] = 5.0,
    ):
        self.store = store if store is not None else MemoryMessageStore()
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.channel = BroadcastChannel(self.registry, push_timeout=push_timeout)
        self.dispatcher = BroadcastDispatcher(self.channel)
        self._ingest_lock: Optional[asyncio.Lock] = None

    @classmethod
    def from_config(cls, config: HubConfig) -> "ChatHub":
        """Create a hub with the store backend selected by ``config``."""
        if config.message_store == STORE_MONGODB:
            from the_hub.store import MongoDBMessageStore
            store = MongoDBMessageStore(
                mongo_uri=config.mongo_uri,
                mongo_db=config.mongo_db,
                mongo_collection=config.mongo_collection,
            )
        else:
            store = MemoryMessageStore()
        return cls(store=store, push_timeout=config.push_timeout)

    async def start(self) -> None:
        self.dispatcher.start()

    async def stop(self) -> None:
        await self.dispatcher.stop()
        await self.store.close()

    # ── Transport events ──────────────────────────────────────

    def on_connection_opened(self, transport: Any) -> Connection:
        connection = Connection(transport=transport)
        self.registry.register(connection)
        return connection

    def on_connection_closed(self, connection: Connection) -> None:
        self.registry.unregister(connection)

    def on_frame_received(self, connection: Connection, raw: Union[str, bytes]) -> None:
        handle_frame(self.registry, connection, raw)

    # ── Ingest ────────────────────────────────────────────────

    def on_message_persisted(self, message: Message) -> None:
        """Hand a committed message to the broadcast queue without waiting for delivery."""
        self.dispatcher.submit(message)

    async def post_message(self, circle_id: str, sender_id: str, content: str) -> Message:
        """Persist a message, then queue its broadcast.

        :raises MessageStoreError: If persistence fails. Nothing is broadcast in that case.
        """
        if self._ingest_lock is None:
            self._ingest_lock = asyncio.Lock()
        async with self._ingest_lock:
            message = await self.store.append(circle_id, sender_id, content)
            self.on_message_persisted(message)
        logger.info(f"[INGEST] Message {message.id} from {sender_id} persisted for circle {circle_id}")
        return message

    async def history(self, circle_id: str, since: Optional[str] = None) -> List[Message]:
        return await self.store.list_since(circle_id, since)
