"""the-hub — realtime chat for course study circles."""

from the_hub.hub_models import (
    ConnectionState, DeliveryReport, JoinFrame, Message, MessageCreate, PushFrame,
)
from the_hub.config import HubConfig
from the_hub.store import MemoryMessageStore, MessageStore, MessageStoreError
from the_hub.realtime import BroadcastChannel, ChatHub, Connection, ConnectionRegistry

__all__ = [
    "ConnectionState",
    "DeliveryReport",
    "JoinFrame",
    "Message",
    "MessageCreate",
    "PushFrame",
    "HubConfig",
    "MessageStore",
    "MessageStoreError",
    "MemoryMessageStore",
    "MongoDBMessageStore",
    "BroadcastChannel",
    "ChatHub",
    "Connection",
    "ConnectionRegistry",
    "create_app",
]


def __getattr__(name: str):
    if name == "MongoDBMessageStore":
        from the_hub.store.mongodb_message_store import MongoDBMessageStore
        return MongoDBMessageStore
    if name == "create_app":
        from the_hub.standalone import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
