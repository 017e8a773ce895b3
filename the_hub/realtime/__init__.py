"""Realtime fan-out of circle chat messages over persistent connections."""

from .connection_registry import Connection, ConnectionRegistry
from .join_protocol import handle_frame, parse_join_frame
from .broadcast_channel import BroadcastChannel
from .dispatcher import BroadcastDispatcher
from .chat_hub import ChatHub

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "handle_frame",
    "parse_join_frame",
    "BroadcastChannel",
    "BroadcastDispatcher",
    "ChatHub",
]
