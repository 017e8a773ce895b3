"""REST API for circle chat.

The WebSocket endpoint itself lives in the_hub.server.build_ws_router().
"""

from .messages_api import build_messages_router

__all__ = ["build_messages_router"]
