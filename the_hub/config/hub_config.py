import os
from dataclasses import dataclass
from typing import Optional

STORE_MEMORY = "memory"
STORE_MONGODB = "mongodb"
STORE_KINDS = {STORE_MEMORY, STORE_MONGODB}


@dataclass
class HubConfig:
    """Runtime configuration for the chat hub."""

    message_store: str = STORE_MEMORY
    """Message store backend, one of ``memory`` or ``mongodb``."""
    mongo_uri: str = ""
    """MongoDB connection string. Required for the ``mongodb`` backend."""
    mongo_db: str = "the_hub"
    """Database holding the messages collection."""
    mongo_collection: str = "messages"
    """Collection holding circle messages."""
    push_timeout: Optional[float] = 5.0
    """Seconds a single push to one connection may take before it counts as failed. ``None`` disables the limit."""
    ws_path: str = "/ws"
    """Path of the realtime WebSocket endpoint."""
    api_prefix: str = "/api"
    """Prefix of the REST endpoints."""

    def __post_init__(self):
        if self.message_store not in STORE_KINDS:
            raise ValueError(f"Unknown message store '{self.message_store}', expected one of {sorted(STORE_KINDS)}")
        if self.message_store == STORE_MONGODB and not self.mongo_uri:
            raise ValueError("MONGODB_CONNECTION is required for the mongodb message store")
        if self.push_timeout is not None and self.push_timeout <= 0:
            raise ValueError("push_timeout must be positive")

    @classmethod
    def from_env(cls) -> "HubConfig":
        """Build a config from environment variables.

        :return: The populated config. Unset variables keep their defaults.
        :raises ValueError: If a variable holds an unusable value
        """
        return cls(
            message_store=os.environ.get("HUB_MESSAGE_STORE", STORE_MEMORY).lower(),
            mongo_uri=os.environ.get("MONGODB_CONNECTION", ""),
            mongo_db=os.environ.get("HUB_MONGO_DB", "the_hub"),
            mongo_collection=os.environ.get("HUB_MONGO_COLLECTION", "messages"),
            push_timeout=_parse_timeout(os.environ.get("HUB_PUSH_TIMEOUT", "5")),
            ws_path=os.environ.get("HUB_WS_PATH", "/ws"),
        )


def _parse_timeout(value: str) -> Optional[float]:
    if value.strip().lower() in ("", "none", "off"):
        return None
    return float(value)
