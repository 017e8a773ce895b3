from abc import ABC, abstractmethod
from typing import List, Optional

from the_hub.hub_models import Message


class MessageStoreError(Exception):
    """Raised when the store cannot persist or read messages."""


class MessageStore(ABC):
    """Durable, append-only record of chat messages keyed by circle."""

    @abstractmethod
    async def append(self, circle_id: str, sender_id: str, content: str) -> Message:
        """Persist a new message and return it with its id and timestamp.

        :raises MessageStoreError: If the message could not be persisted
        """
        raise NotImplementedError("Subclasses must implement append")

    @abstractmethod
    async def list_since(self, circle_id: str, cursor: Optional[str] = None) -> List[Message]:
        """List a circle's messages in commit order.

        :param circle_id: The circle to read
        :param cursor: Id of the last message the caller already has. Only later messages are
            returned. ``None`` or an id the store does not know returns the full history.
        :raises MessageStoreError: If the history could not be read
        """
        raise NotImplementedError("Subclasses must implement list_since")

    async def close(self) -> None:
        """Release backend resources. The default implementation does nothing."""
        pass
