import logging
import threading
from typing import Dict, List, Optional

from the_hub.hub_models import Message
from .message_store import MessageStore

logger = logging.getLogger(__name__)


class MemoryMessageStore(MessageStore):
    """Message store with in-memory, per-circle lists."""
    def __init__(self):
        self._lock = threading.Lock()
        self._messages: Dict[str, List[Message]] = {}

    async def append(self, circle_id: str, sender_id: str, content: str) -> Message:
        message = Message(circle_id=circle_id, sender_id=sender_id, content=content)
        with self._lock:
            self._messages.setdefault(circle_id, []).append(message)
        logger.debug(f"[STORE] Appended message {message.id} to circle {circle_id}")
        return message

    async def list_since(self, circle_id: str, cursor: Optional[str] = None) -> List[Message]:
        with self._lock:
            messages = list(self._messages.get(circle_id, []))
        if cursor is None:
            return messages
        for index, message in enumerate(messages):
            if message.id == cursor:
                return messages[index + 1:]
        logger.debug(f"[STORE] Unknown cursor {cursor} for circle {circle_id}, returning full history")
        return messages

    def count(self, circle_id: str) -> int:
        with self._lock:
            return len(self._messages.get(circle_id, []))
