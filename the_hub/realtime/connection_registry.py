"""Connection registry: which realtime connections exist and which circles each joined.

All mutation and snapshot reads go through one lock, so a snapshot never observes a
connection halfway through registration or removal.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Set
from uuid import uuid4

from the_hub.hub_models import ConnectionState

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Connection:
    """Handle to one bidirectional transport session.

    ``transport`` is anything with an awaitable ``send_text(str)``, e.g. a Starlette
    ``WebSocket``. State and joined circles are only changed by the registry.
    """
    transport: Any
    id: str = field(default_factory=lambda: uuid4().hex)
    state: ConnectionState = ConnectionState.OPEN
    circles: Set[str] = field(default_factory=set)
    opened_at: float = field(default_factory=time.monotonic)

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN

    async def push(self, text: str) -> None:
        """Send one serialized frame over the transport."""
        await self.transport.send_text(text)

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, state={self.state.value!r}, circles={sorted(self.circles)!r})"


class ConnectionRegistry:
    """Single source of truth for live connections and their circle interests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._connections: Dict[str, Connection] = {}
        self._interests: Dict[str, Set[Connection]] = {}

    def register(self, connection: Connection) -> None:
        """Add a newly opened connection with an empty interest set."""
        with self._lock:
            if connection.state != ConnectionState.OPEN:
                logger.debug(f"[REGISTRY] Ignoring register of {connection.state.value} connection {connection.id}")
                return
            if connection.id in self._connections:
                logger.warning(f"[REGISTRY] Connection {connection.id} registered twice, ignoring")
                return
            connection.circles.clear()
            self._connections[connection.id] = connection
        logger.info(f"[REGISTRY] Registered connection {connection.id}")

    def join(self, connection: Connection, circle_id: str) -> None:
        """Add ``circle_id`` to the connection's interests. Joining twice is a no-op."""
        with self._lock:
            if connection.state != ConnectionState.OPEN or connection.id not in self._connections:
                logger.debug(f"[REGISTRY] Join of {circle_id} on inactive connection {connection.id} ignored")
                return
            if circle_id in connection.circles:
                return
            connection.circles.add(circle_id)
            self._interests.setdefault(circle_id, set()).add(connection)
        logger.info(f"[REGISTRY] Connection {connection.id} joined circle {circle_id}")

    def unregister(self, connection: Connection) -> None:
        """Remove the connection from every interest set and mark it closed.

        Safe to call more than once and while a broadcast is iterating a snapshot that
        still contains the connection.
        """
        with self._lock:
            if connection.state == ConnectionState.CLOSED:
                return
            connection.state = ConnectionState.CLOSED
            self._connections.pop(connection.id, None)
            for circle_id in connection.circles:
                members = self._interests.get(circle_id)
                if members is None:
                    continue
                members.discard(connection)
                if not members:
                    del self._interests[circle_id]
            joined = len(connection.circles)
        logger.info(f"[REGISTRY] Unregistered connection {connection.id} ({joined} circles)")

    def mark_closing(self, connection: Connection) -> None:
        """Exclude the connection from new snapshots while the transport shuts down."""
        with self._lock:
            if connection.state == ConnectionState.OPEN:
                connection.state = ConnectionState.CLOSING

    def interested_in(self, circle_id: str) -> FrozenSet[Connection]:
        """Snapshot of the open connections currently joined to ``circle_id``."""
        with self._lock:
            members = self._interests.get(circle_id)
            if not members:
                return frozenset()
            return frozenset(c for c in members if c.state == ConnectionState.OPEN)

    def is_open(self, connection: Connection) -> bool:
        """Whether the registry still treats the connection as live."""
        with self._lock:
            return connection.state == ConnectionState.OPEN and connection.id in self._connections

    def get(self, connection_id: str) -> Optional[Connection]:
        with self._lock:
            return self._connections.get(connection_id)

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._connections)

    @property
    def circle_count(self) -> int:
        with self._lock:
            return len(self._interests)
