"""Test configuration and fixtures."""
import asyncio
import json
from typing import Awaitable, Callable, List, Optional

import pytest
import pytest_asyncio

from the_hub.realtime import ChatHub, Connection, ConnectionRegistry


class FakeTransport:
    """Stands in for a WebSocket: records every pushed frame as parsed JSON."""

    def __init__(
        self,
        *,
        fail_with: Optional[BaseException] = None,
        delay: float = 0.0,
        before_send: Optional[Callable[[], None]] = None,
    ):
        self.fail_with = fail_with
        self.delay = delay
        self.before_send = before_send
        self.sent: List[dict] = []
        self.attempts = 0

    async def send_text(self, text: str) -> None:
        self.attempts += 1
        if self.before_send is not None:
            self.before_send()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(json.loads(text))

    @property
    def message_ids(self) -> List[str]:
        return [frame["message"]["id"] for frame in self.sent]


def open_connection(registry: ConnectionRegistry, *circles: str, **transport_kwargs) -> Connection:
    """Register a connection on a fake transport and join it to ``circles``."""
    connection = Connection(transport=FakeTransport(**transport_kwargs))
    registry.register(connection)
    for circle_id in circles:
        registry.join(connection, circle_id)
    return connection


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest_asyncio.fixture
async def hub():
    """A started hub on an in-memory store."""
    hub = ChatHub(push_timeout=1.0)
    await hub.start()
    yield hub
    await hub.stop()
