"""Tests for the in-memory message store."""
import pytest

from the_hub.store import MemoryMessageStore


@pytest.fixture
def store():
    return MemoryMessageStore()


@pytest.mark.asyncio
async def test_append_assigns_id_and_timestamp(store):
    message = await store.append("c1", "u1", "hello")
    assert message.id
    assert message.circle_id == "c1"
    assert message.sender_id == "u1"
    assert message.content == "hello"
    assert message.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_list_since_cursor(store):
    m1 = await store.append("c1", "u1", "one")
    m2 = await store.append("c1", "u2", "two")
    m3 = await store.append("c1", "u1", "three")
    await store.append("c2", "u1", "elsewhere")

    assert await store.list_since("c1") == [m1, m2, m3]
    assert await store.list_since("c1", m1.id) == [m2, m3]
    assert await store.list_since("c1", m3.id) == []


@pytest.mark.asyncio
async def test_unknown_cursor_returns_full_history(store):
    m1 = await store.append("c1", "u1", "one")
    assert await store.list_since("c1", "no-such-id") == [m1]


@pytest.mark.asyncio
async def test_unknown_circle_is_empty(store):
    assert await store.list_since("ghost") == []
    assert store.count("ghost") == 0


@pytest.mark.asyncio
async def test_messages_are_immutable(store):
    message = await store.append("c1", "u1", "fixed")
    with pytest.raises(Exception):
        message.content = "changed"
