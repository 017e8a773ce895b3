import os
import uuid

import pytest
import pytest_asyncio

from the_hub.store.mongodb_message_store import MongoDBMessageStore

MONGODB_URI = os.environ.get("MONGODB_CONNECTION")
pytestmark = pytest.mark.skipif(not MONGODB_URI, reason="MONGODB_CONNECTION not set")


@pytest_asyncio.fixture
async def mongo_store():
    store = MongoDBMessageStore(
        mongo_uri=MONGODB_URI,
        mongo_db="test_the_hub",
        mongo_collection=f"messages_test_{uuid.uuid4().hex[:8]}",
    )
    yield store
    await store.drop()
    await store.close()


@pytest.mark.asyncio
async def test_mongodb_append_and_list(mongo_store):
    m1 = await mongo_store.append("c1", "u1", "one")
    m2 = await mongo_store.append("c1", "u2", "two")
    await mongo_store.append("c2", "u1", "other circle")

    history = await mongo_store.list_since("c1")
    assert [m.id for m in history] == [m1.id, m2.id]
    assert history[0] == m1

    after = await mongo_store.list_since("c1", m1.id)
    assert [m.id for m in after] == [m2.id]

    unknown = await mongo_store.list_since("c1", "missing")
    assert len(unknown) == 2


def test_mongodb_requires_settings():
    with pytest.raises(ValueError):
        MongoDBMessageStore(mongo_uri="", mongo_db="db", mongo_collection="messages")
