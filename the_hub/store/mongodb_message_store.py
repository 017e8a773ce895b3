import logging
from datetime import datetime, timezone
from typing import List, Optional

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import PyMongoError
from motor.motor_asyncio import AsyncIOMotorClient

from the_hub.hub_models import Message
from .message_store import MessageStore, MessageStoreError

logger = logging.getLogger(__name__)


class MongoDBMessageStore(MessageStore):
    """Message store backed by MongoDB.

    Commit order is tracked by a ``seq`` field allocated from a counter document with an
    atomic ``$inc``, so history reads are ordered even when timestamps collide.
    """
    def __init__(
        self,
        *,
        mongo_uri: str,
        mongo_db: str,
        mongo_collection: str,
    ):
        if not mongo_uri or not mongo_db or not mongo_collection:
            raise ValueError("MongoDB URI, database, and collection are required")
        self.mongo_uri = mongo_uri
        self.mongo_db = mongo_db
        self.mongo_collection = mongo_collection
        self._client = AsyncIOMotorClient(mongo_uri)
        self._coll = self._client[mongo_db][mongo_collection]
        self._counters = self._client[mongo_db][f"{mongo_collection}_counters"]
        self._indexes_ready = False

    async def _ensure_indexes(self) -> None:
        if self._indexes_ready:
            return
        await self._coll.create_index([("circle_id", ASCENDING), ("seq", ASCENDING)])
        await self._coll.create_index("message_id", unique=True)
        self._indexes_ready = True

    async def _next_seq(self) -> int:
        counter = await self._counters.find_one_and_update(
            {"_id": self.mongo_collection},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    @staticmethod
    def _to_message(doc: dict) -> Message:
        created_at = doc["created_at"]
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Message(
            id=doc["message_id"],
            circle_id=doc["circle_id"],
            sender_id=doc["sender_id"],
            content=doc["content"],
            created_at=created_at,
        )

    async def append(self, circle_id: str, sender_id: str, content: str) -> Message:
        try:
            await self._ensure_indexes()
            seq = await self._next_seq()
            # Mongo stores millisecond precision, truncate so the returned copy matches reads
            now = datetime.now(timezone.utc)
            now = now.replace(microsecond=now.microsecond // 1000 * 1000)
            message = Message(circle_id=circle_id, sender_id=sender_id, content=content, created_at=now)
            await self._coll.insert_one({
                "message_id": message.id,
                "circle_id": circle_id,
                "sender_id": sender_id,
                "content": content,
                "created_at": now,
                "seq": seq,
            })
        except PyMongoError as e:
            raise MessageStoreError(f"Failed to append message to MongoDB: {e}") from e
        logger.debug(f"[STORE] Appended message {message.id} (seq {seq}) to circle {circle_id}")
        return message

    async def list_since(self, circle_id: str, cursor: Optional[str] = None) -> List[Message]:
        query: dict = {"circle_id": circle_id}
        try:
            if cursor is not None:
                anchor = await self._coll.find_one({"circle_id": circle_id, "message_id": cursor}, {"seq": 1})
                if anchor is not None:
                    query["seq"] = {"$gt": anchor["seq"]}
            docs = await self._coll.find(query).sort("seq", ASCENDING).to_list(length=None)
        except PyMongoError as e:
            raise MessageStoreError(f"Failed to read messages from MongoDB: {e}") from e
        return [self._to_message(doc) for doc in docs]

    async def drop(self) -> None:
        """Drop the messages and counter collections."""
        await self._coll.drop()
        await self._counters.drop()
        self._indexes_ready = False

    async def close(self) -> None:
        self._client.close()
