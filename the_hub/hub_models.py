"""Models for circle chat messages and the realtime wire frames."""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ConnectionState(str, Enum):
    """Lifecycle of a realtime connection."""
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class Message(BaseModel):
    """A persisted chat message. Never mutated after the store creates it."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    circle_id: str
    sender_id: str
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


class MessageCreate(BaseModel):
    """Body of ``POST /api/messages``."""
    model_config = ConfigDict(populate_by_name=True)

    circle_id: str = Field(validation_alias=AliasChoices("circleId", "circle_id"), min_length=1)
    sender_id: str = Field(validation_alias=AliasChoices("senderId", "userId", "sender_id"), min_length=1)
    content: str

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be empty")
        return value


class JoinFrame(BaseModel):
    """Inbound control frame declaring interest in a circle."""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["join"]
    circle_id: str = Field(alias="circleId", min_length=1)


class PushFrame(BaseModel):
    """Outbound frame carrying one message to a client."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["message"] = "message"
    circle_id: str
    message: Message

    @classmethod
    def for_message(cls, message: Message) -> "PushFrame":
        return cls(circle_id=message.circle_id, message=message)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class DeliveryReport(BaseModel):
    """Outcome of a single broadcast."""
    message_id: str
    circle_id: str
    attempted: int = 0
    delivered: int = 0
    failed_connection_ids: List[str] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_connection_ids)
