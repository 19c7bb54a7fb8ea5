"""Domain models for the chat orchestrator."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    """Who authored a message."""

    USER = "user"
    ASSISTANT = "assistant"


class MessageStatus(str, Enum):
    """Delivery state shown next to a message."""

    SENDING = "sending"
    SENT = "sent"
    ERROR = "error"
    TEMPORARY = "temporary"


class Message(BaseModel):
    """Message model."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    user_id: str
    content: str
    role: MessageRole = MessageRole.USER
    status: MessageStatus = MessageStatus.SENT
    sent_at: datetime = Field(default_factory=utcnow)

    @field_validator("user_id")
    @classmethod
    def _user_id_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("user_id is required")
        return value

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("content must not be empty")
        return value


class User(BaseModel):
    """Authenticated user as reported by the identity provider."""

    uid: str
    email: str = ""
    name: str = "No name user"
    photo_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    last_connection: datetime = Field(default_factory=utcnow)
