"""Conversation and message records."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "New Conversation"
DEFAULT_PREVIEW = "Start a new conversation..."


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MessageType(StrEnum):
    USER = "user"
    AI = "ai"


class Message(BaseModel):
    """One turn in a conversation."""

    text: str = Field(..., description="Raw text as submitted or received")
    type: MessageType = Field(..., description="Originator: 'user' or 'ai'")
    timestamp: str = Field(default_factory=utc_timestamp, description="Creation time")

    model_config = ConfigDict(frozen=True)


class Conversation(BaseModel):
    """A titled, timestamped thread of messages."""

    id: str = Field(..., min_length=1, description="Unique conversation identifier")
    title: str = Field(default=DEFAULT_TITLE, description="Sidebar label")
    preview: str = Field(default=DEFAULT_PREVIEW, description="Latest user message snippet")
    timestamp: str = Field(default_factory=utc_timestamp, description="Creation time")
    messages: list[Message] = Field(default_factory=list)

    @property
    def has_default_title(self) -> bool:
        return self.title == DEFAULT_TITLE
