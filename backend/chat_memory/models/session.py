"""
Session Models - Defines structures for persisted chat sessions.

Field aliases match the stored layout (camelCase), so records are read with
model_validate() and written with model_dump(by_alias=True).
"""

from datetime import datetime
from typing import Any, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..utils.timestamp import normalize_timestamp, to_iso_string, utc_now

SCHEMA_VERSION = 1

Sender = Literal["user", "assistant"]


class Message(BaseModel):
    """One conversational turn."""
    model_config = ConfigDict(populate_by_name=True)

    id: Union[str, int]
    sender: Sender
    content: str
    timestamp: datetime = Field(default_factory=utc_now)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return to_iso_string(value)


class ChatSession(BaseModel):
    """Full persisted conversation with derived title and preview."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(default=SCHEMA_VERSION, alias="schemaVersion")
    id: str
    title: str
    messages: List[Message] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utc_now, alias="lastUpdated")
    message_count: int = Field(default=0, alias="messageCount")
    preview: str = ""

    @field_validator("last_updated", mode="before")
    @classmethod
    def _repair_last_updated(cls, value: Any) -> datetime:
        # Corrupt stored times are replaced instead of rejecting the record
        return normalize_timestamp(value)

    @field_serializer("last_updated")
    def _serialize_last_updated(self, value: datetime) -> str:
        return to_iso_string(value)


class RecentChat(BaseModel):
    """Sidebar summary of a stored session."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    preview: str
    timestamp: datetime
    message_count: int = Field(alias="messageCount")

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return to_iso_string(value)


class ChatStatistics(BaseModel):
    """Aggregate numbers over the stored collection."""
    model_config = ConfigDict(populate_by_name=True)

    total_sessions: int = Field(default=0, alias="totalSessions")
    total_messages: int = Field(default=0, alias="totalMessages")
    oldest_updated: Optional[datetime] = Field(default=None, alias="oldestUpdated")
    newest_updated: Optional[datetime] = Field(default=None, alias="newestUpdated")
    average_messages_per_session: int = Field(default=0, alias="averageMessagesPerSession")


class SessionList(BaseModel):
    """List of sessions returned by the history endpoints."""
    sessions: List[ChatSession]
    total: int
