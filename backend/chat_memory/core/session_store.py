"""
Session Store - Persistent collection of chat sessions in a single storage slot.

The whole collection is one JSON array under one key. Every mutation is a
read-modify-write of that array, so the collection is the unit of durability
and concurrent contexts resolve by last write wins.
"""

import json
import logging
import math
import secrets
import string
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from ..config import settings
from ..models.session import SCHEMA_VERSION, ChatSession, ChatStatistics, RecentChat
from ..storage import KeyValueStorage
from ..utils.timestamp import to_iso_string, utc_now
from .codec import MessageLike, derive_preview, derive_title, to_runtime_form, to_storage_form

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


class SessionStore:
    """
    Owns the persisted session collection.

    No exception leaves the public methods: storage and decoding failures are
    logged and reported as None, False or an empty list.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: Optional[str] = None,
        capacity: Optional[int] = None,
        context_id: Optional[str] = None,
    ):
        """
        Args:
            storage: Key-value medium holding the slot
            key: Slot name (defaults to settings.chat_sessions_key)
            capacity: Maximum number of sessions kept (defaults to settings.max_sessions)
            context_id: Identity of this execution context, stamped on writes
        """
        self.storage = storage
        self.key = key or settings.chat_sessions_key
        self.capacity = capacity if capacity is not None else settings.max_sessions
        self.context_id = context_id or uuid.uuid4().hex

    @staticmethod
    def create_id() -> str:
        """Mint a new session id, e.g. ``session_k3j9x0a1b_1760600000000``."""
        suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
        return f"session_{suffix}_{int(time.time() * 1000)}"

    def _read_raw(self) -> List[Dict[str, Any]]:
        """Raw records from the slot; [] when the slot is missing, unreadable or corrupt."""
        try:
            payload = self.storage.get_item(self.key)
        except Exception:
            logger.exception(f"Error reading chat sessions from '{self.key}'")
            return []

        if not payload:
            return []

        try:
            records = json.loads(payload)
        except (TypeError, ValueError) as e:
            logger.error(f"Corrupt chat session payload in '{self.key}': {e}")
            return []

        if not isinstance(records, list):
            logger.error(f"Chat session payload in '{self.key}' is not a list")
            return []

        return [record for record in records if isinstance(record, dict)]

    def _write_raw(self, records: List[Dict[str, Any]]) -> None:
        self.storage.set_item(self.key, json.dumps(records, ensure_ascii=False), origin=self.context_id)

    def _decode(self, record: Dict[str, Any]) -> Optional[ChatSession]:
        try:
            data = dict(record)
            data["messages"] = to_runtime_form(data.get("messages") or [])
            session = ChatSession.model_validate(data)
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(f"Dropping malformed chat session {record.get('id')!r}: {e}")
            return None

        if session.schema_version > SCHEMA_VERSION:
            logger.warning(
                f"Chat session {session.id!r} has schema version {session.schema_version}, "
                f"newer than {SCHEMA_VERSION}; unknown fields are ignored"
            )
        return session

    def list_all(self) -> List[ChatSession]:
        """All stored sessions in stored order; malformed records are skipped."""
        sessions = []
        for record in self._read_raw():
            session = self._decode(record)
            if session is not None:
                sessions.append(session)
        return sessions

    def get(self, session_id: str) -> Optional[ChatSession]:
        """Session with the given id, or None."""
        for session in self.list_all():
            if session.id == session_id:
                return session
        return None

    def upsert(
        self,
        session_id: str,
        messages: Sequence[MessageLike],
        title: Optional[str] = None,
    ) -> Optional[ChatSession]:
        """
        Save or update a complete chat session.

        An existing session is replaced where it stands; a new one goes to the
        front. The collection is then cut back to capacity from the tail.

        Args:
            session_id: Session id
            messages: Every message of the session, in order
            title: Explicit title; derived from the first user message if omitted

        Returns:
            Optional[ChatSession]: The stored record, or None if it could not be written
        """
        try:
            stored_messages = to_storage_form(messages)
            record = {
                "schemaVersion": SCHEMA_VERSION,
                "id": session_id,
                "title": title or derive_title(stored_messages),
                "messages": stored_messages,
                "lastUpdated": to_iso_string(utc_now()),
                "messageCount": len(stored_messages),
                "preview": derive_preview(stored_messages),
            }
            session = self._decode(record)
            if session is None:
                return None

            records = self._read_raw()
            existing_index = next(
                (i for i, existing in enumerate(records) if existing.get("id") == session_id),
                None,
            )
            if existing_index is not None:
                records[existing_index] = record
            else:
                records.insert(0, record)

            if len(records) > self.capacity:
                evicted = [r.get("id") for r in records[self.capacity:]]
                del records[self.capacity:]
                logger.info(f"Evicted {len(evicted)} chat session(s) over capacity: {evicted}")

            self._write_raw(records)
        except Exception:
            logger.exception(f"Error saving chat session {session_id}")
            return None

        return session

    def remove(self, session_id: str) -> bool:
        """
        Delete a session. Deleting an unknown id succeeds without changes.

        Returns:
            bool: True if the collection was written
        """
        try:
            records = [r for r in self._read_raw() if r.get("id") != session_id]
            self._write_raw(records)
            return True
        except Exception:
            logger.exception(f"Error deleting chat session {session_id}")
            return False

    def search(self, query: str) -> List[ChatSession]:
        """Sessions whose title or any message contains query, ignoring case."""
        try:
            needle = query.lower()
            return [
                session for session in self.list_all()
                if needle in session.title.lower()
                or any(needle in message.content.lower() for message in session.messages)
            ]
        except Exception:
            logger.exception(f"Error searching chat history for {query!r}")
            return []

    def recent_chats(self, limit: Optional[int] = None) -> List[RecentChat]:
        """Summaries of the first sessions in stored order, for the sidebar."""
        limit = limit if limit is not None else settings.recent_chats_limit
        return [
            RecentChat(
                id=session.id,
                title=session.title,
                preview=session.preview,
                timestamp=session.last_updated,
                message_count=session.message_count,
            )
            for session in self.list_all()[:limit]
        ]

    def statistics(self) -> ChatStatistics:
        """Aggregate counts; zeros and None for an empty collection."""
        sessions = self.list_all()
        if not sessions:
            return ChatStatistics()

        total_messages = sum(session.message_count for session in sessions)
        updated = [session.last_updated for session in sessions]
        return ChatStatistics(
            total_sessions=len(sessions),
            total_messages=total_messages,
            oldest_updated=min(updated),
            newest_updated=max(updated),
            # Half-up rounding
            average_messages_per_session=math.floor(total_messages / len(sessions) + 0.5),
        )


# Global session store instance
_session_store: Optional[SessionStore] = None


def init_session_store(storage: KeyValueStorage, **kwargs) -> SessionStore:
    """
    Initialize the global session store instance.

    Args:
        storage: Key-value medium to persist into
        **kwargs: Passed through to SessionStore
    """
    global _session_store
    _session_store = SessionStore(storage, **kwargs)
    return _session_store


def get_session_store() -> SessionStore:
    """
    Get the global session store instance.

    Raises:
        RuntimeError: If the session store has not been initialized
    """
    if _session_store is None:
        raise RuntimeError("Session store not initialized. Call init_session_store() first.")
    return _session_store
