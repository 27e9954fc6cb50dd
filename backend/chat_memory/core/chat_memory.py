"""
Chat Memory - Facade used by the sidebar and history views.
Keeps a cached list of recent chats that follows writes from any context.
"""

import logging
from typing import List, Optional, Sequence

from ..models.session import ChatSession, RecentChat
from .codec import MessageLike
from .session_store import SessionStore
from .sync import SyncListener

logger = logging.getLogger(__name__)


class ChatMemory:
    """
    Recent-chat cache plus save/load/delete helpers over a SessionStore.
    """

    def __init__(self, store: SessionStore, recent_limit: Optional[int] = None):
        """
        Args:
            store: Session store to read from and write to
            recent_limit: Number of chats kept in recent_chats
        """
        self.store = store
        self.recent_limit = recent_limit
        self.recent_chats: List[RecentChat] = []
        self._listener = SyncListener(
            store.storage, store.key, self.refresh_chats, context_id=store.context_id
        )
        self.refresh_chats()

    def start(self) -> None:
        """Begin following writes made by other contexts."""
        self._listener.start()

    def close(self) -> None:
        self._listener.stop()

    def __enter__(self) -> "ChatMemory":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def refresh_chats(self) -> None:
        """Reload the recent-chat cache from the store."""
        self.recent_chats = self.store.recent_chats(self.recent_limit)

    def save_chat(
        self,
        session_id: str,
        messages: Sequence[MessageLike],
        title: Optional[str] = None,
    ) -> Optional[ChatSession]:
        """Persist a conversation and refresh the cache on success."""
        saved = self.store.upsert(session_id, messages, title)
        if saved is not None:
            self.refresh_chats()
        return saved

    def load_chat(self, session_id: str) -> Optional[ChatSession]:
        return self.store.get(session_id)

    def delete_chat(self, session_id: str) -> bool:
        success = self.store.remove(session_id)
        if success:
            self.refresh_chats()
        return success

    def get_all_chats(self) -> List[ChatSession]:
        return self.store.list_all()
