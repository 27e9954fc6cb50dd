"""
Chat API endpoints - Drive conversations against the assistant service.
Each session id maps to one in-process Conversation whose auto-save
persists the history in the background.
"""

import logging
from collections import OrderedDict
from fastapi import APIRouter, HTTPException, Depends, status
from pydantic import BaseModel, Field
from typing import Optional

from ..config import settings
from ..core import ChatMemory, Conversation
from ..core.session_store import SessionStore, get_session_store
from ..services import AssistantClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    """One user turn."""
    message: str = Field(..., min_length=1)
    session_id: Optional[str] = None


class ChatReply(BaseModel):
    """Assistant reply plus the session state after the turn."""
    session_id: str
    reply: str
    title: str
    message_count: int
    saving: bool


class ConversationRegistry:
    """
    Live conversations keyed by session id, least recently used first.

    Once more than `capacity` conversations are live, the oldest is flushed
    and forgotten; its history stays in the store and is resumed on demand.
    """

    def __init__(self, capacity: Optional[int] = None):
        self.capacity = capacity or settings.max_sessions
        self._conversations: "OrderedDict[str, Conversation]" = OrderedDict()
        self._memory: Optional[ChatMemory] = None

    def __len__(self) -> int:
        return len(self._conversations)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._conversations

    def _get_memory(self, store: SessionStore) -> ChatMemory:
        if self._memory is None or self._memory.store is not store:
            if self._memory is not None:
                self._memory.close()
            self._memory = ChatMemory(store)
            self._memory.start()
        return self._memory

    async def get_or_create(self, store: SessionStore, session_id: Optional[str]) -> Conversation:
        """
        Find the conversation for session_id, resuming it from storage if needed.

        An id that is neither live nor stored starts a new conversation under
        that id. A missing id starts one under a freshly minted id.
        """
        if session_id and session_id in self._conversations:
            self._conversations.move_to_end(session_id)
            return self._conversations[session_id]

        conversation = Conversation(
            self._get_memory(store),
            AssistantClient(
                settings.assistant_base_url,
                timeout=settings.assistant_timeout,
                api_key=settings.assistant_api_key,
            ),
        )
        if session_id and not conversation.switch_to(session_id):
            conversation.new_session(session_id)

        self._conversations[conversation.session_id] = conversation
        await self._evict()
        return conversation

    async def _evict(self) -> None:
        while len(self._conversations) > self.capacity:
            session_id, conversation = self._conversations.popitem(last=False)
            logger.info(f"Evicting idle conversation {session_id}")
            await conversation.close()

    def drop(self, session_id: str) -> None:
        conversation = self._conversations.pop(session_id, None)
        if conversation is not None:
            conversation.autosave.cancel()

    async def close(self) -> None:
        """Flush pending saves; called on shutdown."""
        for conversation in list(self._conversations.values()):
            await conversation.close()
        self._conversations.clear()
        if self._memory is not None:
            self._memory.close()
            self._memory = None


registry = ConversationRegistry()


@router.post("/message", response_model=ChatReply)
async def send_message(
    request: ChatRequest,
    store: SessionStore = Depends(get_session_store)
):
    """
    Send a chat message and get the assistant's reply.

    Args:
        request: User message and optional session id
        store: Session store used for auto-save

    Returns:
        ChatReply with the reply and current session state
    """
    conversation = await registry.get_or_create(store, request.session_id)

    reply = await conversation.send(request.message)
    if reply is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message is empty or a reply is still pending"
        )

    return ChatReply(
        session_id=conversation.session_id,
        reply=reply.content,
        title=conversation.title,
        message_count=len(conversation.messages),
        saving=conversation.autosave.is_saving,
    )


@router.delete("/{session_id}")
async def end_conversation(session_id: str):
    """Forget the live conversation. Stored history is untouched."""
    registry.drop(session_id)
    return {"session_id": session_id, "active": False}
