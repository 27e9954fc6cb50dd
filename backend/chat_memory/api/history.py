"""
History API endpoints - Browse, search and manage stored chat sessions.
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from pydantic import BaseModel
from typing import List, Optional

from ..core.history_query import DateFilter, SortOrder, query_sessions
from ..core.session_store import SessionStore, get_session_store
from ..models import ChatSession, ChatStatistics, Message, RecentChat, SessionList

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionUpsert(BaseModel):
    """Body for saving a whole session."""
    messages: List[Message]
    title: Optional[str] = None


def _dump(session: ChatSession) -> dict:
    return session.model_dump(mode="json", by_alias=True)


@router.get("")
async def list_sessions(
    q: str = Query("", description="Search in titles and message text"),
    date_filter: DateFilter = Query(DateFilter.ALL, alias="filter", description="all, today, week or month"),
    sort: SortOrder = Query(SortOrder.DATE, description="date, title or messages"),
    store: SessionStore = Depends(get_session_store)
):
    """
    List stored sessions for the history view.

    Args:
        q: Free-text query; blank lists everything
        date_filter: Date window on lastUpdated
        sort: Sort order
        store: Session store

    Returns:
        SessionList with matching sessions
    """
    sessions = query_sessions(store, query=q, date_filter=date_filter, sort_by=sort)
    return SessionList(sessions=sessions, total=len(sessions)).model_dump(mode="json", by_alias=True)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session_id():
    """Mint an id for a new conversation. Nothing is stored until the first save."""
    return {"session_id": SessionStore.create_id()}


@router.get("/recent")
async def get_recent_chats(
    limit: Optional[int] = Query(None, ge=1, le=50),
    store: SessionStore = Depends(get_session_store)
):
    """Sidebar summaries of the most recently inserted sessions."""
    chats: List[RecentChat] = store.recent_chats(limit)
    return [chat.model_dump(mode="json", by_alias=True) for chat in chats]


@router.get("/stats")
async def get_statistics(store: SessionStore = Depends(get_session_store)):
    """Aggregate numbers over the stored collection."""
    stats: ChatStatistics = store.statistics()
    return stats.model_dump(mode="json", by_alias=True)


@router.get("/{session_id}")
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Load one session with its full message list."""
    session = store.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found"
        )
    return _dump(session)


@router.put("/{session_id}")
async def save_session(
    session_id: str,
    body: SessionUpsert,
    store: SessionStore = Depends(get_session_store)
):
    """Save or replace a whole session."""
    session = store.upsert(session_id, body.messages, body.title)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save chat session"
        )
    return _dump(session)


@router.delete("/{session_id}")
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Delete a session. Unknown ids succeed."""
    if not store.remove(session_id):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete chat session"
        )
    return {"deleted": True, "session_id": session_id}
