"""
History query composition for the history view: search, date filter, sort.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Union

from ..models.session import ChatSession
from ..utils.timestamp import normalize_timestamp
from .session_store import SessionStore


class DateFilter(str, Enum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class SortOrder(str, Enum):
    DATE = "date"          # most recent first
    TITLE = "title"        # A-Z
    MESSAGES = "messages"  # most messages first


def filter_by_date(
    sessions: List[ChatSession],
    date_filter: Union[DateFilter, str],
    now: Optional[datetime] = None,
) -> List[ChatSession]:
    """Keep sessions whose last update falls inside the window."""
    date_filter = DateFilter(date_filter)
    now = normalize_timestamp(now) if now is not None else datetime.now().astimezone()

    if date_filter is DateFilter.TODAY:
        today = now.astimezone().date()
        return [s for s in sessions if s.last_updated.astimezone().date() == today]
    if date_filter is DateFilter.WEEK:
        cutoff = now - timedelta(days=7)
        return [s for s in sessions if s.last_updated >= cutoff]
    if date_filter is DateFilter.MONTH:
        cutoff = now - timedelta(days=30)
        return [s for s in sessions if s.last_updated >= cutoff]
    return list(sessions)


def sort_sessions(sessions: List[ChatSession], sort_by: Union[SortOrder, str]) -> List[ChatSession]:
    """Return a sorted copy; ties keep stored order."""
    sort_by = SortOrder(sort_by)
    if sort_by is SortOrder.TITLE:
        return sorted(sessions, key=lambda s: s.title.casefold())
    if sort_by is SortOrder.MESSAGES:
        return sorted(sessions, key=lambda s: s.message_count, reverse=True)
    return sorted(sessions, key=lambda s: s.last_updated, reverse=True)


def query_sessions(
    store: SessionStore,
    query: str = "",
    date_filter: Union[DateFilter, str] = DateFilter.ALL,
    sort_by: Union[SortOrder, str] = SortOrder.DATE,
    now: Optional[datetime] = None,
) -> List[ChatSession]:
    """
    Sessions for the history view.

    Args:
        store: Session store to read from
        query: Free-text search; blank means every session
        date_filter: all, today, week or month
        sort_by: date, title or messages
        now: Reference time for the date filter

    Returns:
        List[ChatSession]: Matching sessions in display order
    """
    sessions = store.search(query) if query and query.strip() else store.list_all()
    sessions = filter_by_date(sessions, date_filter, now=now)
    return sort_sessions(sessions, sort_by)
