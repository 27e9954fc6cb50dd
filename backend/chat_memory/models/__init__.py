"""Models module."""

from .session import (
    SCHEMA_VERSION,
    Message,
    ChatSession,
    RecentChat,
    ChatStatistics,
    SessionList,
)

__all__ = [
    'SCHEMA_VERSION', 'Message', 'ChatSession', 'RecentChat', 'ChatStatistics', 'SessionList'
]
