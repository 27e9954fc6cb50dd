"""API module."""

from .chat import router as chat_router
from .history import router as history_router

__all__ = ['chat_router', 'history_router']
