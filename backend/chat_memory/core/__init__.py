"""Core module - session persistence and conversation logic."""

from .session_store import SessionStore, init_session_store, get_session_store
from .chat_memory import ChatMemory
from .autosave import AutoSaveCoordinator, AutoSaveState, should_autosave
from .sync import SyncListener
from .conversation import Conversation

__all__ = [
    'SessionStore',
    'init_session_store',
    'get_session_store',
    'ChatMemory',
    'AutoSaveCoordinator',
    'AutoSaveState',
    'should_autosave',
    'SyncListener',
    'Conversation',
]
