"""
Shared test fixtures and configuration.
"""

import pytest
import os

# Set test environment variables before importing app modules
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("STORAGE_TYPE", "memory")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/chat_memory_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("AUTOSAVE_DELAY_SECONDS", "0.05")

from chat_memory.models import Message  # noqa: E402
from chat_memory.core.session_store import SessionStore  # noqa: E402
from chat_memory.storage import MemoryStorage  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return SessionStore(storage, key="test_chatSessions", capacity=50)


def make_message(sender: str, content: str, message_id=None) -> Message:
    """Build a message with a unique id."""
    make_message.counter += 1
    return Message(id=message_id if message_id is not None else f"m{make_message.counter}",
                   sender=sender, content=content)


make_message.counter = 0


@pytest.fixture
def welcome():
    return make_message("assistant", "Welcome to IslamicAI! How can I help you today?")


@pytest.fixture
def conversation_messages(welcome):
    return [
        welcome,
        make_message("user", "Tell me about Tawheed"),
        make_message("assistant", "Tawheed is the oneness of Allah."),
    ]
