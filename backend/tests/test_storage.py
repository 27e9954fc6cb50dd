"""
Unit tests for the storage media.
"""

import pytest

from chat_memory.core.session_store import SessionStore
from chat_memory.storage import (
    LocalStorage,
    MemoryStorage,
    QuotaExceededError,
    StorageError,
    create_storage,
)


class TestLocalStorage:
    """Tests for LocalStorage."""

    def test_set_get_remove(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        assert storage.get_item("chats") is None

        storage.set_item("chats", "[1, 2]")
        assert storage.get_item("chats") == "[1, 2]"
        assert (tmp_path / "chats.json").exists()

        storage.remove_item("chats")
        assert storage.get_item("chats") is None

    def test_remove_missing_is_noop(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        storage.remove_item("missing")

    def test_no_temp_files_left(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        storage.set_item("chats", "a")
        storage.set_item("chats", "b")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["chats.json"]

    def test_path_traversal_rejected(self, tmp_path):
        storage = LocalStorage(str(tmp_path / "data"))
        with pytest.raises(StorageError):
            storage.set_item("../escape", "x")

    def test_notifies_listeners(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        events = []
        storage.subscribe(events.append)

        storage.set_item("chats", "a", origin="ctx")
        storage.set_item("chats", "b")
        storage.remove_item("chats")

        assert [(e.old_value, e.new_value) for e in events] == [(None, "a"), ("a", "b"), ("b", None)]
        assert events[0].origin == "ctx"

    def test_persists_across_instances(self, tmp_path, conversation_messages):
        SessionStore(LocalStorage(str(tmp_path)), key="slot").upsert("s1", conversation_messages)
        reopened = SessionStore(LocalStorage(str(tmp_path)), key="slot")
        assert reopened.get("s1").message_count == 3


class TestMemoryStorage:
    """Tests for MemoryStorage."""

    def test_quota(self):
        storage = MemoryStorage(quota_chars=20)
        storage.set_item("k", "x" * 10)
        with pytest.raises(QuotaExceededError):
            storage.set_item("other", "y" * 15)
        # Replacing a value only counts the new size
        storage.set_item("k", "z" * 19)

    def test_unsubscribe(self):
        storage = MemoryStorage()
        events = []
        unsubscribe = storage.subscribe(events.append)
        unsubscribe()
        storage.set_item("k", "v")
        assert events == []

    def test_listener_errors_do_not_break_writes(self):
        storage = MemoryStorage()

        def broken(event):
            raise RuntimeError("listener bug")

        storage.subscribe(broken)
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"


class TestCreateStorage:
    """Tests for create_storage."""

    def test_memory(self):
        assert isinstance(create_storage("memory"), MemoryStorage)

    def test_local(self, tmp_path):
        assert isinstance(create_storage("local", str(tmp_path)), LocalStorage)

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported"):
            create_storage("s3")
