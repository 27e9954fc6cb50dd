"""
Unit tests for title/preview derivation and timestamp conversion.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from chat_memory.core.codec import derive_preview, derive_title, to_runtime_form, to_storage_form
from conftest import make_message


class TestDeriveTitle:
    """Tests for derive_title."""

    def test_backs_off_to_word_boundary(self):
        messages = [
            make_message("assistant", "Welcome"),
            make_message("user", "What are the five pillars of Islam and why do they matter so much?"),
        ]
        assert derive_title(messages) == "What are the five pillars of..."

    def test_no_user_message(self):
        assert derive_title([make_message("assistant", "Welcome")]) == "New Chat"
        assert derive_title([]) == "New Chat"

    def test_short_content_unchanged(self):
        assert derive_title([make_message("user", "  Salah times  ")]) == "Salah times"

    def test_long_word_without_early_space_cut_mid_word(self):
        content = "Supercalifragilisticexpialidocious is long"
        assert derive_title([make_message("user", content)]) == content[:30] + "..."

    def test_space_before_index_15_is_ignored(self):
        content = "Short words a_really_long_identifier"
        title = derive_title([make_message("user", content)])
        assert title == content[:30] + "..."

    def test_space_at_index_15_is_used(self):
        content = "a" * 15 + " " + "b" * 20
        assert derive_title([make_message("user", content)]) == "a" * 15 + "..."

    def test_exactly_thirty_chars_gets_ellipsis(self):
        content = "x" * 30
        assert derive_title([make_message("user", content)]) == content + "..."

    def test_uses_first_user_message(self):
        messages = [make_message("user", "First question"), make_message("user", "Second")]
        assert derive_title(messages) == "First question"

    def test_accepts_dicts(self):
        assert derive_title([{"sender": "user", "content": "Zakat rules"}]) == "Zakat rules"


class TestDerivePreview:
    """Tests for derive_preview."""

    def test_fifty_one_chars_truncated(self):
        content = "y" * 51
        preview = derive_preview([make_message("user", content)])
        assert preview == "y" * 47 + "..."
        assert len(preview) == 50

    def test_fifty_chars_unchanged(self):
        content = "z" * 50
        assert derive_preview([make_message("user", content)]) == content

    def test_no_user_message(self):
        assert derive_preview([make_message("assistant", "Welcome")]) == "No messages yet"


class TestConversion:
    """Tests for storage/runtime conversion."""

    def test_storage_form_uses_iso_strings(self):
        message = make_message("user", "Hello")
        message.timestamp = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)
        stored = to_storage_form([message])
        assert stored[0]["timestamp"] == "2026-03-01T08:30:00.000Z"
        assert stored[0]["content"] == "Hello"
        assert stored[0]["sender"] == "user"
        assert stored[0]["id"] == message.id

    def test_runtime_form_restores_datetimes(self):
        stored = [{"id": 7, "sender": "assistant", "content": "Hi", "timestamp": "2026-03-01T08:30:00.000Z"}]
        runtime = to_runtime_form(stored)
        assert runtime[0].timestamp == datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)
        assert runtime[0].id == 7

    def test_runtime_form_repairs_bad_timestamp(self):
        stored = [{"id": "a", "sender": "user", "content": "Hi", "timestamp": "garbage"}]
        runtime = to_runtime_form(stored)
        assert runtime[0].timestamp.tzinfo is not None

    def test_runtime_form_rejects_missing_content(self):
        with pytest.raises(ValidationError):
            to_runtime_form([{"id": "a", "sender": "user"}])

    def test_extra_fields_pass_through_storage_form(self):
        stored = to_storage_form([{"id": "a", "sender": "user", "content": "Hi",
                                   "timestamp": 0, "isStreaming": False}])
        assert stored[0]["isStreaming"] is False
        assert stored[0]["timestamp"] == "1970-01-01T00:00:00.000Z"
