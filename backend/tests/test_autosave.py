"""
Unit tests for the debounced auto-save coordinator.
"""

import asyncio

import pytest
from unittest.mock import MagicMock

from chat_memory.core.autosave import AutoSaveCoordinator, AutoSaveState, should_autosave
from conftest import make_message

DELAY = 0.05


class TestShouldAutosave:
    """Tests for the eligibility rule."""

    def test_welcome_only(self, welcome):
        assert not should_autosave([welcome])

    def test_no_user_message(self, welcome):
        assert not should_autosave([welcome, make_message("assistant", "Another")])

    def test_assistant_then_user(self, welcome):
        assert should_autosave([welcome, make_message("user", "Hi")])

    def test_dicts(self):
        assert should_autosave([{"sender": "assistant"}, {"sender": "user"}])


class TestAutoSaveCoordinator:
    """Tests for AutoSaveCoordinator."""

    @pytest.mark.asyncio
    async def test_welcome_only_never_writes(self, welcome):
        save = MagicMock(return_value=object())
        coordinator = AutoSaveCoordinator(save, delay=DELAY)

        assert coordinator.notify("s1", [welcome]) is False
        await asyncio.sleep(DELAY * 4)

        save.assert_not_called()
        assert coordinator.state is AutoSaveState.IDLE

    @pytest.mark.asyncio
    async def test_burst_is_coalesced(self, welcome):
        save = MagicMock(return_value=object())
        coordinator = AutoSaveCoordinator(save, delay=DELAY)

        messages = [welcome, make_message("user", "First")]
        coordinator.notify("s1", messages)
        assert coordinator.state is AutoSaveState.PENDING
        assert coordinator.is_saving

        for text in ("Second", "Third", "Fourth"):
            await asyncio.sleep(DELAY / 5)
            messages = messages + [make_message("user", text)]
            coordinator.notify("s1", messages)

        await coordinator.wait()

        save.assert_called_once()
        session_id, saved_messages = save.call_args.args
        assert session_id == "s1"
        assert len(saved_messages) == 5
        assert [m.content for m in saved_messages][-1] == "Fourth"
        assert coordinator.state is AutoSaveState.IDLE
        assert coordinator.last_saved is not None
        assert coordinator.save_count == 1

    @pytest.mark.asyncio
    async def test_snapshot_is_taken_at_notify(self, welcome):
        save = MagicMock(return_value=object())
        coordinator = AutoSaveCoordinator(save, delay=DELAY)

        messages = [welcome, make_message("user", "Hi")]
        coordinator.notify("s1", messages)
        messages.append(make_message("user", "not notified"))
        await coordinator.wait()

        assert len(save.call_args.args[1]) == 2

    @pytest.mark.asyncio
    async def test_failure_is_not_retried(self, welcome):
        save = MagicMock(return_value=None)
        coordinator = AutoSaveCoordinator(save, delay=DELAY)

        coordinator.notify("s1", [welcome, make_message("user", "Hi")])
        await coordinator.wait()
        await asyncio.sleep(DELAY * 3)

        save.assert_called_once()
        assert coordinator.last_saved is None
        assert coordinator.state is AutoSaveState.IDLE

    @pytest.mark.asyncio
    async def test_exception_is_absorbed(self, welcome):
        save = MagicMock(side_effect=RuntimeError("boom"))
        coordinator = AutoSaveCoordinator(save, delay=DELAY)

        coordinator.notify("s1", [welcome, make_message("user", "Hi")])
        await coordinator.wait()

        assert coordinator.state is AutoSaveState.IDLE
        assert coordinator.last_saved is None

    @pytest.mark.asyncio
    async def test_next_change_rearms_after_failure(self, welcome):
        save = MagicMock(side_effect=[None, object()])
        coordinator = AutoSaveCoordinator(save, delay=DELAY)

        messages = [welcome, make_message("user", "Hi")]
        coordinator.notify("s1", messages)
        await coordinator.wait()
        coordinator.notify("s1", messages + [make_message("assistant", "Reply")])
        await coordinator.wait()

        assert save.call_count == 2
        assert coordinator.last_saved is not None

    @pytest.mark.asyncio
    async def test_async_callback(self, welcome):
        saved = []

        async def save(session_id, messages):
            await asyncio.sleep(0)
            saved.append((session_id, len(messages)))
            return object()

        coordinator = AutoSaveCoordinator(save, delay=DELAY)
        coordinator.notify("s1", [welcome, make_message("user", "Hi")])
        await coordinator.wait()

        assert saved == [("s1", 2)]

    @pytest.mark.asyncio
    async def test_cancel(self, welcome):
        save = MagicMock(return_value=object())
        coordinator = AutoSaveCoordinator(save, delay=DELAY)

        coordinator.notify("s1", [welcome, make_message("user", "Hi")])
        coordinator.cancel()
        await asyncio.sleep(DELAY * 3)

        save.assert_not_called()
        assert coordinator.state is AutoSaveState.IDLE

    @pytest.mark.asyncio
    async def test_ineligible_change_cancels_pending(self, welcome):
        save = MagicMock(return_value=object())
        coordinator = AutoSaveCoordinator(save, delay=DELAY)

        coordinator.notify("s1", [welcome, make_message("user", "Hi")])
        coordinator.notify("s2", [welcome])
        await asyncio.sleep(DELAY * 3)

        save.assert_not_called()

    @pytest.mark.asyncio
    async def test_writes_through_store(self, store, welcome):
        coordinator = AutoSaveCoordinator(store.upsert, delay=DELAY)
        messages = [welcome, make_message("user", "What is Tawheed?")]

        coordinator.notify("s1", messages)
        assert store.get("s1") is None
        await coordinator.wait()

        session = store.get("s1")
        assert session is not None
        assert session.title == "What is Tawheed?"
