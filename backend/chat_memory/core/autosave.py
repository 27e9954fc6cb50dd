"""
Auto-Save Coordinator - Debounced persistence of the active conversation.

Every change to the message list re-arms a single timer; the store is written
once the list has been quiet for ``delay`` seconds, so a burst of messages
becomes one write of the latest state. Failed writes are logged and not
retried; the next change schedules a fresh attempt.
"""

import asyncio
import inspect
import logging
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from ..config import settings
from ..models.session import ChatSession, Message
from ..utils.timestamp import utc_now
from .codec import MessageLike

logger = logging.getLogger(__name__)

SaveCallback = Callable[
    [str, List[MessageLike]],
    Union[Optional[ChatSession], Awaitable[Optional[ChatSession]]],
]


class AutoSaveState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"


def should_autosave(messages: Sequence[MessageLike]) -> bool:
    """A conversation is worth saving once it has more than one message and a user turn."""
    if len(messages) <= 1:
        return False
    return any(
        (m.sender if isinstance(m, Message) else m.get("sender")) == "user"
        for m in messages
    )


class AutoSaveCoordinator:
    """
    Debounces writes for one conversation.

    Must be used from inside a running asyncio event loop.
    """

    def __init__(self, save_callback: SaveCallback, delay: Optional[float] = None):
        """
        Args:
            save_callback: Called as save_callback(session_id, messages); returns the
                stored record or None on failure. May be a coroutine function.
            delay: Quiet period in seconds before saving (defaults to settings.autosave_delay_seconds)
        """
        self.save_callback = save_callback
        self.delay = delay if delay is not None else settings.autosave_delay_seconds
        self.state = AutoSaveState.IDLE
        self.last_saved: Optional[datetime] = None
        self.save_count = 0
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def is_saving(self) -> bool:
        return self.state is not AutoSaveState.IDLE

    def notify(self, session_id: str, messages: Sequence[MessageLike]) -> bool:
        """
        Report that the conversation's message list changed.

        Returns:
            bool: True if a save was scheduled
        """
        self.cancel()

        if not session_id or not should_autosave(messages):
            return False

        snapshot = list(messages)
        self._timer = asyncio.get_running_loop().create_task(self._save_later(session_id, snapshot))
        if self.state is AutoSaveState.IDLE:
            self.state = AutoSaveState.PENDING
        logger.debug(f"Auto-save armed for {session_id} ({len(snapshot)} messages, {self.delay}s)")
        return True

    def cancel(self) -> None:
        """Drop the pending save, if any. A save already running is left alone."""
        if self._timer is not None and not self._timer.done() and self._timer is not self._in_flight:
            self._timer.cancel()
        self._timer = None
        if self.state is AutoSaveState.PENDING:
            self.state = AutoSaveState.IDLE

    async def wait(self) -> None:
        """Wait until the scheduled save (if any) and any running save have finished."""
        pending = {t for t in (self._in_flight, self._timer) if t is not None and not t.done()}
        if pending:
            await asyncio.wait(pending)

    async def _save_later(self, session_id: str, messages: List[MessageLike]) -> None:
        await asyncio.sleep(self.delay)

        self._in_flight = asyncio.current_task()
        self.state = AutoSaveState.SAVING
        try:
            result = self.save_callback(session_id, messages)
            if inspect.isawaitable(result):
                result = await result

            if result is None:
                logger.warning(f"Auto-save failed for {session_id}; will retry on next change")
            else:
                self.last_saved = utc_now()
                self.save_count += 1
                logger.info(f"Auto-saved {session_id} ({len(messages)} messages)")
        except Exception:
            logger.exception(f"Auto-save failed for {session_id}")
        finally:
            self._in_flight = None
            # A newer change may have armed another timer meanwhile
            if self._timer is not None and self._timer is not asyncio.current_task() and not self._timer.done():
                self.state = AutoSaveState.PENDING
            else:
                self.state = AutoSaveState.IDLE
                if self._timer is asyncio.current_task():
                    self._timer = None
