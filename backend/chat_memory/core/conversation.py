"""
Conversation - The active chat: session identity, in-memory messages and the
round trip to the assistant, with auto-save wired in.
"""

import itertools
import logging
import time
from typing import List, Optional

from ..config import settings
from ..models.session import Message
from ..services.assistant_client import AssistantClient, AssistantError
from .autosave import AutoSaveCoordinator
from .chat_memory import ChatMemory
from .codec import DEFAULT_TITLE, derive_title
from .logging_config import SessionLoggerAdapter
from .session_store import SessionStore

logger = logging.getLogger(__name__)

_message_counter = itertools.count()


def new_message_id() -> str:
    """Millisecond timestamp plus a process-wide counter, so ids sort in creation order."""
    return f"{int(time.time() * 1000)}-{next(_message_counter):06d}"


class Conversation:
    """
    One conversation view.

    Starts with a single welcome message, which on its own is never saved.
    """

    def __init__(
        self,
        memory: ChatMemory,
        assistant: AssistantClient,
        autosave_delay: Optional[float] = None,
        welcome_message: Optional[str] = None,
        error_message: Optional[str] = None,
    ):
        """
        Args:
            memory: Chat memory used for loading and saving
            assistant: Client for the remote assistant service
            autosave_delay: Debounce delay in seconds (defaults to settings)
            welcome_message: First assistant message of a new session
            error_message: Assistant message shown when the service fails
        """
        self.memory = memory
        self.assistant = assistant
        self.welcome_message = welcome_message or settings.welcome_message
        self.error_message = error_message or settings.error_message
        self.autosave = AutoSaveCoordinator(memory.save_chat, delay=autosave_delay)

        self.session_id: str = ""
        self.title: str = DEFAULT_TITLE
        self.messages: List[Message] = []
        self.is_waiting = False
        self.new_session()

    @property
    def log(self) -> SessionLoggerAdapter:
        return SessionLoggerAdapter(logger, {"session_id": self.session_id})

    def _welcome(self) -> Message:
        return Message(id=new_message_id(), sender="assistant", content=self.welcome_message)

    def _changed(self) -> None:
        self.autosave.notify(self.session_id, self.messages)

    def new_session(self, session_id: Optional[str] = None) -> str:
        """
        Start a fresh conversation and return its id.

        Args:
            session_id: Id minted earlier by the client; a new one is created if omitted
        """
        self.autosave.cancel()
        self.session_id = session_id or SessionStore.create_id()
        self.title = DEFAULT_TITLE
        self.messages = [self._welcome()]
        self.log.info("Started new session")
        return self.session_id

    def switch_to(self, session_id: str) -> bool:
        """
        Resume a stored conversation.

        Returns:
            bool: False if the session does not exist (the current one is kept)
        """
        session = self.memory.load_chat(session_id)
        if session is None:
            self.log.warning(f"Cannot switch to unknown session {session_id}")
            return False

        self.autosave.cancel()
        self.session_id = session.id
        self.title = session.title
        self.messages = list(session.messages)
        self.log.info(f"Resumed session with {len(self.messages)} messages")
        return True

    def append(self, message: Message) -> None:
        """Add a message and let auto-save know."""
        self.messages = [*self.messages, message]
        if self.title == DEFAULT_TITLE:
            self.title = derive_title(self.messages)
        self._changed()

    async def send(self, text: object) -> Optional[Message]:
        """
        Send a user turn and append the assistant's reply.

        Non-string or blank input is ignored.

        Returns:
            Optional[Message]: The assistant message, or None if nothing was sent
        """
        if not isinstance(text, str) or not text.strip() or self.is_waiting:
            return None

        session_id = self.session_id
        self.append(Message(id=new_message_id(), sender="user", content=text.strip()))

        self.is_waiting = True
        try:
            reply = await self.assistant.send_message(session_id, text.strip())
        except AssistantError as e:
            self.log.error(f"Assistant request failed: {e}")
            reply = self.error_message
        finally:
            self.is_waiting = False

        if session_id != self.session_id:
            # The user moved to another session while waiting
            self.log.info(f"Dropping reply for inactive session {session_id}")
            return None

        answer = Message(id=new_message_id(), sender="assistant", content=reply)
        self.append(answer)
        return answer

    async def close(self) -> None:
        """Let the pending save complete."""
        await self.autosave.wait()
