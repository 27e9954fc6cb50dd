"""
Storage Interface - Abstract base class for the key-value medium behind the session store.
This interface enables switching between the in-memory medium (tests) and the
local-file medium without touching the store.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The medium is unavailable or the write could not be completed."""


class QuotaExceededError(StorageError):
    """The medium refused a write because it is full."""


@dataclass(frozen=True)
class StorageEvent:
    """Change notification for a single key."""
    key: str
    old_value: Optional[str]
    new_value: Optional[str]
    origin: Optional[str] = None  # context id of the writer, if known


StorageListener = Callable[[StorageEvent], None]


class KeyValueStorage(ABC):
    """
    Synchronous string key-value medium with a change-notification channel.

    Writers pass their context id as ``origin`` so that listeners can ignore
    their own writes, the way a browser only fires ``storage`` events in
    other tabs.
    """

    def __init__(self):
        self._listeners: List[StorageListener] = []

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under key.

        Args:
            key: Slot name

        Returns:
            Optional[str]: Stored value, or None if the slot is empty

        Raises:
            StorageError: If the medium cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str, origin: Optional[str] = None) -> None:
        """
        Replace the value stored under key and notify listeners.

        Args:
            key: Slot name
            value: New value
            origin: Context id of the writer

        Raises:
            StorageError: If the medium refuses the write
        """
        pass

    @abstractmethod
    def remove_item(self, key: str, origin: Optional[str] = None) -> None:
        """
        Clear the slot. Clearing an empty slot is a no-op.

        Raises:
            StorageError: If the medium refuses the write
        """
        pass

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            Callable: Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: StorageEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Storage listener failed for key {event.key}")
