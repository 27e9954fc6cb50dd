"""
Cross-context sync listener.

Watches the storage medium for writes to the session slot made by other
contexts and triggers a reload. Consistency is eventual and last-write-wins:
there is no merge and no conflict detection.
"""

import logging
from typing import Callable, Optional

from ..storage import KeyValueStorage, StorageEvent

logger = logging.getLogger(__name__)


class SyncListener:
    """Calls on_change whenever another context mutates the watched key."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str,
        on_change: Callable[[], None],
        context_id: Optional[str] = None,
    ):
        """
        Args:
            storage: Medium to watch
            key: Slot to watch
            on_change: Reload callback
            context_id: Writes stamped with this origin are ignored
        """
        self.storage = storage
        self.key = key
        self.on_change = on_change
        self.context_id = context_id
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.storage.subscribe(self._handle)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "SyncListener":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _handle(self, event: StorageEvent) -> None:
        if event.key != self.key:
            return
        if self.context_id is not None and event.origin == self.context_id:
            return

        logger.debug(f"External change to '{self.key}' from {event.origin or 'unknown'}; reloading")
        try:
            self.on_change()
        except Exception:
            logger.exception(f"Reload after external change to '{self.key}' failed")
