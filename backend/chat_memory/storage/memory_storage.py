"""
In-memory Storage Implementation.
Used by tests and by deployments that do not need history to survive a restart.
"""

from typing import Dict, Optional

from .interface import KeyValueStorage, QuotaExceededError, StorageEvent


class MemoryStorage(KeyValueStorage):
    """Dictionary-backed medium with an optional size quota."""

    def __init__(self, quota_chars: Optional[int] = None):
        """
        Args:
            quota_chars: Maximum total characters across all keys and values,
                or None for no limit
        """
        super().__init__()
        self._data: Dict[str, str] = {}
        self.quota_chars = quota_chars

    def _size_with(self, key: str, value: str) -> int:
        total = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
        return total + len(key) + len(value)

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str, origin: Optional[str] = None) -> None:
        if self.quota_chars is not None and self._size_with(key, value) > self.quota_chars:
            raise QuotaExceededError(
                f"Writing {key} would exceed the storage quota of {self.quota_chars} characters"
            )

        old_value = self._data.get(key)
        self._data[key] = value
        self._notify(StorageEvent(key=key, old_value=old_value, new_value=value, origin=origin))

    def remove_item(self, key: str, origin: Optional[str] = None) -> None:
        if key not in self._data:
            return
        old_value = self._data.pop(key)
        self._notify(StorageEvent(key=key, old_value=old_value, new_value=None, origin=origin))
