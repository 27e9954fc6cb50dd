"""Storage module - provides the key-value port and its implementations."""

from .interface import (
    KeyValueStorage,
    StorageError,
    QuotaExceededError,
    StorageEvent,
    StorageListener,
)
from .local_storage import LocalStorage
from .memory_storage import MemoryStorage

__all__ = [
    'KeyValueStorage',
    'StorageError',
    'QuotaExceededError',
    'StorageEvent',
    'StorageListener',
    'LocalStorage',
    'MemoryStorage',
    'create_storage',
]


def create_storage(storage_type: str = "local", base_dir: str = "./data") -> KeyValueStorage:
    """
    Create the configured storage medium.

    Args:
        storage_type: "local" or "memory"
        base_dir: Directory for the local medium

    Returns:
        KeyValueStorage instance
    """
    if storage_type == "local":
        return LocalStorage(base_dir)
    elif storage_type == "memory":
        return MemoryStorage()
    else:
        raise ValueError(f"Unsupported storage type: {storage_type}")
