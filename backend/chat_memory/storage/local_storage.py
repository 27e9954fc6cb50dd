"""
Local Filesystem Storage Implementation.
Each key is kept as one file under a base directory.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .interface import KeyValueStorage, StorageError, StorageEvent

logger = logging.getLogger(__name__)


class LocalStorage(KeyValueStorage):
    """
    Local filesystem key-value medium.
    Change notifications reach listeners in the same process only.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize local storage with a base directory.

        Args:
            base_dir: Directory that holds one file per key
        """
        super().__init__()
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, key: str) -> Path:
        """Map a key to its file inside the base directory."""
        full_path = (self.base_dir / f"{key}.json").resolve()

        if full_path.parent != self.base_dir:
            raise StorageError(f"Invalid key: {key} - path traversal detected")

        return full_path

    def get_item(self, key: str) -> Optional[str]:
        full_path = self._get_full_path(key)
        try:
            return full_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Error reading {key}: {e}") from e

    def set_item(self, key: str, value: str, origin: Optional[str] = None) -> None:
        full_path = self._get_full_path(key)
        old_value = self.get_item(key)

        # Write to a sibling temp file and swap it in so readers never see a torn value
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.base_dir, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, full_path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Error writing {key}: {e}") from e

        self._notify(StorageEvent(key=key, old_value=old_value, new_value=value, origin=origin))

    def remove_item(self, key: str, origin: Optional[str] = None) -> None:
        full_path = self._get_full_path(key)
        old_value = self.get_item(key)
        if old_value is None:
            return

        try:
            full_path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageError(f"Error deleting {key}: {e}") from e

        logger.debug(f"Removed storage key {key}")
        self._notify(StorageEvent(key=key, old_value=old_value, new_value=None, origin=origin))
