# key-value string storage scoped to the app session or persisted on disk
import json
import os
from typing import Dict, Optional

from utils.logger import get_logger

_logger = get_logger(__name__)


class SessionStorage:
    """Lives as long as the running app; nothing is written to disk."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class LocalStorage(SessionStorage):
    """
    Same interface, backed by a JSON file so values survive restarts.
    An unreadable file is treated as empty.
    """

    def __init__(self, path: str) -> None:
        super().__init__()
        self.path = path
        self._load()

    def _load(self) -> None:
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            _logger.exception(f"Could not read {self.path}, starting empty")
            return
        if isinstance(data, dict):
            self._items = {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        folder = os.path.dirname(self.path)
        try:
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._items, f, ensure_ascii=False, indent=2)
        except OSError:
            _logger.exception(f"Could not write {self.path}")

    def set_item(self, key: str, value: str) -> None:
        super().set_item(key, value)
        self._flush()

    def remove_item(self, key: str) -> None:
        super().remove_item(key)
        self._flush()

    def clear(self) -> None:
        super().clear()
        self._flush()
