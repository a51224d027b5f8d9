"""
Local key-value storage.

String-keyed, string-valued blob store modelled on browser local storage.
The JSON file backend persists everything to a single file which is
rewritten in full on every write.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

CONVERSATIONS_KEY = "conversations"
THEME_KEY = "theme"


class LocalStorage(ABC):
    """Abstract key-value blob store."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value for ``key`` or None when absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""


class InMemoryStorage(LocalStorage):
    """Dict-backed storage, mostly useful for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class JsonFileStorage(LocalStorage):
    """Persist all keys to one JSON object on disk."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read local storage {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring local storage {self.path}: expected a JSON object")
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _save(self, items: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(items, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error(
                f"Failed to write local storage {self.path}: {e}",
                extra={"path": str(self.path), "keys": sorted(items)},
            )

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    def clear(self) -> None:
        try:
            if self.path.exists():
                self.path.unlink()
        except OSError as e:
            logger.error(f"Failed to clear local storage {self.path}: {e}")
